# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resmap data models."""

from __future__ import annotations

from resmap.models.identity import MonitoredResourceIdentity, ResourceFilter

__all__ = ["MonitoredResourceIdentity", "ResourceFilter"]
