# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resmap metrics."""

from __future__ import annotations

from resmap.tracking.metrics import record_mapping_result

__all__ = ["record_mapping_result"]
