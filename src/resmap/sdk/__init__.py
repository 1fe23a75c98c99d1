# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resmap configuration and process-wide setup."""

from __future__ import annotations

from resmap.sdk.bootstrap import configure, get_config, get_mapper, is_configured, map_resource, reset
from resmap.sdk.config import MapperConfig

__all__ = [
    "MapperConfig",
    "configure",
    "get_config",
    "get_mapper",
    "is_configured",
    "map_resource",
    "reset",
]
