# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resmap - map OpenTelemetry resources to monitored-resource identities.

Quick Start::

    from resmap import configure, map_resource

    configure()  # reads resmap.yaml or RESMAP_* env vars

    identity = map_resource({"cloud.platform": "gcp_compute_engine", ...})
    identity.type    # "gce_instance"
    identity.labels  # {"zone": ..., "instance_id": ...}

Custom mapping logic goes in a script with a ``map_resource(attrs)``
function; see :mod:`resmap.mapping.engine`.
"""

from __future__ import annotations

from resmap._version import __version__

# Errors
from resmap.errors import (
    ClassificationError,
    ConfigurationError,
    MappingError,
    ScriptBudgetExceeded,
    ScriptInvocationError,
)

# Mappers
from resmap.mapping import (
    DefaultMapper,
    Mapper,
    MappingReport,
    ScriptedMapper,
    map_resources,
    resource_to_labels,
    sanitize_utf8,
)

# Models
from resmap.models import MonitoredResourceIdentity, ResourceFilter
from resmap.resources import AttributeView

# Setup
from resmap.sdk import MapperConfig, configure, get_mapper, is_configured, map_resource, reset

__all__ = [
    "__version__",
    # Setup
    "configure",
    "get_mapper",
    "is_configured",
    "map_resource",
    "reset",
    "MapperConfig",
    # Mappers
    "Mapper",
    "DefaultMapper",
    "ScriptedMapper",
    "map_resources",
    "MappingReport",
    "resource_to_labels",
    "sanitize_utf8",
    # Models
    "AttributeView",
    "MonitoredResourceIdentity",
    "ResourceFilter",
    # Errors
    "MappingError",
    "ConfigurationError",
    "ClassificationError",
    "ScriptInvocationError",
    "ScriptBudgetExceeded",
]
