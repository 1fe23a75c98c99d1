# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Resource to monitored-resource mapping.

- :class:`DefaultMapper`: built-in classification, sanitized labels
- :class:`ScriptedMapper`: operator-supplied ``map_resource`` script
- :func:`resource_to_labels`: resource attributes to exported labels
"""

from __future__ import annotations

from resmap.mapping.base import Mapper
from resmap.mapping.batch import MappingReport, map_resources
from resmap.mapping.classification import ClassifiedResource, classify_resource
from resmap.mapping.default import DefaultMapper
from resmap.mapping.engine import CompiledScript, RestrictedPythonEngine, ScriptEngine
from resmap.mapping.labels import SERVICE_LABEL_KEYS, resource_to_labels
from resmap.mapping.sanitize import sanitize_utf8
from resmap.mapping.scripted import ScriptedMapper, ScriptState

__all__ = [
    "SERVICE_LABEL_KEYS",
    "ClassifiedResource",
    "CompiledScript",
    "DefaultMapper",
    "Mapper",
    "MappingReport",
    "RestrictedPythonEngine",
    "ScriptEngine",
    "ScriptState",
    "ScriptedMapper",
    "classify_resource",
    "map_resources",
    "resource_to_labels",
    "sanitize_utf8",
]
