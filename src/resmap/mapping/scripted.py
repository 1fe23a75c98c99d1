# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Scripted mapper: operator-supplied mapping logic.

The script is compiled once when the mapper is built. Each ``map`` call
hands the script every attribute of the resource (no filtering) and
expects a ``MonitoredResource(...)`` value back.

Lifecycle::

    UNCONFIGURED -> COMPILING -> READY
                              -> CONFIGURATION_FAILED   (constructor raises)

A failed call raises :class:`~resmap.errors.ScriptInvocationError` for that
resource only; the mapper stays ``READY``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Optional

from resmap.errors import ConfigurationError
from resmap.mapping.base import Mapper
from resmap.mapping.engine import (
    DEFAULT_MAX_SECONDS,
    DEFAULT_MAX_STEPS,
    CompiledScript,
    RestrictedPythonEngine,
    ScriptEngine,
)
from resmap.models.identity import MonitoredResourceIdentity
from resmap.resources.attributes import AttributeView

logger = logging.getLogger(__name__)


class ScriptState(str, Enum):
    """Scripted mapper setup state."""

    UNCONFIGURED = "unconfigured"
    COMPILING = "compiling"
    READY = "ready"
    CONFIGURATION_FAILED = "configuration_failed"


class ScriptedMapper(Mapper):
    """Map resources with a user-supplied ``map_resource`` script."""

    kind = "scripted"

    def __init__(
        self,
        source: str,
        engine: Optional[ScriptEngine] = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        max_seconds: float = DEFAULT_MAX_SECONDS,
        include_service_labels: bool = True,
        resource_filters: Iterable[Any] = (),
    ) -> None:
        super().__init__(include_service_labels, resource_filters)
        self.state = ScriptState.UNCONFIGURED
        if engine is None:
            engine = RestrictedPythonEngine(max_steps=max_steps, max_seconds=max_seconds)
        self._engine = engine

        self.state = ScriptState.COMPILING
        try:
            program = self._engine.compile(source)
        except ConfigurationError as exc:
            self.state = ScriptState.CONFIGURATION_FAILED
            logger.error("Mapping script rejected: %s", exc)
            raise
        self._program: CompiledScript = program
        self.state = ScriptState.READY

    @property
    def source(self) -> str:
        return self._program.source

    def _map(self, attributes: AttributeView) -> MonitoredResourceIdentity:
        return self._engine.invoke(self._program, dict(attributes.items()))
