# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Errors raised while mapping resources to monitored-resource identities.

Setup failures (:class:`ConfigurationError`) abort pipeline configuration.
Everything else is scoped to the single resource being mapped, so callers
can log the error and move on to the next resource.
"""

from __future__ import annotations

from typing import Optional


class MappingError(Exception):
    """Base class for every resmap error.

    Carries optional context so callers can log and skip:
    the monitored-resource type that was attempted and the offending key.
    """

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource_type = resource_type
        self.key = key

    def __str__(self) -> str:
        context = []
        if self.resource_type:
            context.append(f"type={self.resource_type!r}")
        if self.key is not None:
            context.append(f"key={self.key!r}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigurationError(MappingError, ValueError):
    """Invalid setup: bad filter regex, unusable script, bad config values."""


class ClassificationError(MappingError):
    """The default classifier failed or returned an unusable result."""


class ScriptInvocationError(MappingError):
    """A single scripted mapping call failed."""


class ScriptBudgetExceeded(ScriptInvocationError):
    """The script ran past its execution step budget."""


__all__ = [
    "ClassificationError",
    "ConfigurationError",
    "MappingError",
    "ScriptBudgetExceeded",
    "ScriptInvocationError",
]
