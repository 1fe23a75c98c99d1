# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Monitored-resource identity and resource filter models.

A monitored-resource identity is what the monitoring backend sees:
a resource type (``gce_instance``, ``k8s_container``, ``generic_task`` ...)
plus the labels that schema requires.

Invariants:
- ``type`` is a non-empty string.
- Labels are ``str -> str``. Keys are taken verbatim from their source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from resmap.errors import ConfigurationError


@dataclass(frozen=True)
class MonitoredResourceIdentity:
    """Resource type plus labels, ready for export."""

    type: str
    labels: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.type, str):
            raise TypeError(f"monitored resource type must be a str, got {type(self.type).__name__}")
        if not self.type:
            raise ValueError("monitored resource type must not be empty")
        if not isinstance(self.labels, Mapping):
            raise TypeError(f"labels must be a mapping, got {type(self.labels).__name__}")

        labels: Dict[str, str] = {}
        for key, value in self.labels.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"labels must be a dict of str keys and values, offending key {key!r}")
            labels[key] = value
        object.__setattr__(self, "labels", labels)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "labels": dict(self.labels)}


@dataclass(frozen=True)
class ResourceFilter:
    """Decides whether a resource attribute becomes an exported label.

    A key matches when it starts with ``prefix`` **and** ``regex`` finds a
    match anywhere in it. The regex is compiled once, here.
    """

    prefix: str = ""
    regex: str = ""
    _pattern: "re.Pattern[str]" = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.prefix, str) or not isinstance(self.regex, str):
            raise ConfigurationError("resource filter prefix and regex must be strings")
        try:
            pattern = re.compile(self.regex)
        except re.error as exc:
            raise ConfigurationError(f"invalid resource filter regex {self.regex!r}: {exc}") from exc
        object.__setattr__(self, "_pattern", pattern)

    def matches(self, key: str) -> bool:
        return key.startswith(self.prefix) and self._pattern.search(key) is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResourceFilter:
        """Build a filter from a config mapping (``prefix`` / ``regex``)."""
        unknown = set(data) - {"prefix", "regex"}
        if unknown:
            raise ConfigurationError(f"unknown resource filter keys: {sorted(unknown)}")
        return cls(prefix=data.get("prefix") or "", regex=data.get("regex") or "")

    def to_dict(self) -> Dict[str, str]:
        return {"prefix": self.prefix, "regex": self.regex}


def coerce_filter(value: Any) -> ResourceFilter:
    if isinstance(value, ResourceFilter):
        return value
    if isinstance(value, Mapping):
        return ResourceFilter.from_dict(value)
    raise ConfigurationError(f"resource filter must be a mapping, got {type(value).__name__}")

