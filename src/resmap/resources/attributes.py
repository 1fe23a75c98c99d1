# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Read-only view over a resource's attributes.

Both mapping paths read attributes through :class:`AttributeView` and never
touch the underlying storage. Values are rendered to strings the way an
OTLP ``AnyValue`` renders itself:

- ``str`` as-is, ``bool`` as ``true``/``false``, numbers via ``str()``
- ``bytes`` as standard base64
- sequences and mappings as compact JSON
"""

from __future__ import annotations

import base64
import json
from typing import Any, Iterator, Mapping, Tuple

from opentelemetry.sdk.resources import Resource


def render_value(value: Any) -> str:
    """Render an attribute value as a string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(_jsonable(value), separators=(",", ":"), ensure_ascii=False)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class AttributeView:
    """Lookup-by-key capability over an attribute mapping.

    Exposes no way to modify the wrapped attributes.
    """

    __slots__ = ("_attrs",)

    def __init__(self, attributes: Mapping[str, Any]) -> None:
        self._attrs = attributes

    @classmethod
    def from_resource(cls, resource: Resource) -> AttributeView:
        return cls(resource.attributes)

    def get_string(self, key: str) -> Tuple[str, bool]:
        """Return ``(value, present)``; absent keys give ``("", False)``."""
        if key not in self._attrs:
            return "", False
        return render_value(self._attrs[key]), True

    def items(self) -> Iterator[Tuple[str, str]]:
        for key, value in self._attrs.items():
            yield key, render_value(value)

    def keys(self) -> Iterator[str]:
        return iter(self._attrs)

    def to_dict(self) -> dict:
        return dict(self.items())

    def __contains__(self, key: object) -> bool:
        return key in self._attrs

    def __len__(self) -> int:
        return len(self._attrs)

    def __repr__(self) -> str:
        return f"AttributeView({sorted(self._attrs)!r})"


def as_attribute_view(attributes: Any) -> AttributeView:
    """Coerce a view, an OTel ``Resource`` or a plain mapping to a view."""
    if isinstance(attributes, AttributeView):
        return attributes
    if isinstance(attributes, Mapping):
        return AttributeView(attributes)
    if isinstance(attributes, Resource):
        return AttributeView.from_resource(attributes)
    raise TypeError(f"expected resource attributes, got {type(attributes).__name__}")
