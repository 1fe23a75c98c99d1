# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Default mapper: built-in classification plus label sanitization."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from resmap.errors import ClassificationError, MappingError
from resmap.mapping.base import Mapper
from resmap.mapping.classification import ClassifiedResource, classify_resource
from resmap.mapping.sanitize import sanitize_utf8
from resmap.models.identity import MonitoredResourceIdentity
from resmap.resources.attributes import AttributeView

Classifier = Callable[[AttributeView], ClassifiedResource]


class DefaultMapper(Mapper):
    """Classify with *classifier*, then sanitize every label value.

    Label keys pass through unchanged. Errors raised by the classifier as
    :class:`MappingError` propagate as-is; anything else is wrapped in
    :class:`ClassificationError`. There is no retry here.
    """

    kind = "default"

    def __init__(
        self,
        include_service_labels: bool = True,
        resource_filters: Iterable[Any] = (),
        classifier: Classifier = classify_resource,
        sanitizer: Callable[[str], str] = sanitize_utf8,
    ) -> None:
        super().__init__(include_service_labels, resource_filters)
        self._classify = classifier
        self._sanitize = sanitizer

    def _map(self, attributes: AttributeView) -> MonitoredResourceIdentity:
        try:
            classified = self._classify(attributes)
        except MappingError:
            raise
        except Exception as exc:
            raise ClassificationError(f"resource classification failed: {exc}") from exc

        resource_type = getattr(classified, "type", None)
        labels = getattr(classified, "labels", None)
        if not isinstance(resource_type, str) or not resource_type:
            raise ClassificationError(f"classifier returned an invalid resource type: {resource_type!r}")
        if not isinstance(labels, Mapping):
            raise ClassificationError("classifier returned non-mapping labels", resource_type=resource_type)

        sanitized = {}
        for key, value in labels.items():
            if not isinstance(key, str) or not isinstance(value, (str, bytes)):
                raise ClassificationError(
                    "classifier returned a non-string label",
                    resource_type=resource_type,
                    key=str(key),
                )
            sanitized[key] = self._sanitize(value)
        return MonitoredResourceIdentity(type=resource_type, labels=sanitized)
