# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""The mapper capability shared by the default and scripted paths."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Iterable, Tuple

from resmap.errors import MappingError
from resmap.mapping.labels import resource_to_labels
from resmap.models.identity import MonitoredResourceIdentity, ResourceFilter, coerce_filter
from resmap.resources.attributes import AttributeView, as_attribute_view
from resmap.tracking.metrics import record_mapping_result

logger = logging.getLogger(__name__)


class Mapper(ABC):
    """Maps one resource's attributes to one monitored-resource identity.

    A mapper is built once at configuration time and then called from any
    number of threads. Implementations must not keep per-call state.
    """

    kind: ClassVar[str] = "abstract"

    def __init__(
        self,
        include_service_labels: bool = True,
        resource_filters: Iterable[Any] = (),
    ) -> None:
        self.include_service_labels = include_service_labels
        self.resource_filters: Tuple[ResourceFilter, ...] = tuple(coerce_filter(f) for f in resource_filters)

    def map(self, attributes: Any) -> MonitoredResourceIdentity:
        """Map *attributes* to a monitored-resource identity.

        Accepts an :class:`AttributeView`, an OTel ``Resource`` or a mapping.

        Raises:
            MappingError: The resource could not be mapped. Only this
                resource is affected; the mapper stays usable.
        """
        view = as_attribute_view(attributes)
        try:
            identity = self._map(view)
        except MappingError as exc:
            logger.debug("%s mapper failed for %r: %s", self.kind, view, exc)
            record_mapping_result(self.kind, exc)
            raise
        record_mapping_result(self.kind)
        return identity

    @abstractmethod
    def _map(self, attributes: AttributeView) -> MonitoredResourceIdentity:
        """Map a view; raise :class:`MappingError` on failure."""

    def resource_labels(self, attributes: Any) -> Dict[str, str]:
        """Resource attributes to export as labels, per this mapper's filters."""
        return resource_to_labels(
            as_attribute_view(attributes),
            self.include_service_labels,
            self.resource_filters,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(include_service_labels={self.include_service_labels}, "
            f"resource_filters={list(self.resource_filters)!r})"
        )
