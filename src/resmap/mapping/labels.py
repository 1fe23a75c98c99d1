# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Select which resource attributes become exported labels."""

from __future__ import annotations

from typing import Dict, FrozenSet, Sequence

from opentelemetry.semconv._incubating.attributes import service_attributes

from resmap.models.identity import ResourceFilter
from resmap.resources.attributes import AttributeView

SERVICE_LABEL_KEYS: FrozenSet[str] = frozenset(
    {
        service_attributes.SERVICE_NAME,
        service_attributes.SERVICE_NAMESPACE,
        service_attributes.SERVICE_INSTANCE_ID,
    }
)


def resource_to_labels(
    attributes: AttributeView,
    include_service_labels: bool,
    resource_filters: Sequence[ResourceFilter],
) -> Dict[str, str]:
    """Convert resource attributes into labels.

    Per attribute:

    1. With ``include_service_labels``, the service name, namespace and
       instance id keys are kept when non-empty and otherwise dropped.
       Filters are not consulted for them.
    2. Any other attribute is kept when one of ``resource_filters`` matches
       its key. The first matching filter decides.

    Keys and values are copied unchanged.
    """
    labels: Dict[str, str] = {}
    for key, value in attributes.items():
        if include_service_labels and key in SERVICE_LABEL_KEYS:
            if value:
                labels[key] = value
            continue
        for resource_filter in resource_filters:
            if resource_filter.matches(key):
                labels[key] = value
                break
    return labels
