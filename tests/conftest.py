# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Shared test fixtures for resmap tests."""

from __future__ import annotations

import pytest
from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from resmap.sdk import bootstrap

# Set eagerly at module level: OTel only allows set_meter_provider() once.
_metric_reader = InMemoryMetricReader()
metrics.set_meter_provider(MeterProvider(metric_readers=[_metric_reader]))

GENERIC_TASK_SCRIPT = """
def map_resource(attrs):
    return MonitoredResource(
        type="generic_task",
        labels={"location": attrs["cloud.region"]},
    )
"""


def _mapping_results(**attrs) -> int:
    """Cumulative ``resmap.mapping.results`` count for points matching *attrs*."""
    data = _metric_reader.get_metrics_data()
    total = 0
    if data is None:
        return total
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name != "resmap.mapping.results":
                    continue
                for point in metric.data.data_points:
                    if all(point.attributes.get(k) == v for k, v in attrs.items()):
                        total += point.value
    return total


@pytest.fixture
def mapping_results():
    """Callable returning the cumulative mapping result count for given attributes."""
    return _mapping_results


@pytest.fixture
def generic_task_script() -> str:
    return GENERIC_TASK_SCRIPT


@pytest.fixture(autouse=True)
def reset_mapper():
    """Uninstall the process-wide mapper around each test."""
    bootstrap.reset()
    yield
    bootstrap.reset()
