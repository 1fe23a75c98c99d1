# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Mapping metrics.

- ``resmap.mapping.results`` (counter): mapping calls by mapper kind,
  status and error class
"""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import Counter

logger = logging.getLogger(__name__)

_METER_NAME = "resmap"

meter = metrics.get_meter(_METER_NAME)

_mapping_results_counter: Optional[Counter] = None


def _get_mapping_results_counter() -> Counter:
    global _mapping_results_counter
    if _mapping_results_counter is None:
        _mapping_results_counter = meter.create_counter(
            name="resmap.mapping.results",
            description="Resource mapping calls by outcome",
            unit="1",
        )
    return _mapping_results_counter


def record_mapping_result(mapper: str, error: Optional[BaseException] = None) -> None:
    """Record the outcome of one ``Mapper.map`` call.

    Args:
        mapper: Mapper kind (``default`` or ``scripted``).
        error: The exception the call raised, if any.
    """
    attrs = {
        "mapper": mapper,
        "status": "success" if error is None else "failure",
    }
    if error is not None:
        attrs["error"] = type(error).__name__

    try:
        _get_mapping_results_counter().add(1, attrs)
    except Exception as exc:
        logger.debug("Failed to record resmap.mapping.results metric: %s", exc)
