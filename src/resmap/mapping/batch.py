# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Map a batch of resources, skipping the ones that fail."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple

from resmap.errors import MappingError
from resmap.mapping.base import Mapper
from resmap.models.identity import MonitoredResourceIdentity

logger = logging.getLogger(__name__)


@dataclass
class MappingReport:
    """Outcome of :func:`map_resources`."""

    mapped: List[Tuple[Any, MonitoredResourceIdentity]] = field(default_factory=list)
    failed: List[Tuple[Any, MappingError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def map_resources(mapper: Mapper, resources: Iterable[Any]) -> MappingReport:
    """Map every resource; a failure drops that resource and nothing else."""
    report = MappingReport()
    for resource in resources:
        try:
            identity = mapper.map(resource)
        except MappingError as exc:
            logger.warning("Dropping resource that could not be mapped: %s", exc)
            report.failed.append((resource, exc))
            continue
        report.mapped.append((resource, identity))

    if report.failed:
        logger.info(
            "Mapped %d resources, dropped %d",
            len(report.mapped),
            len(report.failed),
        )
    return report
