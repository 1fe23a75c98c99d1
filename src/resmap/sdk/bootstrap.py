# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Process-wide resource mapper.

The exporter pipeline configures one mapper at startup and uses it for
every resource until shutdown::

    from resmap import configure, map_resource

    configure(config_file="resmap.yaml")
    identity = map_resource(resource)

A configuration error aborts :func:`configure`; nothing is installed.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Optional

from resmap.errors import ConfigurationError

if TYPE_CHECKING:
    from resmap.mapping.base import Mapper
    from resmap.models.identity import MonitoredResourceIdentity
    from resmap.sdk.config import MapperConfig

logger = logging.getLogger(__name__)

_lock = threading.RLock()
_current_mapper: Optional[Mapper] = None
_current_config: Optional[MapperConfig] = None


def configure(
    config: Optional[MapperConfig] = None,
    config_file: Optional[str] = None,
    log_level: str = "INFO",
) -> Mapper:
    """Build and install the process-wide mapper.

    Args:
        config: Full :class:`MapperConfig` (takes precedence over *config_file*).
        config_file: Path to YAML config file.
        log_level: Logging level (default: ``"INFO"``).

    Returns:
        The installed mapper. If one is already installed it is returned
        unchanged.

    Raises:
        ConfigurationError: The configuration or script is invalid.
    """
    global _current_mapper, _current_config

    with _lock:
        if _current_mapper is not None:
            logger.warning("Resource mapper already configured")
            return _current_mapper

        logging.basicConfig(level=getattr(logging, log_level.upper()))

        from resmap.sdk.config import MapperConfig as ConfigClass

        if config is not None:
            cfg = config
        elif config_file is not None:
            cfg = ConfigClass.from_yaml(config_file)
        else:
            cfg = ConfigClass.from_file_or_env()

        logger.info(
            "Configuring resource mapper: mode=%s, service_labels=%s, filters=%d",
            cfg.mapping_mode,
            cfg.service_resource_labels,
            len(cfg.resource_filters),
        )

        try:
            mapper = cfg.build_mapper()
        except ConfigurationError as exc:
            logger.error("Failed to configure resource mapper: %s", exc)
            raise

        _current_mapper = mapper
        _current_config = cfg
        return mapper


def is_configured() -> bool:
    """Check if a mapper is installed."""
    return _current_mapper is not None


def get_mapper() -> Optional[Mapper]:
    """Get the installed mapper."""
    return _current_mapper


def get_config() -> Optional[MapperConfig]:
    """Get the configuration of the installed mapper."""
    return _current_config


def map_resource(attributes: Any) -> MonitoredResourceIdentity:
    """Map *attributes* with the installed mapper.

    Raises:
        RuntimeError: :func:`configure` has not been called.
        MappingError: The resource could not be mapped.
    """
    mapper = _current_mapper
    if mapper is None:
        raise RuntimeError("resource mapper is not configured; call resmap.configure() first")
    return mapper.map(attributes)


def reset() -> None:
    """Uninstall the mapper (pipeline shutdown, tests)."""
    global _current_mapper, _current_config

    with _lock:
        if _current_mapper is None:
            return
        _current_mapper = None
        _current_config = None
        logger.info("Resource mapper reset")
