# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Configuration for resource mapping.

Configuration precedence (highest to lowest):
1. Code arguments (explicit values passed to MapperConfig)
2. YAML config file (resmap.yaml or specified path)
3. Environment variables (RESMAP_*), for keys the file leaves unset
4. Built-in defaults

YAML layout::

    metric:
      service_resource_labels: true
      resource_filters:
        - prefix: "cloud."
          regex: "^cloud\\\\..*"
    resource_mapping:
      mode: scripted            # or "default"
      script_file: ${MAPPING_DIR}/map_resource.py
      max_steps: 100000
      max_seconds: 1.0
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from resmap.errors import ConfigurationError
from resmap.mapping.base import Mapper
from resmap.mapping.engine import DEFAULT_MAX_SECONDS, DEFAULT_MAX_STEPS
from resmap.models.identity import ResourceFilter, coerce_filter

logger = logging.getLogger(__name__)

MAPPING_MODES = ("default", "scripted")

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


@dataclass
class MapperConfig:
    """Configuration for the resource mapper.

    Example::

        >>> config = MapperConfig(
        ...     resource_filters=[{"prefix": "cloud.", "regex": "^cloud\\\\..*"}],
        ... )
        >>> mapper = config.build_mapper()

        >>> # Or load from YAML
        >>> config = MapperConfig.from_yaml("config/resmap.yaml")
    """

    # Label selection
    service_resource_labels: Optional[bool] = None
    resource_filters: List[ResourceFilter] = field(default_factory=list)

    # Mapping mode: "default" (built-in classification) or "scripted"
    mapping_mode: Optional[str] = None
    script: Optional[str] = field(default=None, repr=False)
    script_file: Optional[str] = None
    max_script_steps: Optional[int] = None
    max_script_seconds: Optional[float] = None

    # Config file path (for tracking where config was loaded from)
    _config_file: Optional[str] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Apply environment variable defaults, then validate."""
        if self.service_resource_labels is None:
            self.service_resource_labels = os.getenv("RESMAP_SERVICE_RESOURCE_LABELS", True)
        self.service_resource_labels = _parse_bool(self.service_resource_labels, "service_resource_labels")

        if self.mapping_mode is None:
            self.mapping_mode = os.getenv("RESMAP_MAPPING_MODE", "default")

        if self.script_file is None:
            self.script_file = os.getenv("RESMAP_SCRIPT_FILE")

        if self.max_script_steps is None:
            env_steps = os.getenv("RESMAP_MAX_SCRIPT_STEPS")
            if env_steps:
                try:
                    self.max_script_steps = int(env_steps)
                except ValueError as exc:
                    raise ConfigurationError(f"RESMAP_MAX_SCRIPT_STEPS must be an integer, got {env_steps!r}") from exc
            else:
                self.max_script_steps = DEFAULT_MAX_STEPS

        if self.max_script_seconds is None:
            env_seconds = os.getenv("RESMAP_MAX_SCRIPT_SECONDS")
            if env_seconds:
                try:
                    self.max_script_seconds = float(env_seconds)
                except ValueError as exc:
                    raise ConfigurationError(
                        f"RESMAP_MAX_SCRIPT_SECONDS must be a number, got {env_seconds!r}"
                    ) from exc
            else:
                self.max_script_seconds = DEFAULT_MAX_SECONDS

        self.resource_filters = [coerce_filter(f) for f in self.resource_filters]
        self.validate()

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` if the configuration is unusable."""
        if self.mapping_mode not in MAPPING_MODES:
            raise ConfigurationError(f"unknown resource mapping mode {self.mapping_mode!r}, expected one of {MAPPING_MODES}")
        steps = self.max_script_steps
        if isinstance(steps, bool) or not isinstance(steps, int) or steps <= 0:
            raise ConfigurationError(f"max_script_steps must be a positive integer, got {steps!r}")
        seconds = self.max_script_seconds
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or seconds <= 0:
            raise ConfigurationError(f"max_script_seconds must be a positive number, got {seconds!r}")
        if self.mapping_mode == "scripted" and not self.script and not self.script_file:
            raise ConfigurationError("scripted resource mapping needs a script or script_file")

    def load_script(self) -> str:
        """Return the script source, reading ``script_file`` if needed."""
        if self.script:
            return self.script
        if not self.script_file:
            raise ConfigurationError("no mapping script configured")
        path = Path(self.script_file)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"cannot read mapping script {path}: {exc}") from exc

    def build_mapper(self) -> Mapper:
        """Construct the configured mapper.

        Raises:
            ConfigurationError: Invalid script or settings.
        """
        from resmap.mapping.default import DefaultMapper
        from resmap.mapping.scripted import ScriptedMapper

        if self.mapping_mode == "scripted":
            return ScriptedMapper(
                self.load_script(),
                max_steps=self.max_script_steps or DEFAULT_MAX_STEPS,
                max_seconds=self.max_script_seconds or DEFAULT_MAX_SECONDS,
                include_service_labels=bool(self.service_resource_labels),
                resource_filters=self.resource_filters,
            )
        return DefaultMapper(
            include_service_labels=bool(self.service_resource_labels),
            resource_filters=self.resource_filters,
        )

    # ------------------------------------------------------------------
    # YAML loading
    # ------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> MapperConfig:
        """Load configuration from a YAML file.

        Supports environment variable interpolation using ``${VAR_NAME}`` syntax.
        A relative ``script_file`` is resolved against the config file's directory.

        Args:
            path: Path to YAML config file.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ConfigurationError: If YAML is malformed or values are invalid.
        """
        if path is None:
            raise FileNotFoundError("No config file path provided")

        resolved = Path(path)
        if not resolved.exists():
            raise FileNotFoundError(f"Config file not found: {resolved}")

        try:
            import yaml  # type: ignore[import-untyped]
        except ImportError as err:
            raise ImportError("PyYAML required for YAML config. Install with: pip install resmap[yaml]") from err

        with open(resolved, encoding="utf-8") as fh:
            raw_content = fh.read()

        content = _interpolate_env_vars(raw_content)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {resolved}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid config in {resolved}: expected a mapping at the top level")

        return cls._from_dict(data, config_file=str(resolved))

    @classmethod
    def from_file_or_env(cls, path: Optional[str] = None) -> MapperConfig:
        """Load config from file if exists, otherwise use environment variables.

        Search order:
        1. Explicit *path* argument
        2. ``RESMAP_CONFIG_FILE`` env var
        3. ``./resmap.yaml``
        4. ``./config/resmap.yaml``
        5. Falls back to env-only config
        """
        search_paths: List[Path] = []

        if path:
            search_paths.append(Path(path))

        env_path = os.getenv("RESMAP_CONFIG_FILE")
        if env_path:
            search_paths.append(Path(env_path))

        search_paths.extend(
            [
                Path("resmap.yaml"),
                Path("resmap.yml"),
                Path("config/resmap.yaml"),
                Path("config/resmap.yml"),
            ]
        )

        for candidate in search_paths:
            if candidate.exists():
                logger.info("Loading config from: %s", candidate)
                return cls.from_yaml(str(candidate))

        logger.debug("No config file found, using environment variables only")
        return cls()

    @classmethod
    def _from_dict(
        cls,
        data: Dict[str, Any],
        config_file: Optional[str] = None,
    ) -> MapperConfig:
        """Create config from dictionary (parsed YAML)."""
        metric = data.get("metric") or {}
        mapping = data.get("resource_mapping") or {}

        script_file = mapping.get("script_file")
        if script_file and config_file and not os.path.isabs(script_file):
            script_file = str(Path(config_file).parent / script_file)

        return cls(
            service_resource_labels=metric.get("service_resource_labels"),
            resource_filters=list(metric.get("resource_filters") or []),
            mapping_mode=mapping.get("mode"),
            script=mapping.get("script"),
            script_file=script_file,
            max_script_steps=mapping.get("max_steps"),
            max_script_seconds=mapping.get("max_seconds"),
            _config_file=config_file,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "metric": {
                "service_resource_labels": self.service_resource_labels,
                "resource_filters": [f.to_dict() for f in self.resource_filters],
            },
            "resource_mapping": {
                "mode": self.mapping_mode,
                "script": self.script,
                "script_file": self.script_file,
                "max_steps": self.max_script_steps,
                "max_seconds": self.max_script_seconds,
            },
        }


def _interpolate_env_vars(content: str) -> str:
    """Interpolate ``${VAR_NAME}`` and ``${VAR_NAME:-default}`` in *content*."""
    pattern = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

    def _replace(match: re.Match) -> str:  # type: ignore[type-arg]
        var_name = match.group(1)
        default = match.group(2)
        value = os.getenv(var_name)
        if value is not None:
            return value
        if default is not None:
            return default
        return match.group(0)

    return pattern.sub(_replace, content)


def _parse_bool(value: Any, name: str) -> bool:
    """Accept a bool or one of the usual true/false spellings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")
