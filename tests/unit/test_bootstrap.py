# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the process-wide mapper: configure(), map_resource(), reset()."""

from __future__ import annotations

import os
from unittest import mock

import pytest

import resmap
from resmap.errors import ConfigurationError, ScriptInvocationError
from resmap.mapping.default import DefaultMapper
from resmap.mapping.scripted import ScriptedMapper
from resmap.sdk import bootstrap
from resmap.sdk.config import MapperConfig


class TestConfigure:
    def test_not_configured_initially(self):
        assert not bootstrap.is_configured()
        assert bootstrap.get_mapper() is None
        assert bootstrap.get_config() is None

    def test_configure_with_config(self, generic_task_script):
        config = MapperConfig(mapping_mode="scripted", script=generic_task_script)
        mapper = bootstrap.configure(config=config)

        assert isinstance(mapper, ScriptedMapper)
        assert bootstrap.is_configured()
        assert bootstrap.get_mapper() is mapper
        assert bootstrap.get_config() is config

    def test_configure_from_file(self, tmp_path):
        config_file = tmp_path / "resmap.yaml"
        config_file.write_text("metric:\n  resource_filters:\n    - prefix: cloud.\n")

        mapper = bootstrap.configure(config_file=str(config_file))

        assert isinstance(mapper, DefaultMapper)
        assert bootstrap.get_config().resource_filters[0].prefix == "cloud."

    def test_configure_from_env(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with mock.patch.dict(os.environ, {"RESMAP_MAPPING_MODE": "default"}):
            os.environ.pop("RESMAP_CONFIG_FILE", None)
            assert isinstance(bootstrap.configure(), DefaultMapper)

    def test_second_configure_keeps_first_mapper(self, caplog):
        first = bootstrap.configure(config=MapperConfig(mapping_mode="default"))
        second = bootstrap.configure(config=MapperConfig(mapping_mode="default", service_resource_labels=False))

        assert second is first
        assert "already configured" in caplog.text

    def test_invalid_script_installs_nothing(self):
        config = MapperConfig(mapping_mode="scripted", script="def map_resource(attrs):\n    while True:\n        pass\n")
        with pytest.raises(ConfigurationError):
            bootstrap.configure(config=config)

        assert not bootstrap.is_configured()
        assert bootstrap.get_config() is None


class TestMapResource:
    def test_requires_configure(self):
        with pytest.raises(RuntimeError, match="not configured"):
            bootstrap.map_resource({"host.name": "h"})

    def test_maps_with_installed_mapper(self, generic_task_script):
        bootstrap.configure(config=MapperConfig(mapping_mode="scripted", script=generic_task_script))
        identity = bootstrap.map_resource({"cloud.region": "us-west1"})
        assert identity.type == "generic_task"
        assert identity.labels == {"location": "us-west1"}

    def test_call_errors_propagate(self, generic_task_script):
        bootstrap.configure(config=MapperConfig(mapping_mode="scripted", script=generic_task_script))
        with pytest.raises(ScriptInvocationError):
            bootstrap.map_resource({})
        assert bootstrap.is_configured()

    def test_top_level_api(self):
        resmap.configure(config=MapperConfig())
        assert resmap.map_resource({"host.name": "box"}).labels["node_id"] == "box"


class TestReset:
    def test_reset_uninstalls(self):
        bootstrap.configure(config=MapperConfig())
        bootstrap.reset()
        assert not bootstrap.is_configured()
        assert bootstrap.get_config() is None

    def test_reset_when_not_configured(self):
        bootstrap.reset()
        assert not bootstrap.is_configured()

    def test_configure_after_reset_builds_new_mapper(self):
        first = bootstrap.configure(config=MapperConfig())
        bootstrap.reset()
        second = bootstrap.configure(config=MapperConfig())
        assert second is not first
