# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for DefaultMapper."""

from __future__ import annotations

from unittest import mock

import pytest
from opentelemetry.sdk.resources import Resource

from resmap.errors import ClassificationError, MappingError
from resmap.mapping.classification import ClassifiedResource
from resmap.mapping.default import DefaultMapper
from resmap.models.identity import MonitoredResourceIdentity, ResourceFilter


def static_classifier(resource_type, labels):
    return mock.Mock(return_value=ClassifiedResource(type=resource_type, labels=labels))


class TestDefaultMapping:
    def test_maps_with_builtin_classifier(self):
        mapper = DefaultMapper()
        identity = mapper.map(
            {
                "cloud.platform": "gcp_compute_engine",
                "cloud.availability_zone": "us-central1-a",
                "host.id": "42",
            }
        )
        assert identity == MonitoredResourceIdentity(
            type="gce_instance",
            labels={"zone": "us-central1-a", "instance_id": "42"},
        )

    def test_accepts_otel_resource(self):
        identity = DefaultMapper().map(Resource({"host.name": "box"}))
        assert identity.type == "generic_node"
        assert identity.labels["node_id"] == "box"

    def test_classifier_receives_view(self):
        classifier = static_classifier("generic_node", {"node_id": "n"})
        DefaultMapper(classifier=classifier).map({"host.name": "n"})
        (view,), _ = classifier.call_args
        assert view.get_string("host.name") == ("n", True)

    def test_label_values_sanitized(self):
        mapper = DefaultMapper(classifier=static_classifier("generic_node", {"node_id": b"box\xff"}))
        identity = mapper.map({})
        assert identity.labels == {"node_id": "box�"}

    def test_label_keys_unchanged(self):
        mapper = DefaultMapper(classifier=static_classifier("custom", {"Weird Key!": "v"}))
        assert mapper.map({}).labels == {"Weird Key!": "v"}

    def test_valid_labels_untouched(self):
        labels = {"location": "日本", "job": "checkout"}
        mapper = DefaultMapper(classifier=static_classifier("generic_task", labels))
        assert mapper.map({}).labels == labels

    def test_custom_sanitizer(self):
        mapper = DefaultMapper(
            classifier=static_classifier("generic_node", {"node_id": "Box"}),
            sanitizer=str.lower,
        )
        assert mapper.map({}).labels == {"node_id": "box"}


class TestClassifierErrors:
    def test_unexpected_error_wrapped(self):
        boom = RuntimeError("boom")
        mapper = DefaultMapper(classifier=mock.Mock(side_effect=boom))
        with pytest.raises(ClassificationError, match="resource classification failed: boom") as exc_info:
            mapper.map({})
        assert exc_info.value.__cause__ is boom

    def test_mapping_error_propagates_unchanged(self):
        error = ClassificationError("unknown platform", resource_type="gce_instance")
        mapper = DefaultMapper(classifier=mock.Mock(side_effect=error))
        with pytest.raises(ClassificationError) as exc_info:
            mapper.map({})
        assert exc_info.value is error

    def test_invalid_type_rejected(self):
        mapper = DefaultMapper(classifier=static_classifier("", {}))
        with pytest.raises(ClassificationError, match="invalid resource type"):
            mapper.map({})

    def test_non_mapping_labels_rejected(self):
        mapper = DefaultMapper(classifier=static_classifier("generic_node", [("node_id", "n")]))
        with pytest.raises(ClassificationError, match="non-mapping labels"):
            mapper.map({})

    def test_non_string_label_reports_key(self):
        mapper = DefaultMapper(classifier=static_classifier("generic_node", {"node_id": 7}))
        with pytest.raises(ClassificationError) as exc_info:
            mapper.map({})
        assert exc_info.value.key == "node_id"
        assert exc_info.value.resource_type == "generic_node"

    def test_mapper_usable_after_failure(self):
        classifier = mock.Mock(
            side_effect=[RuntimeError("transient"), ClassifiedResource("generic_node", {"node_id": "n"})]
        )
        mapper = DefaultMapper(classifier=classifier)
        with pytest.raises(MappingError):
            mapper.map({})
        assert mapper.map({}).type == "generic_node"


class TestResourceLabels:
    def test_uses_configured_filters(self):
        mapper = DefaultMapper(resource_filters=[{"prefix": "cloud."}])
        assert mapper.resource_filters == (ResourceFilter(prefix="cloud."),)
        labels = mapper.resource_labels({"service.name": "svc", "cloud.region": "r", "host.id": "h"})
        assert labels == {"service.name": "svc", "cloud.region": "r"}

    def test_service_labels_can_be_disabled(self):
        mapper = DefaultMapper(include_service_labels=False)
        assert mapper.resource_labels({"service.name": "svc"}) == {}


class TestMappingMetrics:
    def test_success_counted(self, mapping_results):
        before = mapping_results(mapper="default", status="success")
        DefaultMapper().map({"host.name": "h"})
        assert mapping_results(mapper="default", status="success") == before + 1

    def test_failure_counted_with_error_class(self, mapping_results):
        before = mapping_results(mapper="default", status="failure", error="ClassificationError")
        mapper = DefaultMapper(classifier=mock.Mock(side_effect=RuntimeError("x")))
        with pytest.raises(ClassificationError):
            mapper.map({})
        assert mapping_results(mapper="default", status="failure", error="ClassificationError") == before + 1
