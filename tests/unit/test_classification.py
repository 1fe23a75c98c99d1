# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the built-in resource classification table."""

from __future__ import annotations

from resmap.mapping.classification import (
    MONITORED_RESOURCE_MAPPINGS,
    classify_resource,
    create_monitored_resource,
)
from resmap.resources.attributes import AttributeView


def classify(attrs):
    return classify_resource(AttributeView(attrs))


class TestCloudPlatform:
    def test_gce_instance(self):
        result = classify(
            {
                "cloud.platform": "gcp_compute_engine",
                "cloud.availability_zone": "us-central1-a",
                "host.id": "1234567890",
            }
        )
        assert result.type == "gce_instance"
        assert result.labels == {"zone": "us-central1-a", "instance_id": "1234567890"}

    def test_gae_instance(self):
        result = classify(
            {
                "cloud.platform": "gcp_app_engine",
                "cloud.region": "us-central1",
                "faas.name": "default",
                "faas.version": "v1",
                "faas.instance": "inst-1",
            }
        )
        assert result.type == "gae_instance"
        assert result.labels == {
            "location": "us-central1",
            "module_id": "default",
            "version_id": "v1",
            "instance_id": "inst-1",
        }

    def test_aws_ec2_instance(self):
        result = classify(
            {
                "cloud.platform": "aws_ec2",
                "cloud.region": "us-east-1",
                "cloud.account.id": "123456789012",
                "host.id": "i-0abc",
            }
        )
        assert result.type == "aws_ec2_instance"
        assert result.labels == {"instance_id": "i-0abc", "region": "us-east-1", "aws_account": "123456789012"}

    def test_zone_preferred_over_region(self):
        result = classify(
            {
                "cloud.platform": "aws_ec2",
                "cloud.availability_zone": "us-east-1a",
                "cloud.region": "us-east-1",
            }
        )
        assert result.labels["region"] == "us-east-1a"


class TestKubernetes:
    BASE = {
        "cloud.availability_zone": "us-central1-c",
        "k8s.cluster.name": "prod",
    }

    def test_k8s_container(self):
        result = classify(
            {
                **self.BASE,
                "k8s.namespace.name": "default",
                "k8s.pod.name": "web-abc",
                "k8s.container.name": "web",
            }
        )
        assert result.type == "k8s_container"
        assert result.labels == {
            "location": "us-central1-c",
            "cluster_name": "prod",
            "namespace_name": "default",
            "pod_name": "web-abc",
            "container_name": "web",
        }

    def test_k8s_pod(self):
        result = classify({**self.BASE, "k8s.namespace.name": "default", "k8s.pod.name": "web-abc"})
        assert result.type == "k8s_pod"

    def test_k8s_node(self):
        result = classify({**self.BASE, "k8s.node.name": "node-1"})
        assert result.type == "k8s_node"
        assert result.labels["node_name"] == "node-1"

    def test_k8s_cluster(self):
        result = classify(dict(self.BASE))
        assert result.type == "k8s_cluster"
        assert result.labels == {"location": "us-central1-c", "cluster_name": "prod"}

    def test_gke_platform_uses_k8s_attributes(self):
        result = classify({**self.BASE, "cloud.platform": "gcp_kubernetes_engine", "k8s.node.name": "n"})
        assert result.type == "k8s_node"


class TestGeneric:
    def test_generic_task_from_service(self):
        result = classify(
            {
                "service.name": "checkout",
                "service.namespace": "shop",
                "service.instance.id": "inst-7",
                "cloud.region": "europe-west1",
            }
        )
        assert result.type == "generic_task"
        assert result.labels == {
            "location": "europe-west1",
            "namespace": "shop",
            "job": "checkout",
            "task_id": "inst-7",
        }

    def test_generic_task_from_faas(self):
        result = classify({"faas.name": "fn", "faas.instance": "abc"})
        assert result.type == "generic_task"
        assert result.labels["job"] == "fn"
        assert result.labels["task_id"] == "abc"

    def test_generic_task_location_falls_back_to_global(self):
        result = classify({"service.name": "svc", "service.instance.id": "i"})
        assert result.labels["location"] == "global"
        assert result.labels["namespace"] == ""

    def test_generic_node(self):
        result = classify({"service.name": "svc", "host.name": "box-1"})
        assert result.type == "generic_node"
        assert result.labels == {"location": "global", "namespace": "", "node_id": "box-1"}

    def test_generic_node_prefers_host_id(self):
        result = classify({"host.id": "id-1", "host.name": "box-1"})
        assert result.labels["node_id"] == "id-1"

    def test_empty_resource(self):
        result = classify({})
        assert result.type == "generic_node"
        assert result.labels == {"location": "global", "namespace": "", "node_id": ""}


class TestCreateMonitoredResource:
    def test_every_schema_fills_every_label(self):
        for resource_type, mapping in MONITORED_RESOURCE_MAPPINGS.items():
            result = create_monitored_resource(resource_type, AttributeView({}))
            assert result.type == resource_type
            assert set(result.labels) == set(mapping)
