# SPDX-FileCopyrightText: 2026 The Resmap Authors
# SPDX-License-Identifier: Apache-2.0

"""Built-in resource classification for Cloud Monitoring.

Picks a monitored-resource type from the resource's attributes:

- ``cloud.platform`` decides first (GCE, App Engine, EC2)
- then Kubernetes attributes, most specific schema first
- then ``generic_task`` for identifiable services, else ``generic_node``

Every label of the chosen schema is filled from the first attribute present
in its candidate list. Missing labels fall back to a literal (``global`` for
the location of generic types) or to an empty string.
"""

from __future__ import annotations

from typing import Dict, NamedTuple, Tuple

from opentelemetry.semconv._incubating.attributes import (
    cloud_attributes,
    faas_attributes,
    host_attributes,
    k8s_attributes,
    service_attributes,
)
from opentelemetry.semconv._incubating.attributes.cloud_attributes import CloudPlatformValues

from resmap.resources.attributes import AttributeView

# =========================================================================
# Monitored resource types and label keys
# =========================================================================

GCE_INSTANCE = "gce_instance"
GAE_INSTANCE = "gae_instance"
AWS_EC2_INSTANCE = "aws_ec2_instance"
K8S_CONTAINER = "k8s_container"
K8S_POD = "k8s_pod"
K8S_NODE = "k8s_node"
K8S_CLUSTER = "k8s_cluster"
GENERIC_TASK = "generic_task"
GENERIC_NODE = "generic_node"


class LabelSource(NamedTuple):
    """Ordered candidate attributes for one label, plus a fallback literal."""

    attributes: Tuple[str, ...]
    fallback: str = ""


class ClassifiedResource(NamedTuple):
    type: str
    labels: Dict[str, str]


_ZONE_OR_REGION = (cloud_attributes.CLOUD_AVAILABILITY_ZONE, cloud_attributes.CLOUD_REGION)

MONITORED_RESOURCE_MAPPINGS: Dict[str, Dict[str, LabelSource]] = {
    GCE_INSTANCE: {
        "zone": LabelSource((cloud_attributes.CLOUD_AVAILABILITY_ZONE,)),
        "instance_id": LabelSource((host_attributes.HOST_ID,)),
    },
    GAE_INSTANCE: {
        "location": LabelSource(_ZONE_OR_REGION),
        "module_id": LabelSource((faas_attributes.FAAS_NAME,)),
        "version_id": LabelSource((faas_attributes.FAAS_VERSION,)),
        "instance_id": LabelSource((faas_attributes.FAAS_INSTANCE,)),
    },
    AWS_EC2_INSTANCE: {
        "instance_id": LabelSource((host_attributes.HOST_ID,)),
        "region": LabelSource(_ZONE_OR_REGION),
        "aws_account": LabelSource((cloud_attributes.CLOUD_ACCOUNT_ID,)),
    },
    K8S_CONTAINER: {
        "location": LabelSource(_ZONE_OR_REGION),
        "cluster_name": LabelSource((k8s_attributes.K8S_CLUSTER_NAME,)),
        "namespace_name": LabelSource((k8s_attributes.K8S_NAMESPACE_NAME,)),
        "pod_name": LabelSource((k8s_attributes.K8S_POD_NAME,)),
        "container_name": LabelSource((k8s_attributes.K8S_CONTAINER_NAME,)),
    },
    K8S_POD: {
        "location": LabelSource(_ZONE_OR_REGION),
        "cluster_name": LabelSource((k8s_attributes.K8S_CLUSTER_NAME,)),
        "namespace_name": LabelSource((k8s_attributes.K8S_NAMESPACE_NAME,)),
        "pod_name": LabelSource((k8s_attributes.K8S_POD_NAME,)),
    },
    K8S_NODE: {
        "location": LabelSource(_ZONE_OR_REGION),
        "cluster_name": LabelSource((k8s_attributes.K8S_CLUSTER_NAME,)),
        "node_name": LabelSource((k8s_attributes.K8S_NODE_NAME,)),
    },
    K8S_CLUSTER: {
        "location": LabelSource(_ZONE_OR_REGION),
        "cluster_name": LabelSource((k8s_attributes.K8S_CLUSTER_NAME,)),
    },
    GENERIC_TASK: {
        "location": LabelSource(_ZONE_OR_REGION, fallback="global"),
        "namespace": LabelSource((service_attributes.SERVICE_NAMESPACE,)),
        "job": LabelSource((service_attributes.SERVICE_NAME, faas_attributes.FAAS_NAME)),
        "task_id": LabelSource((service_attributes.SERVICE_INSTANCE_ID, faas_attributes.FAAS_INSTANCE)),
    },
    GENERIC_NODE: {
        "location": LabelSource(_ZONE_OR_REGION, fallback="global"),
        "namespace": LabelSource((service_attributes.SERVICE_NAMESPACE,)),
        "node_id": LabelSource((host_attributes.HOST_ID, host_attributes.HOST_NAME)),
    },
}

_PLATFORM_TYPES: Dict[str, str] = {
    CloudPlatformValues.GCP_COMPUTE_ENGINE.value: GCE_INSTANCE,
    CloudPlatformValues.GCP_APP_ENGINE.value: GAE_INSTANCE,
    CloudPlatformValues.AWS_EC2.value: AWS_EC2_INSTANCE,
}


def classify_resource(attributes: AttributeView) -> ClassifiedResource:
    """Classify a resource into a monitored-resource type and labels."""
    platform, _ = attributes.get_string(cloud_attributes.CLOUD_PLATFORM)
    resource_type = _PLATFORM_TYPES.get(platform) or _classify_by_attributes(attributes)
    return create_monitored_resource(resource_type, attributes)


def _classify_by_attributes(attributes: AttributeView) -> str:
    def has(key: str) -> bool:
        return attributes.get_string(key)[1]

    if has(k8s_attributes.K8S_CLUSTER_NAME):
        if has(k8s_attributes.K8S_NAMESPACE_NAME) and has(k8s_attributes.K8S_POD_NAME):
            if has(k8s_attributes.K8S_CONTAINER_NAME):
                return K8S_CONTAINER
            return K8S_POD
        if has(k8s_attributes.K8S_NODE_NAME):
            return K8S_NODE
        return K8S_CLUSTER

    has_service = has(service_attributes.SERVICE_NAME) and has(service_attributes.SERVICE_INSTANCE_ID)
    has_faas = has(faas_attributes.FAAS_NAME) and has(faas_attributes.FAAS_INSTANCE)
    if has_service or has_faas:
        return GENERIC_TASK
    return GENERIC_NODE


def create_monitored_resource(resource_type: str, attributes: AttributeView) -> ClassifiedResource:
    """Fill the labels of *resource_type* from *attributes*."""
    labels: Dict[str, str] = {}
    for label_key, source in MONITORED_RESOURCE_MAPPINGS[resource_type].items():
        value = ""
        found = False
        for attribute_key in source.attributes:
            value, found = attributes.get_string(attribute_key)
            if found:
                break
        if not found and source.fallback:
            value = source.fallback
        labels[label_key] = value
    return ClassifiedResource(type=resource_type, labels=labels)
