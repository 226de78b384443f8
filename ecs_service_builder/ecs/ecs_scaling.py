#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to attach target tracking autoscaling on CPU to the service desired count.
"""

from __future__ import annotations

from collections import namedtuple
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions
    from ecs_service_builder.config import AutoscalingConfig

from troposphere import GetAtt, Ref, Template
from troposphere.applicationautoscaling import (
    PredefinedMetricSpecification,
    ScalableTarget,
    ScalingPolicy,
    TargetTrackingScalingPolicyConfiguration,
)
from troposphere.ecs import Cluster, Service

from ecs_service_builder.common.cfn_tools import add_resource, interpolate
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.ecs.ecs_params import (
    CPU_METRIC_TYPE,
    SCALABLE_DIMENSION,
    SCALING_NAMESPACE,
    SCALING_POLICY_TYPE,
)

ServiceScaling = namedtuple("ServiceScaling", ["target", "policy"])


def define_service_resource_id(cluster: Cluster, service: Service):
    """
    The scalable resource ID of an ECS service, service/<cluster name>/<service name>
    """
    return interpolate("service/", Ref(cluster), "/", GetAtt(service, "Name"))


def add_service_scaling(
    template: Template,
    target_title: str,
    policy_title: str,
    autoscaling: AutoscalingConfig,
    cluster: Cluster,
    service: Service,
    opts: ResourceOptions = None,
):
    """
    Creates the scalable target over the service desired count and the CPU target tracking policy.
    Without autoscaling settings, nothing is created and the service keeps its fixed desired count.

    :param troposphere.Template template:
    :param str target_title:
    :param str policy_title:
    :param AutoscalingConfig autoscaling:
    :param troposphere.ecs.Cluster cluster:
    :param troposphere.ecs.Service service:
    :param ResourceOptions opts:
    :return: the target and policy, or None
    :rtype: ServiceScaling
    """
    if autoscaling is None:
        LOG.debug(f"{service.title} - No autoscaling defined.")
        return None
    target = add_resource(
        template,
        ScalableTarget(
            target_title,
            MinCapacity=autoscaling.min,
            MaxCapacity=autoscaling.max,
            ResourceId=define_service_resource_id(cluster, service),
            ScalableDimension=SCALABLE_DIMENSION,
            ServiceNamespace=SCALING_NAMESPACE,
        ),
        opts,
    )
    policy = add_resource(
        template,
        ScalingPolicy(
            policy_title,
            PolicyName=policy_title,
            PolicyType=SCALING_POLICY_TYPE,
            ScalingTargetId=Ref(target),
            TargetTrackingScalingPolicyConfiguration=TargetTrackingScalingPolicyConfiguration(
                TargetValue=float(autoscaling.cpu_avg_threshold),
                PredefinedMetricSpecification=PredefinedMetricSpecification(
                    PredefinedMetricType=CPU_METRIC_TYPE
                ),
            ),
        ),
        opts,
    )
    LOG.info(
        f"{service.title} - Scaling between {autoscaling.min} and {autoscaling.max} tasks, "
        f"targeting {autoscaling.cpu_avg_threshold}% CPU"
    )
    return ServiceScaling(target, policy)
