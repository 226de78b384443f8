#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Single container Fargate task definition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions
    from ecs_service_builder.config import ServiceConfig

from troposphere import GetAtt, Template
from troposphere.ecs import (
    ContainerDefinition,
    LogConfiguration,
    PortMapping,
    TaskDefinition,
)
from troposphere.iam import Role

from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.tagging import add_object_tags
from ecs_service_builder.ecs.ecs_params import (
    LAUNCH_TYPE,
    LOG_DRIVER,
    NETWORK_MODE,
    TASK_FAMILY,
)


def define_log_configuration(
    log_group: str, region: str, stream_prefix: str
) -> LogConfiguration:
    """
    awslogs configuration, the log group is created by the driver when the task starts.
    """
    return LogConfiguration(
        LogDriver=LOG_DRIVER,
        Options={
            "awslogs-create-group": "true",
            "awslogs-group": log_group,
            "awslogs-region": region,
            "awslogs-stream-prefix": stream_prefix,
        },
    )


def define_container(
    container_name: str, config: ServiceConfig, log_configuration: LogConfiguration
) -> ContainerDefinition:
    return ContainerDefinition(
        Name=container_name,
        Image=config.image,
        Essential=True,
        PortMappings=[
            PortMapping(
                ContainerPort=config.port,
                HostPort=config.port,
                Protocol="tcp",
            )
        ],
        LogConfiguration=log_configuration,
    )


def create_task_definition(
    template: Template,
    title: str,
    container_name: str,
    config: ServiceConfig,
    region: str,
    execution_role: Role,
    log_group: str,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> TaskDefinition:
    """
    Creates the task definition with its one container.

    :param troposphere.Template template:
    :param str title:
    :param str container_name: name of the container, also used by the load balancer registration
    :param ServiceConfig config:
    :param str region:
    :param troposphere.iam.Role execution_role:
    :param str log_group:
    :param dict tags:
    :param ResourceOptions opts:
    :rtype: troposphere.ecs.TaskDefinition
    """
    log_configuration = define_log_configuration(
        log_group, region, f"{log_group}-{config.name}"
    )
    task_definition = TaskDefinition(
        title,
        Family=TASK_FAMILY,
        Cpu=config.cpu,
        Memory=config.memory,
        NetworkMode=NETWORK_MODE,
        RequiresCompatibilities=[LAUNCH_TYPE],
        ExecutionRoleArn=GetAtt(execution_role, "Arn"),
        ContainerDefinitions=[
            define_container(container_name, config, log_configuration)
        ],
    )
    add_object_tags(task_definition, tags)
    return add_resource(template, task_definition, opts)
