#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS Cluster, service networking and the ECS Service itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions
    from ecs_service_builder.common.context import DeploymentContext

from troposphere import GetAtt, Ref, Template
from troposphere.ec2 import SecurityGroup, SecurityGroupEgress, SecurityGroupRule
from troposphere.ecs import (
    AwsvpcConfiguration,
    Cluster,
    LoadBalancer,
    NetworkConfiguration,
    Service,
    TaskDefinition,
)

from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.common.naming import stack_qualified_name
from ecs_service_builder.common.tagging import add_object_tags
from ecs_service_builder.ecs.ecs_params import LAUNCH_TYPE


def create_cluster(
    template: Template,
    title: str,
    cluster_name: str,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> Cluster:
    cluster = Cluster(title, ClusterName=cluster_name)
    add_object_tags(cluster, tags)
    return add_resource(template, cluster, opts)


def create_service_security_group(
    template: Template,
    title: str,
    service_name: str,
    port: int,
    vpc_id,
    lb_security_group_id,
    context: DeploymentContext,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> SecurityGroup:
    """
    Security group of the service tasks. Only the load balancer security group may reach the service port.
    All outbound traffic is allowed.

    :param troposphere.Template template:
    :param str title:
    :param str service_name: name of the service
    :param int port: the service port
    :param vpc_id: VPC ID or deferred value
    :param lb_security_group_id: ID of the security group allowed in
    :param DeploymentContext context:
    :param dict tags:
    :param ResourceOptions opts:
    """
    group_name = f"ecs-{stack_qualified_name(service_name, context)}"
    security_group = SecurityGroup(
        title,
        GroupName=group_name,
        GroupDescription=f"Load balancer access to {group_name} on port {port}",
        VpcId=vpc_id,
        SecurityGroupIngress=[
            SecurityGroupRule(
                IpProtocol="tcp",
                FromPort=port,
                ToPort=port,
                SourceSecurityGroupId=lb_security_group_id,
            )
        ],
        SecurityGroupEgress=[
            SecurityGroupRule(
                IpProtocol="-1",
                FromPort=0,
                ToPort=0,
                CidrIp="0.0.0.0/0",
            )
        ],
    )
    add_object_tags(security_group, tags)
    return add_resource(template, security_group, opts)


def create_lb_to_service_egress(
    template: Template,
    title: str,
    port: int,
    lb_security_group_id,
    service_security_group: SecurityGroup,
    opts: ResourceOptions = None,
) -> SecurityGroupEgress:
    """
    Allows the load balancer security group to send traffic to the service security group on the service port.
    The two groups are separate resources, so the rule is defined on its own.
    """
    return add_resource(
        template,
        SecurityGroupEgress(
            title,
            GroupId=lb_security_group_id,
            IpProtocol="tcp",
            FromPort=port,
            ToPort=port,
            DestinationSecurityGroupId=GetAtt(service_security_group, "GroupId"),
            Description="Load balancer to ECS service",
        ),
        opts,
    )


def create_service(
    template: Template,
    title: str,
    cluster: Cluster,
    task_definition: TaskDefinition,
    target_group_arn,
    container_name: str,
    container_port: int,
    subnets,
    security_group: SecurityGroup,
    depends_on: list = None,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> Service:
    """
    Creates the ECS Service, registered to the load balancer target group.
    Deploying does not wait for the service to reach steady state.

    :param troposphere.Template template:
    :param str title:
    :param troposphere.ecs.Cluster cluster:
    :param troposphere.ecs.TaskDefinition task_definition:
    :param target_group_arn: the target group ARN, usually a deferred value
    :param str container_name:
    :param int container_port:
    :param subnets: list of subnets IDs or deferred value
    :param troposphere.ec2.SecurityGroup security_group:
    :param list depends_on: the resources to wait for, i.e. the listener the target group is attached to
    :param dict tags:
    :param ResourceOptions opts:
    :rtype: troposphere.ecs.Service
    """
    service = Service(
        title,
        Cluster=Ref(cluster),
        LaunchType=LAUNCH_TYPE,
        TaskDefinition=Ref(task_definition),
        NetworkConfiguration=NetworkConfiguration(
            AwsvpcConfiguration=AwsvpcConfiguration(
                AssignPublicIp="ENABLED",
                Subnets=subnets,
                SecurityGroups=[GetAtt(security_group, "GroupId")],
            )
        ),
        LoadBalancers=[
            LoadBalancer(
                TargetGroupArn=target_group_arn,
                ContainerName=container_name,
                ContainerPort=container_port,
            )
        ],
    )
    if depends_on:
        setattr(
            service,
            "DependsOn",
            [
                dependency if isinstance(dependency, str) else dependency.title
                for dependency in depends_on
            ],
        )
    add_object_tags(service, tags)
    LOG.debug(f"{title} - registered to target group on {container_name}:{container_port}")
    return add_resource(template, service, opts)
