#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
IAM execution role of the service tasks.

The role only allows the awslogs driver to create the service log group and its streams.
The account ID is left to CloudFormation to resolve with the AWS::AccountId pseudo parameter.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions

from troposphere import Ref, Sub, Template
from troposphere.iam import ManagedPolicy, Role

from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.tagging import add_object_tags
from ecs_service_builder.ecs.ecs_params import TASKS_PRINCIPAL


def service_role_trust_policy(service_name: str) -> dict:
    """
    Simple function to format the trust relationship for a Role and an AWS Service

    :param str service_name: name of the AWS service, i.e. ecs-tasks
    :return: policy document
    :rtype: dict
    """
    statement = {
        "Effect": "Allow",
        "Principal": {"Service": [Sub(f"{service_name}.${{AWS::URLSuffix}}")]},
        "Action": ["sts:AssumeRole"],
    }
    return {"Version": "2012-10-17", "Statement": [statement]}


def define_logs_policy_document(log_group: str, region: str) -> dict:
    """
    Least privileged policy for the awslogs driver to create the group and streams

    :param str log_group: name of the log group
    :param str region: region of the log group
    :return: policy document
    :rtype: dict
    """
    group_arn = f"arn:${{AWS::Partition}}:logs:{region}:${{AWS::AccountId}}:log-group:{log_group}"
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["logs:CreateLogGroup", "logs:CreateLogStream"],
                "Resource": [
                    Sub(group_arn),
                    Sub(f"{group_arn}:log-stream:*"),
                ],
            }
        ],
    }


def create_execution_role(
    template: Template,
    policy_title: str,
    role_title: str,
    log_group: str,
    region: str,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> Role:
    """
    Creates the managed policy and the role assumed by ECS to start the tasks.

    :param troposphere.Template template:
    :param str policy_title:
    :param str role_title:
    :param str log_group: the service log group name
    :param str region:
    :param dict tags:
    :param ResourceOptions opts:
    :return: the IAM role
    """
    policy = add_resource(
        template,
        ManagedPolicy(
            policy_title,
            Description=f"Allows ECS to create the {log_group} log group and streams",
            PolicyDocument=define_logs_policy_document(log_group, region),
        ),
        opts,
    )
    role = Role(
        role_title,
        AssumeRolePolicyDocument=service_role_trust_policy(TASKS_PRINCIPAL),
        ManagedPolicyArns=[Ref(policy)],
    )
    add_object_tags(role, tags)
    return add_resource(template, role, opts)
