#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the BuilderSettings class
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime as dt

import boto3
from compose_x_common.compose_x_common import keyisset, set_else_none

from ecs_service_builder.common.aws import get_cross_role_session
from ecs_service_builder.common.context import DeploymentContext
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.common.naming import stack_qualified_name
from ecs_service_builder.config import ServiceConfig, load_service_file
from ecs_service_builder.exceptions import ServiceValidationError
from ecs_service_builder.network import NetworkContext


class BuilderSettings:
    """
    Class to handle the settings of an ecs-service-builder execution.

    :ivar boto3.session.Session session: session for the lookup and deployment API calls
    :ivar DeploymentContext context:
    :ivar NetworkContext network:
    :ivar ServiceConfig config:
    :ivar str name: name of the CloudFormation stack
    """

    name_arg = "Name"
    stack_arg = "Stack"
    region_arg = "RegionName"
    arn_arg = "RoleArn"

    deploy_arg = "up"
    render_arg = "render"
    plan_arg = "plan"
    command_arg = "command"

    input_file_arg = "ServiceFile"
    output_dir_arg = "OutputDirectory"
    format_arg = "TemplateFormat"
    default_format = "json"
    allowed_formats = ["json", "yaml"]
    default_stack = "dev"
    default_output_dir = f"/tmp/{dt.utcnow().strftime('%s')}"

    active_commands = [
        {
            "name": deploy_arg,
            "help": "Generates & Validates the CFN template, Creates/Updates stack in CFN",
        },
        {
            "name": render_arg,
            "help": "Generates & Validates the CFN template locally.",
        },
        {
            "name": plan_arg,
            "help": "Creates a change-set to show the diff prior to a create/update",
        },
    ]
    neutral_commands = [
        {"name": "version", "help": "ecs-service-builder version"},
    ]
    all_commands = active_commands + neutral_commands

    def __init__(self, content: dict = None, session=None, **kwargs):
        """
        :param dict content: the service definition. Loaded from the input file when not set
        :param boto3.session.Session session: override session
        :param kwargs: the CLI arguments
        """
        self.__args = deepcopy(kwargs)
        self.command = set_else_none(self.command_arg, kwargs, self.render_arg)
        self.deploy = self.command == self.deploy_arg
        self.plan = self.command == self.plan_arg
        self.definition = self.set_content(kwargs, content)
        self.config = ServiceConfig.from_dict(self.definition)
        self.session = session if session else boto3.session.Session()
        self.aws_region = set_else_none(
            self.region_arg,
            kwargs,
            set_else_none("region", self.definition, self.session.region_name),
        )
        if keyisset(self.arn_arg, kwargs):
            self.session = get_cross_role_session(
                self.session, kwargs[self.arn_arg], region_name=self.aws_region
            )
        self.context = DeploymentContext(
            set_else_none(self.stack_arg, kwargs, self.default_stack),
            self.aws_region,
            self.session,
        )
        self.network = self.set_network(self.definition)
        self.tags = set_else_none("tags", self.definition, None)
        self.name = set_else_none(
            self.name_arg,
            kwargs,
            stack_qualified_name(self.config.name, self.context),
        )
        self.output_dir = set_else_none(
            self.output_dir_arg, kwargs, self.default_output_dir
        )
        self.format = set_else_none(self.format_arg, kwargs, self.default_format)
        if self.format not in self.allowed_formats:
            raise ValueError(
                "Template format must be one of", self.allowed_formats, "Got", self.format
            )

    @property
    def disable_rollback(self) -> bool:
        return bool(set_else_none("DisableRollback", self.__args, alt_value=False))

    def set_content(self, kwargs: dict, content: dict = None) -> dict:
        """
        Method to load the service definition, from content or from the input file

        :param dict kwargs:
        :param dict content:
        :rtype: dict
        """
        if content is not None:
            return deepcopy(content)
        if not keyisset(self.input_file_arg, kwargs):
            raise KeyError(
                "Either the service definition or the input file must be set",
                self.input_file_arg,
            )
        return load_service_file(kwargs[self.input_file_arg])

    @staticmethod
    def set_network(definition: dict) -> NetworkContext:
        if not keyisset("vpcId", definition) or not keyisset("subnets", definition):
            raise ServiceValidationError(
                "vpcId and subnets must be set to deploy the service"
            )
        return NetworkContext(definition["vpcId"], definition["subnets"])

    def __repr__(self):
        return (
            f"BuilderSettings(name={self.name!r}, command={self.command!r}, "
            f"context={self.context!r}, config={self.config!r})"
        )
