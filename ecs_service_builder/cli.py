#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for ecs_service_builder.
"""

import argparse
import sys

from ecs_service_builder import __version__
from ecs_service_builder.common.aws import deploy, plan
from ecs_service_builder.common.files import (
    render_template,
    write_parameters,
    write_template,
)
from ecs_service_builder.common.logging import LOG, set_log_level
from ecs_service_builder.service import Service
from ecs_service_builder.settings import BuilderSettings


def main_parser():
    """
    Console script for ecs_service_builder.
    """
    parser = argparse.ArgumentParser(prog="ecs-service-builder")
    cmd_parsers = parser.add_subparsers(
        dest=BuilderSettings.command_arg, help="Command to execute."
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    base_command_parser.add_argument(
        "-f",
        "--service-file",
        dest=BuilderSettings.input_file_arg,
        required=True,
        help="Path to the service definition file (YAML or JSON)",
    )
    base_command_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest=BuilderSettings.output_dir_arg,
        default=BuilderSettings.default_output_dir,
    )
    base_command_parser.add_argument(
        "-n",
        "--name",
        help="Name of the CloudFormation stack. Defaults to <service name>-<stack>",
        required=False,
        type=str,
        dest=BuilderSettings.name_arg,
    )
    base_command_parser.add_argument(
        "-s",
        "--stack",
        help="Deployment identifier, used to suffix the resources names",
        required=False,
        type=str,
        dest=BuilderSettings.stack_arg,
        default=BuilderSettings.default_stack,
    )
    base_command_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=BuilderSettings.format_arg,
        choices=BuilderSettings.allowed_formats,
        default=BuilderSettings.default_format,
    )
    base_command_parser.add_argument(
        "--region",
        required=False,
        dest=BuilderSettings.region_arg,
        help="Specify the region you want to build for"
        "default use region from the service file, config or environment vars",
    )
    base_command_parser.add_argument(
        "--role-arn",
        dest=BuilderSettings.arn_arg,
        help="Allow you to run API calls using a specific IAM role, within same or for cross-account",
        required=False,
    )
    base_command_parser.add_argument(
        "--disable-rollback",
        dest="DisableRollback",
        help="On create/plan, disable stack automatic rollback.",
        required=False,
        action="store_true",
    )
    base_command_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    for command in BuilderSettings.active_commands:
        cmd_parsers.add_parser(
            name=command["name"],
            help=command["help"],
            parents=[base_command_parser],
        )
    for command in BuilderSettings.neutral_commands:
        cmd_parsers.add_parser(name=command["name"], help=command["help"])
    return parser


def main(args=None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    args = parser.parse_args(args)
    command = getattr(args, BuilderSettings.command_arg, None)
    if not command:
        parser.print_help()
        return 1
    if command == "version":
        print(__version__)
        return 0
    if args.loglevel and not set_log_level(args.loglevel):
        LOG.warning(f"Log level value {args.loglevel} is invalid. Using INFO")
    settings = BuilderSettings(**vars(args))
    LOG.debug(settings)

    service = Service(
        settings.config.name,
        settings.config,
        settings.context,
        settings.network,
        tags=settings.tags,
    )
    parameters = settings.network.render_parameters_list_cfn()
    write_template(service.template, settings.output_dir, settings.name, settings.format)
    write_parameters(parameters, settings.output_dir, settings.name)

    if settings.deploy:
        if not deploy(settings, render_template(service.template), parameters):
            return 1
    elif settings.plan:
        if not plan(settings, render_template(service.template), parameters):
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
