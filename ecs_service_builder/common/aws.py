#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Submission of the rendered template to CloudFormation.
CloudFormation owns ordering, diffing and retries, these functions only submit requests.
"""

from __future__ import annotations

import secrets
from string import ascii_lowercase
from time import sleep
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.settings import BuilderSettings

from botocore.exceptions import ClientError
from compose_x_common.aws import get_assume_role_session
from compose_x_common.compose_x_common import keyisset
from tabulate import tabulate

from ecs_service_builder.common.logging import LOG

CAPABILITIES = ["CAPABILITY_IAM"]


def get_cross_role_session(session, arn, region_name=None, session_name=None):
    """
    Function to override the settings session with a session for the given IAM role

    :param boto3.session.Session session: The original session fetching the credentials for the role
    :param str arn:
    :param str region_name: Name of region for session
    :param str session_name: Override name of the session
    :return: boto3 session
    :rtype: boto3.session.Session
    """
    if not session_name:
        session_name = "EcsServiceBuilder@Deploy"
    try:
        return get_assume_role_session(
            session, arn, session_name=session_name, region=region_name
        )
    except ClientError:
        LOG.error(f"Failed to use the Role ARN {arn}")
        raise


def assert_can_create_stack(client, name):
    """
    Checks whether a stack already exists or not
    """
    try:
        stack_r = client.describe_stacks(StackName=name)
        if not keyisset("Stacks", stack_r):
            return True
        stacks = stack_r["Stacks"]
        if len(stacks) != 1:
            raise LookupError("Too many stacks found with machine name", name)
        stack = stacks[0]
        if stack["StackStatus"] == "REVIEW_IN_PROGRESS":
            return stack
        return False
    except ClientError as error:
        if (
            error.response["Error"]["Code"] == "ValidationError"
            and error.response["Error"]["Message"].find("does not exist") > 0
        ):
            return True
        raise error


def assert_can_update_stack(client, name):
    """
    Checks whether a stack can be updated given its current status
    """
    can_update_statuses = [
        "CREATE_COMPLETE",
        "ROLLBACK_COMPLETE",
        "UPDATE_COMPLETE",
        "UPDATE_ROLLBACK_COMPLETE",
    ]
    res = client.describe_stacks(StackName=name)
    if not res["Stacks"]:
        return False
    stack = res["Stacks"][0]
    LOG.info(f"Stack {name} is {stack['StackStatus']}")
    if stack["StackStatus"] in can_update_statuses:
        return True
    return False


def deploy(settings: BuilderSettings, template_body: str, parameters: list):
    """
    Function to deploy (create or update) the stack to CFN.
    Returns as soon as CloudFormation accepted the request, it does not wait for the stack to complete.

    :param BuilderSettings settings:
    :param str template_body: the rendered template
    :param list parameters: the stack parameters
    :return: the stack ID, or None if the stack could not be created nor updated
    """
    client = settings.session.client("cloudformation")
    if assert_can_create_stack(client, settings.name):
        res = client.create_stack(
            StackName=settings.name,
            TemplateBody=template_body,
            Capabilities=CAPABILITIES,
            Parameters=parameters,
            DisableRollback=settings.disable_rollback,
        )
        LOG.info(f"Stack {settings.name} successfully deployed.")
        LOG.info(res["StackId"])
        return res["StackId"]
    elif assert_can_update_stack(client, settings.name):
        LOG.warning(f"Stack {settings.name} already exists. Updating.")
        res = client.update_stack(
            StackName=settings.name,
            TemplateBody=template_body,
            Capabilities=CAPABILITIES,
            Parameters=parameters,
            DisableRollback=settings.disable_rollback,
        )
        LOG.info(f"Stack {settings.name} successfully updating.")
        LOG.info(res["StackId"])
        return res["StackId"]
    LOG.error(f"Stack {settings.name} can neither be created nor updated.")
    return None


def get_change_set_status(client, change_set_name, settings, wait_seconds=10):
    pending_statuses = [
        "CREATE_PENDING",
        "CREATE_IN_PROGRESS",
        "DELETE_PENDING",
        "DELETE_IN_PROGRESS",
        "REVIEW_IN_PROGRESS",
    ]
    success_statuses = ["CREATE_COMPLETE", "DELETE_COMPLETE"]
    failed_statuses = ["DELETE_FAILED", "FAILED"]
    ready = False
    status = None
    while not ready:
        status = client.describe_change_set(
            ChangeSetName=change_set_name, StackName=settings.name
        )
        if status["Status"] in failed_statuses:
            raise SystemExit(
                "Change set is unsuccessful",
                status["Status"],
                status.get("StatusReason"),
            )
        if status["Status"] in success_statuses:
            ready = True
        else:
            if status["Status"] not in pending_statuses:
                LOG.warning(
                    f"ChangeSet {change_set_name} has unexpected status {status['Status']}"
                )
            LOG.info(f"ChangeSet creation in progress. Waiting {wait_seconds} seconds")
            sleep(wait_seconds)
    return status


def render_changes(status: dict) -> str:
    return tabulate(
        [
            [
                change["ResourceChange"]["LogicalResourceId"],
                change["ResourceChange"]["ResourceType"],
                change["ResourceChange"]["Action"],
            ]
            for change in status.get("Changes", [])
        ],
        ["LogicalResourceId", "ResourceType", "Action"],
        tablefmt="rst",
    )


def plan(settings: BuilderSettings, template_body: str, parameters: list):
    """
    Function to create a change-set and show the changes it would apply

    :param BuilderSettings settings:
    :param str template_body: the rendered template
    :param list parameters: the stack parameters
    :return: the change-set description
    :rtype: dict
    """
    client = settings.session.client("cloudformation")
    change_set_name = f"{settings.name}-" + "".join(
        secrets.choice(ascii_lowercase) for _ in range(10)
    )
    if assert_can_create_stack(client, settings.name):
        change_set_type = "CREATE"
    elif assert_can_update_stack(client, settings.name):
        change_set_type = "UPDATE"
    else:
        LOG.error(f"Stack {settings.name} can neither be created nor updated.")
        return None
    client.create_change_set(
        StackName=settings.name,
        TemplateBody=template_body,
        Capabilities=CAPABILITIES,
        Parameters=parameters,
        ChangeSetType=change_set_type,
        ChangeSetName=change_set_name,
    )
    status = get_change_set_status(client, change_set_name, settings)
    print(render_changes(status))
    return status
