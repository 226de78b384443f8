#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Naming functions so that the resources of parallel deployments never collide.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import DeploymentContext


def stack_qualified_name(name: str, context: DeploymentContext) -> str:
    """
    Suffixes the logical name with the deployment identifier.

    >>> stack_qualified_name("nginx", DeploymentContext("dev", "eu-west-1"))
    'nginx-dev'

    :param str name: logical name of the resource
    :param DeploymentContext context: the deployment the resource belongs to
    :rtype: str
    """
    return f"{name}-{context.stack}"


def log_group_name(service_name: str, context: DeploymentContext) -> str:
    return f"awslogs-{stack_qualified_name(service_name, context)}"
