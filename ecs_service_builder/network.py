#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Network the service is deployed into. The VPC and its subnets are not managed here,
they are only referenced.
"""

from __future__ import annotations

from troposphere import AWSHelperFn, Ref, Template

from ecs_service_builder.common.cfn_params import SUBNETS, SUBNETS_T, VPC_ID, VPC_ID_T
from ecs_service_builder.common.cfn_tools import add_parameters


class Subnet:
    """
    Handle to an existing subnet

    :ivar resource_id: the subnet ID, or a troposphere function resolving to it
    """

    def __init__(self, resource_id):
        if not isinstance(resource_id, (str, AWSHelperFn)):
            raise TypeError(
                "Subnet resource_id must be a str or troposphere function. Got",
                type(resource_id),
            )
        self.resource_id = resource_id

    def __repr__(self):
        return f"Subnet({self.resource_id!r})"


class NetworkContext:
    """
    The VPC and ordered list of subnets the load balancer and service tasks use.

    When all values are literal IDs, the template takes them as the VpcId and Subnets parameters,
    which are filled in at deployment time. Otherwise the deferred values are used in place.
    """

    def __init__(self, vpc_id, subnets: list):
        if not subnets:
            raise ValueError("At least one subnet is required")
        self.vpc_id = vpc_id
        self.subnets = [
            subnet if isinstance(subnet, Subnet) else Subnet(subnet)
            for subnet in subnets
        ]

    @property
    def uses_parameters(self) -> bool:
        return isinstance(self.vpc_id, str) and all(
            isinstance(subnet.resource_id, str) for subnet in self.subnets
        )

    def vpc_id_value(self, template: Template):
        """
        Returns the value to use for VpcId properties, adding the parameter to the template when needed.
        """
        if not self.uses_parameters:
            return self.vpc_id
        add_parameters(template, [VPC_ID])
        return Ref(VPC_ID)

    def subnets_value(self, template: Template):
        """
        Returns the value to use for Subnets properties, adding the parameter to the template when needed.
        """
        if not self.uses_parameters:
            return [subnet.resource_id for subnet in self.subnets]
        add_parameters(template, [SUBNETS])
        return Ref(SUBNETS)

    def render_parameters_list_cfn(self) -> list:
        """
        Renders the stack parameters in the format CloudFormation API expects

        :rtype: list
        """
        if not self.uses_parameters:
            return []
        return [
            {"ParameterKey": VPC_ID_T, "ParameterValue": self.vpc_id},
            {
                "ParameterKey": SUBNETS_T,
                "ParameterValue": ",".join(
                    subnet.resource_id for subnet in self.subnets
                ),
            },
        ]

    def __repr__(self):
        return f"NetworkContext(vpc_id={self.vpc_id!r}, subnets={self.subnets!r})"
