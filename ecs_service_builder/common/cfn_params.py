#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Common parameters for CFN
All the titles, marked `_T` are string which are then used the same way
across all imports, which gives consistency for CFN to use the same names,
which it heavily relies onto.
"""

from troposphere import Parameter as CfnParameter


class Parameter(CfnParameter):
    """
    Class to extend the default Parameter behaviour with the label and group rendered in the
    AWS::CloudFormation::Interface metadata of the template
    """

    def __init__(self, title, group_label=None, label=None, **kwargs):
        self.group_label = group_label if group_label else "Uncategorized parameters"
        self.label = label
        super().__init__(title, **kwargs)


VPC_ID_T = "VpcId"
VPC_ID = Parameter(
    VPC_ID_T,
    group_label="Network",
    label="VPC to deploy the service to",
    Type="AWS::EC2::VPC::Id",
)

SUBNETS_T = "Subnets"
SUBNETS = Parameter(
    SUBNETS_T,
    group_label="Network",
    label="Subnets for the load balancer and the service tasks",
    Type="List<AWS::EC2::Subnet::Id>",
)
