#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Route53 records pointing at the service load balancer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions
    from ecs_service_builder.common.context import DeploymentContext

from troposphere import GetAtt, Template
from troposphere.elasticloadbalancingv2 import LoadBalancer
from troposphere.route53 import AliasTarget, RecordSetType

from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.naming import stack_qualified_name
from ecs_service_builder.dns.dns_params import ALIAS_RECORD_TYPE, LAST_DOT_RE
from ecs_service_builder.elbv2.elbv2_params import LB_DNS_NAME, LB_DNS_ZONE_ID


def define_service_domain(
    service_name: str, hosted_zone: str, context: DeploymentContext
) -> str:
    """
    The fully qualified domain name of the service, <name>-<stack>.<zone>

    :param str service_name:
    :param str hosted_zone:
    :param DeploymentContext context:
    :rtype: str
    """
    return (
        f"{stack_qualified_name(service_name, context)}."
        f"{LAST_DOT_RE.sub('', hosted_zone)}"
    )


def create_alias_record(
    template: Template,
    title: str,
    domain_name: str,
    zone_id: str,
    load_balancer: LoadBalancer,
    opts: ResourceOptions = None,
) -> RecordSetType:
    """
    Creates the A alias record for the domain name to the load balancer

    :param troposphere.Template template:
    :param str title: logical ID of the record
    :param str domain_name: the FQDN of the service
    :param str zone_id: the hosted zone ID
    :param troposphere.elasticloadbalancingv2.LoadBalancer load_balancer:
    :param ResourceOptions opts:
    :return: the record
    """
    record = RecordSetType(
        title,
        HostedZoneId=zone_id,
        Name=domain_name,
        Type=ALIAS_RECORD_TYPE,
        AliasTarget=AliasTarget(
            HostedZoneId=GetAtt(load_balancer, LB_DNS_ZONE_ID),
            DNSName=GetAtt(load_balancer, LB_DNS_NAME),
            EvaluateTargetHealth=True,
        ),
    )
    return add_resource(template, record, opts)
