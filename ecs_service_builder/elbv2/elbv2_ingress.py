#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Builds the load balancer subgraph of a service.

With a hosted zone, the listener serves HTTPS on 443 with a DNS validated certificate and the service
gets an alias record in the zone. Without, the listener serves plain HTTP on 80.
"""

from __future__ import annotations

from collections import namedtuple
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions
    from ecs_service_builder.common.context import DeploymentContext
    from ecs_service_builder.network import NetworkContext

from troposphere import GetAtt, Ref, Template
from troposphere.certificatemanager import Certificate as AcmCertificate
from troposphere.ec2 import SecurityGroup, SecurityGroupRule
from troposphere.elasticloadbalancingv2 import (
    Action,
    Certificate,
    Listener,
    LoadBalancer,
    TargetGroup,
)

from ecs_service_builder.acm.acm_certificate import create_dns_validated_certificate
from ecs_service_builder.common import logical_id
from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.common.naming import stack_qualified_name
from ecs_service_builder.common.tagging import add_object_tags
from ecs_service_builder.config import HTTP_PORT, HTTPS_PORT
from ecs_service_builder.dns.dns_lookup import lookup_hosted_zone_id
from ecs_service_builder.dns.dns_records import (
    create_alias_record,
    define_service_domain,
)
from ecs_service_builder.elbv2.elbv2_params import (
    ANYWHERE_CIDR,
    CERTIFICATE_T,
    DNS_RECORD_T,
    HTTP_PROTOCOL,
    HTTPS_PROTOCOL,
    LB_DNS_NAME,
    LB_SG_T,
    LB_T,
    LISTENER_T,
    TARGET_GROUP_PORT,
    TARGET_GROUP_T,
    TARGET_TYPE,
)

ListenerSpec = namedtuple(
    "ListenerSpec", ["port", "protocol", "certificate_arn", "depends_on"]
)
ListenerSpec.__doc__ = "Immutable definition of the listener, assembled before it is created"

LoadBalancerResult = namedtuple(
    "LoadBalancerResult",
    ["security_group_id", "target_group_arn", "dns_name", "listener", "certificate"],
)
LoadBalancerResult.__doc__ = "Values of the load balancer subgraph the service subgraph consumes"


def create_alb_security_group(
    template: Template,
    title: str,
    service_name: str,
    port: int,
    vpc_id,
    context: DeploymentContext,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> SecurityGroup:
    """
    Security group of the load balancer, open to the world on the exposed port only.
    """
    group_name = f"alb-{stack_qualified_name(service_name, context)}"
    security_group = SecurityGroup(
        title,
        GroupName=group_name,
        GroupDescription=f"Public ingress to {group_name} on port {port}",
        VpcId=vpc_id,
        SecurityGroupIngress=[
            SecurityGroupRule(
                IpProtocol="tcp",
                FromPort=port,
                ToPort=port,
                CidrIp=ANYWHERE_CIDR,
            )
        ],
    )
    add_object_tags(security_group, tags)
    return add_resource(template, security_group, opts)


def create_load_balancer(
    template: Template,
    title: str,
    security_group: SecurityGroup,
    subnets,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> LoadBalancer:
    load_balancer = LoadBalancer(
        title,
        Type="application",
        Scheme="internet-facing",
        SecurityGroups=[GetAtt(security_group, "GroupId")],
        Subnets=subnets,
    )
    add_object_tags(load_balancer, tags)
    return add_resource(template, load_balancer, opts)


def create_target_group(
    template: Template,
    title: str,
    vpc_id,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> TargetGroup:
    """
    Target group with IP targets, as required for tasks using the awsvpc network mode.
    """
    target_group = TargetGroup(
        title,
        Port=TARGET_GROUP_PORT,
        Protocol=HTTP_PROTOCOL,
        TargetType=TARGET_TYPE,
        VpcId=vpc_id,
    )
    add_object_tags(target_group, tags)
    return add_resource(template, target_group, opts)


def define_listener_spec(
    exposed_port: int,
    target_group: TargetGroup,
    certificate: AcmCertificate = None,
) -> ListenerSpec:
    """
    Defines the listener settings and the resources it must wait for.
    When a certificate is given, the listener uses HTTPS and waits for the certificate to be validated.

    :param int exposed_port:
    :param troposphere.elasticloadbalancingv2.TargetGroup target_group:
    :param troposphere.certificatemanager.Certificate certificate:
    :rtype: ListenerSpec
    """
    depends_on = (target_group.title,)
    if certificate is None:
        return ListenerSpec(exposed_port, HTTP_PROTOCOL, None, depends_on)
    return ListenerSpec(
        exposed_port,
        HTTPS_PROTOCOL,
        Ref(certificate),
        depends_on + (certificate.title,),
    )


def create_listener(
    template: Template,
    title: str,
    load_balancer: LoadBalancer,
    target_group: TargetGroup,
    spec: ListenerSpec,
    opts: ResourceOptions = None,
) -> Listener:
    """
    Creates the listener from its spec, forwarding all traffic to the target group.
    """
    props = {
        "LoadBalancerArn": Ref(load_balancer),
        "Port": spec.port,
        "Protocol": spec.protocol,
        "DefaultActions": [Action(Type="forward", TargetGroupArn=Ref(target_group))],
    }
    if spec.certificate_arn is not None:
        props["Certificates"] = [Certificate(CertificateArn=spec.certificate_arn)]
    listener = Listener(title, DependsOn=list(spec.depends_on), **props)
    return add_resource(template, listener, opts)


def build_load_balancer(
    template: Template,
    prefix: str,
    service_name: str,
    network: NetworkContext,
    context: DeploymentContext,
    hosted_zone: str = None,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> LoadBalancerResult:
    """
    Builds the ingress resources of the service and returns the values the service subgraph needs.

    :param troposphere.Template template: template to add the resources to
    :param str prefix: logical ID prefix of the owning Service
    :param str service_name: name of the service
    :param NetworkContext network:
    :param DeploymentContext context:
    :param str hosted_zone: DNS zone to expose the service in with TLS
    :param dict tags:
    :param ResourceOptions opts:
    :rtype: LoadBalancerResult
    """
    exposed_port = HTTPS_PORT if hosted_zone else HTTP_PORT
    vpc_id = network.vpc_id_value(template)
    LOG.info(
        f"{service_name} - Defining load balancer on port {exposed_port}"
        f"{' with TLS for zone ' + hosted_zone if hosted_zone else ''}"
    )
    security_group = create_alb_security_group(
        template,
        logical_id(prefix, LB_SG_T),
        service_name,
        exposed_port,
        vpc_id,
        context,
        tags,
        opts,
    )
    load_balancer = create_load_balancer(
        template,
        logical_id(prefix, LB_T),
        security_group,
        network.subnets_value(template),
        tags,
        opts,
    )
    target_group = create_target_group(
        template, logical_id(prefix, TARGET_GROUP_T), vpc_id, tags, opts
    )
    certificate = None
    if hosted_zone:
        domain_name = define_service_domain(service_name, hosted_zone, context)
        zone_id = lookup_hosted_zone_id(context, hosted_zone)
        create_alias_record(
            template,
            logical_id(prefix, DNS_RECORD_T),
            domain_name,
            zone_id,
            load_balancer,
            opts,
        )
        certificate = create_dns_validated_certificate(
            template,
            logical_id(prefix, CERTIFICATE_T),
            domain_name,
            zone_id,
            tags,
            opts,
        )
    spec = define_listener_spec(exposed_port, target_group, certificate)
    listener = create_listener(
        template,
        logical_id(prefix, LISTENER_T),
        load_balancer,
        target_group,
        spec,
        opts,
    )
    return LoadBalancerResult(
        GetAtt(security_group, "GroupId"),
        Ref(target_group),
        GetAtt(load_balancer, LB_DNS_NAME),
        listener,
        certificate,
    )
