#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
DNS validated ACM certificate.

The DomainValidationOption carries the hosted zone ID: CloudFormation publishes the CNAME
validation record in that zone, and the certificate resource only completes once ACM validated
the domain. Anything depending on the certificate therefore waits for its validation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.cfn_tools import ResourceOptions

from troposphere import Template
from troposphere.certificatemanager import Certificate, DomainValidationOption

from ecs_service_builder.common.cfn_tools import add_resource
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.common.tagging import add_object_tags

VALIDATION_METHOD = "DNS"


def define_validation_option(domain_name: str, zone_id: str) -> DomainValidationOption:
    return DomainValidationOption(DomainName=domain_name, HostedZoneId=zone_id)


def create_dns_validated_certificate(
    template: Template,
    title: str,
    domain_name: str,
    zone_id: str,
    tags: dict = None,
    opts: ResourceOptions = None,
) -> Certificate:
    """
    Creates the certificate for the domain, validated via DNS records in the given zone

    :param troposphere.Template template:
    :param str title: logical ID of the certificate
    :param str domain_name: FQDN the certificate is for
    :param str zone_id: the hosted zone to publish the validation record into
    :param dict tags:
    :param ResourceOptions opts:
    :return: the certificate
    :rtype: troposphere.certificatemanager.Certificate
    """
    certificate = Certificate(
        title,
        DomainName=domain_name,
        ValidationMethod=VALIDATION_METHOD,
        DomainValidationOptions=[define_validation_option(domain_name, zone_id)],
    )
    add_object_tags(certificate, tags)
    LOG.info(f"{domain_name} - certificate validated in zone {zone_id}")
    return add_resource(template, certificate, opts)
