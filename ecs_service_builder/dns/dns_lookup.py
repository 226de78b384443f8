#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resolution of the public Route53 hosted zone ID from its name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.context import DeploymentContext

from botocore.exceptions import ClientError
from compose_x_common.compose_x_common import keyisset

from ecs_service_builder.common.logging import LOG
from ecs_service_builder.dns.dns_params import (
    HOSTED_ZONE_PREFIX_RE,
    LAST_DOT_RE,
    ZONES_PATTERN,
)
from ecs_service_builder.exceptions import HostedZoneNotFound


def validate_zone_id_input(zone_id: str) -> str:
    """
    Function to validate the ZoneID is conform to expectations

    :param str zone_id:
    :return: the zone ID, without the /hostedzone/ prefix
    :rtype: str
    """
    zone_id = HOSTED_ZONE_PREFIX_RE.sub("", zone_id)
    if not ZONES_PATTERN.match(zone_id):
        raise ValueError(
            "ZoneID is not valid. Got", zone_id, "Expected", ZONES_PATTERN.pattern
        )
    return zone_id


def filter_out_cloudmap_zones(zones: list, zone_name: str) -> dict:
    """
    Function to filter out the Hosted Zones linked to CloudMap and the private zones

    :param list zones:
    :param str zone_name:
    :return: The only valid zone
    :rtype: dict
    """
    new_zones = []
    for zone in zones:
        if (
            keyisset("LinkedService", zone)
            and keyisset("ServicePrincipal", zone["LinkedService"])
            and zone["LinkedService"]["ServicePrincipal"]
            == "servicediscovery.amazonaws.com"
        ):
            continue
        elif keyisset("Config", zone) and keyisset("PrivateZone", zone["Config"]):
            continue
        else:
            new_zones.append(zone)
    if not zone_name.endswith("."):
        zone_name = f"{zone_name}."
    if not new_zones or not new_zones[0]["Name"] == zone_name:
        raise HostedZoneNotFound(
            f"No public hosted zone named {LAST_DOT_RE.sub('', zone_name)} was found",
            [zone["Name"] for zone in new_zones],
        )
    return new_zones[0]


def lookup_hosted_zone_id(context: DeploymentContext, zone_name: str) -> str:
    """
    Finds the public hosted zone ID for the given DNS name. The result is kept on the context,
    so only one API call is made per zone and deployment.

    :param DeploymentContext context:
    :param str zone_name: the DNS zone name, i.e. labs.example.com
    :return: the hosted zone ID
    :rtype: str
    """
    zone_name = LAST_DOT_RE.sub("", zone_name)
    if zone_name in context.hosted_zones:
        return context.hosted_zones[zone_name]
    client = context.session.client("route53")
    try:
        zones_r = client.list_hosted_zones_by_name(DNSName=zone_name, MaxItems="5")
    except ClientError as error:
        LOG.error(f"Failed to list hosted zones for {zone_name}")
        LOG.error(error)
        raise
    zone = filter_out_cloudmap_zones(zones_r["HostedZones"], zone_name)
    zone_id = validate_zone_id_input(zone["Id"])
    LOG.info(f"Hosted zone {zone_name} resolved to {zone_id}")
    context.hosted_zones[zone_name] = zone_id
    return zone_id
