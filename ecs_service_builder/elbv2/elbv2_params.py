#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles suffixes and settings for the load balancer resources
"""

LB_SG_T = "AlbSecurityGroup"
LB_T = "AppLb"
TARGET_GROUP_T = "LbTargetGroup"
LISTENER_T = "Listener"
CERTIFICATE_T = "Certificate"
DNS_RECORD_T = "DnsRecord"

LB_DNS_NAME = "DNSName"
LB_DNS_ZONE_ID = "CanonicalHostedZoneID"

HTTP_PROTOCOL = "HTTP"
HTTPS_PROTOCOL = "HTTPS"
TARGET_GROUP_PORT = 80
TARGET_TYPE = "ip"
ANYWHERE_CIDR = "0.0.0.0/0"
