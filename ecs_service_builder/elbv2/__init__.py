#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Public ingress of the service: security group, application load balancer, target group and listener.
"""
