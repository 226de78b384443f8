#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS Fargate compute of the service: cluster, IAM, task definition, service and autoscaling.
"""
