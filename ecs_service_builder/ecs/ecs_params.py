#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles suffixes and fixed settings of the ECS resources.
Titles are prefixed with the logical name of the Service which owns the resources.
"""

CLUSTER_T = "Cluster"
SG_T = "SecurityGroup"
EXEC_POLICY_T = "TaskExecPolicy"
EXEC_ROLE_T = "TaskExecRole"
TASK_T = "TaskDefinitions"
SERVICE_T = "AppService"
LB_EGRESS_T = "AlbEcsEgress"
SERVICE_SCALING_TARGET_T = "ScalingTarget"
SERVICE_SCALING_POLICY_T = "ScalingPolicy"

LAUNCH_TYPE = "FARGATE"
NETWORK_MODE = "awsvpc"
TASK_FAMILY = "fargate-task-definition"
TASKS_PRINCIPAL = "ecs-tasks"
LOG_DRIVER = "awslogs"

SCALABLE_DIMENSION = "ecs:service:DesiredCount"
SCALING_NAMESPACE = "ecs"
SCALING_POLICY_TYPE = "TargetTrackingScaling"
CPU_METRIC_TYPE = "ECSServiceAverageCPUUtilization"
