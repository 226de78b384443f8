#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Tests for the naming, tagging and template helpers shared by all builders.
"""

from pytest import fixture, raises
from troposphere import GetAtt, Join, Ref, Tags, Template
from troposphere.ec2 import SecurityGroupEgress
from troposphere.ecs import Cluster

from ecs_service_builder.common import logical_id
from ecs_service_builder.common.cfn_params import SUBNETS_T, VPC_ID_T
from ecs_service_builder.common.cfn_tools import (
    ResourceOptions,
    add_resource,
    build_template,
    interpolate,
)
from ecs_service_builder.common.context import DeploymentContext
from ecs_service_builder.common.logging import LOG, set_log_level
from ecs_service_builder.common.naming import log_group_name, stack_qualified_name
from ecs_service_builder.common.tagging import add_object_tags, define_tags
from ecs_service_builder.network import NetworkContext, Subnet


@fixture
def context():
    return DeploymentContext("dev", "eu-west-1")


def test_stack_qualified_names(context):
    assert stack_qualified_name("nginx", context) == "nginx-dev"
    assert log_group_name("nginx", context) == "awslogs-nginx-dev"
    other = DeploymentContext("prod", "eu-west-1")
    assert stack_qualified_name("nginx", other) != stack_qualified_name(
        "nginx", context
    )


def test_deployment_context():
    for stack in ["", "dev_1", None, "dev stack"]:
        with raises(ValueError):
            DeploymentContext(stack, "eu-west-1")
    assert DeploymentContext("dev", "us-east-1").region == "us-east-1"
    assert DeploymentContext("dev", "us-east-1").hosted_zones == {}


def test_logical_id():
    assert logical_id("nginx", "Cluster") == "nginxCluster"
    assert logical_id("my-app", "_", "Listener") == "myappListener"
    with raises(ValueError):
        logical_id("--", "_")


def test_interpolate():
    assert interpolate("https://", "nginx-dev.labs.example.com") == (
        "https://nginx-dev.labs.example.com"
    )
    joined = interpolate("http://", GetAtt("AppLb", "DNSName"))
    assert isinstance(joined, Join)
    assert joined.to_dict() == {
        "Fn::Join": ["", ["http://", {"Fn::GetAtt": ["AppLb", "DNSName"]}]]
    }
    with raises(TypeError):
        interpolate("http://", Ref("AppLb"), 1.5)


def test_tags():
    assert define_tags(None) is None
    assert define_tags({}) is None
    tags = define_tags({"project": "labs", "costcentre": "1234"})
    assert isinstance(tags, Tags)
    assert {"Key": "project", "Value": "labs"} in tags.to_dict()
    with raises(TypeError):
        define_tags(["project"])

    cluster = Cluster("nginxCluster")
    add_object_tags(cluster, {"project": "labs"})
    assert cluster.to_dict()["Properties"]["Tags"] == [
        {"Key": "project", "Value": "labs"}
    ]
    egress = SecurityGroupEgress(
        "nginxEgress", GroupId="sg-0123456789", IpProtocol="-1"
    )
    add_object_tags(egress, {"project": "labs"})
    assert "Tags" not in egress.properties


def test_resource_options():
    template = Template()
    with raises(ValueError):
        ResourceOptions(deletion_policy="Keep")
    with raises(TypeError):
        ResourceOptions(depends_on=[1])
    opts = ResourceOptions(
        depends_on=[Cluster("ExternalCluster"), "ExternalBucket"],
        deletion_policy="Retain",
    )
    cluster = add_resource(
        template, Cluster("nginxCluster", DependsOn="ExternalBucket"), opts
    )
    rendered = template.to_dict()["Resources"][cluster.title]
    assert rendered["DependsOn"] == ["ExternalBucket", "ExternalCluster"]
    assert rendered["DeletionPolicy"] == "Retain"


def test_build_template():
    template = build_template("Override")
    assert template.description == "Override"
    assert template.metadata["Type"] == "ecs-service-builder"
    assert build_template().description


def test_network_parameters():
    template = Template()
    network = NetworkContext(
        "vpc-0a1b2c3d4e5f67890",
        ["subnet-0a1b2c3d4e5f67890", Subnet("subnet-1a1b2c3d4e5f67890")],
    )
    assert network.uses_parameters
    assert network.vpc_id_value(template).to_dict() == {"Ref": VPC_ID_T}
    assert network.subnets_value(template).to_dict() == {"Ref": SUBNETS_T}
    assert template.parameters[SUBNETS_T].Type == "List<AWS::EC2::Subnet::Id>"
    network.vpc_id_value(template)
    interface = template.metadata["AWS::CloudFormation::Interface"]
    assert interface["ParameterGroups"] == [
        {"Label": {"default": "Network"}, "Parameters": [VPC_ID_T, SUBNETS_T]}
    ]
    assert interface["ParameterLabels"][VPC_ID_T] == {
        "default": "VPC to deploy the service to"
    }
    assert network.render_parameters_list_cfn() == [
        {"ParameterKey": VPC_ID_T, "ParameterValue": "vpc-0a1b2c3d4e5f67890"},
        {
            "ParameterKey": SUBNETS_T,
            "ParameterValue": "subnet-0a1b2c3d4e5f67890,subnet-1a1b2c3d4e5f67890",
        },
    ]


def test_network_deferred_values():
    template = Template()
    vpc_id = Ref("Vpc")
    network = NetworkContext(vpc_id, [Ref("SubnetA"), Ref("SubnetB")])
    assert not network.uses_parameters
    assert network.vpc_id_value(template) is vpc_id
    assert len(network.subnets_value(template)) == 2
    assert not template.parameters
    assert network.render_parameters_list_cfn() == []
    with raises(ValueError):
        NetworkContext("vpc-0a1b2c3d4e5f67890", [])
    with raises(TypeError):
        Subnet(123)


def test_log_level():
    assert set_log_level("debug")
    assert LOG.level == 10
    assert not set_log_level("chatty")
    assert set_log_level("INFO")
