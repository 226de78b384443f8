#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from os import path

from pytest import fixture, raises

from ecs_service_builder.config import (
    DEFAULT_CPU,
    DEFAULT_CPU_THRESHOLD,
    DEFAULT_MEMORY,
    AutoscalingConfig,
    ServiceConfig,
    load_service_file,
)
from ecs_service_builder.exceptions import (
    ServiceBuilderException,
    ServiceValidationError,
)

HERE = path.abspath(path.dirname(__file__))


@fixture
def definition():
    return {"name": "nginx", "image": "nginx:latest", "port": 80}


def test_defaults(definition):
    config = ServiceConfig.from_dict(definition)
    assert config.cpu == DEFAULT_CPU == "256"
    assert config.memory == DEFAULT_MEMORY == "512"
    assert config.autoscaling is None
    assert config.hosted_zone is None
    assert not config.use_tls
    assert config.exposed_port == 80


def test_explicit_values(definition):
    definition.update(
        {
            "cpu": "1024",
            "memory": "2048",
            "hostedZone": "labs.example.com.",
            "autoscaling": {"min": 2, "max": 4},
        }
    )
    config = ServiceConfig.from_dict(definition)
    assert config.cpu == "1024"
    assert config.memory == "2048"
    assert config.hosted_zone == "labs.example.com"
    assert config.use_tls
    assert config.exposed_port == 443
    assert config.autoscaling.min == 2
    assert config.autoscaling.max == 4
    assert config.autoscaling.cpu_avg_threshold == DEFAULT_CPU_THRESHOLD


def test_image_references(definition):
    for image in [
        "nginx",
        "nginx:1.25-alpine",
        "public.ecr.aws/nginx/nginx:latest",
        "123456789012.dkr.ecr.eu-west-1.amazonaws.com/app/web:v1.2.3",
        "localhost:5000/app",
        f"nginx@sha256:{'a' * 64}",
    ]:
        definition["image"] = image
        assert ServiceConfig.from_dict(definition).image == image


def test_invalid_definitions(definition):
    invalid_updates = [
        {"name": ""},
        {"name": "my_service"},
        {"name": "-nginx"},
        {"name": "nginx-"},
        {"name": "---"},
        {"name": "a" * 64},
        {"image": "Not An Image"},
        {"port": 0},
        {"port": 65536},
        {"port": "80"},
        {"cpu": "0"},
        {"cpu": 256},
        {"memory": "512MB"},
        {"hostedZone": "not_a_zone"},
        {"autoscaling": {"min": 0, "max": 2}},
        {"autoscaling": {"min": 3, "max": 2}},
        {"autoscaling": {"min": 1, "max": 2, "cpuAvgThreshold": 0}},
        {"autoscaling": {"min": 1, "max": 2, "cpuAvgThreshold": 120}},
        {"autoscaling": {"min": 1}},
        {"unknownSetting": True},
    ]
    for update in invalid_updates:
        test_definition = dict(definition)
        test_definition.update(update)
        with raises(ServiceValidationError):
            ServiceConfig.from_dict(test_definition)


def test_missing_required_properties():
    with raises(ServiceValidationError):
        ServiceConfig.from_dict({"name": "nginx", "port": 80})
    with raises(ServiceValidationError):
        ServiceConfig.from_dict(["nginx"])


def test_validation_error_is_builder_error(definition):
    definition["port"] = -1
    with raises(ServiceBuilderException):
        ServiceConfig.from_dict(definition)


def test_autoscaling_config():
    autoscaling = AutoscalingConfig(1, 1)
    assert autoscaling.cpu_avg_threshold == 75
    assert AutoscalingConfig(1, 5, 50).cpu_avg_threshold == 50
    assert AutoscalingConfig.from_dict({"min": 1, "max": 5}).max == 5
    with raises(ServiceValidationError):
        AutoscalingConfig(True, 2)
    with raises(ServiceValidationError):
        AutoscalingConfig(1, 2, "50")


def test_direct_config_validation():
    config = ServiceConfig(
        "nginx", "nginx:latest", 8080, autoscaling={"min": 1, "max": 3}
    )
    assert isinstance(config.autoscaling, AutoscalingConfig)
    with raises(ServiceValidationError):
        ServiceConfig("nginx", "nginx:latest", 8080, autoscaling=[1, 3])
    with raises(ServiceValidationError):
        ServiceConfig("nginx", "nginx:latest", 8080, autoscaling={"min": 1})
    with raises(ServiceValidationError):
        ServiceConfig("nginx", "nginx:latest", 8080, cpu="")
    with raises(ServiceValidationError):
        ServiceConfig("nginx", "nginx:latest", 8080, memory="")
    with raises(ServiceValidationError):
        AutoscalingConfig.from_dict({"max": 2})


def test_load_service_file():
    definition = load_service_file(f"{HERE}/use-cases/nginx.yml")
    assert definition["name"] == "nginx"
    assert definition["subnets"] == [
        "subnet-0a1b2c3d4e5f67890",
        "subnet-1a1b2c3d4e5f67890",
    ]
    config = ServiceConfig.from_dict(definition)
    assert config.port == 80
