#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Service configuration parsing and validation.

The configuration is validated against the JSON schema packaged in ``specs/`` and then against
the semantic rules the schema cannot express. Nothing is built until validation passes.
"""

from __future__ import annotations

import re
from copy import deepcopy
from json import loads

import jsonschema
import yaml
from compose_x_common.compose_x_common import keyisset, set_else_none
from importlib_resources import files as pkg_files

from ecs_service_builder.common.logging import LOG
from ecs_service_builder.exceptions import ServiceValidationError

DEFAULT_CPU = "256"
DEFAULT_MEMORY = "512"
DEFAULT_CPU_THRESHOLD = 75
HTTP_PORT = 80
HTTPS_PORT = 443

NAME_RE = re.compile(r"^(?!-)[a-zA-Z0-9-]{1,63}(?<!-)$")
IMAGE_RE = re.compile(
    r"^(?:[a-zA-Z0-9.-]+(?::[0-9]+)?/)?"
    r"[a-z0-9]+(?:[._-][a-z0-9]+)*"
    r"(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*"
    r"(?::[\w][\w.-]{0,127})?"
    r"(?:@sha256:[a-f0-9]{64})?$"
)
DOMAIN_RE = re.compile(
    r"^(?=.{1,253}\.?$)(?:(?!-)[a-zA-Z0-9-]{1,63}(?<!-)\.)+[a-zA-Z]{2,63}\.?$"
)
NUMERIC_RE = re.compile(r"^[1-9][0-9]*$")


def get_service_schema() -> dict:
    source = pkg_files("ecs_service_builder").joinpath("specs/service.spec.json")
    return loads(source.read_text())


def validate_against_schema(definition: dict) -> None:
    """
    Validates the raw definition against the JSON schema

    :param dict definition:
    :raises: ServiceValidationError
    """
    try:
        jsonschema.validate(definition, get_service_schema())
    except jsonschema.exceptions.ValidationError as error:
        path = ".".join(str(part) for part in error.absolute_path) or "<root>"
        raise ServiceValidationError(
            f"Invalid service definition at {path}: {error.message}"
        ) from error


class AutoscalingConfig:
    """
    Autoscaling bounds of the service desired count.

    :ivar int min: minimum number of tasks
    :ivar int max: maximum number of tasks
    :ivar float cpu_avg_threshold: average CPU utilization, in percent, the policy tracks
    """

    def __init__(self, min: int, max: int, cpu_avg_threshold=None):
        self.min = min
        self.max = max
        self.cpu_avg_threshold = (
            cpu_avg_threshold
            if cpu_avg_threshold is not None
            else DEFAULT_CPU_THRESHOLD
        )
        self.validate()

    @classmethod
    def from_dict(cls, definition: dict) -> AutoscalingConfig:
        if not isinstance(definition, dict):
            raise ServiceValidationError(
                "autoscaling must be a mapping. Got", type(definition)
            )
        missing = [key for key in ("min", "max") if key not in definition]
        if missing:
            raise ServiceValidationError(
                f"autoscaling is missing required properties: {', '.join(missing)}"
            )
        return cls(
            definition["min"],
            definition["max"],
            definition.get("cpuAvgThreshold"),
        )

    def validate(self) -> None:
        for key, value in (("min", self.min), ("max", self.max)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ServiceValidationError(
                    f"autoscaling.{key} must be an integer. Got {value!r}"
                )
        if self.min < 1:
            raise ServiceValidationError(
                f"autoscaling.min must be at least 1. Got {self.min}"
            )
        if self.max < self.min:
            raise ServiceValidationError(
                f"autoscaling.max ({self.max}) must be greater than or equal to autoscaling.min ({self.min})"
            )
        if isinstance(self.cpu_avg_threshold, bool) or not isinstance(
            self.cpu_avg_threshold, (int, float)
        ):
            raise ServiceValidationError(
                f"autoscaling.cpuAvgThreshold must be a number. Got {self.cpu_avg_threshold!r}"
            )
        if not 0 < self.cpu_avg_threshold <= 100:
            raise ServiceValidationError(
                "autoscaling.cpuAvgThreshold must be within ]0, 100]. "
                f"Got {self.cpu_avg_threshold}"
            )

    def __repr__(self):
        return f"AutoscalingConfig(min={self.min}, max={self.max}, cpu_avg_threshold={self.cpu_avg_threshold})"


class ServiceConfig:
    """
    The user intent for a service.

    :ivar str name: logical name of the service
    :ivar str image: container image reference
    :ivar int port: port the container listens on
    :ivar str cpu: task CPU units
    :ivar str memory: task memory, in MiB
    :ivar AutoscalingConfig autoscaling: autoscaling bounds, if any
    :ivar str hosted_zone: public DNS zone to expose the service onto with TLS, if any
    """

    def __init__(
        self,
        name: str,
        image: str,
        port: int,
        cpu: str = None,
        memory: str = None,
        autoscaling: AutoscalingConfig = None,
        hosted_zone: str = None,
    ):
        self.name = name
        self.image = image
        self.port = port
        self.cpu = cpu if cpu is not None else DEFAULT_CPU
        self.memory = memory if memory is not None else DEFAULT_MEMORY
        if isinstance(autoscaling, dict):
            autoscaling = AutoscalingConfig.from_dict(autoscaling)
        self.autoscaling = autoscaling
        if isinstance(hosted_zone, str):
            hosted_zone = hosted_zone.rstrip(".")
        self.hosted_zone = hosted_zone if hosted_zone else None
        self.validate()

    @classmethod
    def from_dict(cls, definition: dict) -> ServiceConfig:
        """
        Validates the raw definition and creates the ServiceConfig from it

        :param dict definition: the service definition, camelCase keys
        :rtype: ServiceConfig
        """
        if not isinstance(definition, dict):
            raise ServiceValidationError(
                "The service definition must be a mapping. Got", type(definition)
            )
        validate_against_schema(definition)
        return cls(
            definition["name"],
            definition["image"],
            definition["port"],
            cpu=set_else_none("cpu", definition),
            memory=set_else_none("memory", definition),
            autoscaling=AutoscalingConfig.from_dict(definition["autoscaling"])
            if keyisset("autoscaling", definition)
            else None,
            hosted_zone=set_else_none("hostedZone", definition),
        )

    @property
    def use_tls(self) -> bool:
        return bool(self.hosted_zone)

    @property
    def exposed_port(self) -> int:
        return HTTPS_PORT if self.use_tls else HTTP_PORT

    def validate(self) -> None:
        """
        Validates the configuration values

        :raises: ServiceValidationError
        """
        if not isinstance(self.name, str) or not NAME_RE.match(self.name):
            raise ServiceValidationError(
                f"name must be a non-empty string matching {NAME_RE.pattern}. Got {self.name!r}"
            )
        if not isinstance(self.image, str) or not IMAGE_RE.match(self.image):
            raise ServiceValidationError(
                f"{self.name} - image {self.image!r} is not a valid container image reference"
            )
        if (
            isinstance(self.port, bool)
            or not isinstance(self.port, int)
            or not 1 <= self.port <= 65535
        ):
            raise ServiceValidationError(
                f"{self.name} - port must be a TCP port number within [1, 65535]. Got {self.port!r}"
            )
        for key, value in (("cpu", self.cpu), ("memory", self.memory)):
            if not isinstance(value, str) or not NUMERIC_RE.match(value):
                raise ServiceValidationError(
                    f"{self.name} - {key} must be a positive integer as a string. Got {value!r}"
                )
        if self.autoscaling is not None and not isinstance(
            self.autoscaling, AutoscalingConfig
        ):
            raise ServiceValidationError(
                f"{self.name} - autoscaling must be an AutoscalingConfig. Got",
                type(self.autoscaling),
            )
        if self.hosted_zone is not None and (
            not isinstance(self.hosted_zone, str) or not DOMAIN_RE.match(self.hosted_zone)
        ):
            raise ServiceValidationError(
                f"{self.name} - hostedZone {self.hosted_zone!r} is not a valid DNS zone name"
            )
        LOG.debug(f"{self.name} - configuration is valid")

    def __repr__(self):
        return (
            f"ServiceConfig(name={self.name!r}, image={self.image!r}, port={self.port}, "
            f"cpu={self.cpu!r}, memory={self.memory!r}, autoscaling={self.autoscaling!r}, "
            f"hosted_zone={self.hosted_zone!r})"
        )


def load_service_file(file_path: str) -> dict:
    """
    Loads the service definition file. JSON files are valid YAML.

    :param str file_path: path to the YAML/JSON file
    :return: the raw definition
    :rtype: dict
    """
    with open(file_path, encoding="utf-8") as definition_fd:
        content = yaml.safe_load(definition_fd.read())
    if not isinstance(content, dict):
        raise ServiceValidationError(
            f"{file_path} - The service definition must be a mapping. Got",
            type(content),
        )
    LOG.info(f"Loaded service definition from {file_path}")
    return deepcopy(content)
