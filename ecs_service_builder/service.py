#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the Service class, which derives the whole ECS service topology from its configuration.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_service_builder.common.context import DeploymentContext
    from ecs_service_builder.network import NetworkContext

from troposphere import Export, Output, Sub, Template

from ecs_service_builder.common import logical_id
from ecs_service_builder.common.cfn_tools import (
    ResourceOptions,
    add_outputs,
    build_template,
    interpolate,
)
from ecs_service_builder.common.logging import LOG
from ecs_service_builder.common.naming import log_group_name, stack_qualified_name
from ecs_service_builder.config import DOMAIN_RE, NAME_RE, ServiceConfig
from ecs_service_builder.dns.dns_records import define_service_domain
from ecs_service_builder.ecs.ecs_iam import create_execution_role
from ecs_service_builder.ecs.ecs_params import (
    CLUSTER_T,
    EXEC_POLICY_T,
    EXEC_ROLE_T,
    LB_EGRESS_T,
    SERVICE_SCALING_POLICY_T,
    SERVICE_SCALING_TARGET_T,
    SERVICE_T,
    SG_T,
    TASK_T,
)
from ecs_service_builder.ecs.ecs_scaling import add_service_scaling
from ecs_service_builder.ecs.ecs_service import (
    create_cluster,
    create_lb_to_service_egress,
    create_service,
    create_service_security_group,
)
from ecs_service_builder.ecs.ecs_task import create_task_definition
from ecs_service_builder.elbv2.elbv2_ingress import build_load_balancer
from ecs_service_builder.exceptions import BuildPhaseError, ServiceValidationError

SERVICE_URL_T = "ServiceUrl"


@contextmanager
def build_phase(service_name: str, phase: str):
    """
    Adds the service name and phase to any error raised while building. Validation errors are left as-is.

    :param str service_name:
    :param str phase:
    """
    LOG.debug(f"{service_name} - Starting {phase}")
    try:
        yield
    except (ServiceValidationError, BuildPhaseError):
        raise
    except Exception as error:
        LOG.error(f"{service_name} - Failed to build {phase}: {error}")
        raise BuildPhaseError(
            f"{service_name} - Failed to build {phase}: {error}",
            service_name,
            phase,
        ) from error


class Service:
    """
    Derives the ECS service topology from its configuration.

    :ivar str name: the unique name of this Service, prefix of all the logical IDs
    :ivar ServiceConfig config:
    :ivar troposphere.Template template: the template the resources are added to
    :ivar url: the URL the service is reachable at. A str when using a custom domain, a deferred value otherwise.
    """

    def __init__(
        self,
        name: str,
        config,
        context: DeploymentContext,
        network: NetworkContext,
        template: Template = None,
        opts: ResourceOptions = None,
        tags: dict = None,
    ):
        """
        :param str name: the unique name of the Service
        :param config: ServiceConfig or the raw definition to validate
        :param DeploymentContext context:
        :param NetworkContext network:
        :param troposphere.Template template: template to add the resources to. A new one is created if not set
        :param ResourceOptions opts: options applied to all resources
        :param dict tags: tags applied to all resources supporting them
        """
        self.config = self.validate_service_args(config)
        self.name = self.validate_service_name(name)
        self.logical_name = logical_id(name)
        self.context = context
        self.validate_service_domain()
        self.network = network
        self.tags = tags
        self.opts = opts
        self.template = (
            template
            if template is not None
            else build_template(f"ECS service {self.config.name} ({context.stack})")
        )
        self.resources = {}
        self.lb = None
        self.url = None
        self.build()

    @staticmethod
    def validate_service_args(config) -> ServiceConfig:
        if isinstance(config, ServiceConfig):
            config.validate()
            return config
        if isinstance(config, dict):
            return ServiceConfig.from_dict(config)
        raise ServiceValidationError(
            "config must be a ServiceConfig or a dict. Got", type(config)
        )

    @staticmethod
    def validate_service_name(name) -> str:
        if not isinstance(name, str) or not NAME_RE.match(name):
            raise ServiceValidationError(
                f"The service name must match {NAME_RE.pattern}. Got {name!r}"
            )
        return name

    def validate_service_domain(self) -> None:
        """
        With TLS, the service domain must be a valid DNS name before the certificate and record are defined.
        """
        if not self.config.use_tls:
            return
        domain_name = define_service_domain(
            self.config.name, self.config.hosted_zone, self.context
        )
        if not DOMAIN_RE.match(domain_name):
            raise ServiceValidationError(
                f"{self.name} - {domain_name} is not a valid DNS name. "
                "Each label must be at most 63 characters and not start or end with -"
            )

    @property
    def qualified_name(self) -> str:
        return stack_qualified_name(self.config.name, self.context)

    def title(self, suffix: str) -> str:
        return logical_id(self.logical_name, suffix)

    def build(self) -> None:
        LOG.info(
            f"{self.name} - Building service {self.qualified_name} in {self.context.region}"
        )
        with build_phase(self.name, "load balancer"):
            self.lb = build_load_balancer(
                self.template,
                self.logical_name,
                self.config.name,
                self.network,
                self.context,
                hosted_zone=self.config.hosted_zone,
                tags=self.tags,
                opts=self.opts,
            )
        with build_phase(self.name, "service"):
            self.build_service()
        with build_phase(self.name, "autoscaling"):
            self.resources["scaling"] = add_service_scaling(
                self.template,
                self.title(SERVICE_SCALING_TARGET_T),
                self.title(SERVICE_SCALING_POLICY_T),
                self.config.autoscaling,
                self.resources["cluster"],
                self.resources["service"],
                self.opts,
            )
        with build_phase(self.name, "outputs"):
            self.set_url()

    def build_service(self) -> None:
        config = self.config
        log_group = log_group_name(config.name, self.context)
        cluster = create_cluster(
            self.template, self.title(CLUSTER_T), self.qualified_name, self.tags, self.opts
        )
        security_group = create_service_security_group(
            self.template,
            self.title(SG_T),
            config.name,
            config.port,
            self.network.vpc_id_value(self.template),
            self.lb.security_group_id,
            self.context,
            self.tags,
            self.opts,
        )
        role = create_execution_role(
            self.template,
            self.title(EXEC_POLICY_T),
            self.title(EXEC_ROLE_T),
            log_group,
            self.context.region,
            self.tags,
            self.opts,
        )
        task_definition = create_task_definition(
            self.template,
            self.title(TASK_T),
            self.qualified_name,
            config,
            self.context.region,
            role,
            log_group,
            self.tags,
            self.opts,
        )
        create_lb_to_service_egress(
            self.template,
            self.title(LB_EGRESS_T),
            config.port,
            self.lb.security_group_id,
            security_group,
            self.opts,
        )
        service = create_service(
            self.template,
            self.title(SERVICE_T),
            cluster,
            task_definition,
            self.lb.target_group_arn,
            self.qualified_name,
            config.port,
            self.network.subnets_value(self.template),
            security_group,
            depends_on=[self.lb.listener],
            tags=self.tags,
            opts=self.opts,
        )
        self.resources.update(
            {
                "cluster": cluster,
                "security_group": security_group,
                "execution_role": role,
                "task_definition": task_definition,
                "service": service,
            }
        )

    def set_url(self) -> None:
        """
        Defines the URL of the service and the template output for it
        """
        if self.config.use_tls:
            self.url = interpolate(
                "https://",
                define_service_domain(
                    self.config.name, self.config.hosted_zone, self.context
                ),
            )
        else:
            self.url = interpolate("http://", self.lb.dns_name)
        add_outputs(
            self.template,
            [
                Output(
                    self.title(SERVICE_URL_T),
                    Description=f"URL of the {self.qualified_name} service",
                    Value=self.url,
                    Export=Export(Sub(f"${{AWS::StackName}}-{self.title(SERVICE_URL_T)}")),
                )
            ],
        )
        if isinstance(self.url, str):
            LOG.info(f"{self.name} - URL: {self.url}")
        else:
            LOG.info(f"{self.name} - URL: http://<load balancer DNS name>")
