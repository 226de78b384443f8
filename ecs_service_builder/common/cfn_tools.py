#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helpers around troposphere templates and deferred values.

Any CloudFormation attribute not known until the stack is applied (ARNs, IDs, DNS names) is
represented by a troposphere helper function (Ref, GetAtt, Sub, Join) and resolved by CloudFormation.
"""

from __future__ import annotations

from troposphere import AWSHelperFn, AWSObject, Join, Output, Parameter, Template

from ecs_service_builder import __version__
from ecs_service_builder.common.cfn_params import Parameter as LabelledParameter
from ecs_service_builder.common.logging import LOG


def build_template(description=None, *parameters) -> Template:
    """
    Entry point function to return a new template with the default metadata

    :param str description: description of the template
    :param parameters: troposphere.Parameter to add to the template
    :return: Template
    :rtype: troposphere.Template
    """
    template = Template(
        description if description else "Template generated by ecs-service-builder"
    )
    template.set_metadata(
        {
            "Type": "ecs-service-builder",
            "Properties": {"Version": __version__},
        }
    )
    add_parameters(template, list(parameters))
    return template


def add_parameters(template: Template, parameters: list[Parameter]) -> None:
    """
    Adds the parameters to the template if they are not already defined

    :param troposphere.Template template:
    :param list parameters:
    """
    for parameter in parameters:
        if parameter.title not in template.parameters:
            template.add_parameter(parameter)
            if isinstance(parameter, LabelledParameter):
                add_parameter_to_interface(template, parameter)


def add_parameter_to_interface(
    template: Template, parameter: LabelledParameter
) -> None:
    """
    Adds the parameter to its group, and its label, in the AWS::CloudFormation::Interface metadata

    :param troposphere.Template template:
    :param LabelledParameter parameter:
    """
    interface = template.metadata.setdefault(
        "AWS::CloudFormation::Interface",
        {"ParameterGroups": [], "ParameterLabels": {}},
    )
    for group in interface["ParameterGroups"]:
        if group["Label"]["default"] == parameter.group_label:
            group["Parameters"].append(parameter.title)
            break
    else:
        interface["ParameterGroups"].append(
            {
                "Label": {"default": parameter.group_label},
                "Parameters": [parameter.title],
            }
        )
    if parameter.label:
        interface["ParameterLabels"][parameter.title] = {"default": parameter.label}


def add_outputs(template: Template, outputs: list[Output]) -> None:
    for output in outputs:
        if output.title in template.outputs:
            LOG.warning(f"Output {output.title} already defined. Overriding")
            del template.outputs[output.title]
        template.add_output(output)


def interpolate(*parts):
    """
    Concatenates strings and deferred values. If all parts are strings, returns a string.

    :param parts: str or troposphere.AWSHelperFn
    :return: the concatenated value
    :rtype: str or troposphere.Join
    """
    if all(isinstance(part, str) for part in parts):
        return "".join(parts)
    for part in parts:
        if not isinstance(part, (str, int, AWSHelperFn)):
            raise TypeError(
                "Can only interpolate str, int or troposphere functions. Got",
                type(part),
            )
    return Join("", [str(part) if isinstance(part, int) else part for part in parts])


class ResourceOptions:
    """
    Options applied to every resource built on behalf of a Service.

    :ivar list depends_on: resources (or their titles) every created resource must wait for
    :ivar str deletion_policy: DeletionPolicy to set on the resources, if any
    """

    allowed_deletion_policies = ["Delete", "Retain", "Snapshot", "RetainExceptOnCreate"]

    def __init__(self, depends_on: list = None, deletion_policy: str = None):
        if deletion_policy and deletion_policy not in self.allowed_deletion_policies:
            raise ValueError(
                "DeletionPolicy must be one of",
                self.allowed_deletion_policies,
                "Got",
                deletion_policy,
            )
        self.depends_on = []
        for dependency in depends_on or []:
            title = dependency.title if isinstance(dependency, AWSObject) else dependency
            if not isinstance(title, str):
                raise TypeError(
                    "depends_on must be a list of resources or titles. Got",
                    type(dependency),
                )
            self.depends_on.append(title)
        self.deletion_policy = deletion_policy

    def apply(self, resource: AWSObject) -> None:
        """
        Merges the options into the resource attributes, keeping the explicit DependsOn already set.
        """
        if self.depends_on:
            depends_on = getattr(resource, "DependsOn", [])
            if isinstance(depends_on, str):
                depends_on = [depends_on]
            depends_on = list(depends_on)
            for title in self.depends_on:
                if title not in depends_on:
                    depends_on.append(title)
            setattr(resource, "DependsOn", depends_on)
        if self.deletion_policy:
            setattr(resource, "DeletionPolicy", self.deletion_policy)


def add_resource(
    template: Template, resource: AWSObject, opts: ResourceOptions = None
) -> AWSObject:
    """
    Function to add the resource to the template, applying the options

    :param troposphere.Template template:
    :param troposphere.AWSObject resource:
    :param ResourceOptions opts:
    :return: the resource
    """
    if opts:
        opts.apply(resource)
    LOG.debug(f"Adding {resource.resource_type} {resource.title}")
    return template.add_resource(resource)
