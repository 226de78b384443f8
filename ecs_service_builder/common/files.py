#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to render a template and write it to the local filesystem
"""

from __future__ import annotations

import json
from os import makedirs, path

from troposphere import Template

from ecs_service_builder.common.logging import LOG

JSON_FORMAT = "json"
YAML_FORMAT = "yaml"


def render_template(template: Template, file_format: str = JSON_FORMAT) -> str:
    """
    Renders the template body in the given format

    :param troposphere.Template template:
    :param str file_format: json or yaml
    :rtype: str
    """
    if file_format == YAML_FORMAT:
        return template.to_yaml(clean_up=True, long_form=True)
    elif file_format == JSON_FORMAT:
        return template.to_json()
    raise ValueError("Template format must be one of", [JSON_FORMAT, YAML_FORMAT])


def write_template(
    template: Template, output_dir: str, file_name: str, file_format: str = JSON_FORMAT
) -> str:
    """
    Writes the template to output_dir/file_name.<format>

    :return: the path of the file written
    :rtype: str
    """
    body = render_template(template, file_format)
    makedirs(output_dir, exist_ok=True)
    file_path = path.abspath(f"{output_dir}/{file_name}.{file_format}")
    with open(file_path, "w", encoding="utf-8") as template_fd:
        template_fd.write(body)
    LOG.info(f"Template written to {file_path}")
    return file_path


def write_parameters(parameters: list, output_dir: str, file_name: str) -> str:
    """
    Writes the stack parameters in the CloudFormation CLI format, next to the template
    """
    makedirs(output_dir, exist_ok=True)
    file_path = path.abspath(f"{output_dir}/{file_name}.params.json")
    with open(file_path, "w", encoding="utf-8") as params_fd:
        params_fd.write(json.dumps(parameters, indent=4))
    LOG.info(f"Parameters written to {file_path}")
    return file_path
