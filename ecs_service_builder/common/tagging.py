#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Renders the user defined tags onto the resources which support Tags in CloudFormation.

Tags are propagated as given. Neither keys nor values are validated.
"""

from __future__ import annotations

from troposphere import AWSObject, Tags

from ecs_service_builder.common.logging import LOG


def define_tags(tags: dict | None) -> Tags | None:
    """
    Function to generate the tags to be added to objects

    :param dict tags: tags mapping as defined in the configuration
    :return: Tags() or None
    :rtype: troposphere.Tags or None
    """
    if not tags:
        return None
    if not isinstance(tags, dict):
        raise TypeError("Tags must be of type", dict, "Got", type(tags))
    return Tags({str(key): value for key, value in tags.items()})


def add_object_tags(obj: AWSObject, tags: dict | None) -> None:
    """
    Sets Tags on the resource if it supports it.

    :param troposphere.AWSObject obj:
    :param dict tags:
    """
    rendered = define_tags(tags)
    if rendered is None:
        return
    if "Tags" not in obj.props:
        LOG.debug(f"{obj.title} ({obj.resource_type}) does not support Tags. Skipping")
        return
    setattr(obj, "Tags", rendered)
