#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

import re

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def logical_id(*parts: str) -> str:
    """
    Builds a CloudFormation logical ID from the given parts, removing any non alphanumerical character

    :param str parts: the parts to concatenate
    :return: the logical ID
    :rtype: str
    """
    title = NONALPHANUM.sub("", "".join(str(part) for part in parts))
    if not title:
        raise ValueError("Cannot define a logical ID from", parts)
    return title
