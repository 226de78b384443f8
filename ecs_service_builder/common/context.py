#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the DeploymentContext class, passed explicitly to every builder.
"""

from __future__ import annotations

import re

import boto3

STACK_ID_RE = re.compile(r"^[a-zA-Z0-9-]+$")


class DeploymentContext:
    """
    Identifies the deployment the resources are built for.

    :ivar str stack: the deployment identifier, used to suffix the external names of resources
    :ivar str region: the AWS region to deploy to
    :ivar boto3.session.Session session: session used for the (few) lookup API calls
    :ivar dict hosted_zones: zone name to zone ID, resolved at most once per context
    """

    def __init__(self, stack: str, region: str = None, session=None):
        if not isinstance(stack, str) or not STACK_ID_RE.match(stack):
            raise ValueError(
                "The deployment identifier must match", STACK_ID_RE.pattern, "Got", stack
            )
        self.stack = stack
        self._session = session
        self.region = region if region else self.session.region_name
        if not self.region:
            raise ValueError(
                f"Deployment {stack} - Unable to determine the AWS region to deploy to"
            )
        self.hosted_zones: dict = {}

    @property
    def session(self) -> boto3.session.Session:
        if self._session is None:
            self._session = boto3.session.Session()
        return self._session

    def __repr__(self):
        return f"DeploymentContext(stack={self.stack!r}, region={self.region!r})"
