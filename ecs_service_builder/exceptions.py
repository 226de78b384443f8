#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for ecs-service-builder
"""


class ServiceBuilderException(Exception):
    """
    Top class for ecs-service-builder Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class ServiceValidationError(ServiceBuilderException):
    """
    Exception when the service configuration is invalid. Raised before any resource is defined.
    """


class HostedZoneNotFound(ServiceBuilderException, LookupError):
    """
    Exception when the public DNS zone could not be resolved by name
    """


class BuildPhaseError(ServiceBuilderException):
    """
    Exception raised when one of the builder phases failed, adding the service and phase to the original error.
    """

    def __init__(self, msg, service_name=None, phase=None, *args):
        self.service_name = service_name
        self.phase = phase
        super().__init__(msg, *args)
