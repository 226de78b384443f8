#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Public DNS records and hosted zone lookup for the services exposed with a custom domain.
"""
