#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

import re

ZONES_PATTERN = re.compile(r"^Z[0-9A-Z]+$")
HOSTED_ZONE_PREFIX_RE = re.compile(r"^/hostedzone/")
LAST_DOT_RE = re.compile(r"(\.{1}$)")

ALIAS_RECORD_TYPE = "A"
