# Copyright DataStax, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import datetime

# Defaults/settings for reaching the API
DEFAULT_API_HOST = "api.orchestrate.io"
DEFAULT_API_SCHEME = "https"
API_VERSION_PATH = "/v0/"

# Defaults/settings for requests
DEFAULT_REQUEST_TIMEOUT_MS = 3000
DEFAULT_AUTH_HEADER = "Authorization"
DEFAULT_DATETIME_TZINFO = datetime.timezone.utc

# Expected success statuses for the read-only calls issued by this client
PAGE_FETCH_EXPECTED_STATUS = 200
PING_EXPECTED_STATUS = 200

# Server-side page size limits for listing operations
MAX_PAGE_SIZE = 100

# Settings for redacting secrets in string representations and logging
SECRETS_REDACT_ENDING = "..."
SECRETS_REDACT_CHAR = "*"
SECRETS_REDACT_ENDING_LENGTH = 3
FIXED_SECRET_PLACEHOLDER = "***"
DEFAULT_REDACTED_HEADER_NAMES = {
    DEFAULT_AUTH_HEADER,
}

# Deprecation notices
WITH_ERROR_DEPRECATION_NOTICE = (
    "Please call the corresponding advance method and then inspect the "
    "`error` property of the iterator."
)
