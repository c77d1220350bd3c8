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

from typing import Sequence

from orchestrapy import __version__
from orchestrapy.constants import CallerType


def detect_orchestrapy_user_agent() -> CallerType:
    """The (name, version) identity of this library in the User-Agent."""

    return (__name__.partition(".")[0], __version__)


def compose_user_agent_string(
    caller_name: str | None, caller_version: str | None
) -> str | None:
    # a version without a name cannot be rendered
    if not caller_name:
        return None
    return "/".join(pc for pc in (caller_name, caller_version) if pc)


def compose_full_user_agent(callers: Sequence[CallerType]) -> str | None:
    """
    Join the caller identities into a single User-Agent value, in order,
    skipping callers without a name. None if nothing is left.
    """

    rendered = (compose_user_agent_string(name, version) for name, version in callers)
    return " ".join(ua for ua in rendered if ua) or None
