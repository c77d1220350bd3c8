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

from enum import Enum


class UnsetType(Enum):
    """
    Sentinel type for parameters that were not passed at all, as opposed
    to parameters explicitly passed as None.
    """

    UNSET = "unset"

    def __repr__(self) -> str:
        return "(unset)"

    def __bool__(self) -> bool:
        return False


_UNSET = UnsetType.UNSET
