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
from typing import Dict, Optional, Tuple

QueryParamsType = Dict[str, str]
CallerType = Tuple[Optional[str], Optional[str]]


class IteratorKind(Enum):
    """
    The kind of results a result iterator produces. The kind is fixed when the
    iterator is created and determines which typed result each raw page entry
    is projected into.

    Values:
        ITEM: key/value items, as returned by listing a collection or
            following graph relations.
        EVENT: entries of the event log attached to a key.
        SEARCH: full-text search hits, carrying score and distance.
        HISTORY: the past revisions of a key, possibly including tombstones.
    """

    ITEM = "item"
    EVENT = "event"
    SEARCH = "search"
    HISTORY = "history"

    @classmethod
    def coerce(cls, value: str | IteratorKind) -> IteratorKind:
        """
        Accept either an IteratorKind or its (case-insensitive) string value.
        Raise ValueError if the string does not name any kind.
        """

        if isinstance(value, IteratorKind):
            return value
        if isinstance(value, str):
            for kind in cls:
                if kind.value == value.lower():
                    return kind
        raise ValueError(
            f"Invalid value '{value}' for {cls.__name__}. "
            f"Allowed values are: {[e.value for e in cls]}"
        )
