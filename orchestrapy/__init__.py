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

import importlib.metadata


def get_version() -> str:
    try:
        return importlib.metadata.version(__package__)
    # if the package is not installed, the version cannot be determined
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


__version__: str = get_version()


import orchestrapy.constants  # noqa: E402
import orchestrapy.exceptions  # noqa: E402
import orchestrapy.iterators  # noqa: F401, E402
import orchestrapy.queries  # noqa: F401, E402
from orchestrapy.api_options import APIOptions  # noqa: E402
from orchestrapy.client import OrchestrateClient  # noqa: E402
from orchestrapy.collection import AsyncCollection, Collection  # noqa: E402
from orchestrapy.constants import IteratorKind  # noqa: E402
from orchestrapy.iterators import (  # noqa: E402
    AsyncResultIterator,
    IteratorState,
    ResultIterator,
)
from orchestrapy.queries import (  # noqa: E402
    GetLinksQuery,
    HistoryQuery,
    ListEventsQuery,
    ListQuery,
    SearchQuery,
)

__all__ = [
    "APIOptions",
    "AsyncCollection",
    "AsyncResultIterator",
    "Collection",
    "GetLinksQuery",
    "HistoryQuery",
    "IteratorKind",
    "IteratorState",
    "ListEventsQuery",
    "ListQuery",
    "OrchestrateClient",
    "ResultIterator",
    "SearchQuery",
    "__version__",
]


__pdoc__ = {
    "api_commander": False,
    "data": False,
    "settings": False,
    "utils": False,
}
