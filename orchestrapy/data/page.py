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

import logging
from dataclasses import dataclass, field
from typing import Any

from orchestrapy.exceptions import DecodeException
from orchestrapy.settings.defaults import (
    API_VERSION_PATH,
    PAGE_FETCH_EXPECTED_STATUS,
)
from orchestrapy.utils.api_commander import APICommander
from orchestrapy.utils.request_tools import HttpMethod

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryPath:
    """
    The "path" descriptor of an entry in a page of results, locating the
    entry within the database.

    Attributes:
        collection: the name of the collection the entry belongs to.
        key: the key of the item the entry refers to.
        ref: the immutable revision identifier, if returned.
        ordinal: for events, the per-key sequence number.
        timestamp: for events, the event timestamp in milliseconds since epoch.
        tombstone: for history listings, whether the revision is a deletion marker.
        type: for events, the event type.
    """

    collection: str = ""
    key: str = ""
    ref: str | None = None
    ordinal: int = 0
    timestamp: int = 0
    tombstone: bool = False
    type: str | None = None

    @staticmethod
    def _from_dict(raw_path: dict[str, Any]) -> EntryPath:
        return EntryPath(
            collection=_as_str(raw_path.get("collection"), "path.collection") or "",
            key=_as_str(raw_path.get("key"), "path.key") or "",
            ref=_as_str(raw_path.get("ref"), "path.ref"),
            ordinal=_as_int(raw_path.get("ordinal"), "path.ordinal"),
            timestamp=_as_int(raw_path.get("timestamp"), "path.timestamp"),
            tombstone=bool(raw_path.get("tombstone") or False),
            type=_as_str(raw_path.get("type"), "path.type"),
        )


@dataclass(frozen=True)
class RawEntry:
    """
    One entry in a page of results, as returned by the API and before any
    projection into a typed result. Raw entries are never modified.

    Attributes:
        path: the path descriptor of the entry.
        value: the (JSON-decoded) value stored in the entry, None if absent.
        score: the search score, zero if not applicable.
        distance: the geo-distance for search hits, zero if not applicable.
        reftime: the revision time in milliseconds since epoch, zero if absent.
        timestamp: the event timestamp in milliseconds since epoch, zero if absent.
        ordinal: the event ordinal, zero if absent.
    """

    path: EntryPath
    value: Any = None
    score: float = 0.0
    distance: float = 0.0
    reftime: int = 0
    timestamp: int = 0
    ordinal: int = 0

    @staticmethod
    def _from_dict(raw_entry: dict[str, Any]) -> RawEntry:
        raw_path = raw_entry.get("path") or {}
        if not isinstance(raw_path, dict):
            raise DecodeException(
                text="Malformed result entry: 'path' is not an object.",
                raw_response=raw_entry,
            )
        return RawEntry(
            path=EntryPath._from_dict(raw_path),
            value=raw_entry.get("value"),
            score=_as_float(raw_entry.get("score"), "score"),
            distance=_as_float(raw_entry.get("distance"), "distance"),
            reftime=_as_int(raw_entry.get("reftime"), "reftime"),
            timestamp=_as_int(raw_entry.get("timestamp"), "timestamp"),
            ordinal=_as_int(raw_entry.get("ordinal"), "ordinal"),
        )


@dataclass
class ResultPage:
    """
    A whole pageful of results from a listing operation, i.e. the decoded
    envelope returned by the API for one request.

    Attributes:
        entries: the raw entries on this page, in server order.
        count: the number of entries the server declares for this page.
        total_count: the total number of matches, for the listing kinds
            that report it (zero otherwise).
        next_path: the continuation path for the following page, already made
            relative to the API root. None if there are no further pages.
        prev_path: the continuation path for the preceding page, if any.
    """

    entries: list[RawEntry] = field(default_factory=list)
    count: int = 0
    total_count: int = 0
    next_path: str | None = None
    prev_path: str | None = None

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"entries=<{len(self.entries)} entries>",
                f"total_count={self.total_count}" if self.total_count else None,
                f"next_path={self.next_path}" if self.next_path else None,
            )
            if pc is not None
        ]
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @staticmethod
    def from_response(
        raw_response: dict[str, Any],
        *,
        api_version_path: str = API_VERSION_PATH,
    ) -> ResultPage:
        """
        Decode a page envelope (a JSON object as returned by the API) into
        a ResultPage, raising DecodeException if its structure is unexpected.
        """

        raw_results = raw_response.get("results")
        if raw_results is None:
            raw_results = []
        if not isinstance(raw_results, list):
            raise DecodeException(
                text="Malformed page of results: 'results' is not a list.",
                raw_response=raw_response,
            )
        entries: list[RawEntry] = []
        for raw_entry in raw_results:
            if not isinstance(raw_entry, dict):
                raise DecodeException(
                    text="Malformed page of results: an entry is not an object.",
                    raw_response=raw_response,
                )
            entries.append(RawEntry._from_dict(raw_entry))
        return ResultPage(
            entries=entries,
            count=_as_int(raw_response.get("count"), "count"),
            total_count=_as_int(raw_response.get("total_count"), "total_count"),
            next_path=strip_api_version_path(
                _as_str(raw_response.get("next"), "next"),
                api_version_path=api_version_path,
            ),
            prev_path=strip_api_version_path(
                _as_str(raw_response.get("prev"), "prev"),
                api_version_path=api_version_path,
            ),
        )


def strip_api_version_path(
    continuation: str | None,
    *,
    api_version_path: str = API_VERSION_PATH,
) -> str | None:
    """
    Make a continuation path, as found in a page envelope, usable for a new
    request: the server returns it absolute from the root (e.g.
    "/v0/coll?limit=2&offset=2"), while requests are relative to the API
    version path (i.e. "coll?limit=2&offset=2").
    Empty continuations are normalized to None.
    """
    if not continuation:
        return None
    if continuation.startswith(api_version_path):
        continuation = continuation[len(api_version_path) :]
    return continuation or None


def _as_int(value: Any, field_name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeException(
            text=f"Malformed page of results: '{field_name}' is not a number.",
            raw_response=value,
        )
    return int(value)


def _as_float(value: Any, field_name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeException(
            text=f"Malformed page of results: '{field_name}' is not a number.",
            raw_response=value,
        )
    return float(value)


def _as_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeException(
            text=f"Malformed page of results: '{field_name}' is not a string.",
            raw_response=value,
        )
    return value


class PageFetcher:
    """
    Fetches pages of results: each call issues one GET against a continuation
    path, requires a 200 response and decodes the page envelope.

    Page fetches are idempotent and stateless on the server side, so a page
    fetcher can be shared by any number of iterators.

    Args:
        api_commander: the APICommander issuing the requests. Continuation paths
            are interpreted relative to its base path.
        api_version_path: the prefix to strip from server-provided continuations.
    """

    def __init__(
        self,
        *,
        api_commander: APICommander,
        api_version_path: str = API_VERSION_PATH,
    ) -> None:
        self.api_commander = api_commander
        self.api_version_path = api_version_path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.api_commander})"

    def fetch_page(self, path: str) -> ResultPage:
        logger.info(
            f"iterator fetching a page: '{path}' from {self.api_commander.full_path}"
        )
        raw_response = self.api_commander.request(
            http_method=HttpMethod.GET,
            additional_path=path,
            expected_status=PAGE_FETCH_EXPECTED_STATUS,
        )
        page = ResultPage.from_response(
            raw_response, api_version_path=self.api_version_path
        )
        logger.info(f"finished fetching a page: '{path}' ({len(page.entries)} entries)")
        return page

    async def async_fetch_page(self, path: str) -> ResultPage:
        logger.info(
            f"iterator fetching a page: '{path}' "
            f"from {self.api_commander.full_path}, async"
        )
        raw_response = await self.api_commander.async_request(
            http_method=HttpMethod.GET,
            additional_path=path,
            expected_status=PAGE_FETCH_EXPECTED_STATUS,
        )
        page = ResultPage.from_response(
            raw_response, api_version_path=self.api_version_path
        )
        logger.info(
            f"finished fetching a page: '{path}' ({len(page.entries)} entries), async"
        )
        return page
