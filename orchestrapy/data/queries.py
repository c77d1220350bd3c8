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
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from orchestrapy.constants import QueryParamsType
from orchestrapy.settings.defaults import MAX_PAGE_SIZE
from orchestrapy.utils.date_utils import _datetime_to_unix_timestamp_ms


def _encode_query(params: QueryParamsType) -> str:
    # parameters are sorted by name, for a stable, predictable path
    return urlencode(sorted(params.items()))


def _path_segment(segment: str) -> str:
    return quote(segment, safe="")


def _check_page_size(page_size: int | None, allow_negative: bool = False) -> None:
    if page_size is None:
        return
    if page_size > MAX_PAGE_SIZE:
        raise ValueError(
            f"The page size cannot exceed {MAX_PAGE_SIZE} (got {page_size})."
        )
    if page_size < 0 and not allow_negative:
        raise ValueError(f"The page size cannot be negative (got {page_size}).")


@dataclass
class ListQuery:
    """
    The parameters for listing the items in a collection, in key order.
    All parameters are optional: the server defaults to pages of 10 items.

    Attributes:
        page_size: the number of items in each page of results (max. 100).
        start_key: list from this key, included.
        after_key: list from this key, excluded.
        before_key: list up to this key, excluded.
        end_key: list up to this key, included.
    """

    page_size: int | None = None
    start_key: str | None = None
    after_key: str | None = None
    before_key: str | None = None
    end_key: str | None = None

    def __post_init__(self) -> None:
        _check_page_size(self.page_size)

    def to_query_params(self) -> QueryParamsType:
        params: QueryParamsType = {}
        if self.page_size:
            params["limit"] = str(self.page_size)
        if self.after_key:
            params["afterKey"] = self.after_key
        if self.before_key:
            params["beforeKey"] = self.before_key
        if self.end_key:
            params["endKey"] = self.end_key
        if self.start_key:
            params["startKey"] = self.start_key
        return params

    @staticmethod
    def build_path(collection_name: str, query: ListQuery | None = None) -> str:
        """The path to the first page of a listing of the collection."""

        base_path = _path_segment(collection_name)
        if query is None:
            return base_path
        return f"{base_path}?{_encode_query(query.to_query_params())}"


@dataclass
class SearchQuery:
    """
    The optional parameters for a search on a collection.

    Attributes:
        page_size: the number of hits in each page of results (max. 100).
            A negative page size asks for no hits at all: only the total
            count of matches is then reported by the iterator.
        offset: the number of hits to skip at the beginning.
        sort: the sort specification, e.g. "value.name:asc". If not given,
            hits are sorted by relevance score.
    """

    page_size: int | None = None
    offset: int | None = None
    sort: str | None = None

    def __post_init__(self) -> None:
        _check_page_size(self.page_size, allow_negative=True)

    def to_query_params(self) -> QueryParamsType:
        params: QueryParamsType = {}
        if self.page_size is not None:
            if self.page_size < 0:
                params["limit"] = "0"
            elif self.page_size > 0:
                params["limit"] = str(self.page_size)
        if self.offset:
            params["offset"] = str(self.offset)
        if self.sort:
            params["sort"] = self.sort
        return params

    @staticmethod
    def build_path(
        collection_name: str,
        query_string: str,
        query: SearchQuery | None = None,
    ) -> str:
        """The path to the first page of hits for a search query."""

        params: QueryParamsType = {"query": query_string}
        if query is not None:
            params.update(query.to_query_params())
        return f"{_path_segment(collection_name)}?{_encode_query(params)}"


@dataclass
class HistoryQuery:
    """
    The optional parameters for browsing the history (the past revisions)
    of a key, most recent first.

    Attributes:
        page_size: the number of revisions in each page of results (max. 100).
        offset: the number of revisions to skip at the beginning.
        values: whether to have the stored values returned along with the
            revisions. Without values the listing is faster, but the results
            carry None as value.
    """

    page_size: int | None = None
    offset: int | None = None
    values: bool = False

    def __post_init__(self) -> None:
        _check_page_size(self.page_size)

    def to_query_params(self) -> QueryParamsType:
        params: QueryParamsType = {}
        if self.offset:
            params["offset"] = str(self.offset)
        if self.page_size:
            params["limit"] = str(self.page_size)
        if self.values:
            params["values"] = "true"
        return params

    @staticmethod
    def build_path(
        collection_name: str,
        key: str,
        query: HistoryQuery | None = None,
    ) -> str:
        """The path to the first page of revisions for a key."""

        base_path = f"{_path_segment(collection_name)}/{_path_segment(key)}/refs?"
        if query is None:
            return base_path
        return f"{base_path}{_encode_query(query.to_query_params())}"


def _event_bound(timestamp: datetime.datetime | int, ordinal: int | None) -> str:
    timestamp_ms = _datetime_to_unix_timestamp_ms(timestamp)
    if ordinal:
        return f"{timestamp_ms}/{ordinal}"
    return str(timestamp_ms)


@dataclass
class ListEventsQuery:
    """
    The optional parameters for listing the events of a given type attached
    to a key. Events are listed newest first.

    Each bound is a timestamp, either as an aware datetime or as milliseconds
    since the epoch, optionally refined by an ordinal to tell apart events
    sharing the same timestamp.

    Attributes:
        page_size: the number of events in each page of results (max. 100).
        start: the oldest timestamp to include.
        start_ordinal: the ordinal refining `start`.
        end: the newest timestamp to include.
        end_ordinal: the ordinal refining `end`.
        after: only list events newer than this timestamp.
        after_ordinal: the ordinal refining `after`.
        before: only list events older than this timestamp.
        before_ordinal: the ordinal refining `before`.
    """

    page_size: int | None = None
    start: datetime.datetime | int | None = None
    start_ordinal: int | None = None
    end: datetime.datetime | int | None = None
    end_ordinal: int | None = None
    after: datetime.datetime | int | None = None
    after_ordinal: int | None = None
    before: datetime.datetime | int | None = None
    before_ordinal: int | None = None

    def __post_init__(self) -> None:
        _check_page_size(self.page_size)

    def to_query_params(self) -> QueryParamsType:
        params: QueryParamsType = {}
        if self.page_size:
            params["limit"] = str(self.page_size)
        if self.after is not None:
            params["afterEvent"] = _event_bound(self.after, self.after_ordinal)
        if self.before is not None:
            params["beforeEvent"] = _event_bound(self.before, self.before_ordinal)
        if self.end is not None:
            params["endEvent"] = _event_bound(self.end, self.end_ordinal)
        if self.start is not None:
            params["startEvent"] = _event_bound(self.start, self.start_ordinal)
        return params

    @staticmethod
    def build_path(
        collection_name: str,
        key: str,
        event_type: str,
        query: ListEventsQuery | None = None,
    ) -> str:
        """The path to the first page of events of a type for a key."""

        base_path = "/".join(
            [
                _path_segment(collection_name),
                _path_segment(key),
                "events",
                _path_segment(event_type),
            ]
        )
        if query is None:
            return base_path
        return f"{base_path}?{_encode_query(query.to_query_params())}"


@dataclass
class GetLinksQuery:
    """
    The optional parameters for following the graph relations of a key.

    Attributes:
        page_size: the number of related items in each page of results (max. 100).
    """

    page_size: int | None = None

    def __post_init__(self) -> None:
        _check_page_size(self.page_size)

    @staticmethod
    def build_path(
        collection_name: str,
        key: str,
        kinds: list[str],
        query: GetLinksQuery | None = None,
    ) -> str:
        """
        The path to the first page of items reached by walking the given
        relation kinds, in sequence, starting from the key.
        """

        if not kinds:
            raise ValueError("At least one relation kind is required.")
        base_path = "/".join(
            [
                _path_segment(collection_name),
                _path_segment(key),
                "relations",
                *(_path_segment(kind) for kind in kinds),
            ]
        )
        if query is not None and query.page_size:
            return f"{base_path}?{_encode_query({'limit': str(query.page_size)})}"
        return base_path
