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
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from typing_extensions import override

from orchestrapy.constants import IteratorKind
from orchestrapy.data.page import RawEntry
from orchestrapy.exceptions import PayloadDecodeException
from orchestrapy.utils.date_utils import _unix_timestamp_ms_to_datetime


@dataclass
class Item:
    """
    A key/value item, as found when listing a collection, following graph
    relations, searching or browsing the history of a key.

    Attributes:
        collection_name: the name of the collection holding the item.
        key: the key of the item.
        ref: the identifier of this specific revision of the item.
        updated: the time at which this revision was written, as an aware
            datetime (UTC).
        value: the value stored in the item, possibly converted through the
            `into` callable passed when reading it. None if the server omitted it.
        collection: the collection object the item belongs to, when the
            iterator producing the item knows how to build one.
    """

    collection_name: str
    key: str
    ref: str | None
    updated: datetime.datetime
    value: Any
    collection: Any = field(default=None, repr=False, compare=False)


@dataclass
class SearchHit(Item):
    """
    An item returned by a search query, along with its relevance information.

    Attributes:
        score: the relevance score of the hit.
        distance: for geospatial queries, the distance of the hit from the
            query location. If non-zero, the score is zero.
    """

    score: float = 0.0
    distance: float = 0.0


@dataclass
class HistoryEntry(Item):
    """
    A past revision of an item, as returned when browsing the history of a key.

    Attributes:
        tombstone: whether this revision records the deletion of the item.
    """

    tombstone: bool = False


@dataclass
class Event:
    """
    An event attached to a key.

    Attributes:
        collection_name: the name of the collection holding the key.
        key: the key the event is attached to.
        type: the event type.
        timestamp: the event timestamp, as an aware datetime (UTC).
        ordinal: the ordinal distinguishing events sharing the same timestamp.
        ref: the identifier of this revision of the event.
        value: the event payload, possibly converted through the `into`
            callable passed when reading it.
        collection: the collection object the event belongs to, if available.
    """

    collection_name: str
    key: str
    type: str | None
    timestamp: datetime.datetime
    ordinal: int
    ref: str | None
    value: Any
    collection: Any = field(default=None, repr=False, compare=False)


TypedResult = Union[Item, SearchHit, HistoryEntry, Event]

# maps a collection name to a collection object (for the back-reference)
CollectionResolver = Callable[[str], Any]


def convert_payload(value: Any, into: Callable[[Any], Any] | None) -> Any:
    """
    Pass a result payload through a conversion callable, if one is given.
    Any failure in the conversion is reported as a PayloadDecodeException.
    """

    if into is None:
        return value
    try:
        return into(value)
    except Exception as exc:
        raise PayloadDecodeException(
            text=f"Could not convert the result value: {exc}",
            raw_response=value,
        ) from exc


class ResultProjector(ABC):
    """
    Turns raw page entries into typed results, according to the kind
    of the iterator the entries come from.
    """

    kind: IteratorKind

    @abstractmethod
    def project(
        self,
        entry: RawEntry,
        *,
        value: Any,
        resolver: CollectionResolver | None = None,
    ) -> TypedResult: ...

    @staticmethod
    def _resolve(entry: RawEntry, resolver: CollectionResolver | None) -> Any:
        if resolver is None or not entry.path.collection:
            return None
        return resolver(entry.path.collection)


class ItemProjector(ResultProjector):
    kind = IteratorKind.ITEM

    @override
    def project(
        self,
        entry: RawEntry,
        *,
        value: Any,
        resolver: CollectionResolver | None = None,
    ) -> Item:
        return Item(
            collection_name=entry.path.collection,
            key=entry.path.key,
            ref=entry.path.ref,
            updated=_unix_timestamp_ms_to_datetime(entry.reftime),
            value=value,
            collection=self._resolve(entry, resolver),
        )


class SearchHitProjector(ResultProjector):
    kind = IteratorKind.SEARCH

    @override
    def project(
        self,
        entry: RawEntry,
        *,
        value: Any,
        resolver: CollectionResolver | None = None,
    ) -> SearchHit:
        return SearchHit(
            collection_name=entry.path.collection,
            key=entry.path.key,
            ref=entry.path.ref,
            updated=_unix_timestamp_ms_to_datetime(entry.reftime),
            value=value,
            collection=self._resolve(entry, resolver),
            score=entry.score,
            distance=entry.distance,
        )


class HistoryEntryProjector(ResultProjector):
    kind = IteratorKind.HISTORY

    @override
    def project(
        self,
        entry: RawEntry,
        *,
        value: Any,
        resolver: CollectionResolver | None = None,
    ) -> HistoryEntry:
        return HistoryEntry(
            collection_name=entry.path.collection,
            key=entry.path.key,
            ref=entry.path.ref,
            updated=_unix_timestamp_ms_to_datetime(entry.reftime),
            value=value,
            collection=self._resolve(entry, resolver),
            tombstone=entry.path.tombstone,
        )


class EventProjector(ResultProjector):
    kind = IteratorKind.EVENT

    @override
    def project(
        self,
        entry: RawEntry,
        *,
        value: Any,
        resolver: CollectionResolver | None = None,
    ) -> Event:
        # the event timestamp is at top level, the ordinal within the path
        return Event(
            collection_name=entry.path.collection,
            key=entry.path.key,
            type=entry.path.type,
            timestamp=_unix_timestamp_ms_to_datetime(
                entry.timestamp or entry.path.timestamp
            ),
            ordinal=entry.path.ordinal or entry.ordinal,
            ref=entry.path.ref,
            value=value,
            collection=self._resolve(entry, resolver),
        )


PROJECTORS: dict[IteratorKind, ResultProjector] = {
    IteratorKind.ITEM: ItemProjector(),
    IteratorKind.SEARCH: SearchHitProjector(),
    IteratorKind.HISTORY: HistoryEntryProjector(),
    IteratorKind.EVENT: EventProjector(),
}

# the kinds an accessor accepts. Search hits and history entries are items too.
ACCEPTED_KINDS: dict[IteratorKind, frozenset[IteratorKind]] = {
    IteratorKind.ITEM: frozenset(
        {IteratorKind.ITEM, IteratorKind.SEARCH, IteratorKind.HISTORY}
    ),
    IteratorKind.SEARCH: frozenset({IteratorKind.SEARCH}),
    IteratorKind.HISTORY: frozenset({IteratorKind.HISTORY}),
    IteratorKind.EVENT: frozenset({IteratorKind.EVENT}),
}


def project_entry(
    entry: RawEntry,
    *,
    kind: IteratorKind,
    into: Callable[[Any], Any] | None = None,
    resolver: CollectionResolver | None = None,
) -> TypedResult:
    """
    Project a raw entry into the typed result matching the given kind,
    converting its payload with `into` if provided.
    """

    value = convert_payload(entry.value, into)
    return PROJECTORS[kind].project(entry, value=value, resolver=resolver)
