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

import pytest

from orchestrapy.constants import IteratorKind
from orchestrapy.data.results import project_entry
from orchestrapy.exceptions import PayloadDecodeException
from orchestrapy.iterators import (
    EntryPath,
    Event,
    HistoryEntry,
    Item,
    RawEntry,
    SearchHit,
)

UTC = datetime.timezone.utc

RAW_ENTRY = RawEntry(
    path=EntryPath(
        collection="users",
        key="alice",
        ref="0123abcd",
        ordinal=7,
        timestamp=1400000000123,
        tombstone=True,
        type="login",
    ),
    value={"name": "Alice"},
    score=1.5,
    distance=0.25,
    reftime=1400000000999,
    timestamp=1400000000123,
    ordinal=7,
)


class TestProjection:
    @pytest.mark.describe("test of projecting raw entries into items")
    def test_project_item(self) -> None:
        item = project_entry(RAW_ENTRY, kind=IteratorKind.ITEM)
        assert isinstance(item, Item)
        assert not isinstance(item, SearchHit)
        assert item.collection_name == "users"
        assert item.key == "alice"
        assert item.ref == "0123abcd"
        assert item.value == {"name": "Alice"}
        assert item.updated == datetime.datetime(
            2014, 5, 13, 16, 53, 20, 999000, tzinfo=UTC
        )
        assert item.collection is None

    @pytest.mark.describe("test of projecting raw entries into search hits")
    def test_project_search_hit(self) -> None:
        hit = project_entry(RAW_ENTRY, kind=IteratorKind.SEARCH)
        assert isinstance(hit, SearchHit)
        assert hit.score == 1.5
        assert hit.distance == 0.25
        assert hit.key == "alice"

    @pytest.mark.describe("test of projecting raw entries into history entries")
    def test_project_history_entry(self) -> None:
        entry = project_entry(RAW_ENTRY, kind=IteratorKind.HISTORY)
        assert isinstance(entry, HistoryEntry)
        assert entry.tombstone is True
        assert entry.ref == "0123abcd"

    @pytest.mark.describe("test of projecting raw entries into events")
    def test_project_event(self) -> None:
        event = project_entry(RAW_ENTRY, kind=IteratorKind.EVENT)
        assert isinstance(event, Event)
        assert event.type == "login"
        assert event.ordinal == 7
        assert event.timestamp == datetime.datetime(
            2014, 5, 13, 16, 53, 20, 123000, tzinfo=UTC
        )

    @pytest.mark.describe("test of projection defaults for omitted fields")
    def test_project_defaults(self) -> None:
        bare = RawEntry(path=EntryPath(collection="c", key="k"))
        hit = project_entry(bare, kind=IteratorKind.SEARCH)
        assert isinstance(hit, SearchHit)
        assert hit.score == 0.0
        assert hit.distance == 0.0
        assert hit.value is None
        assert hit.updated == datetime.datetime(1970, 1, 1, tzinfo=UTC)
        history = project_entry(bare, kind=IteratorKind.HISTORY)
        assert isinstance(history, HistoryEntry)
        assert history.tombstone is False

    @pytest.mark.describe("test of projection with payload conversion")
    def test_project_into(self) -> None:
        item = project_entry(
            RAW_ENTRY, kind=IteratorKind.ITEM, into=lambda v: v["name"]
        )
        assert item.value == "Alice"
        # the raw entry is never modified
        assert RAW_ENTRY.value == {"name": "Alice"}

        with pytest.raises(PayloadDecodeException) as exc_info:
            project_entry(RAW_ENTRY, kind=IteratorKind.ITEM, into=int)
        assert exc_info.value.raw_response == {"name": "Alice"}
        assert isinstance(exc_info.value.__cause__, TypeError)

    @pytest.mark.describe("test of projection back-reference to the collection")
    def test_project_resolver(self) -> None:
        resolved: list[str] = []

        def _resolver(name: str) -> str:
            resolved.append(name)
            return f"<{name}>"

        item = project_entry(RAW_ENTRY, kind=IteratorKind.ITEM, resolver=_resolver)
        assert item.collection == "<users>"
        assert resolved == ["users"]
        # the back-reference plays no role in comparisons
        assert item == project_entry(RAW_ENTRY, kind=IteratorKind.ITEM)
