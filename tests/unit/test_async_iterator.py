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

import asyncio

import pytest

from orchestrapy.constants import IteratorKind
from orchestrapy.exceptions import NotFoundException, WrongIteratorKindException
from orchestrapy.iterators import AsyncResultIterator, IteratorState, ResultPage

from ..conftest import FakeFetcher, make_http_exception, make_page_dict


class SlowFetcher:
    """A fetcher whose single fetch hangs until cancelled."""

    def __init__(self) -> None:
        self.started = asyncio.Event()

    async def async_fetch_page(self, path: str) -> ResultPage:
        self.started.set()
        await asyncio.sleep(3600)
        return ResultPage()


class TestAsyncResultIterator:
    @pytest.mark.describe("test of async iterator over two entries then an empty page")
    async def test_async_iterator_two_entries_then_empty(self) -> None:
        fetcher = FakeFetcher(
            [
                make_page_dict(["a", "b"], next_path="/v0/c?limit=2&offset=2"),
                make_page_dict([]),
            ]
        )
        it = AsyncResultIterator(fetcher=fetcher, kind="item", path="c?limit=2")
        assert await it.advance()
        assert it.current_item().key == "a"
        assert await it.advance()
        assert it.current_item().key == "b"
        assert not await it.advance()
        assert not await it.advance()

        assert fetcher.fetched_paths == ["c?limit=2", "c?limit=2&offset=2"]
        assert it.state == IteratorState.EXHAUSTED
        assert it.error is None

    @pytest.mark.describe("test of async iterator failure on first fetch")
    async def test_async_iterator_not_found(self) -> None:
        fetcher = FakeFetcher([make_http_exception(404)])
        it = AsyncResultIterator(fetcher=fetcher, kind="item", path="c")
        assert not await it.advance()
        assert isinstance(it.error, NotFoundException)
        assert not await it.advance_page()
        assert fetcher.fetch_count == 1

    @pytest.mark.describe("test of async iterator iteration protocol")
    async def test_async_iterator_protocol(self) -> None:
        fetcher = FakeFetcher(
            [
                make_page_dict(["a", "b"], next_path="/v0/c/k/events/t?p=2"),
                make_page_dict(["c"]),
            ]
        )
        it = AsyncResultIterator(fetcher=fetcher, kind=IteratorKind.EVENT, path="c")
        keys = [event.key async for event in it]
        assert keys == ["a", "b", "c"]
        assert fetcher.fetched_paths == ["c", "c/k/events/t?p=2"]

        failing_fetcher = FakeFetcher([make_http_exception(404)])
        failing_it = AsyncResultIterator(fetcher=failing_fetcher, kind="item", path="c")
        with pytest.raises(NotFoundException):
            async for _ in failing_it:
                pass

    @pytest.mark.describe("test of async iterator page-wise reading")
    async def test_async_iterator_pages(self) -> None:
        fetcher = FakeFetcher(
            [
                make_page_dict(["a", "b"], next_path="/v0/c?p=2", total_count=3),
                make_page_dict(["c"]),
            ]
        )
        it = AsyncResultIterator(fetcher=fetcher, kind="search", path="c?query=x")
        pages = []
        while await it.advance_page():
            pages.append([hit.key for hit in it.current_page(kind="search")])
        assert pages == [["a", "b"], ["c"]]
        assert it.total_count == 3
        with pytest.raises(WrongIteratorKindException):
            it.current_event()

    @pytest.mark.describe("test of async iterator state upon fetch cancellation")
    async def test_async_iterator_cancellation(self) -> None:
        fetcher = SlowFetcher()
        it = AsyncResultIterator(fetcher=fetcher, kind="item", path="c")
        task = asyncio.create_task(it.advance())
        await fetcher.started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert it.state == IteratorState.FRESH
        assert it.pages_retrieved == 0
        assert it.error is None

    @pytest.mark.describe("test of deprecated async iterator advance methods")
    async def test_async_iterator_with_error_methods(self) -> None:
        fetcher = FakeFetcher([make_page_dict(["a"], next_path="/v0/c?p=2"), {}])
        it = AsyncResultIterator(fetcher=fetcher, kind="item", path="c")
        with pytest.warns(DeprecationWarning):
            assert await it.advance_with_error() == (True, None)
        with pytest.warns(DeprecationWarning):
            assert await it.advance_page_with_error() == (False, None)
