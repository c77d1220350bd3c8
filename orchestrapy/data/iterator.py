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
from abc import ABC
from enum import Enum
from typing import Any, Callable, Protocol, cast

import deprecation

from orchestrapy import __version__
from orchestrapy.constants import IteratorKind
from orchestrapy.data.page import RawEntry, ResultPage
from orchestrapy.data.results import (
    ACCEPTED_KINDS,
    CollectionResolver,
    Event,
    HistoryEntry,
    Item,
    SearchHit,
    TypedResult,
    project_entry,
)
from orchestrapy.exceptions import (
    IteratorStateException,
    OrchestrateException,
    WrongIteratorKindException,
)
from orchestrapy.settings.defaults import WITH_ERROR_DEPRECATION_NOTICE

logger = logging.getLogger(__name__)


class PageFetcherProtocol(Protocol):
    def fetch_page(self, path: str) -> ResultPage: ...


class AsyncPageFetcherProtocol(Protocol):
    async def async_fetch_page(self, path: str) -> ResultPage: ...


class IteratorState(Enum):
    """
    This enum expresses the possible states for a result iterator.

    Values:
        FRESH: no page has been fetched yet.
        LOADED: a page is buffered, and further results may follow.
        EXHAUSTED: all results have been returned. No more API calls will be made.
        FAILED: a page fetch has failed. The iterator is frozen and keeps the error.
    """

    FRESH = "fresh"
    LOADED = "loaded"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class _BaseResultIterator(ABC):
    """
    The state shared by the sync and async result iterators: the buffered
    page, the position of the current result within it, the continuation
    path for the next fetch, the total count and the terminal error, if any.

    This class only deals with the bookkeeping. The concrete subclasses
    perform the actual page fetches (in their respective sync/async fashion)
    and feed the outcome back through `_ingest_page` and `_ingest_error`.
    """

    kind: IteratorKind
    _initial_path: str
    _resolver: CollectionResolver | None
    _state: IteratorState
    _buffer: list[RawEntry]
    _index: int
    _next_path: str | None
    _total_count: int
    _error: OrchestrateException | None
    _pages_retrieved: int

    def __init__(
        self,
        *,
        kind: IteratorKind | str,
        path: str,
        resolver: CollectionResolver | None = None,
    ) -> None:
        self.kind = IteratorKind.coerce(kind)
        self._initial_path = path
        self._resolver = resolver
        self._state = IteratorState.FRESH
        self._buffer = []
        self._index = 0
        self._next_path = path
        self._total_count = 0
        self._error = None
        self._pages_retrieved = 0

    def __repr__(self) -> str:
        pieces = [
            f"kind={self.kind.value}",
            f"path='{self._initial_path}'",
            f"state={self._state.value}",
            f"pages_retrieved={self._pages_retrieved}",
        ]
        if self._error is not None:
            pieces.append(f"error={self._error.__class__.__name__}")
        return f"{self.__class__.__name__}({', '.join(pieces)})"

    @property
    def state(self) -> IteratorState:
        """
        The current state of this iterator.

        Returns:
            a value in `orchestrapy.iterators.IteratorState`.
        """

        return self._state

    @property
    def error(self) -> OrchestrateException | None:
        """
        The error that terminated the iteration, if any. None means the
        iteration either is still ongoing or has ended normally.
        """

        return self._error

    @property
    def done(self) -> bool:
        """Whether the iteration is over, be it normally or because of an error."""

        return self._state in {IteratorState.EXHAUSTED, IteratorState.FAILED}

    @property
    def total_count(self) -> int:
        """
        The total number of matches, as reported by the API.
        This is zero until the first page is fetched, and stays zero for
        the kinds of listing that do not report it. Once known, the total
        count is retained even if subsequent pages omit it.
        """

        return self._total_count

    @property
    def pages_retrieved(self) -> int:
        """The number of pages successfully fetched so far."""

        return self._pages_retrieved

    @property
    def initial_path(self) -> str:
        """The path (relative to the API root) of the first page."""

        return self._initial_path

    def _has_next_in_buffer(self) -> bool:
        return (
            self._state == IteratorState.LOADED
            and self._index < len(self._buffer) - 1
        )

    def _has_current(self) -> bool:
        return self._state == IteratorState.LOADED and 0 <= self._index < len(
            self._buffer
        )

    def _fetch_target(self) -> str | None:
        """
        The path to fetch next, or None if there is nothing left to fetch.
        A fresh iterator always has its initial path to fetch.
        """

        if self._state == IteratorState.FRESH:
            return self._initial_path
        return self._next_path or None

    def _mark_exhausted(self) -> None:
        logger.info(f"iterator exhausted after {self._pages_retrieved} page(s)")
        self._state = IteratorState.EXHAUSTED
        self._buffer = []
        self._index = 0

    def _ingest_page(self, page: ResultPage) -> bool:
        self._pages_retrieved += 1
        if page.total_count:
            self._total_count = page.total_count
        self._next_path = page.next_path
        if not page.entries:
            self._mark_exhausted()
            return False
        self._buffer = page.entries
        self._index = 0
        self._state = IteratorState.LOADED
        return True

    def _ingest_error(self, error: OrchestrateException) -> bool:
        logger.warning(f"iterator failed: {error.__class__.__name__}: {error}")
        self._state = IteratorState.FAILED
        self._error = error
        self._buffer = []
        self._index = 0
        return False

    def _ensure_kind(self, requested_kind: IteratorKind | str | None) -> None:
        if requested_kind is None:
            return
        _requested_kind = IteratorKind.coerce(requested_kind)
        if self.kind not in ACCEPTED_KINDS[_requested_kind]:
            raise WrongIteratorKindException(
                text=(
                    f"Cannot read a result of kind '{_requested_kind.value}' from "
                    f"an iterator of kind '{self.kind.value}'."
                ),
                iterator_kind=self.kind.value,
                requested_kind=_requested_kind.value,
            )

    def _ensure_not_failed(self) -> None:
        if self._error is not None:
            raise self._error

    def current(
        self,
        into: Callable[[Any], Any] | None = None,
        *,
        kind: IteratorKind | str | None = None,
    ) -> TypedResult:
        """
        Return the current result, projected into the typed result
        corresponding to the kind of this iterator.
        This method never triggers API calls.

        Args:
            into: an optional callable which the stored value is passed
                through: the returned result carries its return value instead.
                A failure in this conversion is raised as a
                `PayloadDecodeException` and leaves the iterator usable.
            kind: if provided, the kind of result the caller expects. If this
                does not match the kind of the iterator, a
                `WrongIteratorKindException` is raised.

        Returns:
            an `Item`, `SearchHit`, `HistoryEntry` or `Event`.

        Raises:
            the error that terminated the iteration, if the iterator failed.
            `IteratorStateException` if there is no current result.
        """

        self._ensure_kind(kind)
        self._ensure_not_failed()
        if not self._has_current():
            raise IteratorStateException(
                text="There is no current result to read.",
                iterator_state=self._state.value,
            )
        return project_entry(
            self._buffer[self._index],
            kind=self.kind,
            into=into,
            resolver=self._resolver,
        )

    def current_page(
        self,
        into: Callable[[Any], Any] | None = None,
        *,
        kind: IteratorKind | str | None = None,
    ) -> list[TypedResult]:
        """
        Return all results of the buffered page not returned yet, starting
        with the current one, and mark them as read: a subsequent `advance`
        will fetch a new page.
        This method never triggers API calls.

        Args:
            into: an optional conversion callable, as for `current`. If it
                fails on any of the results, nothing is marked as read.
            kind: an optional expected kind, as for `current`.

        Returns:
            a list of typed results, possibly empty.
        """

        self._ensure_kind(kind)
        self._ensure_not_failed()
        if not self._has_current():
            return []
        results = [
            project_entry(entry, kind=self.kind, into=into, resolver=self._resolver)
            for entry in self._buffer[self._index :]
        ]
        self._index = len(self._buffer)
        return results

    def current_item(self, into: Callable[[Any], Any] | None = None) -> Item:
        """
        The current result, for iterators over items (this includes search
        hits and history entries, which are items as well).
        See `current` for details.
        """

        return cast(Item, self.current(into, kind=IteratorKind.ITEM))

    def current_event(self, into: Callable[[Any], Any] | None = None) -> Event:
        """The current result, for iterators over events. See `current`."""

        return cast(Event, self.current(into, kind=IteratorKind.EVENT))

    def current_search_hit(
        self, into: Callable[[Any], Any] | None = None
    ) -> SearchHit:
        """The current result, for iterators over search hits. See `current`."""

        return cast(SearchHit, self.current(into, kind=IteratorKind.SEARCH))

    def current_history_entry(
        self, into: Callable[[Any], Any] | None = None
    ) -> HistoryEntry:
        """The current result, for iterators over a key history. See `current`."""

        return cast(HistoryEntry, self.current(into, kind=IteratorKind.HISTORY))


class ResultIterator(_BaseResultIterator):
    """
    An iterator over the results of a listing operation (listing the items
    in a collection, searching, browsing the history of a key, listing events
    or following graph relations).

    Result iterators are obtained from the corresponding methods of a
    `Collection` and are not meant to be instantiated directly.

    Results are fetched from the API one page at a time, as the iteration
    proceeds. The iterator can be driven explicitly:

        >>> items = my_collection.list(ListQuery(page_size=10))
        >>> while items.advance():
        ...     print(items.current_item().key)
        ...
        >>> items.error is None
        True

    or through the Python iteration protocol, in which case an error
    terminating the iteration is raised at the end:

        >>> for item in my_collection.list():
        ...     print(item.key)

    A result iterator is meant to be used by a single owner and is not
    safe for concurrent use.

    Args:
        fetcher: an object able to fetch a page of results given its path.
        kind: the kind of results this iterator produces.
        path: the path to the first page of results.
        resolver: an optional callable that maps a collection name to a
            collection object, for the back-reference in the results.
    """

    fetcher: PageFetcherProtocol

    def __init__(
        self,
        *,
        fetcher: PageFetcherProtocol,
        kind: IteratorKind | str,
        path: str,
        resolver: CollectionResolver | None = None,
    ) -> None:
        super().__init__(kind=kind, path=path, resolver=resolver)
        self.fetcher = fetcher

    def __iter__(self) -> ResultIterator:
        return self

    def __next__(self) -> TypedResult:
        if self.advance():
            return self.current()
        self._ensure_not_failed()
        raise StopIteration

    def _fetch(self) -> bool:
        target = self._fetch_target()
        if target is None:
            self._mark_exhausted()
            return False
        try:
            page = self.fetcher.fetch_page(target)
        except OrchestrateException as exc:
            return self._ingest_error(exc)
        return self._ingest_page(page)

    def advance(self) -> bool:
        """
        Move to the next result, fetching a new page from the API if needed.

        Returns:
            True if a current result is available (to be read with `current`
            or one of the kind-specific accessors). False if the iteration
            is over, in which case the `error` property tells a normal
            ending (None) apart from a failure.
            Once this method has returned False, it will keep doing so
            without issuing any further API calls.
        """

        if self.done:
            return False
        if self._has_next_in_buffer():
            self._index += 1
            return True
        return self._fetch()

    def advance_page(self) -> bool:
        """
        Fetch the next page of results, discarding any result of the buffered
        page not read yet. The first result of the new page becomes current:
        the whole page is conveniently read with `current_page`.

        Returns:
            a boolean, with the same meaning as for `advance`.
        """

        if self.done:
            return False
        return self._fetch()

    @deprecation.deprecated(  # type: ignore[misc]
        deprecated_in="0.4.0",
        removed_in="1.0.0",
        current_version=__version__,
        details=WITH_ERROR_DEPRECATION_NOTICE,
    )
    def advance_with_error(self) -> tuple[bool, OrchestrateException | None]:
        """
        Like `advance`, but additionally return the error terminating the
        iteration (None if none).
        """

        return (self.advance(), self._error)

    @deprecation.deprecated(  # type: ignore[misc]
        deprecated_in="0.4.0",
        removed_in="1.0.0",
        current_version=__version__,
        details=WITH_ERROR_DEPRECATION_NOTICE,
    )
    def advance_page_with_error(self) -> tuple[bool, OrchestrateException | None]:
        """
        Like `advance_page`, but additionally return the error terminating
        the iteration (None if none).
        """

        return (self.advance_page(), self._error)


class AsyncResultIterator(_BaseResultIterator):
    """
    An iterator over the results of a listing operation, for use with asyncio.

    This is the async counterpart of `ResultIterator`: the methods that
    may fetch pages from the API (`advance`, `advance_page`) are coroutines,
    while reading results is synchronous. The iteration protocol is
    supported through `async for`.

    Cancelling a task while it awaits a page fetch leaves the iterator
    in the state it had before the fetch started.

    Example:
        >>> items = my_async_collection.list(ListQuery(page_size=10))
        >>> async for item in items:
        ...     print(item.key)

    Args:
        fetcher: an object able to fetch a page of results asynchronously.
        kind: the kind of results this iterator produces.
        path: the path to the first page of results.
        resolver: an optional callable mapping collection names to
            collection objects.
    """

    fetcher: AsyncPageFetcherProtocol

    def __init__(
        self,
        *,
        fetcher: AsyncPageFetcherProtocol,
        kind: IteratorKind | str,
        path: str,
        resolver: CollectionResolver | None = None,
    ) -> None:
        super().__init__(kind=kind, path=path, resolver=resolver)
        self.fetcher = fetcher

    def __aiter__(self) -> AsyncResultIterator:
        return self

    async def __anext__(self) -> TypedResult:
        if await self.advance():
            return self.current()
        self._ensure_not_failed()
        raise StopAsyncIteration

    async def _fetch(self) -> bool:
        target = self._fetch_target()
        if target is None:
            self._mark_exhausted()
            return False
        try:
            page = await self.fetcher.async_fetch_page(target)
        except OrchestrateException as exc:
            return self._ingest_error(exc)
        return self._ingest_page(page)

    async def advance(self) -> bool:
        """
        Move to the next result, fetching a new page from the API if needed.
        See `ResultIterator.advance` for details.
        """

        if self.done:
            return False
        if self._has_next_in_buffer():
            self._index += 1
            return True
        return await self._fetch()

    async def advance_page(self) -> bool:
        """
        Fetch the next page of results, discarding any unread result of the
        buffered page. See `ResultIterator.advance_page` for details.
        """

        if self.done:
            return False
        return await self._fetch()

    @deprecation.deprecated(  # type: ignore[misc]
        deprecated_in="0.4.0",
        removed_in="1.0.0",
        current_version=__version__,
        details=WITH_ERROR_DEPRECATION_NOTICE,
    )
    async def advance_with_error(self) -> tuple[bool, OrchestrateException | None]:
        """
        Like `advance`, but additionally return the error terminating the
        iteration (None if none).
        """

        return (await self.advance(), self._error)

    @deprecation.deprecated(  # type: ignore[misc]
        deprecated_in="0.4.0",
        removed_in="1.0.0",
        current_version=__version__,
        details=WITH_ERROR_DEPRECATION_NOTICE,
    )
    async def advance_page_with_error(
        self,
    ) -> tuple[bool, OrchestrateException | None]:
        """
        Like `advance_page`, but additionally return the error terminating
        the iteration (None if none).
        """

        return (await self.advance_page(), self._error)
