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
from typing import Any

from orchestrapy.authentication import TokenProvider
from orchestrapy.constants import IteratorKind
from orchestrapy.data.iterator import AsyncResultIterator, ResultIterator
from orchestrapy.data.page import PageFetcher
from orchestrapy.data.queries import (
    GetLinksQuery,
    HistoryQuery,
    ListEventsQuery,
    ListQuery,
    SearchQuery,
)
from orchestrapy.settings.defaults import DEFAULT_AUTH_HEADER
from orchestrapy.utils.api_commander import APICommander
from orchestrapy.utils.api_options import APIOptions, FullAPIOptions
from orchestrapy.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)


def _get_api_commander(api_options: FullAPIOptions) -> APICommander:
    """
    Instantiate an APICommander rooted at the API version path, so that
    server-provided continuation paths can be requested as they are.
    """

    commander_headers: dict[str, str | None] = {
        **{DEFAULT_AUTH_HEADER: api_options.token.get_auth_header()},
        **api_options.additional_headers,
    }
    return APICommander(
        api_endpoint=api_options.api_url_options.api_endpoint,
        path=api_options.api_url_options.api_version_path,
        headers=commander_headers,
        callers=api_options.callers,
        redacted_header_names=api_options.redacted_header_names,
        request_timeout_ms=api_options.timeout_options.request_timeout_ms,
    )


class Collection:
    """
    An Orchestrate collection, the object to browse the data stored in the
    collection: listing its items, searching it, reading the history of a key,
    listing the events attached to a key and following graph relations.
    This class has a synchronous interface.

    All these operations return a `ResultIterator`. Creating the iterator
    issues no API call: pages of results are fetched only as the iterator
    is advanced.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking the `get_collection` method of OrchestrateClient,
    wherefrom the Collection inherits its API options such as the token.

    Args:
        name: the collection name.
        api_options: a complete specification of the API Options for this instance.
        api_commander: an optional APICommander to share with another collection
            object, instead of creating a new one from the API options.

    Example:
        >>> from orchestrapy import OrchestrateClient
        >>> client = OrchestrateClient("01234567-89ab-cdef-0123-456789abcdef")
        >>> users = client.get_collection("users")
        >>> for item in users.list(ListQuery(page_size=50)):
        ...     print(item.key, item.value)

    Note:
        creating an instance of Collection does not check the existence
        of the collection on the service.
    """

    def __init__(
        self,
        *,
        name: str,
        api_options: FullAPIOptions,
        api_commander: APICommander | None = None,
    ) -> None:
        self.api_options = api_options
        self._name = name
        self._api_commander = api_commander or _get_api_commander(self.api_options)
        self._page_fetcher = PageFetcher(
            api_commander=self._api_commander,
            api_version_path=self.api_options.api_url_options.api_version_path,
        )

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(name="{self.name}", '
            f"api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Collection):
            return all(
                [
                    self._name == other._name,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    def __call__(self, *pargs: Any, **kwargs: Any) -> None:
        raise TypeError(
            f"'{self.__class__.__name__}' object is not callable. If you "
            f"meant to call the '{self.name}' method on an "
            "'OrchestrateClient' object it is failing because no such "
            "method exists."
        )

    @property
    def name(self) -> str:
        """The name of this collection."""

        return self._name

    def _copy(
        self,
        *,
        name: str | UnsetType = _UNSET,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Collection(
            name=self.name if isinstance(name, UnsetType) else name,
            api_options=final_api_options,
        )

    def with_options(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection:
        """
        Create a clone of this collection with some changed attributes.

        Args:
            token: an API key, either as a string or a TokenProvider, to use
                in place of the current one.
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).
                In case the same setting is also provided as named parameter,
                the latter takes precedence.

        Returns:
            a new Collection instance.

        Example:
            >>> patient_users = users.with_options(
            ...     api_options=APIOptions(
            ...         timeout_options=TimeoutOptions(request_timeout_ms=20000),
            ...     ),
            ... )
        """

        return self._copy(token=token, api_options=api_options)

    def to_async(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection:
        """
        Create an AsyncCollection from this one. Save for the arguments
        explicitly provided as overrides, everything else is kept identical
        to this collection in the copy.

        Args:
            token: an API key to use in place of the current one.
            api_options: any additional options to set for the result, in the form
                of an APIOptions instance.

        Returns:
            the new copy, an AsyncCollection instance.
        """

        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncCollection(name=self.name, api_options=final_api_options)

    def _sibling(self, name: str) -> Collection:
        # the commander is not bound to a collection name, hence can be shared
        return Collection(
            name=name,
            api_options=self.api_options,
            api_commander=self._api_commander,
        )

    def _collection_resolver(self) -> Any:
        # one Collection per distinct name for the lifetime of an iterator
        resolved: dict[str, Collection] = {self.name: self}

        def _resolve(collection_name: str) -> Collection:
            if collection_name not in resolved:
                resolved[collection_name] = self._sibling(collection_name)
            return resolved[collection_name]

        return _resolve

    def _iterator(self, *, kind: IteratorKind, path: str) -> ResultIterator:
        logger.info(f"creating {kind.value} iterator on '{self.name}': '{path}'")
        return ResultIterator(
            fetcher=self._page_fetcher,
            kind=kind,
            path=path,
            resolver=self._collection_resolver(),
        )

    def list(self, query: ListQuery | None = None) -> ResultIterator:
        """
        List the items in this collection, in key order.

        Args:
            query: an optional ListQuery specifying the page size and the
                key range to list.

        Returns:
            a ResultIterator over `Item` results.

        Example:
            >>> items = users.list(ListQuery(start_key="m", page_size=20))
            >>> while items.advance():
            ...     print(items.current_item().key)
            ...
            >>> items.error is None
            True
        """

        return self._iterator(
            kind=IteratorKind.ITEM,
            path=ListQuery.build_path(self.name, query),
        )

    def search(
        self,
        query: str,
        options: SearchQuery | None = None,
    ) -> ResultIterator:
        """
        Run a full-text search query on this collection.

        Args:
            query: the query, in Lucene syntax, e.g. "value.name:Mario".
            options: an optional SearchQuery specifying page size,
                offset and sort.

        Returns:
            a ResultIterator over `SearchHit` results. After the first
            page is fetched, its `total_count` reports the number of matches.

        Example:
            >>> hits = users.search("value.city:Rome", SearchQuery(page_size=-1))
            >>> hits.advance()
            False
            >>> hits.total_count
            123
        """

        return self._iterator(
            kind=IteratorKind.SEARCH,
            path=SearchQuery.build_path(self.name, query, options),
        )

    def history(
        self,
        key: str,
        query: HistoryQuery | None = None,
    ) -> ResultIterator:
        """
        Browse the revisions of a key, most recent first.

        Args:
            key: the key whose history is required.
            query: an optional HistoryQuery. Note that values are returned
                only if requested in the query.

        Returns:
            a ResultIterator over `HistoryEntry` results.
        """

        return self._iterator(
            kind=IteratorKind.HISTORY,
            path=HistoryQuery.build_path(self.name, key, query),
        )

    def list_events(
        self,
        key: str,
        event_type: str,
        query: ListEventsQuery | None = None,
    ) -> ResultIterator:
        """
        List the events of a given type attached to a key, most recent first.

        Args:
            key: the key the events are attached to.
            event_type: the type of the events to list.
            query: an optional ListEventsQuery specifying page size and
                time bounds.

        Returns:
            a ResultIterator over `Event` results.
        """

        return self._iterator(
            kind=IteratorKind.EVENT,
            path=ListEventsQuery.build_path(self.name, key, event_type, query),
        )

    def get_links(
        self,
        key: str,
        kind: str,
        *kinds: str,
        query: GetLinksQuery | None = None,
    ) -> ResultIterator:
        """
        Walk the graph relations starting from a key: the first relation kind
        is required, further kinds traverse the graph deeper.

        Args:
            key: the key to start from.
            kind: the first relation kind to follow.
            kinds: additional relation kinds, followed in sequence.
            query: an optional GetLinksQuery specifying the page size.

        Returns:
            a ResultIterator over the `Item` results reached. These may
            belong to other collections.

        Example:
            >>> friends_of_friends = users.get_links("alice", "friend", "friend")
        """

        return self._iterator(
            kind=IteratorKind.ITEM,
            path=GetLinksQuery.build_path(self.name, key, [kind, *kinds], query),
        )


class AsyncCollection:
    """
    An Orchestrate collection, for browsing its data with an asynchronous
    interface. Listing methods are regular (non-async) methods returning an
    `AsyncResultIterator`, whose page fetches are awaited as it is advanced.

    This class is not meant for direct instantiation by the user, rather
    it is obtained by invoking the `get_async_collection` method of
    OrchestrateClient, or the `to_async` method of a Collection.

    Args:
        name: the collection name.
        api_options: a complete specification of the API Options for this instance.
        api_commander: an optional APICommander to share with another collection
            object, instead of creating a new one from the API options.

    Example:
        >>> async_users = client.get_async_collection("users")
        >>> async for item in async_users.list():
        ...     print(item.key)
    """

    def __init__(
        self,
        *,
        name: str,
        api_options: FullAPIOptions,
        api_commander: APICommander | None = None,
    ) -> None:
        self.api_options = api_options
        self._name = name
        self._api_commander = api_commander or _get_api_commander(self.api_options)
        self._page_fetcher = PageFetcher(
            api_commander=self._api_commander,
            api_version_path=self.api_options.api_url_options.api_version_path,
        )

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(name="{self.name}", '
            f"api_options={self.api_options})"
        )

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, AsyncCollection):
            return all(
                [
                    self._name == other._name,
                    self.api_options == other.api_options,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> AsyncCollection:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self._api_commander.__aexit__(*exc_info)

    @property
    def name(self) -> str:
        """The name of this collection."""

        return self._name

    def _copy(
        self,
        *,
        name: str | UnsetType = _UNSET,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncCollection(
            name=self.name if isinstance(name, UnsetType) else name,
            api_options=final_api_options,
        )

    def with_options(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection:
        """
        Create a clone of this collection with some changed attributes.
        See `Collection.with_options` for the arguments.

        Returns:
            a new AsyncCollection instance.
        """

        return self._copy(token=token, api_options=api_options)

    def to_sync(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection:
        """
        Create a Collection from this one, with the same settings save for
        the overrides explicitly provided.

        Returns:
            the new copy, a Collection instance.
        """

        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Collection(name=self.name, api_options=final_api_options)

    def _sibling(self, name: str) -> AsyncCollection:
        return AsyncCollection(
            name=name,
            api_options=self.api_options,
            api_commander=self._api_commander,
        )

    def _collection_resolver(self) -> Any:
        resolved: dict[str, AsyncCollection] = {self.name: self}

        def _resolve(collection_name: str) -> AsyncCollection:
            if collection_name not in resolved:
                resolved[collection_name] = self._sibling(collection_name)
            return resolved[collection_name]

        return _resolve

    def _iterator(self, *, kind: IteratorKind, path: str) -> AsyncResultIterator:
        logger.info(f"creating {kind.value} async iterator on '{self.name}': '{path}'")
        return AsyncResultIterator(
            fetcher=self._page_fetcher,
            kind=kind,
            path=path,
            resolver=self._collection_resolver(),
        )

    def list(self, query: ListQuery | None = None) -> AsyncResultIterator:
        """
        List the items in this collection, in key order.
        See `Collection.list` for details.
        """

        return self._iterator(
            kind=IteratorKind.ITEM,
            path=ListQuery.build_path(self.name, query),
        )

    def search(
        self,
        query: str,
        options: SearchQuery | None = None,
    ) -> AsyncResultIterator:
        """
        Run a full-text search query on this collection.
        See `Collection.search` for details.
        """

        return self._iterator(
            kind=IteratorKind.SEARCH,
            path=SearchQuery.build_path(self.name, query, options),
        )

    def history(
        self,
        key: str,
        query: HistoryQuery | None = None,
    ) -> AsyncResultIterator:
        """Browse the revisions of a key. See `Collection.history` for details."""

        return self._iterator(
            kind=IteratorKind.HISTORY,
            path=HistoryQuery.build_path(self.name, key, query),
        )

    def list_events(
        self,
        key: str,
        event_type: str,
        query: ListEventsQuery | None = None,
    ) -> AsyncResultIterator:
        """List the events attached to a key. See `Collection.list_events`."""

        return self._iterator(
            kind=IteratorKind.EVENT,
            path=ListEventsQuery.build_path(self.name, key, event_type, query),
        )

    def get_links(
        self,
        key: str,
        kind: str,
        *kinds: str,
        query: GetLinksQuery | None = None,
    ) -> AsyncResultIterator:
        """Walk the graph relations from a key. See `Collection.get_links`."""

        return self._iterator(
            kind=IteratorKind.ITEM,
            path=GetLinksQuery.build_path(self.name, key, [kind, *kinds], query),
        )
