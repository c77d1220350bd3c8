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
from typing import Any, Sequence

from orchestrapy.authentication import TokenProvider
from orchestrapy.collection import AsyncCollection, Collection, _get_api_commander
from orchestrapy.constants import CallerType
from orchestrapy.settings.defaults import PING_EXPECTED_STATUS
from orchestrapy.utils.api_options import (
    APIOptions,
    APIURLOptions,
    defaultAPIOptions,
)
from orchestrapy.utils.request_tools import HttpMethod
from orchestrapy.utils.unset import _UNSET, UnsetType

logger = logging.getLogger(__name__)


class OrchestrateClient:
    """
    A client for the Orchestrate API. This is the entry point, from which
    collections (Collection and AsyncCollection) are obtained.

    Args:
        token: the API key of the Orchestrate application, either as a string
            or a `orchestrapy.authentication.TokenProvider`. It is sent with
            every request using HTTP Basic authentication.
        api_host: the host serving the API, to target an Orchestrate
            data center other than the default one.
        callers: a list of caller identities, i.e. applications, or frameworks,
            on behalf of which API calls are performed.
            These end up in the request user-agent.
            Each caller identity is a ("caller_name", "caller_version") pair.
        api_options: a specification - complete or partial - of the API Options
            to override the system defaults. This allows for a deeper configuration
            than what the named parameters (token, api_host, callers) offer.
            If this is passed alongside these named parameters, those will take
            precedence.

    Example:
        >>> from orchestrapy import OrchestrateClient
        >>> my_client = OrchestrateClient("01234567-89ab-cdef-0123-456789abcdef")
        >>> my_client.ping()
        >>> users = my_client.get_collection("users")
    """

    def __init__(
        self,
        token: str | TokenProvider | UnsetType = _UNSET,
        *,
        api_host: str | UnsetType = _UNSET,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> None:
        arg_api_options = APIOptions(
            callers=callers,
            token=token,
            api_url_options=APIURLOptions(api_host=api_host),
        )
        self.api_options = defaultAPIOptions().with_override(api_options).with_override(
            arg_api_options
        )
        self._api_commander = _get_api_commander(self.api_options)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.api_options})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, OrchestrateClient):
            return all(
                [
                    self.api_options.token == other.api_options.token,
                    self.api_options.api_url_options
                    == other.api_options.api_url_options,
                    self.api_options.callers == other.api_options.callers,
                ]
            )
        else:
            return False

    def __getitem__(self, collection_name: str) -> Collection:
        return self.get_collection(collection_name)

    def _copy(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> OrchestrateClient:
        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return OrchestrateClient(api_options=final_api_options)

    def with_options(
        self,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> OrchestrateClient:
        """
        Create a clone of this OrchestrateClient with some changed attributes.

        Args:
            token: an API key, either as a string or a TokenProvider.
            api_options: any additional options to set for the clone, in the form of
                an APIOptions instance (where one can set just the needed attributes).
                In case the same setting is also provided as named parameter,
                the latter takes precedence.

        Returns:
            a new OrchestrateClient instance.

        Example:
            >>> other_app_client = my_client.with_options(
            ...     token="fedcba98-7654-3210-fedc-ba9876543210",
            ... )
        """

        return self._copy(token=token, api_options=api_options)

    def get_collection(
        self,
        name: str,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> Collection:
        """
        Get a Collection object for a collection. No API call is made:
        the collection is not checked for existence.

        Args:
            name: the name of the collection.
            token: if supplied, is passed to the Collection instead of
                the client token.
            api_options: any additional options to set for the Collection, in the
                form of an APIOptions instance.

        Returns:
            a Collection instance.

        Example:
            >>> users = my_client.get_collection("users")
            >>> users_too = my_client["users"]
        """

        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return Collection(name=name, api_options=final_api_options)

    def collection(self, name: str) -> Collection:
        """A shorthand for `get_collection`, with no option overrides."""

        return self.get_collection(name)

    def get_async_collection(
        self,
        name: str,
        *,
        token: str | TokenProvider | UnsetType = _UNSET,
        api_options: APIOptions | UnsetType = _UNSET,
    ) -> AsyncCollection:
        """
        Get an AsyncCollection object for a collection. No API call is made.
        See `get_collection` for the arguments.

        Returns:
            an AsyncCollection instance.
        """

        arg_api_options = APIOptions(token=token)
        final_api_options = self.api_options.with_override(api_options).with_override(
            arg_api_options
        )
        return AsyncCollection(name=name, api_options=final_api_options)

    def ping(self) -> None:
        """
        Check that the service is reachable and that the token is accepted.
        Returns silently on success.

        Raises:
            an `OrchestrateHttpException` if the service responds with a status
            other than 200 (e.g. for an invalid token), or a
            `TransportException` if it cannot be reached.
        """

        logger.info("pinging the API")
        self._api_commander.raw_request(
            http_method=HttpMethod.HEAD,
            expected_status=PING_EXPECTED_STATUS,
        )
        logger.info("finished pinging the API")

    async def async_ping(self) -> None:
        """
        Check that the service is reachable and that the token is accepted.
        This is the async counterpart of `ping`.
        """

        logger.info("pinging the API, async")
        await self._api_commander.async_raw_request(
            http_method=HttpMethod.HEAD,
            expected_status=PING_EXPECTED_STATUS,
        )
        logger.info("finished pinging the API, async")
