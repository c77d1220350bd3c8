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

from dataclasses import dataclass
from typing import Iterable, Sequence

from orchestrapy.authentication import (
    StaticTokenProvider,
    TokenProvider,
    coerce_possible_token_provider,
)
from orchestrapy.constants import CallerType
from orchestrapy.settings.defaults import (
    API_VERSION_PATH,
    DEFAULT_API_HOST,
    DEFAULT_API_SCHEME,
    DEFAULT_REQUEST_TIMEOUT_MS,
    FIXED_SECRET_PLACEHOLDER,
)
from orchestrapy.utils.unset import _UNSET, UnsetType


@dataclass
class TimeoutOptions:
    """
    The group of settings for the API Options concerning timeouts.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request.
            Each page fetched by a result iterator is a separate request and
            gets this timeout in full. Zero or None mean no timeout.
    """

    request_timeout_ms: int | None | UnsetType = _UNSET


@dataclass
class FullTimeoutOptions(TimeoutOptions):
    """
    The "full" version of `TimeoutOptions`, with the guarantee that all of its
    members have defined values.

    Attributes:
        request_timeout_ms: the timeout imposed on a single HTTP request.
    """

    request_timeout_ms: int | None

    def __init__(self, *, request_timeout_ms: int | None) -> None:
        TimeoutOptions.__init__(self, request_timeout_ms=request_timeout_ms)

    def with_override(self, other: TimeoutOptions) -> FullTimeoutOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        return FullTimeoutOptions(
            request_timeout_ms=(
                other.request_timeout_ms
                if not isinstance(other.request_timeout_ms, UnsetType)
                else self.request_timeout_ms
            ),
        )


@dataclass
class APIURLOptions:
    """
    The group of settings for the API Options that determines the URL used to
    reach the API. Only in very specific customized scenarios (e.g. a proxy or
    a local test server) should it be necessary to change these.

    Attributes:
        api_host: the host (optionally with port) serving the API.
        api_scheme: either "https" or "http".
        api_version_path: the fixed path prefix, including the API version,
            that every request path is relative to. The same prefix is
            stripped from the continuation paths returned by the server.
    """

    api_host: str | UnsetType = _UNSET
    api_scheme: str | UnsetType = _UNSET
    api_version_path: str | UnsetType = _UNSET


@dataclass
class FullAPIURLOptions(APIURLOptions):
    """
    The "full" version of `APIURLOptions`, with the guarantee that all of its
    members have defined values.

    Attributes:
        api_host: the host (optionally with port) serving the API.
        api_scheme: either "https" or "http".
        api_version_path: the fixed path prefix, including the API version.
    """

    api_host: str
    api_scheme: str
    api_version_path: str

    def __init__(
        self,
        *,
        api_host: str,
        api_scheme: str,
        api_version_path: str,
    ) -> None:
        APIURLOptions.__init__(
            self,
            api_host=api_host,
            api_scheme=api_scheme,
            api_version_path=api_version_path,
        )

    @property
    def api_endpoint(self) -> str:
        return f"{self.api_scheme}://{self.api_host}"

    def with_override(self, other: APIURLOptions) -> FullAPIURLOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        return FullAPIURLOptions(
            api_host=(
                other.api_host
                if not isinstance(other.api_host, UnsetType)
                else self.api_host
            ),
            api_scheme=(
                other.api_scheme
                if not isinstance(other.api_scheme, UnsetType)
                else self.api_scheme
            ),
            api_version_path=(
                other.api_version_path
                if not isinstance(other.api_version_path, UnsetType)
                else self.api_version_path
            ),
        )


@dataclass
class APIOptions:
    """
    This class represents all settings that can be configured for how the client
    interacts with the API. Each object in the hierarchy (OrchestrateClient,
    Collection, AsyncCollection) has a full set of these options that determine
    how it behaves when performing requests.

    In order to customize the behavior from its preset defaults, one should create
    an `APIOptions` object and pass it as the `api_options` argument to the
    OrchestrateClient constructor, or to any of the `.with_options` and
    `get_collection` methods. Settings left unspecified keep the values inherited
    from the object whose method is invoked.

    With the exception of the "additional headers" and the "redacted header names",
    which are merged with the inherited ones, an override provided for a setting
    (even if it is None) completely replaces the inherited value.

    Attributes:
        callers: an iterable of "caller identities" to be used in identifying the
            caller, through the User-Agent header, when issuing requests.
            Each caller identity is a `(name, version)` 2-item tuple whose
            elements can be strings or None.
        additional_headers: free-form dictionary of additional headers to
            employ when issuing requests. Passing a key with a value of None
            means that a certain header is suppressed when issuing the request.
        redacted_header_names: A set of (case-insensitive) strings denoting the
            headers that contain secrets, thus are to be masked when logging
            request details.
        token: an instance of TokenProvider to provide authentication to requests.
            Passing a string, or None, to this constructor parameter will get it
            automatically converted into the appropriate TokenProvider object.
        timeout_options: an instance of `TimeoutOptions` (see).
        api_url_options: an instance of `APIURLOptions` (see).

    Example:
        >>> from orchestrapy import OrchestrateClient
        >>> from orchestrapy.api_options import APIOptions, TimeoutOptions
        >>>
        >>> my_client = OrchestrateClient(
        ...     "01234567-...",
        ...     api_options=APIOptions(
        ...         timeout_options=TimeoutOptions(request_timeout_ms=10000),
        ...     ),
        ... )
        >>> slow_movies = my_client.get_collection(
        ...     "movies",
        ...     api_options=APIOptions(
        ...         timeout_options=TimeoutOptions(request_timeout_ms=60000),
        ...     ),
        ... )
    """

    callers: Sequence[CallerType] | UnsetType = _UNSET
    additional_headers: dict[str, str | None] | UnsetType = _UNSET
    redacted_header_names: set[str] | UnsetType = _UNSET
    token: TokenProvider | UnsetType = _UNSET

    timeout_options: TimeoutOptions | UnsetType = _UNSET
    api_url_options: APIURLOptions | UnsetType = _UNSET

    def __init__(
        self,
        *,
        callers: Sequence[CallerType] | UnsetType = _UNSET,
        additional_headers: dict[str, str | None] | UnsetType = _UNSET,
        redacted_header_names: Iterable[str] | UnsetType = _UNSET,
        token: str | TokenProvider | None | UnsetType = _UNSET,
        timeout_options: TimeoutOptions | UnsetType = _UNSET,
        api_url_options: APIURLOptions | UnsetType = _UNSET,
    ) -> None:
        self.callers = callers
        self.additional_headers = additional_headers
        self.redacted_header_names = (
            _UNSET
            if isinstance(redacted_header_names, UnsetType)
            else set(redacted_header_names)
        )
        self.token = coerce_possible_token_provider(token)
        self.timeout_options = timeout_options
        self.api_url_options = api_url_options

    def __repr__(self) -> str:
        _redacted_header_names = (
            set()
            if isinstance(self.redacted_header_names, UnsetType)
            else self.redacted_header_names
        )
        _additional_headers: dict[str, str | None] | UnsetType
        if not isinstance(self.additional_headers, UnsetType):
            _additional_headers = {
                k: v if k not in _redacted_header_names else FIXED_SECRET_PLACEHOLDER
                for k, v in self.additional_headers.items()
            }
        else:
            _additional_headers = _UNSET
        non_unset_pieces = [
            (k, v)
            for k, v in (
                ("callers", self.callers),
                ("additional_headers", _additional_headers),
                ("redacted_header_names", self.redacted_header_names),
                ("token", self.token),
                ("timeout_options", self.timeout_options),
                ("api_url_options", self.api_url_options),
            )
            if not isinstance(v, UnsetType)
        ]
        inner_desc = ", ".join(f"{k}={v}" for k, v in non_unset_pieces)
        return f"{self.__class__.__name__}({inner_desc})"


@dataclass
class FullAPIOptions(APIOptions):
    """
    The "full" version of `APIOptions`, with the guarantee that all of its
    members have defined values. This is what OrchestrateClient, Collection and
    AsyncCollection have as their `.api_options` attribute.

    Attributes:
        callers: see `APIOptions`.
        additional_headers: see `APIOptions`.
        redacted_header_names: see `APIOptions`.
        token: see `APIOptions`.
        timeout_options: a `FullTimeoutOptions`.
        api_url_options: a `FullAPIURLOptions`.
    """

    callers: Sequence[CallerType]
    additional_headers: dict[str, str | None]
    redacted_header_names: set[str]
    token: TokenProvider

    timeout_options: FullTimeoutOptions
    api_url_options: FullAPIURLOptions

    def __init__(
        self,
        *,
        callers: Sequence[CallerType],
        additional_headers: dict[str, str | None],
        redacted_header_names: set[str],
        token: str | TokenProvider | None,
        timeout_options: FullTimeoutOptions,
        api_url_options: FullAPIURLOptions,
    ) -> None:
        APIOptions.__init__(
            self,
            callers=callers,
            additional_headers=additional_headers,
            redacted_header_names=redacted_header_names,
            token=token,
            timeout_options=timeout_options,
            api_url_options=api_url_options,
        )

    def __repr__(self) -> str:
        non_unset_pieces = [
            pc
            for pc in (
                f"api_host={self.api_url_options.api_host}"
                if self.api_url_options.api_host != DEFAULT_API_HOST
                else None,
                f"token={self.token}" if self.token else None,
                "...",
            )
            if pc is not None
        ]
        inner_desc = ", ".join(non_unset_pieces)
        return f"{self.__class__.__name__}({inner_desc})"

    def with_override(self, other: APIOptions | None | UnsetType) -> FullAPIOptions:
        """
        Given an "overriding" set of options, possibly not defined in all its
        attributes, apply the override logic and return a new full options object.

        Defined attributes completely replace the pre-existing ones, except for
        `additional_headers` and `redacted_header_names`, which are merged.

        Args:
            other: a not-necessarily-fully-specified options object. All its defined
                settings take precedence.
        """

        if isinstance(other, UnsetType) or other is None:
            return self

        additional_headers: dict[str, str | None]
        redacted_header_names: set[str]
        timeout_options: FullTimeoutOptions
        api_url_options: FullAPIURLOptions

        if isinstance(other.additional_headers, UnsetType):
            additional_headers = self.additional_headers
        else:
            additional_headers = {
                **self.additional_headers,
                **other.additional_headers,
            }
        if isinstance(other.redacted_header_names, UnsetType):
            redacted_header_names = self.redacted_header_names
        else:
            redacted_header_names = (
                self.redacted_header_names | other.redacted_header_names
            )

        if isinstance(other.timeout_options, TimeoutOptions):
            timeout_options = self.timeout_options.with_override(other.timeout_options)
        else:
            timeout_options = self.timeout_options
        if isinstance(other.api_url_options, APIURLOptions):
            api_url_options = self.api_url_options.with_override(other.api_url_options)
        else:
            api_url_options = self.api_url_options

        return FullAPIOptions(
            callers=(
                other.callers
                if not isinstance(other.callers, UnsetType)
                else self.callers
            ),
            additional_headers=additional_headers,
            redacted_header_names=redacted_header_names,
            token=other.token if not isinstance(other.token, UnsetType) else self.token,
            timeout_options=timeout_options,
            api_url_options=api_url_options,
        )


defaultTimeoutOptions = FullTimeoutOptions(
    request_timeout_ms=DEFAULT_REQUEST_TIMEOUT_MS,
)
defaultAPIURLOptions = FullAPIURLOptions(
    api_host=DEFAULT_API_HOST,
    api_scheme=DEFAULT_API_SCHEME,
    api_version_path=API_VERSION_PATH,
)


def defaultAPIOptions() -> FullAPIOptions:
    """
    Return the default APIOptions object, based on the 'grand defaults'
    hardcoded in the library settings.
    """

    return FullAPIOptions(
        callers=[],
        additional_headers={},
        redacted_header_names=set(),
        token=StaticTokenProvider(None),
        timeout_options=defaultTimeoutOptions,
        api_url_options=defaultAPIURLOptions,
    )
