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

import json
import logging
from types import TracebackType
from typing import Any, Dict, Iterable, Sequence, cast

import httpx

from orchestrapy.constants import CallerType
from orchestrapy.exceptions import (
    DecodeException,
    OrchestrateHttpException,
    to_decode_exception,
    to_timeout_exception,
    to_transport_exception,
)
from orchestrapy.settings.defaults import (
    DEFAULT_REDACTED_HEADER_NAMES,
    FIXED_SECRET_PLACEHOLDER,
)
from orchestrapy.utils.request_tools import (
    HttpMethod,
    log_httpx_request,
    log_httpx_response,
    to_httpx_timeout,
)
from orchestrapy.utils.user_agents import (
    compose_full_user_agent,
    detect_orchestrapy_user_agent,
)

user_agent_orchestrapy = detect_orchestrapy_user_agent()

logger = logging.getLogger(__name__)


class APICommander:
    """
    The low-level request executor. An APICommander is bound to a base URL
    (endpoint plus fixed API path) and a set of headers; each request is then
    issued against a path relative to that base, and the response status is
    checked against the one the calling operation requires.

    Failures are translated into the library's exception taxonomy: network
    problems become `TransportException` (or its timeout subclass), unexpected
    statuses become the matching `OrchestrateHttpException` subclass and
    undecodable bodies become `DecodeException`. No request is ever retried.
    """

    client = httpx.Client()

    def __init__(
        self,
        *,
        api_endpoint: str,
        path: str,
        headers: dict[str, str | None] = {},
        callers: Sequence[CallerType] = [],
        redacted_header_names: Iterable[str] | None = None,
        request_timeout_ms: int | None = None,
    ) -> None:
        self.async_client = httpx.AsyncClient()
        self.api_endpoint = api_endpoint.rstrip("/")
        self.path = path.strip("/")
        self.headers = headers
        self.callers = callers
        self.redacted_header_names = set(redacted_header_names or [])
        self.request_timeout_ms = request_timeout_ms
        self.upper_full_redacted_header_names = {
            header_name.upper()
            for header_name in (
                self.redacted_header_names | DEFAULT_REDACTED_HEADER_NAMES
            )
        }

        full_user_agent_string = compose_full_user_agent(
            list(self.callers) + [user_agent_orchestrapy]
        )
        self.caller_header: dict[str, str] = (
            {"User-Agent": full_user_agent_string} if full_user_agent_string else {}
        )
        self.full_headers: dict[str, str] = {
            k: v
            for k, v in {
                **{
                    "Accept": "application/json",
                },
                **self.caller_header,
                **self.headers,
            }.items()
            if v is not None
        }
        self._loggable_headers = {
            k: v
            if k.upper() not in self.upper_full_redacted_header_names
            else FIXED_SECRET_PLACEHOLDER
            for k, v in self.full_headers.items()
        }
        self.full_path = "/".join(
            pc for pc in (self.api_endpoint, self.path) if pc
        ).rstrip("/")

    def __repr__(self) -> str:
        pieces = [
            pc
            for pc in (
                f"api_endpoint={self.api_endpoint}",
                f"path={self.path}",
                f"callers={self.callers}",
            )
            if pc is not None
        ]
        inner_desc = ", ".join(pieces)
        return f"{self.__class__.__name__}({inner_desc})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, APICommander):
            return all(
                [
                    self.api_endpoint == other.api_endpoint,
                    self.path == other.path,
                    self.headers == other.headers,
                    self.callers == other.callers,
                    self.redacted_header_names == other.redacted_header_names,
                    self.request_timeout_ms == other.request_timeout_ms,
                ]
            )
        else:
            return False

    async def __aenter__(self) -> APICommander:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: TracebackType | None = None,
    ) -> None:
        await self.async_client.aclose()

    def _copy(
        self,
        api_endpoint: str | None = None,
        path: str | None = None,
        headers: dict[str, str | None] | None = None,
        callers: Sequence[CallerType] | None = None,
        redacted_header_names: list[str] | None = None,
        request_timeout_ms: int | None = None,
    ) -> APICommander:
        # some care in allowing e.g. {} to override (but not None):
        return APICommander(
            api_endpoint=(
                api_endpoint if api_endpoint is not None else self.api_endpoint
            ),
            path=path if path is not None else self.path,
            headers=headers if headers is not None else self.headers,
            callers=callers if callers is not None else self.callers,
            redacted_header_names=(
                redacted_header_names
                if redacted_header_names is not None
                else self.redacted_header_names
            ),
            request_timeout_ms=(
                request_timeout_ms
                if request_timeout_ms is not None
                else self.request_timeout_ms
            ),
        )

    def _compose_request_url(self, additional_path: str | None) -> str:
        # the base path always ends with a slash, as the API root does
        return f"{self.full_path}/{(additional_path or '').lstrip('/')}"

    def _check_status(
        self, raw_response: httpx.Response, expected_status: int
    ) -> None:
        if raw_response.status_code != expected_status:
            http_exc = httpx.HTTPStatusError(
                (
                    f"Unexpected status {raw_response.status_code} "
                    f"(expected {expected_status}) for url '{raw_response.url}'"
                ),
                request=raw_response.request,
                response=raw_response,
            )
            logger.warning(
                f"APICommander about to raise from status {raw_response.status_code}"
            )
            raise OrchestrateHttpException.from_httpx_error(http_exc)

    def _raw_response_to_json(self, raw_response: httpx.Response) -> dict[str, Any]:
        # try to process the httpx raw response into a JSON or throw a failure
        raw_response_json: Any
        try:
            raw_response_json = json.loads(raw_response.text)
        except ValueError:
            # json() parsing has failed (e.g., empty body)
            raise DecodeException(
                text=f"Unparseable response from API ('{raw_response.url}').",
                raw_response=raw_response.text,
            )
        if not isinstance(raw_response_json, dict):
            raise DecodeException(
                text=f"Response from API is not a JSON object ('{raw_response.url}').",
                raw_response=raw_response_json,
            )
        return cast(Dict[str, Any], raw_response_json)

    def raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] | None = None,
        expected_status: int = 200,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            request_timeout_ms=self.request_timeout_ms,
        )
        httpx_timeout_s = to_httpx_timeout(self.request_timeout_ms)

        try:
            raw_response = self.client.request(
                method=http_method,
                url=request_url,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_timeout_exception(
                timeout_exc, request_timeout_ms=self.request_timeout_ms
            ) from timeout_exc
        except httpx.DecodingError as decoding_exc:
            raise to_decode_exception(decoding_exc) from decoding_exc
        except httpx.RequestError as request_exc:
            raise to_transport_exception(request_exc) from request_exc

        log_httpx_response(response=raw_response)
        self._check_status(raw_response, expected_status)
        return raw_response

    async def async_raw_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] | None = None,
        expected_status: int = 200,
    ) -> httpx.Response:
        request_url = self._compose_request_url(additional_path)
        log_httpx_request(
            http_method=http_method,
            full_url=request_url,
            request_params=request_params,
            redacted_request_headers=self._loggable_headers,
            request_timeout_ms=self.request_timeout_ms,
        )
        httpx_timeout_s = to_httpx_timeout(self.request_timeout_ms)

        try:
            raw_response = await self.async_client.request(
                method=http_method,
                url=request_url,
                params=request_params,
                timeout=httpx_timeout_s,
                headers=self.full_headers,
            )
        except httpx.TimeoutException as timeout_exc:
            raise to_timeout_exception(
                timeout_exc, request_timeout_ms=self.request_timeout_ms
            ) from timeout_exc
        except httpx.DecodingError as decoding_exc:
            raise to_decode_exception(decoding_exc) from decoding_exc
        except httpx.RequestError as request_exc:
            raise to_transport_exception(request_exc) from request_exc

        log_httpx_response(response=raw_response)
        self._check_status(raw_response, expected_status)
        return raw_response

    def request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] | None = None,
        expected_status: int = 200,
    ) -> dict[str, Any]:
        raw_response = self.raw_request(
            http_method=http_method,
            additional_path=additional_path,
            request_params=request_params,
            expected_status=expected_status,
        )
        return self._raw_response_to_json(raw_response)

    async def async_request(
        self,
        *,
        http_method: str = HttpMethod.GET,
        additional_path: str | None = None,
        request_params: dict[str, Any] | None = None,
        expected_status: int = 200,
    ) -> dict[str, Any]:
        raw_response = await self.async_raw_request(
            http_method=http_method,
            additional_path=additional_path,
            request_params=request_params,
            expected_status=expected_status,
        )
        return self._raw_response_to_json(raw_response)
