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

"""
Main conftest for shared fixtures and test helpers.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import httpx
import pytest
from blockbuster import BlockBuster, blockbuster_ctx
from pytest_httpserver import HTTPServer

from orchestrapy import OrchestrateClient
from orchestrapy.api_options import APIOptions, APIURLOptions
from orchestrapy.exceptions import OrchestrateException, OrchestrateHttpException
from orchestrapy.iterators import ResultPage

TEST_TOKEN = "01234567-89ab-cdef-0123-456789abcdef"


@pytest.fixture(autouse=True)
def blockbuster() -> Iterator[BlockBuster]:
    with blockbuster_ctx("orchestrapy") as bb:
        # TODO: follow discussion in https://github.com/encode/httpx/discussions/3456
        bb.functions["os.stat"].can_block_in("httpx/_client.py", "_init_transport")
        yield bb


def make_entry(
    key: str,
    *,
    collection: str = "c",
    value: Any = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """A raw result entry, as found in the 'results' list of a page."""

    path = {
        "collection": collection,
        "key": key,
        "ref": f"ref_{key}",
        **kwargs.pop("path", {}),
    }
    return {
        "path": path,
        "value": value if value is not None else {"k": key},
        **kwargs,
    }


def make_page_dict(
    keys: list[str],
    *,
    next_path: str | None = None,
    total_count: int | None = None,
    collection: str = "c",
) -> dict[str, Any]:
    """A whole page envelope, as returned by the API."""

    page: dict[str, Any] = {
        "count": len(keys),
        "results": [make_entry(key, collection=collection) for key in keys],
    }
    if next_path is not None:
        page["next"] = next_path
    if total_count is not None:
        page["total_count"] = total_count
    return page


class FakeFetcher:
    """
    A page fetcher serving canned outcomes (page envelopes or exceptions)
    in sequence, recording the paths it is asked for.
    """

    def __init__(self, outcomes: list[dict[str, Any] | OrchestrateException]) -> None:
        self.outcomes = list(outcomes)
        self.fetched_paths: list[str] = []

    @property
    def fetch_count(self) -> int:
        return len(self.fetched_paths)

    def _next_outcome(self, path: str) -> ResultPage:
        self.fetched_paths.append(path)
        if not self.outcomes:
            raise AssertionError(f"Unexpected fetch for '{path}'.")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, OrchestrateException):
            raise outcome
        return ResultPage.from_response(outcome)

    def fetch_page(self, path: str) -> ResultPage:
        return self._next_outcome(path)

    async def async_fetch_page(self, path: str) -> ResultPage:
        return self._next_outcome(path)


def client_for_httpserver(httpserver: HTTPServer) -> OrchestrateClient:
    """An OrchestrateClient pointed at the local test HTTP server."""

    return OrchestrateClient(
        TEST_TOKEN,
        api_options=APIOptions(
            api_url_options=APIURLOptions(
                api_host=f"{httpserver.host}:{httpserver.port}",
                api_scheme="http",
            ),
        ),
    )


def make_http_exception(
    status_code: int,
    body: dict[str, Any] | None = None,
    *,
    url: str = "http://localhost/v0/c",
) -> OrchestrateHttpException:
    """The exception an APICommander raises upon an unexpected status."""

    request = httpx.Request("GET", url)
    response = httpx.Response(status_code, json=body or {}, request=request)
    httpx_error = httpx.HTTPStatusError(
        f"Unexpected status {status_code}", request=request, response=response
    )
    return OrchestrateHttpException.from_httpx_error(httpx_error)
