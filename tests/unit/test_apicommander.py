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

import pytest
from pytest_httpserver import HTTPServer

from orchestrapy.exceptions import (
    ConflictException,
    DecodeException,
    UnknownHttpException,
)
from orchestrapy.utils.api_commander import APICommander
from orchestrapy.utils.request_tools import HttpMethod


class TestAPICommander:
    @pytest.mark.describe("test of APICommander conversion methods")
    def test_apicommander_conversions(self) -> None:
        cmd1 = APICommander(
            api_endpoint="api_endpoint1",
            path="path1",
            headers={"h": "headers1"},
            callers=[("c", "v")],
            redacted_header_names=["redacted_header_names1"],
            request_timeout_ms=1000,
        )
        cmd2 = APICommander(
            api_endpoint="api_endpoint1",
            path="path1",
            headers={"h": "headers1"},
            callers=[("c", "v")],
            redacted_header_names=["redacted_header_names1"],
            request_timeout_ms=1000,
        )
        assert cmd1 == cmd2

        assert cmd1 != cmd1._copy(api_endpoint="x")
        assert cmd1 != cmd1._copy(path="x")
        assert cmd1 != cmd1._copy(headers={})
        assert cmd1 != cmd1._copy(callers=[])
        assert cmd1 != cmd1._copy(redacted_header_names=[])
        assert cmd1 != cmd1._copy(request_timeout_ms=2000)

        assert cmd1 == cmd1._copy(api_endpoint="x")._copy(api_endpoint="api_endpoint1")
        assert cmd1 == cmd1._copy(path="x")._copy(path="path1")
        assert cmd1 == cmd1._copy(headers={})._copy(headers={"h": "headers1"})
        assert cmd1 == cmd1._copy(callers=[])._copy(callers=[("c", "v")])
        assert cmd1 == cmd1._copy(redacted_header_names=[])._copy(
            redacted_header_names=["redacted_header_names1"]
        )

    @pytest.mark.describe("test of APICommander request, sync")
    def test_apicommander_request_sync(self, httpserver: HTTPServer) -> None:
        base_endpoint = httpserver.url_for("/")
        base_path = "/v0"
        cmd = APICommander(
            api_endpoint=base_endpoint,
            path=base_path,
            headers={"h": "v"},
            callers=[("cn0", "cv0"), ("cn1", "cv1")],
        )

        def hv_matcher(hk: str, hv: str | None, ev: str) -> bool:
            if hk == "h":
                return hv == ev
            elif hk.lower() == "user-agent":
                return hv is not None and hv.startswith(ev)
            else:
                return True

        httpserver.expect_oneshot_request(
            "/v0/c",
            method=HttpMethod.GET,
            query_string="limit=2&offset=2",
            headers={
                "h": "v",
                "User-Agent": "cn0/cv0 cn1/cv1",
            },
            header_value_matcher=hv_matcher,
        ).respond_with_json({"r": 1})
        resp_c = cmd.request(additional_path="c?limit=2&offset=2")
        assert resp_c == {"r": 1}

        httpserver.expect_oneshot_request(
            "/v0/",
            method=HttpMethod.HEAD,
        ).respond_with_data("")
        raw_resp = cmd.raw_request(http_method=HttpMethod.HEAD)
        assert raw_resp.status_code == 200

    @pytest.mark.describe("test of APICommander request, async")
    async def test_apicommander_request_async(self, httpserver: HTTPServer) -> None:
        base_endpoint = httpserver.url_for("/")
        cmd = APICommander(
            api_endpoint=base_endpoint,
            path="/v0/",
            headers={"h": "v"},
        )

        httpserver.expect_oneshot_request(
            "/v0/c/k/refs",
            method=HttpMethod.GET,
            query_string="values=true",
            headers={"h": "v"},
        ).respond_with_json({"r": 2})
        resp = await cmd.async_request(additional_path="c/k/refs?values=true")
        assert resp == {"r": 2}

        httpserver.expect_oneshot_request("/v0/c").respond_with_data("", status=409)
        with pytest.raises(ConflictException):
            await cmd.async_request(additional_path="/c")

    @pytest.mark.describe("test of APICommander unexpected status on success")
    def test_apicommander_expected_status(self, httpserver: HTTPServer) -> None:
        cmd = APICommander(api_endpoint=httpserver.url_for("/"), path="/v0")
        httpserver.expect_oneshot_request("/v0/").respond_with_data("", status=204)
        with pytest.raises(UnknownHttpException) as exc_info:
            cmd.raw_request(http_method=HttpMethod.GET)
        assert exc_info.value.status_code == 204
        httpserver.expect_oneshot_request("/v0/").respond_with_data("", status=204)
        cmd.raw_request(http_method=HttpMethod.GET, expected_status=204)

    @pytest.mark.describe("test of APICommander logging with header redaction")
    def test_apicommander_logging(
        self, httpserver: HTTPServer, caplog: pytest.LogCaptureFixture
    ) -> None:
        cmd = APICommander(
            api_endpoint=httpserver.url_for("/"),
            path="/v0",
            headers={
                "Authorization": "Basic c2VjcmV0Og==",
                "X-Custom-Secret": "sensitive",
                "X-Visible": "visible",
            },
            redacted_header_names=["X-Custom-Secret"],
        )
        httpserver.expect_oneshot_request("/v0/c").respond_with_json({})
        with caplog.at_level(logging.DEBUG):
            cmd.request(additional_path="c")

        assert "Basic c2VjcmV0Og==" not in caplog.text
        assert "sensitive" not in caplog.text
        assert "visible" in caplog.text
        assert "Request URL: GET " in caplog.text
        assert "Response status code: 200" in caplog.text

    @pytest.mark.describe("test of APICommander undecodable response body, sync")
    def test_apicommander_undecodable_body_sync(self, httpserver: HTTPServer) -> None:
        cmd = APICommander(api_endpoint=httpserver.url_for("/"), path="/v0")
        httpserver.expect_oneshot_request("/v0/c").respond_with_data(
            b"not gzip at all",
            headers={"Content-Encoding": "gzip"},
        )
        with pytest.raises(DecodeException) as exc_info:
            cmd.request(additional_path="c")
        assert "Undecodable response body" in exc_info.value.text
        httpserver.check_assertions()

    @pytest.mark.describe("test of APICommander undecodable response body, async")
    async def test_apicommander_undecodable_body_async(
        self, httpserver: HTTPServer
    ) -> None:
        cmd = APICommander(api_endpoint=httpserver.url_for("/"), path="/v0")
        httpserver.expect_oneshot_request("/v0/c").respond_with_data(
            b"not gzip at all",
            headers={"Content-Encoding": "gzip"},
        )
        with pytest.raises(DecodeException):
            await cmd.async_request(additional_path="c")
        httpserver.check_assertions()
