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
Tests for the User-Agent customization logic
"""

from __future__ import annotations

import pytest
from pytest_httpserver import HTTPServer

from orchestrapy import OrchestrateClient, __version__
from orchestrapy.api_options import APIOptions, APIURLOptions
from orchestrapy.utils.user_agents import (
    compose_full_user_agent,
    compose_user_agent_string,
    detect_orchestrapy_user_agent,
)


class TestUserAgent:
    @pytest.mark.describe("test of user-agent string composition")
    def test_compose_user_agent(self) -> None:
        assert compose_user_agent_string(None, None) is None
        assert compose_user_agent_string(None, "V") is None
        assert compose_user_agent_string("N", None) == "N"
        assert compose_user_agent_string("N", "V") == "N/V"

        assert compose_full_user_agent([]) is None
        assert compose_full_user_agent([(None, "x"), ("N", "V"), ("M", None)]) == (
            "N/V M"
        )
        assert detect_orchestrapy_user_agent() == ("orchestrapy", __version__)

    @pytest.mark.describe("test of user-agent header sent by the client")
    def test_useragent_client(self, httpserver: HTTPServer) -> None:
        client = OrchestrateClient(
            "t",
            callers=[("CN", "CV")],
            api_options=APIOptions(
                api_url_options=APIURLOptions(
                    api_host=f"{httpserver.host}:{httpserver.port}",
                    api_scheme="http",
                ),
            ),
        )
        httpserver.expect_oneshot_request(
            "/v0/",
            method="HEAD",
            headers={"User-Agent": f"CN/CV orchestrapy/{__version__}"},
        ).respond_with_data("")
        client.ping()
        httpserver.check_assertions()
