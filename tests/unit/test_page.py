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

import pytest

from orchestrapy.data.page import strip_api_version_path
from orchestrapy.exceptions import DecodeException
from orchestrapy.iterators import ResultPage

SEARCH_PAGE = {
    "count": 2,
    "total_count": 12,
    "next": "/v0/users?query=value.city%3ARome&limit=2&offset=2",
    "prev": "/v0/users?query=value.city%3ARome&limit=2&offset=0",
    "results": [
        {
            "path": {
                "collection": "users",
                "key": "alice",
                "ref": "aaa",
                "reftime": 1400000000000,
            },
            "value": {"city": "Rome"},
            "score": 2.5,
            "reftime": 1400000000000,
        },
        {
            "path": {"collection": "users", "key": "bob", "ref": "bbb"},
            "value": {"city": "Rome"},
            "score": 1,
            "distance": 3,
        },
    ],
}


class TestResultPage:
    @pytest.mark.describe("test of page envelope parsing")
    def test_page_parsing(self) -> None:
        page = ResultPage.from_response(SEARCH_PAGE)
        assert page.count == 2
        assert page.total_count == 12
        assert page.next_path == "users?query=value.city%3ARome&limit=2&offset=2"
        assert page.prev_path == "users?query=value.city%3ARome&limit=2&offset=0"
        assert [entry.path.key for entry in page.entries] == ["alice", "bob"]
        assert page.entries[0].score == 2.5
        assert page.entries[0].reftime == 1400000000000
        assert page.entries[1].score == 1.0
        assert page.entries[1].distance == 3.0
        assert page.entries[1].reftime == 0
        assert page.entries[1].path.tombstone is False

    @pytest.mark.describe("test of page envelope parsing, minimal envelopes")
    def test_page_parsing_minimal(self) -> None:
        for envelope in ({}, {"results": None}, {"results": [], "next": ""}):
            page = ResultPage.from_response(envelope)
            assert page.entries == []
            assert page.next_path is None
            assert page.total_count == 0

    @pytest.mark.describe("test of page envelope parsing, malformed envelopes")
    def test_page_parsing_malformed(self) -> None:
        malformed_envelopes = [
            {"results": {"a": 1}},
            {"results": [12]},
            {"results": [{"path": "users/alice"}]},
            {"results": [{"path": {"key": 123}}]},
            {"results": [{"path": {"key": "k"}, "score": "high"}]},
            {"results": [], "total_count": "many"},
            {"results": [], "next": 42},
        ]
        for envelope in malformed_envelopes:
            with pytest.raises(DecodeException):
                ResultPage.from_response(envelope)

    @pytest.mark.describe("test of continuation path normalization")
    def test_strip_api_version_path(self) -> None:
        assert strip_api_version_path("/v0/c?limit=2&offset=2") == "c?limit=2&offset=2"
        assert strip_api_version_path("c?offset=2") == "c?offset=2"
        assert strip_api_version_path("") is None
        assert strip_api_version_path(None) is None
        assert strip_api_version_path("/v0/") is None
        assert (
            strip_api_version_path("/v1/c?offset=2", api_version_path="/v1/")
            == "c?offset=2"
        )

    @pytest.mark.describe("test of page repr")
    def test_page_repr(self) -> None:
        page = ResultPage.from_response(SEARCH_PAGE)
        assert "<2 entries>" in repr(page)
        assert "total_count=12" in repr(page)
