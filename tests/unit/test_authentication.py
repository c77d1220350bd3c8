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

import base64

import pytest

from orchestrapy.authentication import (
    StaticTokenProvider,
    TokenProvider,
    coerce_possible_token_provider,
    coerce_token_provider,
)
from orchestrapy.utils.unset import _UNSET


class TestTokenProviders:
    @pytest.mark.describe("test of static token provider")
    def test_static_token_provider(self) -> None:
        provider = StaticTokenProvider("01234567-89ab-cdef-0123-456789abcdef")
        assert provider.get_token() == "01234567-89ab-cdef-0123-456789abcdef"
        assert provider
        assert "456789abcdef" not in repr(provider)

        null_provider = StaticTokenProvider(None)
        assert not null_provider
        assert null_provider.get_token() is None
        assert repr(null_provider) == "(none)"

        assert provider != "01234567-89ab-cdef-0123-456789abcdef"

    @pytest.mark.describe("test of basic-auth header from token provider")
    def test_auth_header(self) -> None:
        header = StaticTokenProvider("my-key").get_auth_header()
        assert header == "Basic " + base64.b64encode(b"my-key:").decode()
        assert StaticTokenProvider(None).get_auth_header() is None

    @pytest.mark.describe("test of token provider coercion")
    def test_token_coercion(self) -> None:
        provider = StaticTokenProvider("k")
        assert coerce_token_provider(provider) is provider
        assert coerce_token_provider("k") == provider
        assert isinstance(coerce_token_provider(None), TokenProvider)
        assert coerce_possible_token_provider(_UNSET) is _UNSET
        assert coerce_possible_token_provider("k") == provider
