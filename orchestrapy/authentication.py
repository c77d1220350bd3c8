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
from abc import ABC, abstractmethod
from typing import Any

from typing_extensions import override

from orchestrapy.settings.defaults import (
    SECRETS_REDACT_CHAR,
    SECRETS_REDACT_ENDING,
    SECRETS_REDACT_ENDING_LENGTH,
)
from orchestrapy.utils.unset import _UNSET, UnsetType


def coerce_token_provider(
    token: str | TokenProvider | None,
) -> TokenProvider:
    if isinstance(token, TokenProvider):
        return token
    else:
        return StaticTokenProvider(token)


def coerce_possible_token_provider(
    token: str | TokenProvider | None | UnsetType,
) -> TokenProvider | UnsetType:
    if isinstance(token, UnsetType):
        return _UNSET
    else:
        return coerce_token_provider(token)


def _redact_secret(secret: str, max_length: int, hide_if_short: bool = True) -> str:
    """
    Return a shortened-if-necessary version of a 'secret' string (with ellipsis).

    Args:
        secret: a secret string to redact
        max_length: if the secret and the fixed ending exceed this size,
            shortening takes place.
        hide_if_short: if True and no shortening takes place, a masked string
            of the same length as the secret is returned instead of the secret.

    Returns:
        a 'redacted' form of the secret string as per the rules outlined above.
    """
    secret_len = len(secret)
    if secret_len + SECRETS_REDACT_ENDING_LENGTH > max_length:
        return (
            secret[: max_length - SECRETS_REDACT_ENDING_LENGTH] + SECRETS_REDACT_ENDING
        )
    else:
        if hide_if_short:
            return SECRETS_REDACT_CHAR * len(secret)
        else:
            return secret


class TokenProvider(ABC):
    """
    Abstract base class for a token provider.
    The relevant method in this interface is returning a string to use as token.

    The service authenticates requests with HTTP Basic authentication, where
    the token is the user name and the password is empty: `get_auth_header`
    renders the token in that form.

    The __str__ / __repr__ methods are NOT to be used as source of tokens:
    use get_token instead.
    """

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, TokenProvider):
            return other.get_token() == self.get_token()
        else:
            return False

    @abstractmethod
    def __repr__(self) -> str: ...

    def __bool__(self) -> bool:
        return self.get_token() is not None

    @abstractmethod
    def get_token(self) -> str | None:
        """
        Produce a string for direct use as token in a subsequent API request,
        or None for no token.
        """
        ...

    def get_auth_header(self) -> str | None:
        """
        The value of the Authorization header for the current token
        (Basic scheme, token as user name, empty password), or None
        if there is no token.
        """
        token = self.get_token()
        if token is None:
            return None
        credentials = base64.b64encode(f"{token}:".encode()).decode()
        return f"Basic {credentials}"


class StaticTokenProvider(TokenProvider):
    """
    A "pass-through" provider that wraps a supplied literal token.

    Args:
        token: an API key for the application, used for all requests.

    Example:
        >>> from orchestrapy import OrchestrateClient
        >>> from orchestrapy.authentication import StaticTokenProvider
        >>> client = OrchestrateClient(
        ...     StaticTokenProvider("01234567-89ab-cdef-0123-456789abcdef"),
        ... )
    """

    def __init__(self, token: str | None) -> None:
        self.token = token

    @override
    def __repr__(self) -> str:
        if self.token is None:
            return "(none)"
        else:
            return f"{self.__class__.__name__}({_redact_secret(self.token, 15)})"

    @override
    def get_token(self) -> str | None:
        return self.token
