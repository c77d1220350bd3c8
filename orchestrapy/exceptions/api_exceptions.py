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
from typing import Any

import httpx


class OrchestrateException(Exception):
    """
    Any exception occurred while working with the API through this client,
    be it a failure to reach the service, an error status returned by it,
    or a response that cannot be understood.
    """

    pass


@dataclass
class TransportException(OrchestrateException):
    """
    The request could not be completed at the network level (connection
    refused, broken connection, protocol violation, ...). No response status
    is available in this case.

    Attributes:
        text: a textual description of the error.
        endpoint: the URL the failed request was targeting, if known.
    """

    text: str
    endpoint: str | None

    def __init__(
        self,
        text: str,
        *,
        endpoint: str | None,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.endpoint = endpoint


@dataclass
class OrchestrateTimeoutException(TransportException):
    """
    An HTTP request to the API timed out.

    Attributes:
        text: a textual description of the error
        timeout_type: this denotes the phase of the HTTP request when the event
            occurred ("connect", "read", "write", "pool") or "generic" if there is
            not a specific request associated to the exception.
        endpoint: if the timeout is tied to a specific request, this is the
            URL that the request was targeting.
    """

    timeout_type: str

    def __init__(
        self,
        text: str,
        *,
        timeout_type: str,
        endpoint: str | None,
    ) -> None:
        super().__init__(text, endpoint=endpoint)
        self.timeout_type = timeout_type


@dataclass
class OrchestrateHttpException(OrchestrateException, httpx.HTTPStatusError):
    """
    A request to the API resulted in a status other than the one the operation
    requires. This class is never raised directly: the subclass matching the
    status code is used instead (see `from_httpx_error`).

    Being a subclass of `httpx.HTTPStatusError`, the original request and
    response are available as the `request` and `response` attributes.

    Attributes:
        text: a text message about the exception.
        status_code: the HTTP status code of the response.
        message: the error message supplied by the service in the response body,
            if any.
        code: the error code supplied by the service in the response body, if any.
    """

    text: str | None
    status_code: int
    message: str | None
    code: str | None

    def __init__(
        self,
        text: str | None,
        *,
        httpx_error: httpx.HTTPStatusError,
        status_code: int,
        message: str | None = None,
        code: str | None = None,
    ) -> None:
        OrchestrateException.__init__(self, text)
        httpx.HTTPStatusError.__init__(
            self,
            message=str(httpx_error),
            request=httpx_error.request,
            response=httpx_error.response,
        )
        self.text = text
        self.httpx_error = httpx_error
        self.status_code = status_code
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.text or str(self.httpx_error)

    @classmethod
    def from_httpx_error(
        cls,
        httpx_error: httpx.HTTPStatusError,
        **kwargs: Any,
    ) -> OrchestrateHttpException:
        """Parse a httpx status error into the appropriate subclass."""

        status_code: int
        try:
            status_code = httpx_error.response.status_code
        except Exception:
            status_code = 0
        raw_response: dict[str, Any]
        # the attempt to extract a response structure cannot afford failure.
        try:
            raw_response = httpx_error.response.json() or {}
            if not isinstance(raw_response, dict):
                raw_response = {}
        except Exception:
            raw_response = {}
        message = raw_response.get("message")
        code = raw_response.get("code")

        exc_class = _STATUS_EXCEPTION_MAP.get(status_code, UnknownHttpException)
        text: str
        if exc_class is UnknownHttpException:
            reason: str
            try:
                reason = httpx_error.response.reason_phrase
            except Exception:
                reason = ""
            detail = message if message is not None else _safe_text(httpx_error)
            status_line = f"{status_code} {reason}".strip()
            text = f"{status_line} ({status_code}): {detail}"
        else:
            text = exc_class.DEFAULT_TEXT
            if message:
                text = f"{text} {message}"

        return exc_class(
            text,
            httpx_error=httpx_error,
            status_code=status_code,
            message=message,
            code=code,
            **kwargs,
        )


def _safe_text(httpx_error: httpx.HTTPStatusError) -> str:
    try:
        return httpx_error.response.text
    except Exception:
        return str(httpx_error)


class NotFoundException(OrchestrateHttpException):
    """The API returned a 404: the requested resource does not exist."""

    DEFAULT_TEXT = "404: Not found."


class ConflictException(OrchestrateHttpException):
    """The API returned a 409: the request conflicts with the stored state."""

    DEFAULT_TEXT = "409: Conflict."


class PreconditionFailedException(OrchestrateHttpException):
    """The API returned a 412: a conditional header did not match."""

    DEFAULT_TEXT = "412: Precondition failed."


class RateLimitedException(OrchestrateHttpException):
    """The API refused the request because of rate limiting."""

    DEFAULT_TEXT = "Request rate limited."


class UnknownHttpException(OrchestrateHttpException):
    """
    The API returned an unexpected status not covered by the other subclasses.
    The service-provided `message` and `code`, if any, are attached.
    """

    DEFAULT_TEXT = "Unexpected response status."


_STATUS_EXCEPTION_MAP: dict[int, type[OrchestrateHttpException]] = {
    404: NotFoundException,
    409: ConflictException,
    412: PreconditionFailedException,
    419: RateLimitedException,
    429: RateLimitedException,
}


@dataclass
class DecodeException(OrchestrateException):
    """
    A response from the API could not be decoded: either the body is not valid
    JSON, or it lacks the expected structure.

    Attributes:
        text: a text message about the exception.
        raw_response: the offending response body (or part of it), if available.
    """

    text: str
    raw_response: Any

    def __init__(self, text: str, *, raw_response: Any = None) -> None:
        super().__init__(text)
        self.text = text
        self.raw_response = raw_response


class PayloadDecodeException(DecodeException):
    """
    The value stored in a result could not be converted into the requested form.
    Contrary to other decode errors, this concerns a single result and never
    interrupts the iteration that produced it.
    """

    pass


def to_timeout_exception(
    httpx_timeout: httpx.TimeoutException,
    request_timeout_ms: int | None,
) -> OrchestrateTimeoutException:
    text_0 = str(httpx_timeout) or "timed out"
    if request_timeout_ms:
        text = f"{text_0} (timeout honoured: {request_timeout_ms} ms)"
    else:
        text = text_0
    if isinstance(httpx_timeout, httpx.ConnectTimeout):
        timeout_type = "connect"
    elif isinstance(httpx_timeout, httpx.ReadTimeout):
        timeout_type = "read"
    elif isinstance(httpx_timeout, httpx.WriteTimeout):
        timeout_type = "write"
    elif isinstance(httpx_timeout, httpx.PoolTimeout):
        timeout_type = "pool"
    else:
        timeout_type = "generic"
    return OrchestrateTimeoutException(
        text,
        timeout_type=timeout_type,
        endpoint=_request_url(httpx_timeout),
    )


def to_transport_exception(
    httpx_error: httpx.RequestError,
) -> TransportException:
    text = str(httpx_error) or httpx_error.__class__.__name__
    return TransportException(text, endpoint=_request_url(httpx_error))


def to_decode_exception(
    httpx_error: httpx.DecodingError,
) -> DecodeException:
    # the body could not be decoded according to its Content-Encoding
    text = str(httpx_error) or httpx_error.__class__.__name__
    return DecodeException(
        f"Undecodable response body from API: {text}",
        raw_response=_request_url(httpx_error),
    )


def _request_url(httpx_error: httpx.RequestError) -> str | None:
    # accessing .request raises RuntimeError when no request is attached
    try:
        return str(httpx_error.request.url)
    except RuntimeError:
        return None
