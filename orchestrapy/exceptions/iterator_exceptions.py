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

from orchestrapy.exceptions.api_exceptions import OrchestrateException


@dataclass
class WrongIteratorKindException(OrchestrateException):
    """
    A kind-specific accessor was invoked on a result iterator of another kind,
    for instance asking for the current event on an iterator over search hits.
    The iterator is left untouched.

    Attributes:
        text: a text message about the exception.
        iterator_kind: the kind (a string) of the iterator.
        requested_kind: the kind (a string) expected by the accessor.
    """

    text: str
    iterator_kind: str
    requested_kind: str

    def __init__(
        self,
        text: str,
        *,
        iterator_kind: str,
        requested_kind: str,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.iterator_kind = iterator_kind
        self.requested_kind = requested_kind


@dataclass
class IteratorStateException(OrchestrateException):
    """
    The operation cannot be performed in the current state of the iterator,
    typically because there is no current result to return (the iteration
    has not started, the buffered page has been drained, or the iteration
    is over).

    Attributes:
        text: a text message about the exception.
        iterator_state: a string description of the current state
            of the iterator.
    """

    text: str
    iterator_state: str

    def __init__(
        self,
        text: str,
        *,
        iterator_state: str,
    ) -> None:
        super().__init__(text)
        self.text = text
        self.iterator_state = iterator_state
