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

import datetime

import pytest

from orchestrapy.utils.date_utils import (
    _datetime_to_unix_timestamp_ms,
    _unix_timestamp_ms_to_datetime,
)

UTC = datetime.timezone.utc


class TestDateUtils:
    @pytest.mark.describe("test of timestamp to datetime conversion")
    def test_timestamp_to_datetime(self) -> None:
        assert _unix_timestamp_ms_to_datetime(0) == datetime.datetime(
            1970, 1, 1, tzinfo=UTC
        )
        dt = _unix_timestamp_ms_to_datetime(1400000000123)
        assert dt == datetime.datetime(2014, 5, 13, 16, 53, 20, 123000, tzinfo=UTC)
        assert dt.tzinfo == UTC
        assert _unix_timestamp_ms_to_datetime(-1) == datetime.datetime(
            1969, 12, 31, 23, 59, 59, 999000, tzinfo=UTC
        )

    @pytest.mark.describe("test of timestamp conversion exactness")
    def test_timestamp_exactness(self) -> None:
        # values where a float-seconds roundtrip would lose the millisecond
        for timestamp_ms in (
            1,
            999,
            1400000000001,
            253402300799999,
            -62135596800000,
        ):
            dt = _unix_timestamp_ms_to_datetime(timestamp_ms)
            assert dt.microsecond % 1000 == 0
            assert _datetime_to_unix_timestamp_ms(dt) == timestamp_ms

    @pytest.mark.describe("test of datetime to timestamp conversion")
    def test_datetime_to_timestamp(self) -> None:
        plus_two = datetime.timezone(datetime.timedelta(hours=2))
        assert (
            _datetime_to_unix_timestamp_ms(
                datetime.datetime(2014, 5, 13, 18, 53, 20, 123456, tzinfo=plus_two)
            )
            == 1400000000123
        )
        assert _datetime_to_unix_timestamp_ms(1400000000123) == 1400000000123
        with pytest.raises(ValueError):
            _datetime_to_unix_timestamp_ms(datetime.datetime(2014, 5, 13))
