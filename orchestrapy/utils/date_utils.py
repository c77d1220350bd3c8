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

from orchestrapy.settings.defaults import DEFAULT_DATETIME_TZINFO

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)
ONE_MILLISECOND = datetime.timedelta(milliseconds=1)


def _unix_timestamp_ms_to_datetime(
    timestamp_ms: int,
    tz: datetime.tzinfo | None = DEFAULT_DATETIME_TZINFO,
) -> datetime.datetime:
    """
    Convert a (signed) number of milliseconds since the epoch into an aware
    datetime. Integer arithmetic is used throughout, so that no precision is
    lost at the millisecond scale (as would happen through float seconds).
    """
    result = EPOCH + datetime.timedelta(milliseconds=timestamp_ms)
    if tz is not None:
        return result.astimezone(tz)
    return result


def _datetime_to_unix_timestamp_ms(dt: datetime.datetime | int) -> int:
    """
    Convert an aware datetime (or a value already in milliseconds) into a number
    of milliseconds since the epoch, truncating any sub-millisecond part.
    Naive datetimes are rejected, as their offset would be guesswork.
    """
    if isinstance(dt, datetime.datetime):
        if dt.utcoffset() is None:
            raise ValueError(
                "Cannot convert a naive datetime (one without timezone information) "
                "to a timestamp: please use timezone-aware datetimes."
            )
        return (dt - EPOCH) // ONE_MILLISECOND
    return int(dt)
