# SPDX-License-Identifier: MIT

from typing import Optional, cast

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.isoformat()


def datetime_to_iso_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_iso_str(datetime)


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    return cast(pendulum.DateTime, pendulum.parse(datetime))


def datetime_from_str_optional(datetime: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime is None:
        return None
    return datetime_from_str(datetime)


def datetime_to_display_local_datetime_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("MMM-DD ddd HH:mm")


def datetime_to_local_date_str(datetime: pendulum.DateTime) -> str:
    """Convert a pendulum.DateTime to a local date string in 'YYYY-MM-DD' format."""
    return datetime.in_tz("local").format("YYYY-MM-DD")


def datetime_to_local_time_str(datetime: pendulum.DateTime) -> str:
    """Convert a pendulum.DateTime to a local time string in 'HH:mm:ss' format."""
    return datetime.in_tz("local").format("HH:mm:ss")


def start_of_local_day(datetime: pendulum.DateTime) -> pendulum.DateTime:
    return datetime.in_tz("local").start_of("day")
