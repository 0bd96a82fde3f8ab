# SPDX-License-Identifier: MIT

from typing import Optional, cast

import pendulum

EPOCH = pendulum.datetime(1970, 1, 1, tz="UTC")


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def now_iso_str() -> str:
    return datetime_to_iso_str(now_utc())


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.isoformat()


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    return cast(pendulum.DateTime, pendulum.parse(datetime))


def datetime_from_timestamp(timestamp: float) -> pendulum.DateTime:
    return pendulum.from_timestamp(timestamp, tz="UTC")


def format_local_date(datetime: Optional[str], date_format: str) -> str:
    """Format an ISO timestamp in the local timezone with a moment-style pattern."""
    if not datetime:
        return ""
    return datetime_from_str(datetime).in_tz("local").format(date_format)


def datetime_to_display_local_datetime_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY-MM-DD HH:mm")
