"""Local calendar helpers shared by the calculator and the use cases."""

from __future__ import annotations

import datetime as dt

from dateutil import tz

from quit_plan import config


def resolve_zone(zone: dt.tzinfo | None) -> dt.tzinfo:
    return zone if zone is not None else config.LOCAL_TZ


def as_utc(ts: dt.datetime) -> dt.datetime:
    """Naive timestamps are stored as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz.UTC)
    return ts


def local_date(ts: dt.datetime, zone: dt.tzinfo | None = None) -> dt.date:
    return as_utc(ts).astimezone(resolve_zone(zone)).date()


def to_date(value: dt.date | dt.datetime, zone: dt.tzinfo | None = None) -> dt.date:
    # datetime is a subclass of date, check it first
    if isinstance(value, dt.datetime):
        return local_date(value, zone)
    return value


def start_of_day(day: dt.date, zone: dt.tzinfo | None = None) -> dt.datetime:
    return dt.datetime.combine(day, dt.time(), tzinfo=resolve_zone(zone))


def local_hour(ts: dt.datetime, zone: dt.tzinfo | None = None) -> int:
    return as_utc(ts).astimezone(resolve_zone(zone)).hour
