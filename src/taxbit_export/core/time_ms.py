from __future__ import annotations

from datetime import datetime, timedelta, timezone

from ..errors import FormatError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def utc_string_to_time_ms(value: str, column: str = "Date") -> int:
    """
    "2020-03-02T07:32:05.000Z" -> 1583134325000

    The offset must be explicit (Z or +HH:MM); naive timestamps are rejected.
    """
    s = (value or "").strip()
    if not s:
        raise FormatError(column, value, "empty timestamp")

    if s[-1] in ("Z", "z"):
        s = s[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(s)
    except ValueError as e:
        raise FormatError(column, value, "not an ISO-8601 timestamp") from e

    if dt.tzinfo is None or dt.utcoffset() is None:
        raise FormatError(column, value, "timestamp has no UTC offset")

    return (dt.astimezone(timezone.utc) - EPOCH) // _ONE_MS


def time_ms_to_utc_datetime(time_ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=int(time_ms))


def time_ms_to_utc_z_string(time_ms: int) -> str:
    dt = time_ms_to_utc_datetime(time_ms)
    # %Y is not zero-padded below year 1000 on every platform
    return f"{dt.year:04d}-{dt:%m-%dT%H:%M:%S}.{dt.microsecond // 1000:03d}Z"
