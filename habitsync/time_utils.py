from datetime import datetime, timezone


def _to_millis(dt: datetime) -> datetime:
    return dt.replace(microsecond=dt.microsecond - dt.microsecond % 1000)


def utc_now() -> datetime:
    """Current time as naive UTC, the form every DateTime column stores."""
    return _to_millis(datetime.now(timezone.utc).replace(tzinfo=None))


def to_utc_naive(dt: datetime) -> datetime:
    """
    Normalise an aware or naive (assumed UTC) datetime to naive UTC, cut to
    milliseconds so a stored value round-trips through isoformat_z unchanged.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return _to_millis(dt)


def isoformat_z(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    return to_utc_naive(dt).isoformat(timespec="milliseconds") + "Z"
