from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the convention used for storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    # Naive values are taken to already be UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
