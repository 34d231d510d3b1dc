from core.imports import datetime, timezone


def utcnow():
    # columns are naive DateTime holding UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)
