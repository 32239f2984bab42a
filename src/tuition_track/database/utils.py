'''
Column types and small helpers shared by the ORM models and the services.
'''
import datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def month_year_label(moment: datetime.datetime | None = None) -> str:
    """Returns the YYYY-MM label of the given moment (defaults to now, UTC)."""
    moment = moment or utc_now()
    return f"{moment.year:04d}-{moment.month:02d}"


def ensure_utc(value: datetime.datetime) -> datetime.datetime:
    """Naive datetimes are taken to already be in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    A timezone-aware DateTime that always comes back in UTC.

    PostgreSQL keeps the offset itself; SQLite drops it, so values are
    normalised to UTC on the way in and re-tagged on the way out.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return ensure_utc(value)
