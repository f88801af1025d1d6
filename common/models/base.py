from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base


Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds, for columns that order rows."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
