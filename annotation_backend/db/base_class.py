# /annotation_backend/db/base_class.py

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base, declared_attr


class _Base:
    """Table names default to the pluralized, lower-cased class name."""

    @declared_attr
    def __tablename__(cls) -> str:
        return f"{cls.__name__.lower()}s"


Base = declarative_base(cls=_Base)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
