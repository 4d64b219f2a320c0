"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from wastelog.models import audit_log as _audit_log  # noqa: E402,F401
from wastelog.models import branch as _branch  # noqa: E402,F401
from wastelog.models import review_request as _review_request  # noqa: E402,F401
from wastelog.models import user as _user  # noqa: E402,F401
from wastelog.models import waste_record as _waste_record  # noqa: E402,F401
