"""
Declarative base shared by every ORM model.

Import calsync.models (not this module) when the full metadata is needed,
e.g. for create_all() or Alembic autogenerate.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
