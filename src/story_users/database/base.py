"""
Declarative base and shared column types for the ORM row classes.
Import `Base` in any module under `story_users.models` that declares mapped tables.
"""

from sqlalchemy import BigInteger
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import DeclarativeBase

# Unsigned 64-bit identifiers: BIGINT UNSIGNED on MySQL, BIGINT elsewhere (tests use SQLite).
UInt64 = BigInteger().with_variant(mysql.BIGINT(unsigned=True), "mysql", "mariadb")


class Base(DeclarativeBase):
    pass


# Constraint names stay stable across dialects; MySQL reports them in duplicate-key errors.
Base.metadata.naming_convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
