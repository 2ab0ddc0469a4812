# story_users/
# │
# ├── domain/errors.py           # App-level error catalog (ErrorKind, DomainError)
# ├── exceptions/
# │   ├── __init__.py
# │   ├── classifier.py          # SQLAlchemy error kinds -> DomainError
# │   ├── dialects.py            # MySQL / SQLite message patterns -> DomainError
# │   └── mapper.py              # db_error_handler: repository boundary
from .classifier import DriverErrorClassifier
from .dialects import (
    DialectErrorClassifier,
    MySQLErrorClassifier,
    SQLiteErrorClassifier,
    classifier_for_dialect,
)
from .mapper import db_error_handler

__all__ = [
    "DriverErrorClassifier",
    "DialectErrorClassifier",
    "MySQLErrorClassifier",
    "SQLiteErrorClassifier",
    "classifier_for_dialect",
    "db_error_handler",
]
