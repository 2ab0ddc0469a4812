"""
Engine-specific driver-error classifiers.

Some failures (duplicate keys, oversized values, missing NOT NULL values) reach us only as a
generic IntegrityError/DataError whose text is the engine's own message. These classifiers
read that text with named-group patterns and produce INVALID_PARAM errors naming the offending
field, e.g.

    Error 1062: Duplicate entry 'alice@example.com' for key 'idx_email'
        -> "Invalid or malformed parameters: conflict duplicate idx_email"

Foreign-key violations (a referenced user that does not exist) become UNKNOWN_RESOURCE.

Order of evaluation for `DialectErrorClassifier.classify`:
    1. None -> None
    2. the generic classifier's recognized categories (not found, transaction, ...)
    3. the dialect's pattern rules, first match wins
    4. INTERNAL_ERROR wrapping the caller's debug message
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from story_users.domain.errors import DomainError, ErrorKind

from .classifier import DriverErrorClassifier


@dataclass(frozen=True)
class PatternRule:
    """A driver message pattern and the client message it maps to (uses the `field` group)."""

    name: str
    pattern: re.Pattern[str]
    message: str
    kind: ErrorKind = ErrorKind.INVALID_PARAM


# -----------------------
# Patterns
# -----------------------

MYSQL_DUPLICATE = re.compile(
    r"^Error (?P<code>\d{4}): Duplicate entry '(?P<value>.*)' for key '(?P<field>.+)'$", re.DOTALL
)
MYSQL_DATA_LENGTH = re.compile(
    r"^Error (?P<code>\d{4}): Data too long for column '(?P<field>.+)' at row (?P<row>\d+)$"
)
MYSQL_NOT_NULL = re.compile(
    r"^Error (?P<code>\d{4}): Column '(?P<field>.+)' cannot be null$"
)

SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?:\w+\.)?(?P<field>[\w.]+)")
SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: (?:\w+\.)?(?P<field>\w+)")

# Foreign keys: the referenced row (e.g. a follower or followed user) does not exist
MYSQL_FOREIGN_KEY = re.compile(
    r"^Error (?P<code>\d{4}): Cannot add or update a child row(?:: .*?FOREIGN KEY \(`(?P<field>\w+)`\))?", re.DOTALL
)
SQLITE_FOREIGN_KEY = re.compile(r"FOREIGN KEY constraint failed")

MYSQL_RULES = (
    PatternRule("duplicate", MYSQL_DUPLICATE, "conflict duplicate {field}"),
    PatternRule("data_length", MYSQL_DATA_LENGTH, "data too long for {field} field"),
    PatternRule("not_null", MYSQL_NOT_NULL, "missing required {field} field"),
    PatternRule("foreign_key", MYSQL_FOREIGN_KEY, "referenced item does not exist", ErrorKind.UNKNOWN_RESOURCE),
)

SQLITE_RULES = (
    PatternRule("duplicate", SQLITE_UNIQUE, "conflict duplicate {field}"),
    PatternRule("not_null", SQLITE_NOT_NULL, "missing required {field} field"),
    PatternRule("foreign_key", SQLITE_FOREIGN_KEY, "referenced item does not exist", ErrorKind.UNKNOWN_RESOURCE),
)


# -----------------------
# Helpers
# -----------------------

def extract_params(pattern: re.Pattern[str], text: str) -> dict[str, str]:
    """
    Named groups of the first match of `pattern` in `text`.
    Groups that did not participate map to "" so callers never see None; no match gives {}.
    """
    match = pattern.search(text)
    if match is None:
        return {}
    return {name: value or "" for name, value in match.groupdict().items()}


def driver_message(db_err: BaseException) -> str:
    """
    Engine text of a driver error.

    SQLAlchemy wraps DBAPI errors and keeps the driver's exception on `.orig`. MySQL drivers
    carry `(errno, text)` in `args`, rendered here as "Error <errno>: <text>".
    """
    orig = getattr(db_err, "orig", None) or db_err
    args = getattr(orig, "args", ())
    if len(args) >= 2 and isinstance(args[0], int) and isinstance(args[1], str):
        return f"Error {args[0]}: {args[1]}"
    return str(orig)


# -----------------------
# Classifiers
# -----------------------

class DialectErrorClassifier(DriverErrorClassifier):
    """Generic classification first, then the dialect's message patterns."""

    rules: tuple[PatternRule, ...] = ()

    def __init__(self, dialect: str, rules: tuple[PatternRule, ...] | None = None):
        super().__init__(dialect)
        self.generic = DriverErrorClassifier(dialect)
        if rules is not None:
            self.rules = rules

    def match_rules(self, db_err: BaseException) -> DomainError | None:
        text = driver_message(db_err)
        for rule in self.rules:
            if not rule.pattern.search(text):
                continue
            params = extract_params(rule.pattern, text)
            return rule.kind.with_message(rule.message.format(field=params.get("field", "")))
        return None

    def match_known(self, db_err: BaseException, message: str) -> DomainError | None:
        known = self.generic.match_known(db_err, message)
        if known is not None:
            return known
        return self.match_rules(db_err)

    def classify(self, db_err: BaseException | None, message: str) -> DomainError | None:
        if db_err is None:
            return None
        known = self.match_known(db_err, message)
        if known is not None:
            return known
        return ErrorKind.INTERNAL_ERROR.wrap(db_err, message)


class MySQLErrorClassifier(DialectErrorClassifier):
    rules = MYSQL_RULES

    def __init__(self):
        super().__init__("mysql")


class SQLiteErrorClassifier(DialectErrorClassifier):
    rules = SQLITE_RULES

    def __init__(self):
        super().__init__("sqlite")


def classifier_for_dialect(dialect: str) -> DriverErrorClassifier:
    """Pick the classifier for a SQLAlchemy dialect name (`engine.dialect.name`)."""
    name = (dialect or "").lower()
    if name in ("mysql", "mariadb"):
        return MySQLErrorClassifier()
    if name == "sqlite":
        return SQLiteErrorClassifier()
    return DriverErrorClassifier(name or "generic")
