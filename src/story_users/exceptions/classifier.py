"""
Generic driver-error classifier.

Translates errors raised by the persistence collaborator (SQLAlchemy) into the application
error catalog. Only failure categories that SQLAlchemy exposes as distinct exception types are
recognized here; engine-specific message parsing lives in `dialects.py`.

| SQLAlchemy error                                   | Domain error                    |
| -------------------------------------------------- | ------------------------------- |
| NoResultFound                                      | UNKNOWN_RESOURCE (cause dropped) |
| PendingRollbackError, ResourceClosedError          | INTERNAL_ERROR (debug message)  |
| ProgrammingError, CompileError                     | INTERNAL_ERROR (debug message)  |
| UnmappedInstanceError, UnmappedClassError, ...     | INTERNAL_ERROR (defect hint)    |
| anything else                                      | INTERNAL_ERROR (uncaught hint)  |

Classification is pure: no logging, no I/O, never raises.
"""

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import exc as orm_exc

from story_users.domain.errors import DomainError, ErrorKind

NOT_FOUND_MESSAGE = "item not found with specified identifier/field"
UNADDRESSABLE_HINT = (
    "repository: fatal human error: pass a mapped instance (UserRow(...)), "
    "not a plain value, to the session"
)
UNCAUGHT_HINT = "repository: fatal uncaught db error"

NOT_FOUND_ERRORS = (sa_exc.NoResultFound,)
TRANSACTION_ERRORS = (sa_exc.PendingRollbackError, sa_exc.ResourceClosedError)
STATEMENT_ERRORS = (sa_exc.ProgrammingError, sa_exc.CompileError)
UNADDRESSABLE_ERRORS = (
    orm_exc.UnmappedInstanceError,
    orm_exc.UnmappedClassError,
    sa_exc.NoInspectionAvailable,
)


class DriverErrorClassifier:
    """Classifier for errors every SQLAlchemy dialect reports the same way."""

    def __init__(self, dialect: str = "generic"):
        self.dialect = dialect

    def is_not_found(self, db_err: BaseException) -> bool:
        return isinstance(db_err, NOT_FOUND_ERRORS)

    def is_transaction_error(self, db_err: BaseException) -> bool:
        return isinstance(db_err, TRANSACTION_ERRORS)

    def is_statement_error(self, db_err: BaseException) -> bool:
        return isinstance(db_err, STATEMENT_ERRORS)

    def is_unaddressable(self, db_err: BaseException) -> bool:
        return isinstance(db_err, UNADDRESSABLE_ERRORS)

    def match_known(self, db_err: BaseException, message: str) -> DomainError | None:
        """
        Classify only the recognized categories, in order. Returns None when `db_err`
        belongs to none of them, leaving the decision to the caller.
        """
        if self.is_not_found(db_err):
            # routine case: no cause, nothing internal leaks to the client
            return ErrorKind.UNKNOWN_RESOURCE.with_message(NOT_FOUND_MESSAGE)
        if self.is_transaction_error(db_err):
            return ErrorKind.INTERNAL_ERROR.wrap(db_err, message)
        if self.is_statement_error(db_err):
            return ErrorKind.INTERNAL_ERROR.wrap(db_err, message)
        if self.is_unaddressable(db_err):
            return ErrorKind.INTERNAL_ERROR.wrap(db_err, UNADDRESSABLE_HINT)
        return None

    def classify(self, db_err: BaseException | None, message: str) -> DomainError | None:
        """Convert `db_err` to a DomainError; None passes through as None."""
        if db_err is None:
            return None
        known = self.match_known(db_err, message)
        if known is not None:
            return known
        return ErrorKind.INTERNAL_ERROR.wrap(db_err, UNCAUGHT_HINT)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(dialect={self.dialect!r})"
