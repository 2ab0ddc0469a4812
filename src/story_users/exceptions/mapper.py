import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from story_users.domain.errors import DomainError

from .classifier import DriverErrorClassifier

logger = logging.getLogger(__name__)


# -----------------------
# Async context manager to DRY error translation in repositories
# -----------------------
@asynccontextmanager
async def db_error_handler(
    db: AsyncSession,
    classifier: DriverErrorClassifier,
    debug: str,
    *,
    rollback: bool = False,
):
    """
    Usage:
        async with db_error_handler(self.db, self.classifier, "userrepo: insert one user fail", rollback=True):
            ... DB ops ...

    Any exception leaving the block is classified into a DomainError and raised from its
    annotated cause. DomainErrors raised inside the block pass through untouched. With
    `rollback=True` the session is rolled back before the translated error is raised.
    """
    try:
        yield
    except DomainError:
        if rollback:
            await _safe_rollback(db, debug)
        raise
    except Exception as exc:
        if rollback:
            await _safe_rollback(db, debug)

        app_err = classifier.classify(exc, debug)
        _log_translated(classifier, app_err, debug)

        # not-found errors carry no cause on purpose; don't re-attach the driver error
        raise app_err from app_err.cause


async def _safe_rollback(db: AsyncSession, debug: str) -> None:
    try:
        await db.rollback()
    except Exception:
        # Unusual; keep the stack but let the original failure win.
        logger.exception("repo.rollback.failed", extra={"debug": debug})


def _log_translated(classifier: DriverErrorClassifier, app_err: DomainError, debug: str) -> None:
    context = {
        "dialect": classifier.dialect,
        "error_kind": app_err.kind.name,
        "code": app_err.code,
        "debug": debug,
    }
    if app_err.http_status < 500:
        # client-level outcome (not found, duplicate, too long): expected, no stack trace
        logger.info("repo.db_error.client", extra=context)
        return

    cause = app_err.cause
    logger.error(
        "repo.db_error.internal",
        extra=context,
        exc_info=(type(cause), cause, cause.__traceback__) if cause is not None else None,
    )
