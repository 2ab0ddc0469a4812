"""
MySQL-backed user repository.

Every operation runs inside `db_error_handler`, so callers only ever see `DomainError`s:
not-found lookups become UNKNOWN_RESOURCE, duplicate/oversized values become INVALID_PARAM
and everything else becomes INTERNAL_ERROR with the driver error kept as its cause.

The repository flushes but never commits; the transaction belongs to the caller
(see `story_users.database.session.get_async_session`).
"""

import logging
import time

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from story_users.domain.user import User, UserRepository as UserRepositoryContract
from story_users.exceptions.classifier import DriverErrorClassifier
from story_users.exceptions.dialects import MySQLErrorClassifier
from story_users.exceptions.mapper import db_error_handler
from story_users.models.user import UserRow, followership, utcnow
from story_users.utils.random_id import IDGenerator

logger = logging.getLogger(__name__)


class UserRepository(UserRepositoryContract):
    """
    Repository for `users` rows.

    Args:
        db: the async session (one per request)
        id_generator: source of new user ids
        classifier: driver error classifier; MySQL unless told otherwise
    """

    def __init__(
        self,
        db: AsyncSession,
        id_generator: IDGenerator,
        classifier: DriverErrorClassifier | None = None,
    ):
        self.db = db
        self.id_generator = id_generator
        self.classifier = classifier or MySQLErrorClassifier()

    def _errors(self, debug: str, *, rollback: bool = False):
        return db_error_handler(self.db, self.classifier, debug, rollback=rollback)

    def generate_id(self) -> int:
        return self.id_generator.uint64()

    async def _fetch_one(self, *criteria) -> UserRow:
        # SELECT * FROM users WHERE ... ; raises NoResultFound when absent
        query = select(UserRow).where(*criteria).execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one()

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def get_by_id(self, user_id: int) -> User:
        async with self._errors("userrepo: find user by id fail"):
            row = await self._fetch_one(UserRow.id == user_id)
        return row.to_entity()

    async def get_by_email(self, email: str) -> User:
        async with self._errors("userrepo: find user by email fail"):
            row = await self._fetch_one(UserRow.email == email)
        return row.to_entity()

    async def get_by_username(self, username: str) -> User:
        async with self._errors("userrepo: find user by username fail"):
            row = await self._fetch_one(UserRow.username == username)
        return row.to_entity()

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def insert_one(self, user: User) -> User:
        """
        Insert a new user. The id comes from the ID generator, exactly once, here.
        Duplicate email/username surface as INVALID_PARAM ("conflict duplicate <key>").
        """
        row = UserRow.for_insert(user)
        row.id = self.generate_id()
        start = time.perf_counter()

        # INSERT INTO users (...) VALUES (...)
        async with self._errors("userrepo: insert one user fail", rollback=True):
            self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)

        logger.info(
            "userrepo.insert.success",
            extra={"user_id": row.id, "duration_ms": int((time.perf_counter() - start) * 1000)},
        )
        return row.to_entity()

    async def update_one(self, user_id: int, user: User) -> User:
        """
        Update the mutable profile fields (name, profile image, location, description).
        Returns the stored user after the update.
        """
        values = UserRow.update_values(user)

        # UPDATE users SET name = ?, ..., updated_at = ? WHERE id = ?
        async with self._errors("userrepo: update one user fail", rollback=True):
            result = await self.db.execute(
                update(UserRow).where(UserRow.id == user_id).values(**values)
            )
            if result.rowcount == 0:
                raise NoResultFound(f"no users row with id {user_id}")
            row = await self._fetch_one(UserRow.id == user_id)

        logger.info("userrepo.update.success", extra={"user_id": user_id, "fields": sorted(values)})
        return row.to_entity()

    async def update_username(self, user_id: int, username: str) -> User:
        """Rename a user; a taken username surfaces as INVALID_PARAM."""
        async with self._errors("userrepo: update username fail", rollback=True):
            result = await self.db.execute(
                update(UserRow)
                .where(UserRow.id == user_id)
                .values(username=username, updated_at=utcnow())
            )
            if result.rowcount == 0:
                raise NoResultFound(f"no users row with id {user_id}")
            row = await self._fetch_one(UserRow.id == user_id)

        logger.info("userrepo.update_username.success", extra={"user_id": user_id})
        return row.to_entity()

    async def delete_one(self, user_id: int) -> None:
        # DELETE FROM users WHERE id = ?  (followership rows cascade)
        async with self._errors("userrepo: delete one user fail", rollback=True):
            await self._release_followership(user_id)
            result = await self.db.execute(delete(UserRow).where(UserRow.id == user_id))
            if result.rowcount == 0:
                raise NoResultFound(f"no users row with id {user_id}")

        logger.info("userrepo.delete.success", extra={"user_id": user_id})

    # =================================================================================================================
    # Followership
    # =================================================================================================================

    async def _bump_counters(self, followed_id: int, follower_id: int, delta: int) -> None:
        await self.db.execute(
            update(UserRow)
            .where(UserRow.id == followed_id)
            .values(followers_count=UserRow.followers_count + delta)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            update(UserRow)
            .where(UserRow.id == follower_id)
            .values(following_count=UserRow.following_count + delta)
            .execution_options(synchronize_session=False)
        )

    async def _release_followership(self, user_id: int) -> None:
        """Take `user_id` out of the counters of everyone it follows or is followed by."""
        followed_by_user = select(followership.c.followed_id).where(followership.c.follower_id == user_id)
        following_user = select(followership.c.follower_id).where(followership.c.followed_id == user_id)

        await self.db.execute(
            update(UserRow)
            .where(UserRow.id.in_(followed_by_user))
            .values(followers_count=UserRow.followers_count - 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.execute(
            update(UserRow)
            .where(UserRow.id.in_(following_user))
            .values(following_count=UserRow.following_count - 1)
            .execution_options(synchronize_session=False)
        )

    async def relate_users(self, followed_id: int, follower_id: int) -> None:
        """Record that `follower_id` follows `followed_id` and bump both counters."""
        async with self._errors("userrepo: relate users fail", rollback=True):
            await self.db.execute(
                insert(followership).values(follower_id=follower_id, followed_id=followed_id)
            )
            await self._bump_counters(followed_id, follower_id, 1)

        logger.info("userrepo.relate.success", extra={"followed_id": followed_id, "follower_id": follower_id})

    async def unrelate_users(self, followed_id: int, follower_id: int) -> None:
        """Remove the follow relation; UNKNOWN_RESOURCE when it does not exist."""
        async with self._errors("userrepo: unrelate users fail", rollback=True):
            result = await self.db.execute(
                delete(followership).where(
                    followership.c.follower_id == follower_id,
                    followership.c.followed_id == followed_id,
                )
            )
            if result.rowcount == 0:
                raise NoResultFound(f"user {follower_id} does not follow {followed_id}")
            await self._bump_counters(followed_id, follower_id, -1)

        logger.info("userrepo.unrelate.success", extra={"followed_id": followed_id, "follower_id": follower_id})
