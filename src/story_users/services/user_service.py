"""
User use-cases on top of a `UserRepository`.

The service validates input the repository cannot judge (blank names, following oneself) and
composes repository calls. Repository DomainErrors propagate unchanged.
"""

import logging

from story_users.domain.errors import DomainError, ErrorKind
from story_users.domain.user import User, UserRepository, UserService

logger = logging.getLogger(__name__)


class UserUseCase(UserService):
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def get_user_profile(self, username: str) -> User:
        user = await self.user_repo.get_by_username(username)
        user.get_url()
        return user

    async def get_or_create_user(self, email: str, user: User) -> User:
        """
        Return the user registered under `email`, creating it from `user` on first sight.
        Only a missing user leads to an insert; any other lookup failure is raised as is.
        """
        try:
            return await self.user_repo.get_by_email(email)
        except DomainError as err:
            if err.kind is not ErrorKind.UNKNOWN_RESOURCE:
                raise

        new_user = user.model_copy(update={"email": email, "id": None})
        created = await self.user_repo.insert_one(new_user)
        logger.info("usecase.user.created", extra={"user_id": created.id})
        return created

    async def delete_user(self, user_id: int) -> None:
        await self.user_repo.delete_one(user_id)

    async def update_username(self, user_id: int, user: User) -> User:
        username = user.username.strip()
        if not username:
            raise ErrorKind.INVALID_PARAM.with_message("username must not be empty")
        return await self.user_repo.update_username(user_id, username)

    async def update_profile(self, user_id: int, user: User) -> User:
        return await self.user_repo.update_one(user_id, user)

    # --- followership ---

    async def follow_user(self, user_id: int, followed_username: str) -> User:
        """Make `user_id` follow `followed_username`; returns the followed user, refreshed."""
        followed = await self.user_repo.get_by_username(followed_username)
        if followed.id == user_id:
            raise ErrorKind.INVALID_PARAM.with_message("user cannot follow themselves")

        await self.user_repo.relate_users(followed.id, user_id)
        return await self.user_repo.get_by_id(followed.id)

    async def unfollow_user(self, user_id: int, followed_username: str) -> User:
        followed = await self.user_repo.get_by_username(followed_username)
        if followed.id == user_id:
            raise ErrorKind.INVALID_PARAM.with_message("user cannot unfollow themselves")

        await self.user_repo.unrelate_users(followed.id, user_id)
        return await self.user_repo.get_by_id(followed.id)
