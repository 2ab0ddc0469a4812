"""
FastAPI dependency providers wiring session -> repository -> service.

    @router.get("/users/{username}")
    async def profile(username: str, users: UserService = Depends(get_user_service)):
        return await users.get_user_profile(username)
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from story_users.database.session import get_async_session
from story_users.domain.user import UserService
from story_users.exceptions.dialects import classifier_for_dialect
from story_users.repositories.user_repository import UserRepository
from story_users.services.user_service import UserUseCase
from story_users.utils.random_id import UUIDGenerator


async def get_user_repository(db: AsyncSession = Depends(get_async_session)) -> UserRepository:
    # classifier follows the engine actually bound to the session
    dialect = db.bind.dialect.name if db.bind is not None else "mysql"
    return UserRepository(db, UUIDGenerator(), classifier_for_dialect(dialect))


async def get_user_service(repo: UserRepository = Depends(get_user_repository)) -> UserService:
    return UserUseCase(repo)
