"""
User entity and the contracts of the layers that serve it.

`UserService` is what the transport layer consumes, `UserRepository` is what the service layer
consumes. Both raise `DomainError` (never a raw driver error) on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

UINT64_MAX = 2**64 - 1


class User(BaseModel):
    """Platform user as seen by services and clients."""

    # assigned once by the ID generator on insert; None until then
    id: int | None = Field(default=None, ge=0, le=UINT64_MAX)
    email: str = ""
    username: str = ""
    name: str = ""
    url: str = ""
    profile_img_url: str = ""
    location: str = ""
    description: str = ""
    is_me: bool = False
    followers_count: int = 0
    following_count: int = 0
    twitter_name: str = ""
    facebook_name: str = ""

    def get_url(self) -> str:
        """Profile URL, derived from the username (and cached on `url`) when not set."""
        if not self.url:
            self.url = f"/@{self.username}"
        return f"/@{self.username}"


class UserService(ABC):
    """Use-cases offered to the transport layer."""

    # --- queries ---
    @abstractmethod
    async def get_user_profile(self, username: str) -> User: ...

    # --- writers ---
    @abstractmethod
    async def get_or_create_user(self, email: str, user: User) -> User: ...

    @abstractmethod
    async def delete_user(self, user_id: int) -> None: ...

    # --- updaters ---
    @abstractmethod
    async def update_username(self, user_id: int, user: User) -> User: ...

    @abstractmethod
    async def update_profile(self, user_id: int, user: User) -> User: ...

    # --- followership ---
    @abstractmethod
    async def follow_user(self, user_id: int, followed_username: str) -> User: ...

    @abstractmethod
    async def unfollow_user(self, user_id: int, followed_username: str) -> User: ...


class UserRepository(ABC):
    """Persistence operations for users (db, cache, ...)."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User: ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User: ...

    @abstractmethod
    async def get_by_username(self, username: str) -> User: ...

    @abstractmethod
    async def insert_one(self, user: User) -> User: ...

    @abstractmethod
    async def update_one(self, user_id: int, user: User) -> User: ...

    @abstractmethod
    async def update_username(self, user_id: int, username: str) -> User: ...

    @abstractmethod
    async def delete_one(self, user_id: int) -> None: ...

    @abstractmethod
    async def relate_users(self, followed_id: int, follower_id: int) -> None: ...

    @abstractmethod
    async def unrelate_users(self, followed_id: int, follower_id: int) -> None: ...
