from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from story_users.database.base import Base, UInt64
from story_users.domain.user import User
from story_users.utils.naming import to_snake_case

DEFAULT_PROFILE_IMG_URL = "/icon/defaultpic"
DEFAULT_LOCATION = "Worldwide"
DEFAULT_DESCRIPTION = "The author tend to keep air of mystery of him/herself"

# Left unset on insert when blank so the column default (or NULL) applies
OPTIONAL_FIELDS = ("profile_img_url", "location", "description", "twitter_name", "facebook_name")
# The only fields an update may change; id, email, username and counters are immutable here
UPDATABLE_FIELDS = ("name", "profile_img_url", "location", "description")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Many-to-many: follower_id follows followed_id
followership = Table(
    "followership",
    Base.metadata,
    Column("follower_id", UInt64, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("followed_id", UInt64, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class UserRow(Base):
    """
    Persisted form of a User (table `users`).

    Column declaration order is the physical column order; `user_columns()` and any code
    zipping values to columns rely on it.
    """
    __tablename__ = "users"

    # generated by the ID generator before insert, never by the database
    id: Mapped[int] = mapped_column(UInt64, primary_key=True, autoincrement=False)

    email: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(40), index=True, nullable=False)

    profile_img_url: Mapped[str | None] = mapped_column(
        String(128), default=DEFAULT_PROFILE_IMG_URL, server_default=DEFAULT_PROFILE_IMG_URL
    )
    location: Mapped[str | None] = mapped_column(
        String(40), default=DEFAULT_LOCATION, server_default=DEFAULT_LOCATION
    )
    description: Mapped[str | None] = mapped_column(
        String(256), default=DEFAULT_DESCRIPTION, server_default=DEFAULT_DESCRIPTION
    )

    # Relationship only: lives in `followership`, not a column of `users`.
    # Writes go through the association table directly (see UserRepository.relate_users).
    followers: Mapped[list[UserRow]] = relationship(
        "UserRow",
        secondary=followership,
        primaryjoin=lambda: UserRow.id == followership.c.followed_id,
        secondaryjoin=lambda: UserRow.id == followership.c.follower_id,
        viewonly=True,
        lazy="raise",
    )

    followers_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    following_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    twitter_name: Mapped[str | None] = mapped_column(String(20))
    facebook_name: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # --- entity <-> row ---

    @classmethod
    def for_insert(cls, user: User, now: datetime | None = None) -> UserRow:
        """
        Row for a new user. Counters start at 0, both timestamps are `now`.
        `id` stays unset: the repository assigns it from the ID generator.
        """
        now = now or utcnow()
        values = {
            "email": user.email,
            "username": user.username,
            "name": user.name,
            "followers_count": 0,
            "following_count": 0,
            "created_at": now,
            "updated_at": now,
        }
        for field in OPTIONAL_FIELDS:
            value = getattr(user, field)
            if value:
                values[field] = value
        return cls(**values)

    @staticmethod
    def update_values(user: User, now: datetime | None = None) -> dict[str, object]:
        """
        UPDATE payload: the non-blank mutable fields of `user` plus a fresh `updated_at`.
        Blank fields are left out, so they keep their stored value.
        """
        values: dict[str, object] = {}
        for field in UPDATABLE_FIELDS:
            value = getattr(user, field)
            if value:
                values[field] = value
        values["updated_at"] = now or utcnow()
        return values

    def to_entity(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            username=self.username,
            name=self.name,
            profile_img_url=self.profile_img_url or "",
            location=self.location or "",
            description=self.description or "",
            followers_count=self.followers_count or 0,
            following_count=self.following_count or 0,
            twitter_name=self.twitter_name or "",
            facebook_name=self.facebook_name or "",
        )

    def __repr__(self) -> str:
        return f"<UserRow(id={self.id!r}, username={self.username!r}, email={self.email!r})>"


@lru_cache(maxsize=None)
def user_columns() -> tuple[str, ...]:
    """
    Column names of `users`, in declaration order, derived from the mapped field names.
    Relationship fields (`followers`) have no column and never appear.
    """
    mapper = sa_inspect(UserRow)
    # order is declaration order; keys are already snake_case, so the conversion is identity here
    return tuple(
        to_snake_case(mapper.get_property_by_column(column).key)
        for column in UserRow.__table__.columns
    )
