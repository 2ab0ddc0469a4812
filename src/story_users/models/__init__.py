"""
Single import point for the ORM row classes, so every table is registered on `Base.metadata`:

    from story_users.models import UserRow, followership
"""

from .user import UserRow, followership, user_columns

__all__ = [
    "UserRow",
    "followership",
    "user_columns",
]
