"""
Repository layer: data access behind the domain's `UserRepository` contract.

Usage:
    from story_users.repositories import UserRepository
"""

from .user_repository import UserRepository

__all__ = ["UserRepository"]
