from .user_service import UserUseCase

__all__ = ["UserUseCase"]
