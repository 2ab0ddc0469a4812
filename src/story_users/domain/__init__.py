from .errors import AnnotatedError, DomainError, ErrorKind
from .user import User, UserRepository, UserService

__all__ = [
    "AnnotatedError",
    "DomainError",
    "ErrorKind",
    "User",
    "UserRepository",
    "UserService",
]
