from learnhub.models.enums import AuthProvider, UserRole
from learnhub.models.refresh_token import RefreshToken
from learnhub.models.user import User

__all__ = [
    "AuthProvider",
    "RefreshToken",
    "User",
    "UserRole",
]
