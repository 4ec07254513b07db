from .config import settings
from .errors import (
    CareError,
    CareValidationError,
    NotAuthenticatedError,
    NotFoundError,
    NotInitializedError,
    StoreError,
)
from .security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_token,
    verify_password,
)

__all__ = [
    "settings",
    "CareError",
    "CareValidationError",
    "NotAuthenticatedError",
    "NotFoundError",
    "NotInitializedError",
    "StoreError",
    "create_access_token",
    "create_refresh_token",
    "get_password_hash",
    "verify_token",
    "verify_password",
]
