"""Error taxonomy shared by services and mapped to HTTP responses in main."""

from __future__ import annotations

from fastapi import status


class CareError(Exception):
    """Base class for failures surfaced to callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotInitializedError(CareError):
    """The store or another collaborator is not configured yet."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class NotAuthenticatedError(CareError):
    """A mutating call was attempted without a current identity."""

    status_code = status.HTTP_401_UNAUTHORIZED


class CareValidationError(CareError):
    """Required text was empty. ``notice`` is the message shown to the user."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, notice: str | None = None) -> None:
        super().__init__(message)
        self.notice = notice or message


class NotFoundError(CareError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(CareError):
    """Underlying store or transport failure."""

    status_code = status.HTTP_502_BAD_GATEWAY
