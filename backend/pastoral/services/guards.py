"""Checks shared by every mutating operation, applied before any store call."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from pastoral.core.errors import (
    CareError,
    CareValidationError,
    NotAuthenticatedError,
    NotInitializedError,
)
from pastoral.schemas.user import Identity
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore

logger = logging.getLogger(__name__)


def require_store(store: Optional[DocumentStore]) -> DocumentStore:
    if store is None or store.engine is None:
        raise NotInitializedError("Store is not initialized")
    return store


def require_identity(identity: Optional[Identity], action: str) -> Identity:
    if identity is None:
        raise NotAuthenticatedError(f"User must be authenticated to {action}")
    return identity


def require_text(
    value: Optional[str],
    notices: NoticeBoard,
    notice: str,
    field: str,
) -> str:
    if value is None or not value.strip():
        notices.error(notice)
        raise CareValidationError(f"{field} cannot be empty", notice)
    return value.strip()


@contextmanager
def reported(notices: NoticeBoard, action: str, failure_notice: str) -> Iterator[None]:
    """Log a failed store call, post one error notice and re-raise."""
    try:
        yield
    except CareError as exc:
        logger.error(f"Error {action}: {exc.message}")
        notices.error(failure_notice)
        raise
