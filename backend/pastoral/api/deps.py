from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select

from pastoral.core.config import settings
from pastoral.core.security import verify_token
from pastoral.db import SessionDep
from pastoral.models import User
from pastoral.schemas import Identity
from pastoral.services.notices import NoticeBoard
from pastoral.services.store import DocumentStore

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_STR}/auth/login")


def get_current_user(
    session: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    try:
        payload = verify_token(token, token_type="access")
        user_id = payload.get("sub")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    user = session.exec(select(User).where(User.id == user_uuid)).one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or missing user",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_identity(user: User = Depends(get_current_user)) -> Identity:
    return Identity(id=str(user.id), display_name=user.display_name, email=user.email)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_notices(request: Request) -> NoticeBoard:
    return request.app.state.notices


CurrentUser = Annotated[User, Depends(get_current_user)]
IdentityDep = Annotated[Identity, Depends(get_identity)]
StoreDep = Annotated[DocumentStore, Depends(get_store)]
NoticesDep = Annotated[NoticeBoard, Depends(get_notices)]
