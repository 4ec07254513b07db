from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Response, status

from pastoral.api.deps import CurrentUser, NoticesDep
from pastoral.schemas import Notice

router = APIRouter()


@router.get("/", response_model=List[Notice], summary="Notices still on screen")
def list_notices(notices: NoticesDep, current_user: CurrentUser) -> List[Notice]:
    return list(notices.notices)


@router.delete(
    "/{notice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Dismiss notice",
)
def dismiss_notice(notice_id: str, notices: NoticesDep, current_user: CurrentUser) -> Response:
    if not notices.dismiss(notice_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notice not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Dismiss all notices",
)
def clear_notices(notices: NoticesDep, current_user: CurrentUser) -> Response:
    notices.clear_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
