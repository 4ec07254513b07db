from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

NoticeKind = Literal["success", "error", "info", "warning"]


class Notice(BaseModel):
    """One-shot user notification (toast)."""

    model_config = ConfigDict(frozen=True)

    id: str
    message: str
    kind: NoticeKind = "info"
    duration: int = 5000
    created_at: datetime
