from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class CreateSessionRequest(BaseModel):
    class_id: int


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    class_id: int
    created_at: datetime
    expires_at: datetime
    state: Optional[str] = None


class OpenedSessionOut(SessionOut):
    token: str
    qr_code: str


class UserSessionsOut(BaseModel):
    active: List[SessionOut]
    expired: List[SessionOut]
