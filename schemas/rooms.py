from pydantic import BaseModel
from typing import Literal, Optional


class RoomDetailsResponse(BaseModel):
    code: str
    state: Literal["open", "paired"]
    created_at: str
    expires_at: Optional[str] = None
    has_callee: bool

class HealthResponse(BaseModel):
    status: str
    rooms: int
