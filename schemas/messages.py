from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, StrictStr


class Envelope(BaseModel):
    """Any inbound frame; only ``type`` is required, everything else is carried along."""

    model_config = ConfigDict(extra="allow")

    type: StrictStr


class RoomRequest(BaseModel):
    """Inbound ``create`` / ``join``."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["create", "join"]
    # Any JSON value; non-string codes are rejected as code-taken / not-found
    code: Any = None


class CreatedMessage(BaseModel):
    type: Literal["created"] = "created"
    code: str

class JoinedMessage(BaseModel):
    type: Literal["joined"] = "joined"
    code: str

class PeerJoinedMessage(BaseModel):
    type: Literal["peer-joined"] = "peer-joined"

class HangUpMessage(BaseModel):
    type: Literal["hang-up"] = "hang-up"

class RoomClosedMessage(BaseModel):
    type: Literal["room-closed"] = "room-closed"

class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    reason: Literal["code-taken", "not-found", "room-full"]
