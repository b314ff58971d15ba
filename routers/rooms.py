from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/{code}", response_model=RoomDetailsResponse)
async def get_room_details(code: str, request: Request):
    """
    Get the current state of a room.

    Returns:
    - code: Room code
    - state: "open" (waiting for a callee) or "paired"
    - created_at: Room creation timestamp
    - expires_at: When an unclaimed room will be destroyed (null once paired)
    - has_callee: Whether a second peer has joined
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {code} from {client_host}")

    rooms = request.app.state.rooms
    room = rooms.registry.get_room(code)
    if not room:
        logger.info(f"Room details failed: Room {code} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    expires_at = rooms.scheduler.deadline(code)
    return RoomDetailsResponse(
        code=room.code,
        state=room.state,
        created_at=room.created_at.isoformat(),
        expires_at=expires_at.isoformat() if expires_at else None,
        has_callee=room.callee is not None,
    )
