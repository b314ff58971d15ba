from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from connection import Connection
from constants import ROLE_CALLER
from errors import CodeTaken
from logging_config import get_logger

logger = get_logger(__name__)

STATE_OPEN = "open"
STATE_PAIRED = "paired"


@dataclass(eq=False)
class Room:
    code: str
    caller: Connection
    callee: Optional[Connection] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def state(self) -> str:
        return STATE_PAIRED if self.callee is not None else STATE_OPEN

    def occupant(self, role: str) -> Optional[Connection]:
        return self.caller if role == ROLE_CALLER else self.callee

    def peer_of(self, role: str) -> Optional[Connection]:
        return self.callee if role == ROLE_CALLER else self.caller


class RoomRegistry:
    """In-memory map of room code -> Room. Rooms live only as long as the process."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        logger.info("Initializing in-memory RoomRegistry")

    def create_room(self, code: str, caller: Connection) -> Room:
        if not isinstance(code, str) or not code or code in self._rooms:
            logger.info(f"Room creation rejected: code {code!r} is empty or taken")
            raise CodeTaken(code)
        room = Room(code=code, caller=caller)
        self._rooms[code] = room
        logger.debug(f"Room {code} created (active rooms: {len(self._rooms)})")
        return room

    def get_room(self, code: str) -> Optional[Room]:
        if not isinstance(code, str):
            return None
        return self._rooms.get(code)

    def delete_room(self, code: str) -> Optional[Room]:
        room = self._rooms.pop(code, None)
        if room is None:
            logger.debug(f"Room {code} already gone, nothing to delete")
        else:
            logger.debug(f"Room {code} deleted (active rooms: {len(self._rooms)})")
        return room

    def codes(self) -> List[str]:
        return list(self._rooms)

    def __contains__(self, code) -> bool:
        return code in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
