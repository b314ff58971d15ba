from typing import Optional

from backend import Room, RoomRegistry
from connection import Connection
from errors import RoomFull, RoomNotFound
from expiry import ExpiryScheduler
from logging_config import get_logger
from schemas.messages import (
    CreatedMessage,
    HangUpMessage,
    JoinedMessage,
    PeerJoinedMessage,
    RoomClosedMessage,
)

logger = get_logger(__name__)

RELAY_TYPES = ("offer", "answer", "ice-candidate")


def _deliver(connection: Optional[Connection], message: dict) -> bool:
    if connection is None or not connection.is_open:
        return False
    connection.send(message)
    return True


class RoomStateMachine:
    """Occupancy rules and relay routing for every room.

    A room is Open (caller only, expiry armed), Paired (caller and callee, no
    expiry) or Closed (gone from the registry). None of the methods await, so
    on a single event loop each transition is atomic.
    """

    def __init__(self, registry: RoomRegistry, scheduler: ExpiryScheduler):
        self.registry = registry
        self.scheduler = scheduler

    def create(self, code: str, caller: Connection) -> Room:
        room = self.registry.create_room(code, caller)
        self.scheduler.schedule(code, self.expire)
        logger.info(f"Room {code} created by connection {caller.connection_id}")
        _deliver(caller, CreatedMessage(code=code).model_dump())
        return room

    def join(self, code: str, callee: Connection) -> Room:
        room = self.registry.get_room(code)
        if room is None:
            logger.warning(f"Join rejected: room {code!r} not found")
            raise RoomNotFound(code)
        # A caller cannot also take the callee seat of its own room
        if room.callee is not None or room.caller is callee:
            logger.warning(f"Join rejected: room {code} is full")
            raise RoomFull(code)

        room.callee = callee
        self.scheduler.cancel(code)
        logger.info(f"Connection {callee.connection_id} joined room {code}")
        _deliver(room.caller, PeerJoinedMessage().model_dump())
        _deliver(callee, JoinedMessage(code=code).model_dump())
        return room

    def occupies(self, code: Optional[str], role: Optional[str], connection: Connection) -> bool:
        """True if ``connection`` is still the ``role`` occupant of room ``code``."""
        room = self.registry.get_room(code)
        return room is not None and role is not None and room.occupant(role) is connection

    def relay(self, code: str, role: str, message: dict, sender: Connection) -> bool:
        room = self.registry.get_room(code)
        if room is None or room.occupant(role) is not sender:
            logger.debug(f"Dropping {message.get('type')} from {role}: not an occupant of room {code}")
            return False
        delivered = _deliver(room.peer_of(role), message)
        if not delivered:
            logger.debug(f"Dropping {message.get('type')} in room {code}: no open peer for {role}")
        return delivered

    def hang_up(self, code: str, role: str, sender: Connection) -> bool:
        """Peer-initiated teardown, also used for disconnects."""
        room = self.registry.get_room(code)
        if room is None or room.occupant(role) is not sender:
            logger.debug(f"Ignoring hang-up from {role}: not an occupant of room {code}")
            return False
        _deliver(room.peer_of(role), HangUpMessage().model_dump())
        self.registry.delete_room(code)
        self.scheduler.cancel(code)
        logger.info(f"Room {code} closed by {role} hang-up")
        return True

    def expire(self, code: str) -> bool:
        room = self.registry.get_room(code)
        if room is None or room.callee is not None:
            logger.debug(f"Expiry for room {code} ignored: room is gone or paired")
            return False
        logger.info(f"Room {code} expired without a callee")
        return self.close(code)

    def close(self, code: str) -> bool:
        """Full teardown: tell every still-connected occupant the room is gone."""
        room = self.registry.delete_room(code)
        self.scheduler.cancel(code)
        if room is None:
            return False
        notice = RoomClosedMessage().model_dump()
        for occupant in (room.caller, room.callee):
            _deliver(occupant, notice)
        logger.info(f"Room {code} closed")
        return True

    def close_all(self) -> int:
        closed = 0
        for code in self.registry.codes():
            if self.close(code):
                closed += 1
        self.scheduler.cancel_all()
        return closed
