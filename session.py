import json
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from connection import Connection
from constants import ROLE_CALLEE, ROLE_CALLER
from errors import MalformedMessage, SignalingError
from logging_config import get_logger
from schemas.messages import Envelope, ErrorMessage, RoomRequest
from signaling import RELAY_TYPES, RoomStateMachine

logger = get_logger(__name__)


@dataclass
class Session:
    code: Optional[str] = None
    role: Optional[str] = None

    @property
    def bound(self) -> bool:
        return self.code is not None and self.role is not None

    def bind(self, code: str, role: str):
        self.code = code
        self.role = role

    def unbind(self):
        self.code = None
        self.role = None


def decode_message(raw) -> dict:
    """Decode one inbound frame (text, or UTF-8 bytes) into a dict with a string ``type``."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"binary frame is not UTF-8: {e}") from e
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedMessage(f"not JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedMessage("not a JSON object")
    try:
        Envelope.model_validate(data)
    except ValidationError as e:
        raise MalformedMessage(f"bad envelope: {e.error_count()} error(s)") from e
    return data


class SessionHandler:
    """Binds one connection to at most one room/role and dispatches its frames."""

    def __init__(self, connection: Connection, rooms: RoomStateMachine):
        self.connection = connection
        self.rooms = rooms
        self.session = Session()

    def handle_frame(self, raw):
        try:
            message = decode_message(raw)
        except MalformedMessage as e:
            logger.debug(f"Discarding malformed frame from connection {self.connection.connection_id}: {e}")
            return

        message_type = message["type"]
        if message_type in ("create", "join"):
            self._handle_room_request(message)
        elif message_type in RELAY_TYPES:
            if self.session.bound:
                self.rooms.relay(self.session.code, self.session.role, message, self.connection)
            else:
                logger.debug(f"Ignoring {message_type} from unbound connection {self.connection.connection_id}")
        elif message_type == "hang-up":
            self._leave()
        else:
            logger.debug(f"Ignoring unknown message type {message_type!r}")

    def _handle_room_request(self, message: dict):
        try:
            request = RoomRequest.model_validate(message)
        except ValidationError:
            logger.debug(f"Discarding malformed {message['type']} from connection {self.connection.connection_id}")
            return

        previous_code, previous_role = self.session.code, self.session.role
        try:
            if request.type == "create":
                self.rooms.create(request.code, self.connection)
                role = ROLE_CALLER
            else:
                self.rooms.join(request.code, self.connection)
                role = ROLE_CALLEE
        except SignalingError as e:
            if self.connection.is_open:
                self.connection.send(ErrorMessage(reason=e.reason).model_dump())
            return

        # One room per connection: the old room is left only once the new one is held
        self._leave_room(previous_code, previous_role)
        self.session.bind(request.code, role)

    def _leave_room(self, code: Optional[str], role: Optional[str]):
        if self.rooms.occupies(code, role, self.connection):
            self.rooms.hang_up(code, role, self.connection)

    def _leave(self):
        if not self.session.bound:
            return
        self._leave_room(self.session.code, self.session.role)
        self.session.unbind()

    def handle_close(self):
        """Disconnect teardown: same as a hang-up from this connection's role."""
        self.connection.mark_closed()
        if self.session.bound:
            logger.info(f"Connection {self.connection.connection_id} left room {self.session.code} as {self.session.role}")
        self._leave()
