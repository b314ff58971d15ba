class SignalingError(Exception):
    """A rejected request, reported to the requesting connection as ``error{reason}``."""

    reason = "error"

    def __init__(self, code=None):
        self.code = code
        super().__init__(f"{self.reason}: {code!r}")


class CodeTaken(SignalingError):
    reason = "code-taken"


class RoomNotFound(SignalingError):
    reason = "not-found"


class RoomFull(SignalingError):
    reason = "room-full"


class MalformedMessage(Exception):
    """Inbound frame that could not be decoded. Never surfaced to the client."""
