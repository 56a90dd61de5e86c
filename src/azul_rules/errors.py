"""Rule and session errors.

Every error carries a stable ``code`` so network replies can be matched by
clients without parsing the message text.
"""


class AzulError(Exception):
    code = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidPhase(AzulError, RuntimeError):
    code = "invalid_phase"


class InvalidSource(AzulError, ValueError):
    code = "invalid_source"


class InvalidTarget(AzulError, ValueError):
    code = "invalid_target"


class NotYourTurn(AzulError, ValueError):
    code = "not_your_turn"


class PendingPickExists(AzulError, ValueError):
    code = "pending_pick_exists"


class RoomFull(AzulError, ValueError):
    code = "room_full"


class NameTaken(AzulError, ValueError):
    code = "name_taken"


class HostOnly(AzulError, ValueError):
    code = "host_only"


class InsufficientPlayers(AzulError, ValueError):
    code = "insufficient_players"


class MalformedMessage(AzulError, ValueError):
    code = "malformed_message"
