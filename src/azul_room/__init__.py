from .pending import IDLE, Held, Idle, PendingPick
from .protocol import parse_client_message
from .room import Room, RoomRegistry

__all__ = [
    "Held",
    "IDLE",
    "Idle",
    "PendingPick",
    "Room",
    "RoomRegistry",
    "parse_client_message",
]
