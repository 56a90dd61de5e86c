from .actions import AvailableMove, Move
from .draft import CENTER, DraftPool, Pick
from .engine import GameEngine
from .enums import GamePhase, Marker, TileColor, WallVariant
from .errors import (
    AzulError,
    HostOnly,
    InsufficientPlayers,
    InvalidPhase,
    InvalidSource,
    InvalidTarget,
    MalformedMessage,
    NameTaken,
    NotYourTurn,
    PendingPickExists,
    RoomFull,
)
from .player import FLOOR_LINE_SIZE, PATTERN_LINE_SIZES, PatternLine, PlayerBoard
from .replay import ReplayResult, replay_game
from .rules import apply_move, available_moves, can_place, finish_turn, legal_moves, new_game, pickup, place_tiles
from .state import GameState, check_conservation
from .supply import TileSupply
from .wall import WALL_PATTERN

__all__ = [
    "AvailableMove",
    "AzulError",
    "CENTER",
    "DraftPool",
    "FLOOR_LINE_SIZE",
    "GameEngine",
    "GamePhase",
    "GameState",
    "HostOnly",
    "InsufficientPlayers",
    "InvalidPhase",
    "InvalidSource",
    "InvalidTarget",
    "MalformedMessage",
    "Marker",
    "Move",
    "NameTaken",
    "NotYourTurn",
    "PATTERN_LINE_SIZES",
    "PatternLine",
    "PendingPickExists",
    "Pick",
    "PlayerBoard",
    "ReplayResult",
    "RoomFull",
    "TileColor",
    "TileSupply",
    "WALL_PATTERN",
    "WallVariant",
    "apply_move",
    "available_moves",
    "can_place",
    "check_conservation",
    "finish_turn",
    "legal_moves",
    "new_game",
    "pickup",
    "place_tiles",
    "replay_game",
]
