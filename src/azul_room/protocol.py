"""Client and server message shapes for a room.

Inbound messages are parsed into small dataclasses so the room never touches
raw dicts; anything that does not parse raises ``MalformedMessage``.
"""

import json
from dataclasses import dataclass

from azul_rules import CENTER, GameState, MalformedMessage, PlayerBoard, TileColor
from azul_rules.serialization import board_to_dict, state_to_dict

from .pending import Held, PendingPick

MAX_NAME_LENGTH = 32
LOBBY = "lobby"


@dataclass(frozen=True)
class Join:
    player_name: str


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class Pickup:
    source_index: int  # factory index, or -1 for center
    color: TileColor


@dataclass(frozen=True)
class Place:
    target_line: int


@dataclass(frozen=True)
class Leave:
    pass


ClientMessage = Join | Start | Pickup | Place | Leave


def _require(data: dict, key: str):
    if key not in data:
        raise MalformedMessage(f"missing field {key!r}")
    return data[key]


def _int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedMessage(f"{name} must be an integer")
    return value


def _parse_source(source) -> int:
    if not isinstance(source, dict):
        raise MalformedMessage("source must be an object")
    kind = source.get("type")
    if kind == "center":
        return CENTER
    if kind == "factory":
        factory_id = _int(_require(source, "factoryId"), "factoryId")
        if factory_id < 0:
            raise MalformedMessage("factoryId must be non-negative")
        return factory_id
    raise MalformedMessage(f"unknown source type {kind!r}")


def parse_client_message(raw) -> ClientMessage:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            # JSONDecodeError and UnicodeDecodeError for undecodable bytes
            raise MalformedMessage("invalid JSON") from exc
    if not isinstance(raw, dict):
        raise MalformedMessage("message must be an object")
    kind = raw.get("type")
    if kind == "join":
        name = _require(raw, "playerName")
        if not isinstance(name, str) or not name.strip():
            raise MalformedMessage("playerName must be a non-empty string")
        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise MalformedMessage(f"playerName longer than {MAX_NAME_LENGTH} characters")
        return Join(player_name=name)
    if kind == "start":
        return Start()
    if kind == "pickup":
        value = _require(raw, "color")
        try:
            color = TileColor(value)
        except ValueError as exc:
            raise MalformedMessage(f"unknown color {value!r}") from exc
        return Pickup(source_index=_parse_source(_require(raw, "source")), color=color)
    if kind == "place":
        return Place(target_line=_int(_require(raw, "targetLine"), "targetLine"))
    if kind == "leave":
        return Leave()
    raise MalformedMessage(f"unknown message type {kind!r}")


def pending_to_dict(pending: PendingPick) -> dict | None:
    if not isinstance(pending, Held):
        return None
    return {
        "player_id": pending.player_id,
        "color": pending.color.value,
        "tiles": [t.value for t in pending.tiles],
    }


def room_snapshot(
    room_id: str,
    host_id: str | None,
    connected: dict[str, bool],
    players: list[PlayerBoard],
    game: GameState | None,
    pending: PendingPick,
) -> dict:
    """Full room state; ``players`` are the lobby boards when no game has started."""
    if game is None:
        snapshot = {
            "round": 0,
            "phase": LOBBY,
            "current_player": 0,
            "supply": {"factories": [], "center": [], "marker_in_center": True, "bag_count": 0, "discard_count": 0},
            "players": [board_to_dict(p) for p in players],
            "winners": [],
            "tie_breaker": None,
        }
    else:
        snapshot = state_to_dict(game)
    for player in snapshot["players"]:
        player["connected"] = connected.get(player["id"], False)
    snapshot["room_id"] = room_id
    snapshot["host_id"] = host_id
    snapshot["pending"] = pending_to_dict(pending)
    return snapshot


def state_message(snapshot: dict, valid_lines: list[int]) -> dict:
    return {"type": "state", "state": snapshot, "validLines": valid_lines}


def joined_message(player_id: str) -> dict:
    return {"type": "joined", "playerId": player_id}


def error_message(code: str, message: str) -> dict:
    return {"type": "error", "code": code, "message": message}
