"""The room's pending pick: ``Idle`` or ``Held`` by exactly one player."""

from dataclasses import dataclass

from azul_rules import TileColor


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Held:
    player_id: str
    color: TileColor
    tiles: tuple[TileColor, ...]


PendingPick = Idle | Held

IDLE = Idle()


def hold(player_id: str, color: TileColor, tiles) -> PendingPick:
    """Held tiles, or ``IDLE`` once nothing remains."""
    tiles = tuple(tiles)
    if not tiles:
        return IDLE
    return Held(player_id=player_id, color=color, tiles=tiles)
