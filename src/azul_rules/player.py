from dataclasses import dataclass, field

from .enums import Marker, TileColor, WallVariant
from .wall import Wall, color_blocked_in_row, empty_wall

PATTERN_LINE_SIZES = (1, 2, 3, 4, 5)
FLOOR_LINE_SIZE = 7

FloorSlot = TileColor | Marker


@dataclass
class PatternLine:
    size: int
    tiles: list[TileColor] = field(default_factory=list)
    color: TileColor | None = None

    @property
    def is_full(self) -> bool:
        return len(self.tiles) >= self.size

    @property
    def is_complete(self) -> bool:
        return len(self.tiles) == self.size and self.color is not None

    @property
    def space(self) -> int:
        return self.size - len(self.tiles)

    def clear(self) -> list[TileColor]:
        tiles = self.tiles
        self.tiles = []
        self.color = None
        return tiles

    def clone(self) -> "PatternLine":
        return PatternLine(size=self.size, tiles=list(self.tiles), color=self.color)


def default_pattern_lines() -> list[PatternLine]:
    return [PatternLine(size=size) for size in PATTERN_LINE_SIZES]


@dataclass
class PlayerBoard:
    """Represents a player's board, score, and penalties."""

    id: str
    name: str
    pattern_lines: list[PatternLine] = field(default_factory=default_pattern_lines)
    wall: Wall = field(default_factory=empty_wall)
    floor_line: list[FloorSlot] = field(default_factory=list)
    has_starting_marker: bool = False
    score: int = 0

    def can_place(self, line_idx: int, color: TileColor, variant: WallVariant = WallVariant.STANDARD) -> bool:
        line = self.pattern_lines[line_idx]
        if line.is_full:
            return False
        if line.color is not None and line.color != color:
            return False
        return not color_blocked_in_row(self.wall, line_idx, color, variant)

    def valid_target_lines(self, color: TileColor, variant: WallVariant = WallVariant.STANDARD) -> list[int]:
        """Pattern lines that accept ``color``, followed by -1 for the floor."""
        lines = [idx for idx in range(len(PATTERN_LINE_SIZES)) if self.can_place(idx, color, variant)]
        lines.append(-1)
        return lines

    def add_to_line(self, line_idx: int, color: TileColor, tiles: list[TileColor]) -> list[TileColor]:
        """Append as many tiles as fit and return the ones that did not."""
        line = self.pattern_lines[line_idx]
        line.color = color
        fit = min(line.space, len(tiles))
        line.tiles.extend(tiles[:fit])
        return tiles[fit:]

    def add_to_floor(self, slots: list[FloorSlot]) -> list[FloorSlot]:
        """Fill free floor slots; whatever is left over must go to the lid."""
        free = max(FLOOR_LINE_SIZE - len(self.floor_line), 0)
        self.floor_line.extend(slots[:free])
        return slots[free:]

    def floor_tiles(self) -> list[TileColor]:
        return [slot for slot in self.floor_line if slot != Marker.STARTING]

    def clone(self) -> "PlayerBoard":
        return PlayerBoard(
            id=self.id,
            name=self.name,
            pattern_lines=[line.clone() for line in self.pattern_lines],
            wall=[list(row) for row in self.wall],
            floor_line=list(self.floor_line),
            has_starting_marker=self.has_starting_marker,
            score=self.score,
        )
