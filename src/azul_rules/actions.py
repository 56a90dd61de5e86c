from dataclasses import dataclass, field

from .enums import TileColor


@dataclass(frozen=True)
class Move:
    source_index: int  # factory index, or -1 for center
    color: TileColor
    target_line: int  # 0-4 for pattern lines, -1 for floor

    FLOOR = -1
    CENTER = -1


@dataclass
class AvailableMove:
    source_index: int
    color: TileColor
    valid_target_lines: list[int] = field(default_factory=list)
