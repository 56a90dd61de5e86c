from .enums import TileColor, WallVariant

BOARD_SIZE = 5

# Row r is row 0 rotated right by r.
WALL_PATTERN = (
    (TileColor.BLUE, TileColor.YELLOW, TileColor.RED, TileColor.BLACK, TileColor.CYAN),
    (TileColor.CYAN, TileColor.BLUE, TileColor.YELLOW, TileColor.RED, TileColor.BLACK),
    (TileColor.BLACK, TileColor.CYAN, TileColor.BLUE, TileColor.YELLOW, TileColor.RED),
    (TileColor.RED, TileColor.BLACK, TileColor.CYAN, TileColor.BLUE, TileColor.YELLOW),
    (TileColor.YELLOW, TileColor.RED, TileColor.BLACK, TileColor.CYAN, TileColor.BLUE),
)
WALL_COLOR_TO_COL = tuple({color: col for col, color in enumerate(row)} for row in WALL_PATTERN)

Wall = list[list[TileColor | None]]


def empty_wall() -> Wall:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def wall_column(row: int, color: TileColor) -> int:
    return WALL_COLOR_TO_COL[row][color]


def color_blocked_in_row(wall: Wall, row: int, color: TileColor, variant: WallVariant) -> bool:
    """True when ``color`` may no longer be staged for ``row``."""
    if variant == WallVariant.GRAY:
        return color in wall[row]
    return wall[row][wall_column(row, color)] is not None


def color_in_column(wall: Wall, col: int, color: TileColor) -> bool:
    return any(wall[r][col] == color for r in range(BOARD_SIZE))


def choose_wall_column(wall: Wall, row: int, color: TileColor, variant: WallVariant) -> int | None:
    """Column that receives a completed line's tile, or None if it cannot land.

    The gray wall takes the first empty column that does not already hold
    ``color`` anywhere.
    """
    if variant == WallVariant.STANDARD:
        col = wall_column(row, color)
        return col if wall[row][col] is None else None
    for col in range(BOARD_SIZE):
        if wall[row][col] is None and not color_in_column(wall, col, color):
            return col
    return None


def completed_rows(wall: Wall) -> int:
    return sum(1 for row in wall if all(cell is not None for cell in row))


def completed_columns(wall: Wall) -> int:
    return sum(
        1 for col in range(BOARD_SIZE) if all(wall[r][col] is not None for r in range(BOARD_SIZE))
    )


def completed_colors(wall: Wall) -> int:
    return sum(1 for color in TileColor if sum(row.count(color) for row in wall) == BOARD_SIZE)
