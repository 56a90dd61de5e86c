"""Wall adjacency scoring, floor penalties, endgame bonuses and tie-breaks."""

from dataclasses import dataclass, field

from .wall import BOARD_SIZE, Wall, completed_colors, completed_columns, completed_rows

FLOOR_PENALTIES = (-1, -1, -2, -2, -2, -3, -3)
HORIZONTAL_ROW_BONUS = 2
VERTICAL_COLUMN_BONUS = 7
COMPLETE_COLOR_BONUS = 10

TIE_BREAK_ROWS = "horizontal rows"
TIE_BREAK_SHARED = "shared"


def _run(wall: Wall, row: int, col: int, dr: int, dc: int) -> int:
    count = 0
    r = row + dr
    c = col + dc
    while 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE and wall[r][c] is not None:
        count += 1
        r += dr
        c += dc
    return count


def score_tile_placement(wall: Wall, row: int, col: int) -> int:
    """Points for the tile just placed at (row, col)."""
    horizontal = _run(wall, row, col, 0, -1) + _run(wall, row, col, 0, 1)
    vertical = _run(wall, row, col, -1, 0) + _run(wall, row, col, 1, 0)
    if horizontal == 0 and vertical == 0:
        return 1
    points = 0
    if horizontal:
        points += horizontal + 1
    if vertical:
        points += vertical + 1
    return points


def calculate_floor_penalty(count: int) -> int:
    return sum(FLOOR_PENALTIES[: max(min(count, len(FLOOR_PENALTIES)), 0)])


def apply_floor_penalty(score: int, count: int) -> int:
    return max(0, score + calculate_floor_penalty(count))


@dataclass
class EndgameScoring:
    player_id: str
    player_name: str
    base_score: int
    horizontal_rows: int
    horizontal_bonus: int
    vertical_columns: int
    vertical_bonus: int
    complete_colors: int
    color_bonus: int

    @property
    def total_score(self) -> int:
        return self.base_score + self.horizontal_bonus + self.vertical_bonus + self.color_bonus


def calculate_endgame_scoring(player) -> EndgameScoring:
    rows = completed_rows(player.wall)
    cols = completed_columns(player.wall)
    colors = completed_colors(player.wall)
    return EndgameScoring(
        player_id=player.id,
        player_name=player.name,
        base_score=player.score,
        horizontal_rows=rows,
        horizontal_bonus=rows * HORIZONTAL_ROW_BONUS,
        vertical_columns=cols,
        vertical_bonus=cols * VERTICAL_COLUMN_BONUS,
        complete_colors=colors,
        color_bonus=colors * COMPLETE_COLOR_BONUS,
    )


@dataclass
class GameOutcome:
    winners: list[str] = field(default_factory=list)
    tie_breaker: str | None = None

    @property
    def shared(self) -> bool:
        return self.tie_breaker == TIE_BREAK_SHARED


def resolve_winner(scorings: list[EndgameScoring]) -> GameOutcome:
    top = max(s.total_score for s in scorings)
    tied = [s for s in scorings if s.total_score == top]
    if len(tied) == 1:
        return GameOutcome(winners=[tied[0].player_id])
    most_rows = max(s.horizontal_rows for s in tied)
    still_tied = [s for s in tied if s.horizontal_rows == most_rows]
    if len(still_tied) == 1:
        return GameOutcome(winners=[still_tied[0].player_id], tie_breaker=TIE_BREAK_ROWS)
    return GameOutcome(winners=[s.player_id for s in still_tied], tie_breaker=TIE_BREAK_SHARED)
