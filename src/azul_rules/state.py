from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from .draft import DraftPool
from .enums import GamePhase, TileColor, WallVariant
from .player import PlayerBoard
from .scoring import EndgameScoring, GameOutcome
from .supply import TILES_PER_COLOR, TileSupply


@dataclass
class LogEntry:
    round: int
    player: str
    action: str


@dataclass
class GameState:
    players: list[PlayerBoard]
    supply: TileSupply
    pool: DraftPool
    current_player: int = 0
    phase: GamePhase = GamePhase.DRAFT
    round_number: int = 1
    starting_player: int = 0
    variant: WallVariant = WallVariant.STANDARD
    log: list[LogEntry] = field(default_factory=list)
    endgame: list[EndgameScoring] = field(default_factory=list)
    outcome: GameOutcome | None = None

    def clone(self) -> "GameState":
        return GameState(
            players=[p.clone() for p in self.players],
            supply=self.supply.clone(),
            pool=self.pool.clone(),
            current_player=self.current_player,
            phase=self.phase,
            round_number=self.round_number,
            starting_player=self.starting_player,
            variant=self.variant,
            log=list(self.log),
            endgame=list(self.endgame),
            outcome=self.outcome,
        )

    def is_terminal(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def current_board(self) -> PlayerBoard:
        return self.players[self.current_player]

    def player_index(self, player_id: str) -> int | None:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return idx
        return None

    def record(self, player: str, action: str) -> None:
        self.log.append(LogEntry(round=self.round_number, player=player, action=action))

    def tile_counts(self, held: Iterable[TileColor] = ()) -> Counter:
        counts = Counter(self.supply.bag)
        counts.update(self.supply.discard_lid)
        for factory in self.pool.factories:
            counts.update(factory)
        counts.update(self.pool.center)
        for player in self.players:
            for line in player.pattern_lines:
                counts.update(line.tiles)
            for row in player.wall:
                counts.update(cell for cell in row if cell is not None)
            counts.update(player.floor_tiles())
        counts.update(held)
        return counts


def check_conservation(state: GameState, held: Iterable[TileColor] = ()) -> None:
    """Every color must total exactly 20 tiles across the whole game."""
    counts = state.tile_counts(held)
    for color in TileColor:
        if counts[color] != TILES_PER_COLOR:
            raise AssertionError(f"{color.value}: {counts[color]} tiles, expected {TILES_PER_COLOR}")
