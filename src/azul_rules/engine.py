import random

from .actions import AvailableMove, Move
from .enums import WallVariant
from .rules import apply_move, available_moves, legal_moves, new_game
from .state import GameState


class GameEngine:
    """Local, single-process game session.

    Each ``step`` commits one full move (pick, placement and any phase
    cascade) or raises without touching the current state.
    """

    def __init__(
        self,
        player_names: list[str] | None = None,
        *,
        num_players: int = 2,
        seed: int | None = None,
        variant: WallVariant = WallVariant.STANDARD,
    ) -> None:
        if player_names is None:
            player_names = [f"Player {i + 1}" for i in range(num_players)]
        if len(player_names) not in (2, 3, 4):
            raise ValueError("Azul supports 2-4 players")
        self.player_names = list(player_names)
        self.num_players = len(player_names)
        self.variant = WallVariant(variant)
        self.rng = random.Random(seed)
        self.state: GameState | None = None
        self.history: list[Move] = []

    def reset(self) -> GameState:
        self.state = new_game(self.player_names, rng=self.rng, variant=self.variant)
        self.history = []
        return self.state

    def legal_moves(self) -> list[Move]:
        return legal_moves(self._require_state())

    def available_moves(self) -> list[AvailableMove]:
        return available_moves(self._require_state())

    def step(self, move: Move) -> GameState:
        self.state = apply_move(self._require_state(), move)
        self.history.append(move)
        return self.state

    def _require_state(self) -> GameState:
        if self.state is None:
            raise RuntimeError("engine not initialized; call reset() first")
        return self.state
