"""Replay a recorded sequence of moves from a seed."""

import json
from dataclasses import dataclass, field

from .actions import Move
from .engine import GameEngine
from .enums import WallVariant
from .serialization import move_from_dict, move_to_dict
from .state import GameState


@dataclass
class ReplayResult:
    final_state: GameState
    scores: list[int]
    score_history: list[list[int]] = field(default_factory=list)


def replay_game(
    player_names: list[str],
    moves: list[Move],
    *,
    seed: int | None = None,
    variant: WallVariant = WallVariant.STANDARD,
) -> ReplayResult:
    engine = GameEngine(player_names, seed=seed, variant=variant)
    state = engine.reset()
    history = [[p.score for p in state.players]]
    for move in moves:
        state = engine.step(move)
        history.append([p.score for p in state.players])
    return ReplayResult(final_state=state, scores=history[-1], score_history=history)


def record_to_json(player_names: list[str], moves: list[Move], *, seed: int | None, variant: WallVariant) -> str:
    return json.dumps(
        {
            "players": list(player_names),
            "seed": seed,
            "variant": WallVariant(variant).value,
            "moves": [move_to_dict(m) for m in moves],
        },
        indent=2,
    )


def record_from_json(text: str) -> tuple[list[str], list[Move], int | None, WallVariant]:
    data = json.loads(text)
    moves = [move_from_dict(m) for m in data["moves"]]
    return list(data["players"]), moves, data.get("seed"), WallVariant(data.get("variant", "standard"))
