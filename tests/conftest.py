import random
from collections import defaultdict

import pytest

from azul_rules import GameEngine, Move, check_conservation


@pytest.fixture()
def play_random():
    """Play a seeded game to the end, preferring pattern lines over the floor."""

    def _play(engine: GameEngine, seed: int, max_moves: int = 2000):
        rng = random.Random(seed)
        state = engine.reset()
        for _ in range(max_moves):
            if state.is_terminal():
                break
            moves = engine.legal_moves()
            assert moves, "drafting stalled with no legal moves"
            lines = [m for m in moves if m.target_line != Move.FLOOR]
            state = engine.step(rng.choice(lines or moves))
            check_conservation(state)
        return state

    return _play


class Outbox:
    def __init__(self) -> None:
        self.messages = defaultdict(list)
        self.order = []

    def __call__(self, conn_id: str, message: dict) -> None:
        self.messages[conn_id].append(message)
        self.order.append((conn_id, message))

    def of_type(self, conn_id: str, kind: str) -> list[dict]:
        return [m for m in self.messages[conn_id] if m["type"] == kind]

    def last(self, conn_id: str, kind: str | None = None) -> dict:
        messages = self.messages[conn_id] if kind is None else self.of_type(conn_id, kind)
        return messages[-1]

    def clear(self) -> None:
        self.messages.clear()
        self.order.clear()


@pytest.fixture()
def outbox():
    return Outbox()
