"""Move validation and the phase state machine.

Public transitions take a state and return a new one; the input is never
mutated, so a rejected move leaves no trace. The private ``_`` helpers work
in place on a state that is already a private clone.
"""

import logging
import random

from .actions import AvailableMove, Move
from .draft import CENTER, DraftPool, Pick
from .enums import GamePhase, Marker, TileColor, WallVariant
from .errors import InvalidPhase, InvalidTarget, NotYourTurn
from .player import PATTERN_LINE_SIZES, PlayerBoard
from .scoring import (
    TIE_BREAK_SHARED,
    apply_floor_penalty,
    calculate_endgame_scoring,
    calculate_floor_penalty,
    resolve_winner,
    score_tile_placement,
)
from .state import GameState
from .supply import TileSupply
from .wall import choose_wall_column, completed_rows

LOGGER = logging.getLogger(__name__)

FLOOR = Move.FLOOR


def new_game(
    player_names: list[str],
    *,
    player_ids: list[str] | None = None,
    rng: random.Random | None = None,
    seed: int | None = None,
    variant: WallVariant = WallVariant.STANDARD,
) -> GameState:
    if not 2 <= len(player_names) <= 4:
        raise ValueError("Azul supports 2-4 players")
    if player_ids is None:
        player_ids = [f"player-{i}" for i in range(len(player_names))]
    if len(player_ids) != len(player_names):
        raise ValueError("player_ids must match player_names")
    rng = rng if rng is not None else random.Random(seed)
    state = GameState(
        players=[PlayerBoard(id=pid, name=name) for pid, name in zip(player_ids, player_names)],
        supply=TileSupply.fresh(rng),
        pool=DraftPool.for_players(len(player_names)),
        variant=WallVariant(variant),
    )
    state.pool.fill(state.supply)
    state.record("System", f"Game started with {len(player_names)} players. Round 1 begins.")
    LOGGER.info("new game: players=%s variant=%s", player_names, state.variant.value)
    return state


def can_place(
    board: PlayerBoard, line_idx: int, color: TileColor, variant: WallVariant = WallVariant.STANDARD
) -> bool:
    if not 0 <= line_idx < len(PATTERN_LINE_SIZES):
        return False
    return board.can_place(line_idx, color, variant)


def legal_moves(state: GameState) -> list[Move]:
    if state.phase != GamePhase.DRAFT:
        return []
    moves = []
    for available in available_moves(state):
        for target in available.valid_target_lines:
            moves.append(Move(source_index=available.source_index, color=available.color, target_line=target))
    return moves


def available_moves(state: GameState) -> list[AvailableMove]:
    """Every (source, color) the current player may take, with its valid targets."""
    if state.phase != GamePhase.DRAFT:
        return []
    board = state.current_board
    result = []
    for source_index, tiles in state.pool.sources():
        for color in TileColor:
            if color in tiles:
                result.append(
                    AvailableMove(
                        source_index=source_index,
                        color=color,
                        valid_target_lines=board.valid_target_lines(color, state.variant),
                    )
                )
    return result


def apply_move(state: GameState, move: Move) -> GameState:
    """Pick, place and run any resulting phase cascade as one transition."""
    _require_draft(state)
    nxt = state.clone()
    idx = nxt.current_player
    board = nxt.players[idx]
    _check_target(board, move.target_line, move.color, nxt.variant)
    pick = _take(nxt, idx, move.source_index, move.color)
    overflow = _place(nxt, board, pick.color, pick.tiles, move.target_line)
    if overflow:
        _to_floor(nxt, board, overflow)
    _finish_turn(nxt)
    return nxt


def pickup(state: GameState, player_index: int, source_index: int, color: TileColor) -> tuple[GameState, Pick]:
    """Take tiles from a source without placing them."""
    _require_draft(state)
    if player_index != state.current_player:
        raise NotYourTurn(f"it is {state.current_board.name}'s turn")
    nxt = state.clone()
    pick = _take(nxt, player_index, source_index, color)
    return nxt, pick


def place_tiles(
    state: GameState, player_index: int, color: TileColor, tiles: list[TileColor], target_line: int
) -> tuple[GameState, list[TileColor]]:
    """Place held tiles on a line or the floor and return the unabsorbed remainder.

    The floor never leaves a remainder; tiles past its last slot go to the lid.
    """
    _require_draft(state)
    if player_index != state.current_player:
        raise NotYourTurn(f"it is {state.current_board.name}'s turn")
    nxt = state.clone()
    board = nxt.players[player_index]
    _check_target(board, target_line, color, nxt.variant)
    remainder = _place(nxt, board, color, list(tiles), target_line)
    return nxt, remainder


def finish_turn(state: GameState) -> GameState:
    """Advance the turn, or tile the walls once the draft pool is empty."""
    _require_draft(state)
    nxt = state.clone()
    _finish_turn(nxt)
    return nxt


def _require_draft(state: GameState) -> None:
    if state.phase != GamePhase.DRAFT:
        raise InvalidPhase(f"cannot draft during {state.phase.value}")


def _check_target(board: PlayerBoard, target_line: int, color: TileColor, variant: WallVariant) -> None:
    if target_line == FLOOR:
        return
    if not 0 <= target_line < len(PATTERN_LINE_SIZES):
        raise InvalidTarget(f"invalid pattern line {target_line}")
    if not board.can_place(target_line, color, variant):
        raise InvalidTarget(f"cannot place {color.value} on pattern line {target_line + 1}")


def _take(state: GameState, player_index: int, source_index: int, color: TileColor) -> Pick:
    board = state.players[player_index]
    pick = state.pool.take(source_index, color)
    if source_index == CENTER:
        where = "center"
    else:
        where = f"factory {source_index + 1}"
    action = f"picked {len(pick.tiles)} {color.value} from {where}"
    if pick.took_marker:
        board.has_starting_marker = True
        board.add_to_floor([Marker.STARTING])
        state.starting_player = player_index
        action += " (+ starting marker)"
    state.record(board.name, action)
    return pick


def _place(
    state: GameState, board: PlayerBoard, color: TileColor, tiles: list[TileColor], target_line: int
) -> list[TileColor]:
    if target_line == FLOOR:
        _to_floor(state, board, tiles)
        state.record(board.name, f"{len(tiles)} {color.value} -> floor line")
        return []
    remainder = board.add_to_line(target_line, color, tiles)
    state.record(board.name, f"{len(tiles) - len(remainder)} {color.value} -> line {target_line + 1}")
    return remainder


def _to_floor(state: GameState, board: PlayerBoard, tiles: list[TileColor]) -> None:
    state.supply.discard(board.add_to_floor(list(tiles)))


def _finish_turn(state: GameState) -> None:
    if state.pool.is_empty():
        state.phase = GamePhase.TILING
        _tile_walls(state)
    else:
        state.current_player = (state.current_player + 1) % len(state.players)


def _tile_walls(state: GameState) -> None:
    for board in state.players:
        for row, line in enumerate(board.pattern_lines):
            # Incomplete lines carry over to the next round.
            if not line.is_complete:
                continue
            color = line.color
            col = choose_wall_column(board.wall, row, color, state.variant)
            if col is None:
                _to_floor(state, board, line.clear())
                state.record(board.name, f"no wall space for {color.value} in row {row + 1}")
                continue
            board.wall[row][col] = color
            points = score_tile_placement(board.wall, row, col)
            board.score += points
            state.supply.discard(line.clear()[1:])
            state.record(board.name, f"placed {color.value} on wall ({row},{col}) for {points} points")
            LOGGER.debug("%s tiles %s at (%d,%d) for %d", board.name, color.value, row, col, points)

        if board.floor_line:
            count = len(board.floor_line)
            penalty = calculate_floor_penalty(count)
            board.score = apply_floor_penalty(board.score, count)
            state.supply.discard(board.floor_tiles())
            board.floor_line = []
            state.record(board.name, f"floor penalty: {penalty} points ({count} tiles)")

    if any(completed_rows(board.wall) for board in state.players):
        _finish_game(state)
    else:
        _prepare_round(state)


def _prepare_round(state: GameState) -> None:
    state.phase = GamePhase.ROUND_PREP
    state.round_number += 1
    state.current_player = state.starting_player
    for board in state.players:
        board.has_starting_marker = False
    state.pool.fill(state.supply)
    state.phase = GamePhase.DRAFT
    state.record("System", f"Round {state.round_number} begins.")
    LOGGER.debug("round %d starts with %s", state.round_number, state.current_board.name)


def _finish_game(state: GameState) -> None:
    state.phase = GamePhase.GAME_OVER
    state.endgame = [calculate_endgame_scoring(board) for board in state.players]
    for board, scoring in zip(state.players, state.endgame):
        board.score = scoring.total_score
    state.outcome = resolve_winner(state.endgame)
    if state.outcome.tie_breaker == TIE_BREAK_SHARED:
        summary = "Shared victory!"
    elif state.outcome.tie_breaker:
        summary = f"Winner determined by {state.outcome.tie_breaker}."
    else:
        summary = "Winner determined."
    state.record("System", f"Game over! {summary}")
    LOGGER.info("game over after round %d: winners=%s", state.round_number, state.outcome.winners)
