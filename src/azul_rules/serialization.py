import random

from .actions import Move
from .draft import DraftPool
from .enums import GamePhase, Marker, TileColor, WallVariant
from .player import PatternLine, PlayerBoard
from .scoring import EndgameScoring, GameOutcome
from .state import GameState, LogEntry
from .supply import TileSupply


def move_to_dict(move: Move) -> dict:
    return {
        "source_index": move.source_index,
        "color": move.color.value,
        "target_line": move.target_line,
    }


def move_from_dict(data: dict) -> Move:
    return Move(
        source_index=int(data["source_index"]),
        color=TileColor(data["color"]),
        target_line=int(data["target_line"]),
    )


def _slot_from_value(value: str) -> TileColor | Marker:
    if value == Marker.STARTING.value:
        return Marker.STARTING
    return TileColor(value)


def board_to_dict(p: PlayerBoard) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "score": p.score,
        "pattern_lines": [
            {
                "size": line.size,
                "tiles": [t.value for t in line.tiles],
                "color": line.color.value if line.color else None,
            }
            for line in p.pattern_lines
        ],
        "wall": [[cell.value if cell else None for cell in row] for row in p.wall],
        "floor_line": [slot.value for slot in p.floor_line],
        "has_starting_marker": p.has_starting_marker,
    }


def board_from_dict(data: dict) -> PlayerBoard:
    return PlayerBoard(
        id=data["id"],
        name=data["name"],
        pattern_lines=[
            PatternLine(
                size=int(line["size"]),
                tiles=[TileColor(t) for t in line["tiles"]],
                color=TileColor(line["color"]) if line["color"] else None,
            )
            for line in data["pattern_lines"]
        ],
        wall=[[TileColor(cell) if cell else None for cell in row] for row in data["wall"]],
        floor_line=[_slot_from_value(v) for v in data["floor_line"]],
        has_starting_marker=bool(data["has_starting_marker"]),
        score=int(data["score"]),
    )


def state_to_dict(
    state: GameState,
    *,
    include_supply_contents: bool = False,
    include_rng: bool = False,
    include_log: bool = False,
) -> dict:
    supply = {
        "factories": [{"id": idx, "tiles": [t.value for t in f]} for idx, f in enumerate(state.pool.factories)],
        "center": [t.value for t in state.pool.center],
        "marker_in_center": state.pool.marker_in_center,
        "bag_count": len(state.supply.bag),
        "discard_count": len(state.supply.discard_lid),
    }
    if include_supply_contents:
        supply["bag"] = [t.value for t in state.supply.bag]
        supply["discard"] = [t.value for t in state.supply.discard_lid]

    data = {
        "round": state.round_number,
        "phase": state.phase.value,
        "variant": state.variant.value,
        "current_player": state.current_player,
        "starting_player": state.starting_player,
        "supply": supply,
        "players": [board_to_dict(p) for p in state.players],
        "winners": list(state.outcome.winners) if state.outcome else [],
        "tie_breaker": state.outcome.tie_breaker if state.outcome else None,
    }
    if state.endgame:
        data["endgame"] = [
            {
                "player_id": s.player_id,
                "player_name": s.player_name,
                "base_score": s.base_score,
                "horizontal_rows": s.horizontal_rows,
                "horizontal_bonus": s.horizontal_bonus,
                "vertical_columns": s.vertical_columns,
                "vertical_bonus": s.vertical_bonus,
                "complete_colors": s.complete_colors,
                "color_bonus": s.color_bonus,
                "total_score": s.total_score,
            }
            for s in state.endgame
        ]
    if include_log:
        data["log"] = [{"round": e.round, "player": e.player, "action": e.action} for e in state.log]
    if include_rng:
        version, internal, gauss = state.supply.rng.getstate()
        data["rng_state"] = {
            "version": version,
            "internal_state": list(internal),
            "gauss_next": gauss,
        }
    return data


def state_from_dict(snapshot: dict, *, require_supply_contents: bool = True) -> GameState:
    def to_colors(values) -> list[TileColor]:
        return [TileColor(v) for v in values]

    supply_data = snapshot["supply"]
    if require_supply_contents and ("bag" not in supply_data or "discard" not in supply_data):
        raise ValueError("snapshot missing supply contents")

    rng = random.Random()
    rng_state = snapshot.get("rng_state")
    if rng_state:
        rng.setstate(
            (
                rng_state["version"],
                tuple(rng_state["internal_state"]),
                rng_state["gauss_next"],
            )
        )

    outcome = None
    if snapshot.get("winners"):
        outcome = GameOutcome(winners=list(snapshot["winners"]), tie_breaker=snapshot.get("tie_breaker"))
    endgame = [
        EndgameScoring(
            player_id=s["player_id"],
            player_name=s["player_name"],
            base_score=int(s["base_score"]),
            horizontal_rows=int(s["horizontal_rows"]),
            horizontal_bonus=int(s["horizontal_bonus"]),
            vertical_columns=int(s["vertical_columns"]),
            vertical_bonus=int(s["vertical_bonus"]),
            complete_colors=int(s["complete_colors"]),
            color_bonus=int(s["color_bonus"]),
        )
        for s in snapshot.get("endgame", [])
    ]

    return GameState(
        players=[board_from_dict(p) for p in snapshot["players"]],
        supply=TileSupply(
            bag=to_colors(supply_data.get("bag", [])),
            discard_lid=to_colors(supply_data.get("discard", [])),
            rng=rng,
        ),
        pool=DraftPool(
            factories=[to_colors(f["tiles"]) for f in supply_data["factories"]],
            center=to_colors(supply_data["center"]),
            marker_in_center=bool(supply_data["marker_in_center"]),
        ),
        current_player=int(snapshot["current_player"]),
        phase=GamePhase(snapshot["phase"]),
        round_number=int(snapshot["round"]),
        starting_player=int(snapshot.get("starting_player", 0)),
        variant=WallVariant(snapshot.get("variant", WallVariant.STANDARD.value)),
        log=[LogEntry(**entry) for entry in snapshot.get("log", [])],
        endgame=endgame,
        outcome=outcome,
    )
