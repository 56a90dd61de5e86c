import itertools
import random

import pytest

from azul_room import IDLE, Held, Room, RoomRegistry
from azul_rules import GamePhase, Marker, TileColor, WallVariant, check_conservation


def _ids():
    counter = itertools.count(1)
    return lambda: f"p{next(counter)}"


@pytest.fixture()
def room(outbox):
    return Room("r1", outbox, rng=random.Random(3), id_factory=_ids())


def _join(room, conn_id, name):
    room.connect(conn_id)
    room.receive(conn_id, {"type": "join", "playerName": name})


@pytest.fixture()
def started(room, outbox):
    _join(room, "c1", "ann")
    _join(room, "c2", "bob")
    room.receive("c1", {"type": "start"})
    outbox.clear()
    return room


def _factory(idx):
    return {"type": "factory", "factoryId": idx}


def _error_code(outbox, conn_id):
    return outbox.last(conn_id, "error")["code"]


def test_connect_receives_lobby_state(room, outbox):
    room.connect("c1")
    message = outbox.last("c1")
    assert message["type"] == "state"
    assert message["state"]["phase"] == "lobby"
    assert message["validLines"] == []


def test_first_joiner_is_host(room, outbox):
    _join(room, "c1", "ann")
    _join(room, "c2", "bob")

    assert outbox.of_type("c1", "joined") == [{"type": "joined", "playerId": "p1"}]
    assert outbox.of_type("c2", "joined") == [{"type": "joined", "playerId": "p2"}]
    state = outbox.last("c1", "state")["state"]
    assert state["host_id"] == "p1"
    assert [(p["name"], p["connected"]) for p in state["players"]] == [("ann", True), ("bob", True)]
    assert state["pending"] is None


def test_duplicate_name_rejected_without_broadcast(room, outbox):
    _join(room, "c1", "ann")
    before = len(outbox.messages["c1"])
    _join(room, "c2", "ann")

    assert _error_code(outbox, "c2") == "name_taken"
    assert len(outbox.messages["c1"]) == before
    assert len(room.seats) == 1


def test_room_full(outbox):
    room = Room("small", outbox, max_players=2, id_factory=_ids())
    _join(room, "c1", "ann")
    _join(room, "c2", "bob")
    _join(room, "c3", "cy")
    assert _error_code(outbox, "c3") == "room_full"
    assert [s.name for s in room.seats] == ["ann", "bob"]


def test_invalid_max_players():
    with pytest.raises(ValueError):
        Room("r", lambda conn, msg: None, max_players=5)


def test_start_gating(room, outbox):
    _join(room, "c1", "ann")
    room.receive("c1", {"type": "start"})
    assert _error_code(outbox, "c1") == "insufficient_players"

    _join(room, "c2", "bob")
    room.receive("c2", {"type": "start"})
    assert _error_code(outbox, "c2") == "host_only"
    room.connect("c9")
    room.receive("c9", {"type": "start"})
    assert _error_code(outbox, "c9") == "host_only"
    assert room.game is None

    room.receive("c1", {"type": "start"})
    state = outbox.last("c2", "state")["state"]
    assert state["phase"] == GamePhase.DRAFT.value
    assert len(state["supply"]["factories"]) == 5
    assert [p["id"] for p in state["players"]] == ["p1", "p2"]

    room.receive("c1", {"type": "start"})
    assert _error_code(outbox, "c1") == "invalid_phase"


def test_join_during_game_rejected(started, outbox):
    _join(started, "c3", "cy")
    assert _error_code(outbox, "c3") == "invalid_phase"


def test_pickup_enforces_turn_and_single_pending(started, outbox):
    game = started.game
    color = game.pool.factories[0][0]
    started.receive("c2", {"type": "pickup", "source": _factory(0), "color": color.value})
    assert _error_code(outbox, "c2") == "not_your_turn"

    started.receive("c1", {"type": "pickup", "source": _factory(0), "color": color.value})
    assert isinstance(started.pending, Held)
    assert started.pending.player_id == "p1"
    assert started.pending.color == color

    other = next(i for i, f in enumerate(started.game.pool.factories) if f)
    other_color = started.game.pool.factories[other][0]
    started.receive("c1", {"type": "pickup", "source": _factory(other), "color": other_color.value})
    assert _error_code(outbox, "c1") == "pending_pick_exists"
    check_conservation(started.game, held=started.pending.tiles)


def test_invalid_pickup_leaves_state_untouched(started, outbox):
    game = started.game
    started.receive("c1", {"type": "pickup", "source": {"type": "center"}, "color": "red"})
    assert _error_code(outbox, "c1") == "invalid_source"
    assert started.game is game
    assert started.pending == IDLE
    assert outbox.of_type("c2", "state") == []


def test_place_without_pickup_rejected(started, outbox):
    started.receive("c1", {"type": "place", "targetLine": 0})
    assert _error_code(outbox, "c1") == "invalid_phase"


def test_overflow_stays_pending_until_resolved(started, outbox):
    game = started.game
    game.pool.factories = [[TileColor.BLACK] * 3 + [TileColor.RED], [TileColor.BLUE]] + [[] for _ in range(3)]
    game.pool.center = []

    started.receive("c1", {"type": "pickup", "source": _factory(0), "color": "black"})
    assert outbox.last("c1", "state")["validLines"] == [0, 1, 2, 3, 4, -1]
    assert outbox.last("c2", "state")["validLines"] == []
    assert outbox.last("c2", "state")["state"]["pending"] == {
        "player_id": "p1",
        "color": "black",
        "tiles": ["black", "black", "black"],
    }

    started.receive("c1", {"type": "place", "targetLine": 0})
    assert started.pending == Held(player_id="p1", color=TileColor.BLACK, tiles=(TileColor.BLACK, TileColor.BLACK))
    assert started.game.current_player == 0
    assert started.game.players[0].pattern_lines[0].tiles == [TileColor.BLACK]
    # Line 0 is full now, so only the remaining lines and the floor are offered.
    assert outbox.last("c1", "state")["validLines"] == [1, 2, 3, 4, -1]

    started.receive("c2", {"type": "pickup", "source": _factory(1), "color": "blue"})
    assert _error_code(outbox, "c2") == "not_your_turn"
    started.receive("c2", {"type": "place", "targetLine": -1})
    assert _error_code(outbox, "c2") == "not_your_turn"

    started.receive("c1", {"type": "place", "targetLine": -1})
    assert started.pending == IDLE
    assert started.game.players[0].floor_line == [TileColor.BLACK, TileColor.BLACK]
    assert started.game.current_player == 1
    assert outbox.last("c1", "state")["validLines"] == []


def test_place_on_invalid_line_keeps_pending(started, outbox):
    game = started.game
    game.pool.factories = [[TileColor.RED, TileColor.RED, TileColor.BLUE, TileColor.BLUE]] + [[] for _ in range(4)]
    game.pool.center = []
    game.players[0].pattern_lines[1].tiles = [TileColor.BLUE]
    game.players[0].pattern_lines[1].color = TileColor.BLUE

    started.receive("c1", {"type": "pickup", "source": _factory(0), "color": "red"})
    held = started.pending
    started.receive("c1", {"type": "place", "targetLine": 1})
    assert _error_code(outbox, "c1") == "invalid_target"
    assert started.pending == held
    started.receive("c1", {"type": "place", "targetLine": 9})
    assert _error_code(outbox, "c1") == "invalid_target"


def test_center_pickup_claims_marker(started, outbox):
    game = started.game
    game.pool.factories = [[TileColor.RED]] + [[] for _ in range(4)]
    game.pool.center = [TileColor.CYAN, TileColor.CYAN]

    started.receive("c1", {"type": "pickup", "source": {"type": "center"}, "color": "cyan"})
    board = started.game.players[0]
    assert board.has_starting_marker is True
    assert board.floor_line == [Marker.STARTING]
    assert started.game.starting_player == 0
    assert outbox.last("c2", "state")["state"]["supply"]["marker_in_center"] is False


def test_last_placement_triggers_tiling(started, outbox):
    game = started.game
    game.pool.factories = [[TileColor.RED]] + [[] for _ in range(4)]
    game.pool.center = []

    started.receive("c1", {"type": "pickup", "source": _factory(0), "color": "red"})
    started.receive("c1", {"type": "place", "targetLine": 0})

    col = started.game.players[0].wall[0].index(TileColor.RED)
    assert col == 2
    assert started.game.round_number == 2
    assert started.game.phase == GamePhase.DRAFT
    assert started.game.players[0].score == 1
    assert outbox.last("c2", "state")["state"]["round"] == 2


def test_disconnect_and_reconnect_by_name(started, outbox):
    started.disconnect("c2")
    state = outbox.last("c1", "state")["state"]
    assert [p["connected"] for p in state["players"]] == [True, False]
    assert "c2" not in started.connections

    started.connect("c5")
    started.receive("c5", {"type": "join", "playerName": "bob"})
    assert outbox.last("c5", "joined")["playerId"] == "p2"
    assert started.connections["c5"] == "p2"
    state = outbox.last("c1", "state")["state"]
    assert [p["connected"] for p in state["players"]] == [True, True]
    assert len(started.game.players) == 2


def test_leave_marks_inactive_without_removing(started, outbox):
    started.receive("c1", {"type": "leave"})
    assert started.connected["p1"] is False
    assert [s.id for s in started.seats] == ["p1", "p2"]
    assert outbox.last("c2", "state")["state"]["players"][0]["connected"] is False
    # The left connection no longer acts for anyone.
    started.receive("c1", {"type": "place", "targetLine": 0})
    assert _error_code(outbox, "c1") == "not_your_turn"


def test_join_twice_from_same_connection(room, outbox):
    _join(room, "c1", "ann")
    room.receive("c1", {"type": "join", "playerName": "annie"})
    assert _error_code(outbox, "c1") == "name_taken"


def test_malformed_message_gets_error(room, outbox):
    room.connect("c1")
    room.receive("c1", "{{nope")
    assert _error_code(outbox, "c1") == "malformed_message"
    room.receive("c1", {"type": "pickup", "source": {"type": "center"}, "color": "purple"})
    assert _error_code(outbox, "c1") == "malformed_message"


def test_messages_sent_during_processing_are_queued(outbox):
    room_box = {}

    def send(conn_id, message):
        outbox(conn_id, message)
        if conn_id == "c1" and message["type"] == "joined":
            # Re-entrant submit: must wait until ann's join is fully handled.
            room_box["room"].receive("c2", {"type": "join", "playerName": "bob"})

    room = Room("r", send, id_factory=_ids())
    room_box["room"] = room
    room.connect("c2")
    outbox.clear()
    room.connect("c1")
    room.receive("c1", {"type": "join", "playerName": "ann"})

    kinds = [(conn, m["type"]) for conn, m in outbox.order]
    assert kinds == [
        ("c1", "state"),
        ("c1", "joined"),
        ("c1", "state"),
        ("c2", "joined"),
        ("c1", "state"),
        ("c2", "state"),
    ]
    assert [s.name for s in room.seats] == ["ann", "bob"]


def test_full_networked_game_conserves_tiles(outbox):
    room = Room("r", outbox, rng=random.Random(11), variant=WallVariant.STANDARD, id_factory=_ids())
    conns = {}
    for conn_id, name in (("c1", "ann"), ("c2", "bob"), ("c3", "cy")):
        _join(room, conn_id, name)
        conns[room.connections[conn_id]] = conn_id
    room.receive("c1", {"type": "start"})

    for _ in range(3000):
        if room.game.is_terminal():
            break
        game = room.game
        if isinstance(room.pending, Held):
            conn_id = conns[room.pending.player_id]
            lines = outbox.last(conn_id, "state")["validLines"]
            room.receive(conn_id, {"type": "place", "targetLine": lines[0]})
        else:
            conn_id = conns[game.current_board.id]
            idx, tiles = next(iter(game.pool.sources()))
            source = {"type": "center"} if idx == -1 else _factory(idx)
            room.receive(conn_id, {"type": "pickup", "source": source, "color": tiles[0].value})
        held = room.pending.tiles if isinstance(room.pending, Held) else ()
        check_conservation(room.game, held=held)
        assert outbox.of_type(conn_id, "error") == []

    assert room.game.phase == GamePhase.GAME_OVER
    final = outbox.last("c2", "state")["state"]
    assert final["phase"] == GamePhase.GAME_OVER.value
    assert final["winners"]


def test_undecodable_bytes_get_error_reply(room, outbox):
    room.connect("c1")
    room.receive("c1", b"\x80abc")
    assert _error_code(outbox, "c1") == "malformed_message"
    _join(room, "c1", "ann")
    assert outbox.last("c1", "joined")["playerId"] == "p1"


def test_failed_handler_does_not_strand_queued_events(outbox):
    room_box = {}

    def send(conn_id, message):
        outbox(conn_id, message)
        if conn_id == "c1" and message["type"] == "joined":
            room_box["room"].receive("c2", {"type": "join", "playerName": "bob"})
            raise RuntimeError("socket closed")

    room = Room("r", send, id_factory=_ids())
    room_box["room"] = room
    room.connect("c1")
    room.connect("c2")
    with pytest.raises(RuntimeError, match="socket closed"):
        room.receive("c1", {"type": "join", "playerName": "ann"})

    assert [s.name for s in room.seats] == ["ann", "bob"]
    assert outbox.last("c2", "joined")["playerId"] == "p2"
    # The mailbox is usable again.
    room.receive("c2", {"type": "start"})
    assert _error_code(outbox, "c2") == "host_only"


def test_registry_discards_idle_rooms_only(outbox):
    registry = RoomRegistry(outbox, seed=1)
    registry.connect("lobby", "c1")
    registry.disconnect("lobby", "c1")
    assert "lobby" not in registry.rooms

    registry.connect("busy", "c1")
    registry.connect("busy", "c2")
    room = registry.rooms["busy"]
    room.receive("c1", {"type": "join", "playerName": "ann"})
    room.receive("c2", {"type": "join", "playerName": "bob"})
    room.receive("c1", {"type": "start"})
    registry.disconnect("busy", "c1")
    registry.disconnect("busy", "c2")
    assert registry.rooms["busy"] is room
    assert registry.discard("busy") is False

    registry.disconnect("missing", "c9")
    assert registry.discard("missing") is False
