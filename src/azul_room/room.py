"""Authoritative multiplayer room.

A ``Room`` owns one game and processes its inbound events strictly one at a
time, in arrival order. Callers hand events to ``connect``, ``receive`` and
``disconnect``; whichever caller finds the mailbox idle drains it, so the
room's state is never touched by two threads at once.
"""

import logging
import random
import threading
import uuid
from collections import deque
from typing import Callable

from azul_rules import (
    AzulError,
    GamePhase,
    GameState,
    HostOnly,
    InsufficientPlayers,
    InvalidPhase,
    NameTaken,
    NotYourTurn,
    PendingPickExists,
    PlayerBoard,
    RoomFull,
    WallVariant,
    finish_turn,
    new_game,
    pickup,
    place_tiles,
)

from .pending import IDLE, Held, PendingPick, hold
from .protocol import (
    Join,
    Leave,
    Pickup,
    Place,
    Start,
    error_message,
    joined_message,
    parse_client_message,
    room_snapshot,
    state_message,
)

LOGGER = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 4

Send = Callable[[str, dict], None]


def _player_id() -> str:
    return f"player-{uuid.uuid4().hex[:8]}"


class Room:
    def __init__(
        self,
        room_id: str,
        send: Send,
        *,
        max_players: int = MAX_PLAYERS,
        variant: WallVariant = WallVariant.STANDARD,
        rng: random.Random | None = None,
        id_factory: Callable[[], str] = _player_id,
    ) -> None:
        if not MIN_PLAYERS <= max_players <= MAX_PLAYERS:
            raise ValueError(f"max_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        self.room_id = room_id
        self.max_players = max_players
        self.variant = WallVariant(variant)
        self.rng = rng if rng is not None else random.Random()
        self.seats: list[PlayerBoard] = []
        self.connected: dict[str, bool] = {}
        self.host_id: str | None = None
        self.game: GameState | None = None
        self.pending: PendingPick = IDLE
        self.connections: dict[str, str] = {}  # connection id -> player id
        self._sockets: set[str] = set()
        self._send = send
        self._new_id = id_factory
        self._mailbox: deque = deque()
        self._lock = threading.Lock()
        self._draining = False

    # -- mailbox -----------------------------------------------------------

    def connect(self, conn_id: str) -> None:
        self.track(conn_id)
        self._submit(self._on_connect, conn_id, None)

    def receive(self, conn_id: str, raw) -> None:
        self._submit(self._on_message, conn_id, raw)

    def disconnect(self, conn_id: str) -> None:
        with self._lock:
            self._sockets.discard(conn_id)
        self._submit(self._on_close, conn_id, None)

    def track(self, conn_id: str) -> None:
        """Count ``conn_id`` as open before its connect event is processed."""
        with self._lock:
            self._sockets.add(conn_id)

    def is_idle(self) -> bool:
        """No open sockets and no game that someone could still come back to."""
        with self._lock:
            if self._sockets:
                return False
        return not self._game_in_progress()

    def _submit(self, handler, conn_id: str, payload) -> None:
        with self._lock:
            self._mailbox.append((handler, conn_id, payload))
            if self._draining:
                return
            self._draining = True
        error = None
        while True:
            with self._lock:
                if not self._mailbox:
                    self._draining = False
                    break
                handler, conn_id, payload = self._mailbox.popleft()
            try:
                handler(conn_id, payload)
            except Exception as exc:
                LOGGER.exception("room %s: %s failed for %s", self.room_id, handler.__name__, conn_id)
                if error is None:
                    error = exc
        # Events queued by other callers are drained before the first failure surfaces.
        if error is not None:
            raise error

    # -- event handlers ----------------------------------------------------

    def _on_connect(self, conn_id: str, _payload) -> None:
        self._send(conn_id, state_message(self.snapshot(), []))

    def _on_close(self, conn_id: str, _payload) -> None:
        if self._release(conn_id):
            self.broadcast()

    def _on_message(self, conn_id: str, raw) -> None:
        try:
            message = parse_client_message(raw)
            if isinstance(message, Join):
                changed = self._join(conn_id, message)
            elif isinstance(message, Start):
                changed = self._start(conn_id)
            elif isinstance(message, Pickup):
                changed = self._pickup(conn_id, message)
            elif isinstance(message, Place):
                changed = self._place(conn_id, message)
            else:
                changed = self._leave(conn_id, message)
        except AzulError as exc:
            LOGGER.warning("room %s rejected message from %s: %s (%s)", self.room_id, conn_id, exc.message, exc.code)
            self._send(conn_id, error_message(exc.code, exc.message))
            return
        if changed:
            self.broadcast()

    # -- roster ------------------------------------------------------------

    def _seat_by_name(self, name: str) -> PlayerBoard | None:
        for seat in self.seats:
            if seat.name == name:
                return seat
        return None

    def _game_in_progress(self) -> bool:
        return self.game is not None and not self.game.is_terminal()

    def _join(self, conn_id: str, message: Join) -> bool:
        if conn_id in self.connections:
            raise NameTaken("this connection has already joined")
        seat = self._seat_by_name(message.player_name)
        if seat is not None:
            if self.connected.get(seat.id):
                raise NameTaken(f"name {message.player_name!r} is already taken")
            self._attach(conn_id, seat.id)
            LOGGER.info("room %s: %s reconnected", self.room_id, seat.name)
            return True
        if self._game_in_progress():
            raise InvalidPhase("game already in progress")
        if len(self.seats) >= self.max_players:
            raise RoomFull("room is full")
        seat = PlayerBoard(id=self._new_id(), name=message.player_name)
        self.seats.append(seat)
        if self.host_id is None:
            self.host_id = seat.id
        self._attach(conn_id, seat.id)
        LOGGER.info("room %s: %s joined (%d/%d)", self.room_id, seat.name, len(self.seats), self.max_players)
        return True

    def _attach(self, conn_id: str, player_id: str) -> None:
        self.connections[conn_id] = player_id
        self.connected[player_id] = True
        self._send(conn_id, joined_message(player_id))

    def _release(self, conn_id: str) -> bool:
        player_id = self.connections.pop(conn_id, None)
        if player_id is None:
            return False
        self.connected[player_id] = False
        LOGGER.info("room %s: %s left", self.room_id, player_id)
        return True

    def _leave(self, conn_id: str, _message: Leave) -> bool:
        return self._release(conn_id)

    def _seated(self, conn_id: str) -> str:
        player_id = self.connections.get(conn_id)
        if player_id is None:
            raise NotYourTurn("join the room before playing")
        return player_id

    # -- game flow ---------------------------------------------------------

    def _start(self, conn_id: str) -> bool:
        player_id = self.connections.get(conn_id)
        if player_id is None or player_id != self.host_id:
            raise HostOnly("only the host can start the game")
        if self._game_in_progress():
            raise InvalidPhase("game already in progress")
        if len(self.seats) < MIN_PLAYERS:
            raise InsufficientPlayers(f"need at least {MIN_PLAYERS} players")
        self.game = new_game(
            [seat.name for seat in self.seats],
            player_ids=[seat.id for seat in self.seats],
            rng=self.rng,
            variant=self.variant,
        )
        self.pending = IDLE
        LOGGER.info("room %s: game started with %d players", self.room_id, len(self.seats))
        return True

    def _require_draft(self) -> GameState:
        if self.game is None or self.game.phase != GamePhase.DRAFT:
            raise InvalidPhase("no drafting in progress")
        return self.game

    def _pickup(self, conn_id: str, message: Pickup) -> bool:
        player_id = self._seated(conn_id)
        game = self._require_draft()
        idx = game.player_index(player_id)
        if idx is None or idx != game.current_player:
            raise NotYourTurn(f"it is {game.current_board.name}'s turn")
        if isinstance(self.pending, Held):
            raise PendingPickExists("place your held tiles first")
        game, pick = pickup(game, idx, message.source_index, message.color)
        self.game = game
        self.pending = hold(player_id, pick.color, pick.tiles)
        return True

    def _place(self, conn_id: str, message: Place) -> bool:
        player_id = self._seated(conn_id)
        game = self._require_draft()
        held = self.pending
        if not isinstance(held, Held):
            raise InvalidPhase("no tiles are held")
        if held.player_id != player_id:
            raise NotYourTurn("another player is placing tiles")
        idx = game.player_index(player_id)
        game, remainder = place_tiles(game, idx, held.color, list(held.tiles), message.target_line)
        pending = hold(player_id, held.color, remainder)
        if not isinstance(pending, Held):
            game = finish_turn(game)
        self.game = game
        self.pending = pending
        return True

    # -- outbound ----------------------------------------------------------

    def snapshot(self) -> dict:
        return room_snapshot(self.room_id, self.host_id, self.connected, self.seats, self.game, self.pending)

    def valid_lines(self, player_id: str) -> list[int]:
        held = self.pending
        if not isinstance(held, Held) or held.player_id != player_id or self.game is None:
            return []
        idx = self.game.player_index(player_id)
        return self.game.players[idx].valid_target_lines(held.color, self.game.variant)

    def broadcast(self) -> None:
        snapshot = self.snapshot()
        for conn_id, player_id in list(self.connections.items()):
            self._send(conn_id, state_message(snapshot, self.valid_lines(player_id)))


class RoomRegistry:
    """Rooms by id, created on first use."""

    def __init__(
        self,
        send: Send,
        *,
        max_players: int = MAX_PLAYERS,
        variant: WallVariant = WallVariant.STANDARD,
        seed: int | None = None,
    ) -> None:
        self._send = send
        self.max_players = max_players
        self.variant = WallVariant(variant)
        self.seed = seed
        self.rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def get(self, room_id: str) -> Room:
        with self._lock:
            return self._room(room_id)

    def connect(self, room_id: str, conn_id: str) -> Room:
        with self._lock:
            room = self._room(room_id)
            # Tracked under the registry lock so a concurrent discard cannot drop it.
            room.track(conn_id)
        room.connect(conn_id)
        return room

    def disconnect(self, room_id: str, conn_id: str) -> None:
        with self._lock:
            room = self.rooms.get(room_id)
        if room is None:
            return
        room.disconnect(conn_id)
        self.discard(room_id)

    def discard(self, room_id: str) -> bool:
        """Forget ``room_id`` if nobody is connected and no game is in progress."""
        with self._lock:
            room = self.rooms.get(room_id)
            if room is None or not room.is_idle():
                return False
            del self.rooms[room_id]
        LOGGER.info("closed room %s", room_id)
        return True

    def _room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            rng = random.Random(None if self.seed is None else f"{self.seed}:{room_id}")
            room = Room(room_id, self._send, max_players=self.max_players, variant=self.variant, rng=rng)
            self.rooms[room_id] = room
            LOGGER.info("created room %s", room_id)
        return room
