"""Socket.IO transport for rooms.

Clients connect to the ``/ws`` namespace with a ``room`` query parameter and
exchange JSON objects on the ``message`` event in both directions.
"""

import logging

from flask import Flask, jsonify, request
from flask_socketio import SocketIO

from azul_rules import WallVariant

from .config import Config
from .protocol import error_message
from .room import RoomRegistry

LOGGER = logging.getLogger(__name__)

NAMESPACE = "/ws"
EVENT = "message"

socketio = SocketIO(async_mode=None)

_sid_to_room: dict[str, str] = {}


def _send(conn_id: str, message: dict) -> None:
    socketio.emit(EVENT, message, to=conn_id, namespace=NAMESPACE)


def create_app(config_class=Config) -> Flask:
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    origins = flask_app.config.get("AZUL_CORS_ORIGINS") or "*"
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    registry = RoomRegistry(
        _send,
        max_players=flask_app.config.get("AZUL_MAX_PLAYERS", 4),
        variant=WallVariant(flask_app.config.get("AZUL_WALL_VARIANT", "standard")),
        seed=flask_app.config.get("AZUL_SEED"),
    )
    flask_app.extensions["azul_rooms"] = registry
    register_socketio_handlers(registry)

    @flask_app.get("/healthz")
    def healthz():
        return jsonify({"status": "ok", "rooms": len(registry.rooms)})

    return flask_app


def register_socketio_handlers(registry: RoomRegistry) -> None:
    def handle_connect(auth=None):
        room_id = request.args.get("room") or (auth or {}).get("room")
        if not room_id:
            LOGGER.warning("connection %s refused: no room id", request.sid)
            return False
        _sid_to_room[request.sid] = room_id
        registry.connect(room_id, request.sid)
        return None

    def handle_message(data):
        room_id = _sid_to_room.get(request.sid)
        if room_id is None:
            _send(request.sid, error_message("malformed_message", "not connected to a room"))
            return
        registry.get(room_id).receive(request.sid, data)

    def handle_disconnect(reason=None):
        room_id = _sid_to_room.pop(request.sid, None)
        if room_id is not None:
            registry.disconnect(room_id, request.sid)

    socketio.on_event("connect", handle_connect, namespace=NAMESPACE)
    socketio.on_event(EVENT, handle_message, namespace=NAMESPACE)
    socketio.on_event("disconnect", handle_disconnect, namespace=NAMESPACE)
