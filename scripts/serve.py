#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from azul_room.config import Config  # noqa: E402
from azul_room.server import create_app, socketio  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve multiplayer Azul rooms over Socket.IO.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--variant", choices=["standard", "gray"], help="Wall variant for new rooms.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for deterministic bag shuffles.")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    if args.variant:
        Config.AZUL_WALL_VARIANT = args.variant
    if args.seed is not None:
        Config.AZUL_SEED = args.seed
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(Config)
    socketio.run(app, host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
