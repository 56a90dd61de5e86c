#!/usr/bin/env python3
import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from azul_rules.replay import record_from_json, replay_game  # noqa: E402
from azul_rules.serialization import state_to_dict  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a recorded Azul game and print the final state.")
    parser.add_argument("record", help="JSON file with players, seed, variant and moves.")
    parser.add_argument("--log", action="store_true", help="Include the game log in the output.")
    parser.add_argument("--plot", help="Write a score history chart to this path.")
    args = parser.parse_args()

    names, moves, seed, variant = record_from_json(Path(args.record).read_text())
    result = replay_game(names, moves, seed=seed, variant=variant)
    print(json.dumps(state_to_dict(result.final_state, include_log=args.log), indent=2))

    if args.plot:
        from azul_rules.visualize import plot_score_history

        fig = plot_score_history(result.score_history, names)
        fig.savefig(args.plot)
        print(f"Wrote {args.plot}")


if __name__ == "__main__":
    main()
