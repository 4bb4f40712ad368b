"""
main.py — Headless battle runner

1. Load tuning constants
2. Build the battle from a scenario file
3. Step it for the scenario's duration
4. Print the summary and the tail of the dev log

    python main.py                                  # data/scenarios/skirmish.toml
    python main.py path/to/scenario.toml --duration 30000 --seed 3
"""

import argparse
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib

from core import tuning
from simulation.battle import Battle

ROOT = Path(__file__).resolve().parent
DEFAULT_SCENARIO = ROOT / "data" / "scenarios" / "skirmish.toml"


def _scenario_meta(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f).get("battle", {})


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a battle scenario headlessly.")
    parser.add_argument("scenario", nargs="?", default=str(DEFAULT_SCENARIO))
    parser.add_argument("--duration", type=float, default=None, help="battle time in ms")
    parser.add_argument("--frame", type=float, default=None, help="frame delta in ms")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--tuning", default=None, help="alternate tuning.toml")
    parser.add_argument("--log", type=int, default=20, help="dev-log lines to print")
    args = parser.parse_args(argv)

    tuning.load(args.tuning)

    path = Path(args.scenario)
    meta = _scenario_meta(path)
    duration = args.duration if args.duration is not None else float(meta.get("duration_ms", 60_000))
    frame = args.frame if args.frame is not None else float(meta.get("frame_ms", 16))

    battle = Battle.from_toml(path, seed=args.seed)
    frames = battle.run(duration, frame)

    summary = battle.summary()
    print(f"[SIM] {frames} frames, {summary['time']:.0f}ms of battle")
    for name, row in summary["teams"].items():
        print(f"[SIM]   {name:<10} {row['alive']}/{row['units']} standing")
    for unit in summary["units"]:
        status = "alive" if unit["alive"] else "dead"
        print(f"[SIM]   {unit['name']:<14} {status:<5} {unit['hp']:>4g} HP  {unit['state']}")
    if args.log:
        print("[SIM] recent events:")
        for entry in battle.log.recent(args.log):
            print("  " + battle.log.format(entry))
    return summary


if __name__ == "__main__":
    main()
