"""Run a batch of battles between two teams and print a summary.

Usage:
    python scripts/simulate_battles.py --player squire cleric --enemy archer bomber necromancer
    python scripts/simulate_battles.py --runs 500 --parallel --config data/sample/config.json
"""

from __future__ import annotations

import argparse
import logging
import time

from effect_engine.sim.config import EngineConfig, load_config
from effect_engine.sim.content.registry import ContentRegistry
from effect_engine.sim.runner import BatchRunner


def main() -> None:
    parser = argparse.ArgumentParser(description="Simulate battles between two teams")
    parser.add_argument("--content", type=str, default=None, help="Content JSON (defaults to the sample)")
    parser.add_argument("--config", type=str, default=None, help="Engine config JSON")
    parser.add_argument("--player", nargs="+", default=["squire", "cleric"], help="Player team, front first")
    parser.add_argument("--enemy", nargs="+", default=["archer", "bomber", "necromancer"], help="Enemy team, front first")
    parser.add_argument("--runs", type=int, default=100, help="Number of battles")
    parser.add_argument("--seed", type=int, default=None, help="Base seed (defaults to the config seed)")
    parser.add_argument("--parallel", action="store_true", help="Use a process pool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(args.config) if args.config else EngineConfig()
    registry = ContentRegistry()
    registry.load_file(args.content)

    runner = BatchRunner(registry, config, content_path=args.content)
    encounter = {"player_team": args.player, "enemy_team": args.enemy}
    base_seed = args.seed if args.seed is not None else config.seed

    print(f"Running {args.runs:,} battles: {args.player} vs {args.enemy}")
    t0 = time.perf_counter()
    results = runner.run_batch(args.runs, encounter, base_seed=base_seed, parallel=args.parallel)
    elapsed = time.perf_counter() - t0
    print(f"Done in {elapsed:.1f}s")

    summary = runner.summarize(results)
    print()
    print(f"  wins:       {summary.wins}")
    print(f"  losses:     {summary.losses}")
    print(f"  draws:      {summary.draws}")
    print(f"  win rate:   {summary.win_rate:.1%}")
    print(f"  mean turns: {summary.mean_turns:.1f}")


if __name__ == "__main__":
    main()
