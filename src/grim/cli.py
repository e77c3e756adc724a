from __future__ import annotations

import argparse
import logging
from collections import Counter

from grim.engine.bots import simulate_match
from grim.engine.game import MatchConfig, match_winner
from grim.engine.scoring import format_scores


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Grim — headless all-bot match runner")
    parser.add_argument("--deals", type=int, default=12, help="Deals per match")
    parser.add_argument("--seed", type=str, default="", help="Match seed (random if empty)")
    parser.add_argument("--games", type=int, default=1, help="Number of matches to play")
    parser.add_argument("--log", action="store_true", help="Print the event log of every match")
    parser.add_argument("--verbose", action="store_true", help="Engine debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.deals < 1 or args.games < 1:
        parser.error("--deals and --games must be at least 1")

    config = MatchConfig.all_bots(args.deals)
    results: Counter[str] = Counter()

    for g in range(args.games):
        seed = None
        if args.seed:
            seed = args.seed if args.games == 1 else f"{args.seed}-{g}"
        state = simulate_match(config, seed)

        if args.log:
            for line in state.log:
                print(line)
        winner = match_winner(state)
        label = winner.value if winner is not None else "draw"
        results[label] += 1
        print(f"match {g + 1}: seed={state.seed} {format_scores(state.scores)} -> {label}")

    if args.games > 1:
        summary = ", ".join(f"{k}={results[k]}" for k in ("NS", "EW", "draw"))
        print(f"{args.games} matches: {summary}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
