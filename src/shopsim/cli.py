from __future__ import annotations

import argparse
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from shopsim.decisions import DecisionSource, InteractiveDecisions, ScriptedDecisions
from shopsim.engine import EngineConfig, initialize, simulate_day, summarize
from shopsim.models import DayResult, ShopConfig, SimulationState
from shopsim.presets import DEMO_DAYS, DEMO_DECISIONS, default_config, default_policy
from shopsim.reporting import print_day, print_summary, write_ledger_csv

logger = logging.getLogger(__name__)


def run_simulation(
    cfg: ShopConfig,
    source: DecisionSource,
    days: int,
    policy: Optional[EngineConfig] = None,
    on_day: Optional[Callable[[DayResult], None]] = None,
) -> Tuple[SimulationState, List[DayResult]]:
    """Drive ``days`` steps from a fresh state; stops early if the source runs dry."""

    state = initialize(cfg)
    results: List[DayResult] = []
    for _ in range(max(0, int(days))):
        decision = source.next_day_decision(state)
        if decision is None:
            logger.info("decision source ended the run after day %d", state.day)
            break
        dr = simulate_day(
            state,
            cfg,
            decision.transfer_volume,
            decision.buy_offer,
            decision.selling_price,
            policy=policy,
        )
        results.append(dr)
        if on_day is not None:
            on_day(dr)
    return state, results


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="shopsim", description="Day-by-day retail shop simulation.")
    ap.add_argument("-d", "--demo", action="store_true", help=f"run the scripted {DEMO_DAYS}-day demo")
    ap.add_argument("--days", type=int, default=None, help="number of days to simulate")
    ap.add_argument("--ledger-csv", default=None, help="write per-day results to this CSV file")
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="engine log verbosity (default: WARNING)",
    )
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    cfg = default_config()
    policy = default_policy()

    source: DecisionSource
    if args.demo:
        days = DEMO_DAYS if args.days is None else args.days
        source = ScriptedDecisions(DEMO_DECISIONS)
        print(f"Running non-interactive demo for {days} days")
    else:
        days = cfg.days if args.days is None else args.days
        source = InteractiveDecisions(cfg)
        print("Interactive mode. Enter the decisions before each simulated day.")

    state, results = run_simulation(cfg, source, days, policy=policy, on_day=print_day)
    print_summary(summarize(state))

    if args.ledger_csv:
        try:
            p = write_ledger_csv(results, args.ledger_csv)
            print(f"Ledger written to {p}")
        except OSError as e:
            print(f"Failed to write ledger: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
