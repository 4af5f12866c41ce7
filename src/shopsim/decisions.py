from __future__ import annotations

import math
from typing import Callable, Optional, Protocol, Sequence

from shopsim.models import DayDecision, ShopConfig, SimulationState
from shopsim.reporting import format_money


class DecisionSource(Protocol):
    def next_day_decision(self, state: SimulationState) -> Optional[DayDecision]:
        """Return the decision for day ``state.day + 1``, or None to stop the run."""
        ...


def parse_volume(s: str) -> int:
    s = (s or "").strip()
    if not s:
        return 0
    try:
        return max(0, int(s))
    except ValueError:
        pass
    try:
        v = float(s)
    except ValueError:
        return 0
    if not math.isfinite(v):
        return 0
    return max(0, int(v))


def parse_yes_no(s: str) -> bool:
    s = (s or "").strip()
    if not s:
        return False
    return s[0].lower() in ("y", "д")


def parse_price(s: str, default: float) -> float:
    s = (s or "").strip()
    if not s:
        return float(default)
    try:
        v = float(s)
    except ValueError:
        return float(default)
    if not math.isfinite(v):
        return float(default)
    return max(0.0, v)


class ScriptedDecisions:
    """Replays a fixed list of decisions, wrapping around when it runs out."""

    def __init__(self, decisions: Sequence[DayDecision]):
        if not decisions:
            raise ValueError("scripted decisions must not be empty")
        self._decisions = list(decisions)
        self._i = 0

    def next_day_decision(self, state: SimulationState) -> Optional[DayDecision]:
        d = self._decisions[self._i % len(self._decisions)]
        self._i += 1
        return d


class InteractiveDecisions:
    def __init__(
        self,
        cfg: ShopConfig,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self.cfg = cfg
        self._input = input_fn
        self._output = output_fn

    def _print_header(self, state: SimulationState) -> None:
        self._output("\n---")
        self._output(
            f"Day {state.day + 1}. Balance: {format_money(state.bank_account)}  "
            f"warehouse: {state.warehouse_stock}  store: {state.store_stock}"
        )

    def next_day_decision(self, state: SimulationState) -> Optional[DayDecision]:
        self._print_header(state)
        try:
            volume = parse_volume(self._input("Transfer volume (0 = none): "))
            buy = parse_yes_no(self._input("Buy wholesale batch? (y/n): "))
            price = parse_price(
                self._input(f"Selling price per unit (suggested {self.cfg.base_price:.2f}): "),
                self.cfg.base_price,
            )
        except (EOFError, KeyboardInterrupt):
            self._output("")
            return None
        return DayDecision(transfer_volume=volume, buy_offer=buy, selling_price=price)
