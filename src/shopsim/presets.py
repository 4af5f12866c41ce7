from __future__ import annotations

from typing import List

from shopsim.engine import EngineConfig
from shopsim.models import DayDecision, ShopConfig

DEMO_DAYS = 10

# (transfer_volume, buy_offer, selling_price) for the scripted walkthrough.
DEMO_DECISIONS: List[DayDecision] = [
    DayDecision(50, False, 120.0),
    DayDecision(0, True, 110.0),
    DayDecision(30, False, 115.0),
    DayDecision(0, False, 105.0),
    DayDecision(80, False, 100.0),
    DayDecision(0, False, 95.0),
    DayDecision(20, False, 100.0),
    DayDecision(0, False, 100.0),
    DayDecision(0, False, 100.0),
    DayDecision(0, False, 90.0),
]


def default_config() -> ShopConfig:
    """Shop economics shared by the CLI and the web API."""

    return ShopConfig()


def default_policy() -> EngineConfig:
    return EngineConfig(month_len_days=30)
