from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ShopConfig:
    base_price: float = 100.0
    base_offer_price: float = 80.0
    initial_balance: float = 10_000.0
    initial_base_stock: int = 500
    initial_store_stock: int = 50
    credit_limit: float = 5_000.0
    credit_rate_monthly: float = 0.02
    tax_rate: float = 0.18
    days: int = 90

    def __post_init__(self) -> None:
        if float(self.base_price) <= 0.0:
            raise ValueError(f"base_price must be positive, got {self.base_price}")
        for name in ("initial_base_stock", "initial_store_stock", "days"):
            if int(getattr(self, name)) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("base_offer_price", "credit_limit", "credit_rate_monthly", "tax_rate"):
            if float(getattr(self, name)) < 0.0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


@dataclass
class StagedOffer:
    volume: int = 0
    unit_price: float = 0.0
    payment_fractions: List[float] = field(default_factory=list)  # share of volume*unit_price per stage
    next_stage_index: int = 0

    def create(self, volume: int, unit_price: float, payment_fractions: List[float]) -> None:
        # Replaces whatever schedule was still outstanding.
        self.volume = max(0, int(volume))
        self.unit_price = float(unit_price)
        self.payment_fractions = [float(f) for f in payment_fractions]
        self.next_stage_index = 0

    def total_cost(self) -> float:
        return float(self.volume) * self.unit_price

    def next_payment_amount(self) -> float:
        if self.is_completed():
            return 0.0
        return self.total_cost() * self.payment_fractions[self.next_stage_index]

    def advance_stage(self) -> None:
        if self.next_stage_index < len(self.payment_fractions):
            self.next_stage_index += 1

    def is_completed(self) -> bool:
        return self.next_stage_index >= len(self.payment_fractions)

    def paid_amount(self) -> float:
        return self.total_cost() * sum(self.payment_fractions[: self.next_stage_index])

    def remaining_amount(self) -> float:
        return self.total_cost() * sum(self.payment_fractions[self.next_stage_index :])


@dataclass
class SimulationState:
    day: int = 0

    warehouse_stock: int = 0
    in_transit: int = 0
    store_stock: int = 0

    bank_account: float = 0.0
    credit_used: float = 0.0

    tax_base_accrued: float = 0.0
    total_tax_paid: float = 0.0

    # Demand modifiers in [0, 1]
    sales_skill: float = 0.8
    sales_motivation: float = 0.8

    offer: StagedOffer = field(default_factory=StagedOffer)

    # Reporting only
    total_revenue: float = 0.0
    total_expenses: float = 0.0

    def total_units(self) -> int:
        return int(self.warehouse_stock) + int(self.in_transit) + int(self.store_stock)


@dataclass(frozen=True)
class DayDecision:
    transfer_volume: int = 0
    buy_offer: bool = False
    selling_price: float = 0.0


@dataclass(frozen=True)
class DayResult:
    day: int
    bank_account: float
    credit_used: float
    warehouse_stock: int
    in_transit: int
    store_stock: int
    offer_volume: int
    offer_paid_stage: int
    tax_base_accrued: float
    total_tax_paid: float
    daily_sales_qty: int
    daily_revenue: float

    # Day-level cash movements
    delivered: int = 0
    offer_payment: float = 0.0
    tax_paid: float = 0.0
    credit_drawn: float = 0.0
    interest_paid: float = 0.0


@dataclass(frozen=True)
class RunSummary:
    days: int
    bank_account: float
    credit_used: float
    total_revenue: float
    total_expenses: float
    total_tax_paid: float
