from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from shopsim.models import DayResult, RunSummary, ShopConfig, SimulationState, StagedOffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineConfig:
    """Policy constants of the daily pipeline.

    The defaults reproduce the standard shop rules: settlements every 30th day,
    90% of the truck unloaded per day, 100-unit wholesale batches paid 50/50.
    """

    month_len_days: int = 30
    delivery_rate: float = 0.9
    base_daily_demand: float = 20.0
    offer_volume: int = 100
    offer_payment_fractions: Tuple[float, ...] = (0.5, 0.5)
    staff_floor: float = 0.6
    staff_weight: float = 0.4

    def __post_init__(self) -> None:
        if int(self.month_len_days) < 1:
            raise ValueError(f"month_len_days must be >= 1, got {self.month_len_days}")
        if not 0.0 <= float(self.delivery_rate) <= 1.0:
            raise ValueError(f"delivery_rate must be within [0, 1], got {self.delivery_rate}")
        if int(self.offer_volume) < 0:
            raise ValueError(f"offer_volume must be >= 0, got {self.offer_volume}")


_DEFAULT_POLICY = EngineConfig()


def _clamp01(x: float) -> float:
    if x <= 0.0:
        return 0.0
    if x >= 1.0:
        return 1.0
    return float(x)


def _non_negative(x: object) -> float:
    # Bad numbers from callers become 0 instead of raising mid-pipeline.
    try:
        v = float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0.0:
        return 0.0
    return v


def _round_half_up(x: float) -> int:
    # Builtin round() goes to even on .5; sales quantities round away from zero.
    return int(math.floor(float(x) + 0.5))


def _is_settlement_day(day: int, policy: EngineConfig) -> bool:
    return day % int(policy.month_len_days) == 0


def calc_demand(
    base_demand: float,
    selling_price: float,
    cfg: ShopConfig,
    skill: float,
    motivation: float,
    policy: Optional[EngineConfig] = None,
) -> float:
    """Expected units sold for one day at ``selling_price``.

    Pricing above ``cfg.base_price`` scales demand down linearly until it hits
    zero at twice the base price; pricing below it scales demand up without a cap.
    """

    pol = policy or _DEFAULT_POLICY
    price_factor = 1.0 - (float(selling_price) - cfg.base_price) / cfg.base_price
    if price_factor < 0.0:
        price_factor = 0.0
    staff_factor = pol.staff_floor + pol.staff_weight * ((float(skill) + float(motivation)) / 2.0)
    demand = float(base_demand) * price_factor * staff_factor
    return max(0.0, demand)


def initialize(cfg: ShopConfig) -> SimulationState:
    return SimulationState(
        day=0,
        warehouse_stock=int(cfg.initial_base_stock),
        in_transit=0,
        store_stock=int(cfg.initial_store_stock),
        bank_account=float(cfg.initial_balance),
        credit_used=0.0,
        tax_base_accrued=0.0,
        total_tax_paid=0.0,
        sales_skill=0.8,
        sales_motivation=0.8,
        offer=StagedOffer(),
        total_revenue=0.0,
        total_expenses=0.0,
    )


def _pay_offer_stage(state: SimulationState) -> float:
    pay = state.offer.next_payment_amount()
    state.bank_account -= pay
    state.total_expenses += pay
    state.offer.advance_stage()
    return pay


def _draw_credit(state: SimulationState, cfg: ShopConfig) -> float:
    if state.bank_account >= 0.0:
        return 0.0
    need = -state.bank_account
    available = max(0.0, float(cfg.credit_limit) - state.credit_used)
    used = min(need, available)
    state.credit_used += used
    state.bank_account += used
    if used > 0.0:
        logger.info("day %d: drew %.2f from credit (used %.2f of %.2f)", state.day, used, state.credit_used, cfg.credit_limit)
    if state.bank_account < 0.0:
        logger.warning(
            "day %d: credit line exhausted, balance stays negative at %.2f",
            state.day,
            state.bank_account,
        )
    return used


def simulate_day(
    state: SimulationState,
    cfg: ShopConfig,
    transfer_volume: int,
    buy_offer: bool,
    selling_price: float,
    base_daily_demand: Optional[float] = None,
    policy: Optional[EngineConfig] = None,
) -> DayResult:
    """Advance ``state`` by one day in place and return the day's snapshot.

    Steps run in a fixed order and later steps read what earlier ones wrote:
    load, deliver, wholesale purchase, sales, staged payment, tax accrual,
    tax settlement, credit draw, credit interest.
    """

    pol = policy or _DEFAULT_POLICY
    base_demand = _non_negative(pol.base_daily_demand if base_daily_demand is None else base_daily_demand)
    transfer = int(_non_negative(transfer_volume))
    price = _non_negative(selling_price)

    state.day += 1
    settlement = _is_settlement_day(state.day, pol)

    # Warehouse -> truck
    load = min(transfer, state.warehouse_stock)
    state.warehouse_stock -= load
    state.in_transit += load

    # Truck -> store
    delivered = int(math.floor(state.in_transit * _clamp01(pol.delivery_rate)))
    state.in_transit -= delivered
    state.store_stock += delivered

    offer_payment = 0.0
    if buy_offer:
        if state.offer.volume > 0 and not state.offer.is_completed():
            logger.info(
                "day %d: new offer replaces unfinished one (%.2f left unpaid)",
                state.day,
                state.offer.remaining_amount(),
            )
        state.offer.create(pol.offer_volume, cfg.base_offer_price, list(pol.offer_payment_fractions))
        pay = _pay_offer_stage(state)
        offer_payment += pay
        logger.info("day %d: bought offer of %d units, first stage %.2f", state.day, state.offer.volume, pay)

    # Sales
    demand = calc_demand(base_demand, price, cfg, state.sales_skill, state.sales_motivation, pol)
    if demand >= state.store_stock:
        sales_qty = state.store_stock
    else:
        sales_qty = max(0, _round_half_up(demand))
    revenue = sales_qty * price
    state.store_stock -= sales_qty
    state.bank_account += revenue
    state.total_revenue += revenue

    if not state.offer.is_completed() and settlement:
        pay = _pay_offer_stage(state)
        offer_payment += pay
        logger.info(
            "day %d: offer stage %d/%d paid %.2f",
            state.day,
            state.offer.next_stage_index,
            len(state.offer.payment_fractions),
            pay,
        )

    # Tax base is gross revenue, not profit.
    if revenue > 0.0:
        state.tax_base_accrued += revenue

    tax = 0.0
    if settlement:
        tax = state.tax_base_accrued * float(cfg.tax_rate)
        state.tax_base_accrued = 0.0
        state.bank_account -= tax
        state.total_tax_paid += tax
        state.total_expenses += tax
        logger.info("day %d: tax settled %.2f", state.day, tax)

    credit_drawn = _draw_credit(state, cfg)

    # Interest is charged to cash only; credit_used does not compound.
    interest = 0.0
    if settlement and state.credit_used > 0.0:
        interest = state.credit_used * float(cfg.credit_rate_monthly)
        state.bank_account -= interest
        state.total_expenses += interest
        logger.info("day %d: credit interest %.2f", state.day, interest)

    logger.debug(
        "day %d: sold %d at %.2f, balance %.2f, stock %d/%d/%d",
        state.day,
        sales_qty,
        price,
        state.bank_account,
        state.warehouse_stock,
        state.in_transit,
        state.store_stock,
    )

    return DayResult(
        day=state.day,
        bank_account=state.bank_account,
        credit_used=state.credit_used,
        warehouse_stock=state.warehouse_stock,
        in_transit=state.in_transit,
        store_stock=state.store_stock,
        offer_volume=state.offer.volume,
        offer_paid_stage=state.offer.next_stage_index,
        tax_base_accrued=state.tax_base_accrued,
        total_tax_paid=state.total_tax_paid,
        daily_sales_qty=sales_qty,
        daily_revenue=revenue,
        delivered=delivered,
        offer_payment=offer_payment,
        tax_paid=tax,
        credit_drawn=credit_drawn,
        interest_paid=interest,
    )


def summarize(state: SimulationState) -> RunSummary:
    return RunSummary(
        days=state.day,
        bank_account=state.bank_account,
        credit_used=state.credit_used,
        total_revenue=state.total_revenue,
        total_expenses=state.total_expenses,
        total_tax_paid=state.total_tax_paid,
    )
