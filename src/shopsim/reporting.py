from __future__ import annotations

import csv
from dataclasses import astuple, fields
from pathlib import Path
from typing import Iterable, List, Union

from shopsim.models import DayResult, RunSummary

SEPARATOR = "-" * 60


def format_money(x: float) -> str:
    return f"{x:,.2f}"


def format_day(dr: DayResult) -> List[str]:
    lines = [
        f"Day {dr.day}: balance={format_money(dr.bank_account)}, credit used={format_money(dr.credit_used)}",
        f"  Stock: warehouse={dr.warehouse_stock}, in transit={dr.in_transit}, store={dr.store_stock}",
        f"  Sold {dr.daily_sales_qty} units, revenue={format_money(dr.daily_revenue)}",
    ]
    if dr.offer_volume > 0:
        lines.append(f"  Active offer: volume={dr.offer_volume}, stages paid={dr.offer_paid_stage}")
    lines.append(f"  Tax base accrued={format_money(dr.tax_base_accrued)}, tax paid total={format_money(dr.total_tax_paid)}")
    lines.append(SEPARATOR)
    return lines


def print_day(dr: DayResult) -> None:
    for line in format_day(dr):
        print(line)


def format_summary(summary: RunSummary) -> List[str]:
    return [
        f"Simulation finished after {summary.days} days.",
        f"  Final balance={format_money(summary.bank_account)}, credit used={format_money(summary.credit_used)}",
        "  ".join(
            [
                f"  Total revenue={format_money(summary.total_revenue)}",
                f"total expenses={format_money(summary.total_expenses)}",
                f"tax paid={format_money(summary.total_tax_paid)}",
            ]
        ),
    ]


def print_summary(summary: RunSummary) -> None:
    for line in format_summary(summary):
        print(line)


def write_ledger_csv(results: Iterable[DayResult], path: Union[str, Path]) -> Path:
    """Write one row per simulated day; overwrites ``path``."""

    p = Path(path)
    if p.parent and not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
    columns = [f.name for f in fields(DayResult)]
    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(columns)
        for dr in results:
            w.writerow(astuple(dr))
    return p
