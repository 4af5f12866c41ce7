from __future__ import annotations

import csv
import tempfile
from pathlib import Path

from shopsim.cli import main, run_simulation
from shopsim.decisions import InteractiveDecisions, ScriptedDecisions, parse_price, parse_volume, parse_yes_no
from shopsim.engine import summarize
from shopsim.models import DayDecision, ShopConfig
from shopsim.presets import DEMO_DAYS, DEMO_DECISIONS
from shopsim.reporting import format_day, format_money, format_summary


def _assert(cond: bool, msg: str) -> None:
    if not cond:
        raise AssertionError(msg)


def _scripted_input(answers):
    pending = list(answers)

    def _input(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _input


def test_input_coercion() -> None:
    _assert(parse_volume("") == 0 and parse_volume("abc") == 0, "bad volume defaults to 0")
    _assert(parse_volume("-20") == 0, "negative volume clamps to 0")
    _assert(parse_volume(" 35 ") == 35 and parse_volume("12.7") == 12, "numeric volume parsed")
    _assert(parse_yes_no("y") and parse_yes_no("Yes") and parse_yes_no("Да"), "yes answers")
    _assert(not parse_yes_no("") and not parse_yes_no("n") and not parse_yes_no("нет"), "no answers")
    _assert(parse_price("", 100.0) == 100.0 and parse_price("cheap", 100.0) == 100.0, "bad price defaults to base")
    _assert(parse_price("-5", 100.0) == 0.0, "negative price clamps to 0")
    _assert(parse_price("inf", 100.0) == 100.0, "non-finite price defaults to base")
    _assert(parse_price("87.5", 100.0) == 87.5, "numeric price parsed")


def test_scripted_decisions_wrap_around() -> None:
    src = ScriptedDecisions([DayDecision(1, False, 10.0), DayDecision(2, True, 20.0)])
    got = [src.next_day_decision(None).transfer_volume for _ in range(5)]  # type: ignore[arg-type]
    _assert(got == [1, 2, 1, 2, 1], f"unexpected cycle {got}")
    try:
        ScriptedDecisions([])
    except ValueError:
        pass
    else:
        raise AssertionError("empty script should be rejected")


def test_interactive_decisions_prompt_and_stop_on_eof() -> None:
    cfg = ShopConfig()
    out = []
    src = InteractiveDecisions(cfg, input_fn=_scripted_input(["40", "y", "", "x", "n", "130"]), output_fn=out.append)
    state, results = run_simulation(cfg, src, cfg.days)

    _assert(len(results) == 2, f"run should stop at EOF, got {len(results)} days")
    _assert(state.offer.volume == 100, "first day bought the offer")
    _assert(results[0].daily_revenue == results[0].daily_sales_qty * 100.0, "empty price uses base price")
    _assert(results[1].daily_revenue == results[1].daily_sales_qty * 130.0, "second day price 130")
    _assert(any("Day 1." in line for line in out), "header printed before day 1")
    _assert(any("Day 3." in line for line in out), "header printed before the aborted day")


def test_demo_run_is_deterministic() -> None:
    cfg = ShopConfig()
    _, first = run_simulation(cfg, ScriptedDecisions(DEMO_DECISIONS), DEMO_DAYS)
    _, second = run_simulation(cfg, ScriptedDecisions(DEMO_DECISIONS), DEMO_DAYS)
    _assert(len(first) == DEMO_DAYS, "demo runs ten days")
    _assert(first == second, "same decisions must give the same results")
    _assert(first[0].daily_sales_qty == 15 and first[0].daily_revenue == 1800.0, "demo day 1")
    _assert(first[1].offer_volume == 100 and first[1].offer_paid_stage == 1, "demo day 2 buys the offer")
    _assert(first[1].daily_sales_qty == 17, f"demo day 2 sells 17, got {first[1].daily_sales_qty}")


def test_report_lines() -> None:
    cfg = ShopConfig()
    _, results = run_simulation(cfg, ScriptedDecisions(DEMO_DECISIONS), 2)
    day1 = format_day(results[0])
    day2 = format_day(results[1])
    _assert(day1[0].startswith("Day 1: balance=11,800.00"), f"unexpected header {day1[0]}")
    _assert(not any("Active offer" in line for line in day1), "no offer line before purchase")
    _assert(any("Active offer: volume=100, stages paid=1" in line for line in day2), "offer line after purchase")
    _assert(day2[-1] == "-" * 60, "separator closes the day")
    _assert(format_money(1234567.891) == "1,234,567.89", "money formatting")


def test_summary_lines() -> None:
    cfg = ShopConfig()
    state, _ = run_simulation(cfg, ScriptedDecisions(DEMO_DECISIONS), 3)
    lines = format_summary(summarize(state))
    _assert("after 3 days" in lines[0], f"unexpected summary {lines}")
    _assert("Total revenue=" in lines[2] and "tax paid=" in lines[2], "totals line")


def test_main_demo_writes_ledger(capsys) -> None:
    with tempfile.TemporaryDirectory() as td:
        p = Path(td) / "out" / "ledger.csv"
        rc = main(["--demo", "--days", "5", "--ledger-csv", str(p)])
        _assert(rc == 0, "demo exits with 0")
        with p.open("r", encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
    _assert(len(rows) == 5, f"expected 5 ledger rows, got {len(rows)}")
    _assert(rows[0]["day"] == "1" and rows[-1]["day"] == "5", "rows ordered by day")
    _assert(rows[0]["daily_sales_qty"] == "15", "ledger carries sales")

    out = capsys.readouterr().out
    _assert("Running non-interactive demo for 5 days" in out, "demo banner printed")
    _assert("Simulation finished after 5 days." in out, "summary printed")


def test_source_launcher_runs_demo(capsys) -> None:
    import run

    rc = run.main(["--demo", "--days", "2"])
    _assert(rc == 0, "launcher exits with 0")
    out = capsys.readouterr().out
    _assert("Day 2:" in out and "Simulation finished after 2 days." in out, "launcher drives the CLI")
