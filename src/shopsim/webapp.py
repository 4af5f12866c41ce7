from __future__ import annotations

import math
import threading
from collections import deque
from dataclasses import asdict
from typing import Any, Dict, Iterable

from fastapi import Body, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shopsim.cli import run_simulation
from shopsim.decisions import ScriptedDecisions, parse_price, parse_volume, parse_yes_no
from shopsim.engine import initialize, simulate_day, summarize
from shopsim.models import DayResult, SimulationState
from shopsim.presets import DEMO_DAYS, DEMO_DECISIONS, default_config, default_policy

LEDGER_LIMIT = 500


def _field_str(payload: dict, key: str) -> str:
    v = payload.get(key)
    return "" if v is None else str(v)


def _coerce_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0 and math.isfinite(v)
    return parse_yes_no(str(v))


def create_app(ledger_limit: int = LEDGER_LIMIT) -> FastAPI:
    app = FastAPI(title="Retail Shop Simulator API")

    # Allow local frontends.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    cfg = default_config()
    policy = default_policy()

    # One in-memory session; the lock gives simulate_day exclusive use of it.
    lock = threading.Lock()
    # Only the most recent days are kept; older ones fall off the front.
    limit = max(1, int(ledger_limit))
    session: Dict[str, Any] = {"state": initialize(cfg), "ledger": deque(maxlen=limit)}

    def _state_to_dto(state: SimulationState, ledger: Iterable[DayResult]) -> dict:
        return {
            "config": asdict(cfg),
            "state": asdict(state),
            "summary": asdict(summarize(state)),
            "ledger": [asdict(dr) for dr in ledger],
        }

    @app.get("/api/state")
    def api_state():
        with lock:
            dto = _state_to_dto(session["state"], session["ledger"])
        return dto

    @app.post("/api/reset")
    def api_reset():
        with lock:
            session["state"] = initialize(cfg)
            session["ledger"] = deque(maxlen=limit)
            dto = _state_to_dto(session["state"], session["ledger"])
        return dto

    @app.post("/api/simulate")
    def api_simulate(payload: dict = Body(default={})):  # {transfer_volume, buy_offer, selling_price}
        volume = parse_volume(_field_str(payload, "transfer_volume"))
        buy = _coerce_bool(payload.get("buy_offer"))
        price = parse_price(_field_str(payload, "selling_price"), cfg.base_price)
        with lock:
            state = session["state"]
            dr = simulate_day(state, cfg, volume, buy, price, policy=policy)
            session["ledger"].append(dr)
            out = {"day": asdict(dr), "summary": asdict(summarize(state))}
        return out

    @app.post("/api/demo")
    def api_demo(payload: dict = Body(default={})):  # {days:int}
        try:
            days = int(payload.get("days", DEMO_DAYS) or DEMO_DAYS)
        except (TypeError, ValueError):
            days = DEMO_DAYS
        days = max(1, min(3650, days))
        state, results = run_simulation(cfg, ScriptedDecisions(DEMO_DECISIONS), days, policy=policy)
        return {
            "days": [asdict(dr) for dr in results],
            "summary": asdict(summarize(state)),
        }

    return app


app = create_app()
