"""JSON endpoints for tracked assets, priced trades and price charts."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from solders.pubkey import Pubkey

router = APIRouter()


class TrackAssetRequest(BaseModel):
    mint: str
    name: str | None = None
    ticker: str | None = None


def _decimal_to_str(obj: Any) -> Any:
    """Recursively convert Decimal values to strings for JSON serialization."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _decimal_to_str(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_decimal_to_str(item) for item in obj]
    return obj


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Store counters plus the last scheduler cycle summary."""
    status = await request.app.state.store.get_status()
    scheduler = request.app.state.scheduler
    status["scheduler_running"] = bool(scheduler and scheduler.is_running)
    status["last_cycle"] = scheduler.last_cycle if scheduler else None
    return JSONResponse(content=status)


@router.get("/assets")
async def list_assets(request: Request) -> JSONResponse:
    assets = await request.app.state.store.get_assets(active_only=False)
    return JSONResponse(content=assets)


@router.post("/assets")
async def track_asset(request: Request, body: TrackAssetRequest) -> JSONResponse:
    """Start tracking a mint. Picked up by the next scheduler cycle."""
    try:
        Pubkey.from_string(body.mint)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid mint address")

    await request.app.state.store.add_asset(body.mint, body.name, body.ticker)
    return JSONResponse(content={"mint": body.mint, "tracked": True}, status_code=201)


@router.get("/assets/{mint}/history")
async def get_history(request: Request, mint: str) -> JSONResponse:
    """Price chart points for a mint, oldest first."""
    points = await request.app.state.store.get_price_chart(
        mint, limit=request.app.state.history_limit
    )
    return JSONResponse(
        content=[{"time": p.time, "price": str(p.price)} for p in points]
    )


@router.get("/assets/{mint}/trades")
async def get_trades(request: Request, mint: str, limit: int = 100) -> JSONResponse:
    """Latest priced trades for a mint, newest first."""
    trades = await request.app.state.store.get_trades(mint, limit=min(limit, 1000))
    return JSONResponse(
        content=[
            _decimal_to_str(
                {
                    "signature": t.signature,
                    "mint": t.mint,
                    "type": t.type.value,
                    "owner": t.owner,
                    "pre_token_balance": t.pre_token_balance,
                    "post_token_balance": t.post_token_balance,
                    "pre_sol_balance": t.pre_sol_balance,
                    "post_sol_balance": t.post_sol_balance,
                    "price": t.price,
                    "date": t.date,
                }
            )
            for t in trades
        ]
    )
