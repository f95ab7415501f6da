
from __future__ import annotations
from typing import Any, Dict

from ..models import Direction, PositionMap
from .base import DataProvider


def apply_trade(positions: Dict[str, float], event: Any) -> Dict[str, float]:
    """Net signed quantity per instrument: Buy adds, Sell subtracts."""
    trade = getattr(event, "trade", event)
    inst = getattr(trade, "instrument", None)
    if inst is None:
        return positions
    try:
        qty = float(trade.quantity)
    except (AttributeError, TypeError, ValueError):
        return positions

    direction = getattr(trade, "direction", None)
    if direction == Direction.BUY:
        signed = qty
    elif direction == Direction.SELL:
        signed = -qty
    else:
        return positions

    out = dict(positions)
    out[inst] = out.get(inst, 0.0) + signed
    return out


def positions_data(trades: DataProvider) -> DataProvider:
    node = DataProvider("positions", {}, PositionMap)
    node.subscribe_to(trades, apply_trade)
    return node
