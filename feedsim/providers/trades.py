
from __future__ import annotations
import random
from typing import List, Optional

from ..config import (
    BOOKS, INSTRUMENTS, TRADERS,
    TRADE_ID_PREFIX, TRADE_ID_WIDTH, TRADE_MAX_PRICE, TRADE_MAX_QTY,
)
from ..models import Direction, Trade, TradeEvent, TRADE_FIELDS
from .base import DataProvider

DIRECTIONS = [Direction.BUY, Direction.SELL]


def next_trade_id(log_length: int) -> str:
    # 1-based: the first trade in an empty log is TradeID_0001
    return f"{TRADE_ID_PREFIX}{log_length + 1:0{TRADE_ID_WIDTH}d}"


def new_trade(log: List[Trade], rng: random.Random) -> Trade:
    return Trade(
        ident=next_trade_id(len(log)),
        trader=rng.choice(TRADERS),
        instrument=rng.choice(INSTRUMENTS),
        quantity=rng.randrange(TRADE_MAX_QTY),
        price=rng.randrange(TRADE_MAX_PRICE),
        direction=rng.choice(DIRECTIONS),
        book=rng.choice(BOOKS),
    )


def append_trade(log: List[Trade], trade: Trade) -> List[Trade]:
    # append-only; the log is extended in place
    log.append(trade)
    return log


def _last_trade(log: List[Trade]) -> Optional[TradeEvent]:
    return TradeEvent(log[-1]) if log else None


def _width(log: List[Trade]) -> int:
    return len(log[0].as_record()) if log else 0


def trades_data(rng: Optional[random.Random] = None) -> DataProvider:
    """Trade generator. Idle until `initialise()`; each tick appends and emits one trade."""
    return DataProvider(
        "trades",
        [],
        _last_trade,
        keys=lambda log: TRADE_FIELDS,
        columns=_width,
        generate=new_trade,
        on_tick=append_trade,
        rng=rng,
    )
