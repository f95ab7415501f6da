
from __future__ import annotations
import random
from typing import Dict, Optional, Tuple

from ..config import INSTRUMENTS, MARKET_MAX_MOVE
from ..models import MarketMap
from .base import DataProvider

Move = Tuple[str, float]


def random_move(prices: Dict[str, float], rng: random.Random) -> Move:
    inst = rng.choice(INSTRUMENTS)
    # U[-M, M): random() never returns 1.0
    delta = rng.random() * 2 * MARKET_MAX_MOVE - MARKET_MAX_MOVE
    return inst, delta


def apply_move(prices: Dict[str, float], move: Move) -> Dict[str, float]:
    inst, delta = move
    out = dict(prices)
    out[inst] = out.get(inst, 0.0) + delta
    return out


def market_data(rng: Optional[random.Random] = None) -> DataProvider:
    """Random-walk price map. Generates from construction; no initialise step."""
    return DataProvider(
        "market",
        {},
        MarketMap,
        generate=random_move,
        on_tick=apply_move,
        rng=rng,
        running=True,
    )
