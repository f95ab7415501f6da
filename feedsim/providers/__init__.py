# feedsim/providers/__init__.py
from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Dict, Optional

from .base import DataProvider, make_rng
from .trades import trades_data
from .positions import positions_data
from .market import market_data
from .pnl import pnl_data

NODE_NAMES = ("trades", "positions", "market", "pnl")
# nodes driven by a timer
GENERATORS = ("trades", "market")


@dataclass
class FeedGraph:
    trades: DataProvider
    positions: DataProvider
    market: DataProvider
    pnl: DataProvider

    def nodes(self) -> Dict[str, DataProvider]:
        return {name: getattr(self, name) for name in NODE_NAMES}

    def get(self, name: str) -> Optional[DataProvider]:
        return self.nodes().get(name)


def build_graph(rng: Optional[random.Random] = None) -> FeedGraph:
    """Construct the nodes in dependency order: trades -> positions -> market -> pnl."""
    rng = rng or make_rng()
    trades = trades_data(rng)
    positions = positions_data(trades)
    market = market_data(rng)
    pnl = pnl_data(positions, market)
    return FeedGraph(trades=trades, positions=positions, market=market, pnl=pnl)


__all__ = [
    "DataProvider", "FeedGraph", "build_graph", "NODE_NAMES", "GENERATORS",
    "trades_data", "positions_data", "market_data", "pnl_data",
]
