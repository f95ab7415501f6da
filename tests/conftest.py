# tests/conftest.py
import random

import pytest

from feedsim.models import Direction, Trade
from feedsim.providers import build_graph
from feedsim.providers.market import apply_move
from feedsim.providers.trades import append_trade
from feedsim.sinks import SinkRegistry


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def graph(rng):
    """Fresh, idle graph with seeded randomness"""
    return build_graph(rng)


@pytest.fixture
def registry():
    return SinkRegistry()


def make_trade(instrument, quantity, direction="Buy", ident="TradeID_9999"):
    return Trade(
        ident=ident,
        trader="Bob",
        instrument=instrument,
        quantity=quantity,
        price=1,
        direction=Direction(direction),
        book="A",
    )


def push_trade(graph, instrument, quantity, direction="Buy"):
    """Feed a hand-made trade through the trades node, cascade included"""
    trade = make_trade(instrument, quantity, direction, ident=f"T{graph.trades.row_count()}")
    graph.trades.dispatch(append_trade, trade)
    return trade


def set_price(graph, instrument, price):
    """Move an instrument to an absolute price through the market node"""
    current = graph.market.state.get(instrument, 0.0)
    graph.market.dispatch(apply_move, (instrument, price - current))


class Recorder:
    """Bus subscriber that keeps every payload it sees"""

    def __init__(self, provider=None):
        self.seen = []
        if provider is not None:
            provider.changed.connect(self, self.on_change)

    def on_change(self, sender, payload):
        self.seen.append((sender, payload))

    @property
    def payloads(self):
        return [p for _, p in self.seen]

    @property
    def last(self):
        return self.seen[-1][1] if self.seen else None
