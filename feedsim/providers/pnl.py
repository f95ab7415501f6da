
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Tuple

from ..models import PnlList
from .base import DataProvider

log = logging.getLogger(__name__)

Rows = Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class PnlBook:
    positions: Mapping[str, float] = field(default_factory=dict)
    prices: Mapping[str, float] = field(default_factory=dict)
    rows: Rows = ()


def recalculate(positions: Mapping[str, float], prices: Mapping[str, float]) -> Rows:
    """Mark-to-market per held instrument; instruments without a price are skipped."""
    out = []
    for inst, qty in positions.items():
        px = prices.get(inst)
        if px is None:
            continue
        try:
            out.append((inst, float(qty) * float(px)))
        except (TypeError, ValueError):
            continue
    return tuple(out)


def _mapping(payload: Any, attr: str) -> Mapping[str, float]:
    m = getattr(payload, attr, payload)
    return m if isinstance(m, Mapping) else {}


def on_positions(book: PnlBook, payload: Any) -> PnlBook:
    positions = _mapping(payload, "positions")
    return replace(book, positions=positions, rows=recalculate(positions, book.prices))


def on_market(book: PnlBook, payload: Any) -> PnlBook:
    prices = _mapping(payload, "prices")
    return replace(book, prices=prices, rows=recalculate(book.positions, prices))


def _project(book: PnlBook) -> PnlList:
    pnl = PnlList(book.rows)
    log.debug("Emitting PnL %s", pnl.rows)
    return pnl


def pnl_data(positions: DataProvider, market: DataProvider) -> DataProvider:
    node = DataProvider("pnl", PnlBook(), _project, rows=lambda b: len(b.rows))
    node.subscribe_to(positions, on_positions)
    node.subscribe_to(market, on_market)
    return node
