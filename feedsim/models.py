from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Mapping, Tuple


class Direction(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


@dataclass(frozen=True)
class Trade:
    ident: str
    trader: str
    instrument: str
    quantity: float    # >= 0
    price: float       # >= 0
    direction: Direction
    book: str

    def as_record(self) -> Dict[str, Any]:
        rec = asdict(self)
        rec["direction"] = self.direction.value
        return rec


TRADE_FIELDS = tuple(Trade.__dataclass_fields__)


def _frozen_map(items: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType(dict(items))


# -----------------------------------------------------------------------------
# Event payloads. Each one is a read-only snapshot, safe to keep after the
# sender mutates its own aggregate.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TradeEvent:
    kind: ClassVar[str] = "trade"
    trade: Trade

    def as_record(self) -> Dict[str, Any]:
        return self.trade.as_record()

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.kind, **self.as_record()}


@dataclass(frozen=True)
class PositionMap:
    kind: ClassVar[str] = "positions"
    positions: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "positions", _frozen_map(self.positions))

    def as_record(self) -> Dict[str, Any]:
        return dict(self.positions)

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.kind, "positions": self.as_record()}


@dataclass(frozen=True)
class MarketMap:
    kind: ClassVar[str] = "market"
    prices: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "prices", _frozen_map(self.prices))

    def as_record(self) -> Dict[str, Any]:
        return dict(self.prices)

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.kind, "prices": self.as_record()}


@dataclass(frozen=True)
class PnlList:
    kind: ClassVar[str] = "pnl"
    rows: Tuple[Tuple[str, float], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rows", tuple((str(i), float(v)) for i, v in self.rows))

    def instruments(self) -> Tuple[str, ...]:
        return tuple(i for i, _ in self.rows)

    def as_record(self) -> Dict[str, Any]:
        return dict(self.rows)

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.kind, "rows": [list(r) for r in self.rows]}
