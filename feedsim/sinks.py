# feedsim/sinks.py
"""
Sinks are the plotting data sources the feed pushes rows into.

A sink only has to expose the narrow capability below (`Sink`). Plot-like
handles (`SinkContainer`) hold renderers that may each point at a sink, and a
process-wide `SinkRegistry` lets a node find "the one plot on the page" when
no target is given.
"""
from __future__ import annotations
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Protocol, Tuple, runtime_checkable

from .config import SINK_ROLLOVER

log = logging.getLogger(__name__)


class BindingError(RuntimeError):
    """Sink discovery was ambiguous, or the target cannot hold data."""


@runtime_checkable
class Sink(Protocol):
    def has_key(self, key: str) -> bool: ...
    def append(self, key: str, value: Any, timestamp: int) -> None: ...
    def reset(self, key: str) -> None: ...


Point = Tuple[int, Any]   # (epoch ms, value)


class ColumnSink:
    """In-memory column buffers, each capped at `rollover` points."""

    def __init__(self, columns: Iterable[str], rollover: int = SINK_ROLLOVER):
        self.rollover = int(rollover)
        self._cols: Dict[str, Deque[Point]] = {
            c: deque(maxlen=self.rollover) for c in columns
        }

    def keys(self) -> List[str]:
        return list(self._cols)

    def has_key(self, key: str) -> bool:
        return key in self._cols

    def append(self, key: str, value: Any, timestamp: int) -> None:
        if key not in self._cols:
            return
        self._cols[key].append((int(timestamp), value))

    def reset(self, key: str) -> None:
        if key in self._cols:
            self._cols[key].clear()

    def points(self, key: str) -> List[Point]:
        return list(self._cols.get(key, ()))

    def data(self) -> Dict[str, Dict[str, list]]:
        return {
            k: {"t": [t for t, _ in pts], "values": [v for _, v in pts]}
            for k, pts in self._cols.items()
        }


@dataclass
class Renderer:
    data_source: Optional[Any] = None


@dataclass
class SinkContainer:
    """A plot: several renderers, assumed to share one data source."""
    renderers: List[Renderer] = field(default_factory=list)


def is_container(handle: Any) -> bool:
    return hasattr(handle, "renderers") and not isinstance(handle, Sink)


class SinkRegistry:
    def __init__(self):
        self._items: Dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._items)

    def register(self, name: str, handle: Any) -> Any:
        self._items[name] = handle
        log.info("sink %s registered", name)
        return handle

    def unregister(self, name: str) -> None:
        self._items.pop(name, None)

    def get(self, name: str) -> Optional[Any]:
        return self._items.get(name)

    def names(self) -> List[str]:
        return sorted(self._items)

    def clear(self) -> None:
        self._items.clear()

    def only(self) -> Any:
        if len(self._items) != 1:
            raise BindingError(
                f"automatic sink discovery needs exactly one registered sink, found {len(self._items)}"
            )
        return next(iter(self._items.values()))


# Process-wide default
REGISTRY = SinkRegistry()


def resolve_sink(target: Any = None, registry: Optional[SinkRegistry] = None) -> Sink:
    """
    Turn a bind target into a concrete sink:
      - None       -> the single handle in the registry
      - container  -> the first renderer exposing a data source
      - sink       -> itself
    Anything else, including a cycle of containers, raises BindingError.
    """
    reg = registry if registry is not None else REGISTRY
    if target is None:
        target = reg.only()
    seen: set[int] = set()
    while not isinstance(target, Sink):
        if not is_container(target):
            raise BindingError(f"invalid sink target: {target!r}")
        if id(target) in seen:
            raise BindingError("sink containers refer back to each other")
        seen.add(id(target))
        ds = next(
            (r.data_source for r in target.renderers or []
             if getattr(r, "data_source", None) is not None),
            None,
        )
        if ds is None:
            raise BindingError(f"container with {len(target.renderers or [])} renderers has no data source")
        target = ds
    return target
