
from __future__ import annotations
import logging
import random
import time
from typing import Any, Callable, Dict, Iterable, Optional

from ..bus import EventBus
from ..config import SIM_SEED
from ..sinks import BindingError, Sink, SinkRegistry, resolve_sink

log = logging.getLogger(__name__)

Reducer = Callable[[Any, Any], Any]          # (state, event) -> new state
Generator = Callable[[Any, random.Random], Any]  # (state, rng) -> event


def make_rng(seed: Any = None) -> random.Random:
    return random.Random(seed if seed is not None else SIM_SEED)


def _no_columns(state: Any) -> int:
    return 0


class DataProvider:
    """
    One node of the feed graph: an owned aggregate plus a `changed` channel.

    Behaviour is composed in, not subclassed: reducers fold upstream payloads
    (or locally generated events) into the state, and `project` turns the
    state into the read-only payload that gets emitted.
    """

    def __init__(
        self,
        name: str,
        state: Any,
        project: Callable[[Any], Any],
        *,
        keys: Optional[Callable[[Any], Iterable[str]]] = None,
        rows: Callable[[Any], int] = len,
        columns: Callable[[Any], int] = _no_columns,
        generate: Optional[Generator] = None,
        on_tick: Optional[Reducer] = None,
        rng: Optional[random.Random] = None,
        running: bool = False,
    ):
        self.name = name
        self.state = state
        self.changed = EventBus(self)
        self.rng = rng or make_rng()
        self.running = running
        self._project = project
        self._keys = keys
        self._rows = rows
        self._columns = columns
        self._generate = generate
        self._on_tick = on_tick
        self._reducers: Dict[int, Reducer] = {}
        self._sink: Optional[Sink] = None
        self.changed.connect(self, self._forward_to_sink)

    def __repr__(self) -> str:
        return f"<DataProvider {self.name} rows={self.row_count()}>"

    # ------------------------------------------------------------------
    # shape
    # ------------------------------------------------------------------
    def row_count(self) -> int:
        return self._rows(self.state)

    def column_count(self) -> int:
        return self._columns(self.state)

    def snapshot(self) -> Any:
        return self._project(self.state)

    def known_keys(self) -> list[str]:
        if self._keys is not None:
            return list(self._keys(self.state))
        snap = self.snapshot()
        return list(snap.as_record()) if snap is not None else []

    # ------------------------------------------------------------------
    # dispatch
    # ------------------------------------------------------------------
    def dispatch(self, reducer: Reducer, event: Any) -> Any:
        self.state = reducer(self.state, event)
        payload = self._project(self.state)
        self.changed.emit(payload)
        return payload

    def subscribe_to(self, upstream: "DataProvider", reducer: Reducer) -> None:
        self._reducers[id(upstream)] = reducer
        upstream.changed.connect(self, self._on_upstream)

    def _on_upstream(self, sender: Any, payload: Any) -> None:
        reducer = self._reducers.get(id(sender))
        if reducer is not None:
            self.dispatch(reducer, payload)

    # ------------------------------------------------------------------
    # generation (leaf nodes only)
    # ------------------------------------------------------------------
    def initialise(self) -> None:
        if self.running:
            log.warning("%s already initialised", self.name)
            return
        self.running = True
        self.tick()

    def tick(self) -> Any:
        if self._generate is None or self._on_tick is None:
            raise TypeError(f"{self.name} is not a generating node")
        if not self.running:
            log.debug("%s idle, tick ignored", self.name)
            return None
        event = self._generate(self.state, self.rng)
        self.dispatch(self._on_tick, event)
        return event

    # ------------------------------------------------------------------
    # sink binding
    # ------------------------------------------------------------------
    @property
    def sink(self) -> Optional[Sink]:
        return self._sink

    def bind_sink(self, target: Any = None, registry: Optional[SinkRegistry] = None) -> Sink:
        """
        Forward every future emission to a sink. With no target, use the one
        sink in the registry. Raises BindingError and keeps the current
        binding when the target can't be resolved.
        """
        try:
            sink = resolve_sink(target, registry)
        except BindingError as e:
            log.error("%s: sink binding failed: %s", self.name, e)
            raise
        keys = self.known_keys()
        for s in (self._sink, sink):
            if s is None:
                continue
            for k in keys:
                if s.has_key(k):
                    s.reset(k)
        self._sink = sink
        log.info("%s bound to sink %r", self.name, sink)
        return sink

    def unbind_sink(self) -> None:
        self._sink = None

    def _forward_to_sink(self, sender: Any, payload: Any) -> None:
        sink = self._sink
        if sink is None or payload is None:
            return
        ts = int(time.time() * 1000)
        for key, value in payload.as_record().items():
            if sink.has_key(key):
                sink.append(key, value, ts)
