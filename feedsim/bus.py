# feedsim/bus.py
from __future__ import annotations
from typing import Any, Callable, List, Tuple

Handler = Callable[[Any, Any], None]


class EventBus:
    """
    Per-instance signal: a node owns one bus and emits on it whenever its
    aggregate changes. Handlers are called synchronously, in connection
    order, with (sender, payload).

    Not thread-safe: only the loop driving the simulation may emit.
    """

    def __init__(self, owner: Any = None):
        self.owner = owner
        self._conns: List[Tuple[Any, Handler]] = []

    def __len__(self) -> int:
        return len(self._conns)

    def _find(self, subscriber: Any, handler: Handler) -> int:
        for i, (sub, fn) in enumerate(self._conns):
            # identity on the subscriber; equality on the handler so two
            # bound-method objects for the same method match
            if sub is subscriber and fn == handler:
                return i
        return -1

    def is_connected(self, subscriber: Any, handler: Handler) -> bool:
        return self._find(subscriber, handler) >= 0

    def connect(self, subscriber: Any, handler: Handler) -> bool:
        if self._find(subscriber, handler) >= 0:
            return False
        self._conns.append((subscriber, handler))
        return True

    def disconnect(self, subscriber: Any, handler: Handler) -> bool:
        i = self._find(subscriber, handler)
        if i < 0:
            return False
        del self._conns[i]
        return True

    def disconnect_all(self, subscriber: Any = None) -> None:
        if subscriber is None:
            self._conns = []
        else:
            self._conns = [(s, fn) for (s, fn) in self._conns if s is not subscriber]

    def emit(self, payload: Any) -> None:
        # snapshot: (dis)connects made by handlers apply from the next emit
        for _, handler in tuple(self._conns):
            handler(self.owner, payload)
