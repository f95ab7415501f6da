# tests/test_bus.py
from feedsim.bus import EventBus


class Sub:
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def handle(self, sender, payload):
        self.log.append((self.name, sender, payload))


def test_emit_calls_handlers_in_connection_order():
    owner = object()
    bus = EventBus(owner)
    log = []
    a, b, c = Sub("a", log), Sub("b", log), Sub("c", log)
    for s in (b, a, c):
        bus.connect(s, s.handle)

    bus.emit(42)

    assert [name for name, _, _ in log] == ["b", "a", "c"]
    assert all(sender is owner and payload == 42 for _, sender, payload in log)


def test_connect_is_idempotent_per_pair():
    bus = EventBus()
    log = []
    s = Sub("s", log)

    assert bus.connect(s, s.handle) is True
    assert bus.connect(s, s.handle) is False
    bus.emit("x")

    assert len(log) == 1
    assert len(bus) == 1


def test_same_handler_different_subscribers_are_distinct():
    bus = EventBus()
    calls = []

    def handler(sender, payload):
        calls.append(payload)

    bus.connect("first", handler)
    bus.connect("second", handler)
    bus.emit(1)

    assert calls == [1, 1]


def test_disconnect_unknown_pair_is_a_noop():
    bus = EventBus()
    s = Sub("s", [])
    assert bus.disconnect(s, s.handle) is False
    bus.connect(s, s.handle)
    assert bus.disconnect(s, s.handle) is True
    assert bus.disconnect(s, s.handle) is False
    assert not bus.is_connected(s, s.handle)


def test_connect_during_emit_applies_from_next_emit():
    bus = EventBus()
    log = []
    late = Sub("late", log)

    def adder(sender, payload):
        log.append(("adder", sender, payload))
        bus.connect(late, late.handle)

    bus.connect("adder", adder)
    bus.emit(1)
    assert [n for n, _, _ in log] == ["adder"]

    bus.emit(2)
    assert [(n, p) for n, _, p in log] == [("adder", 1), ("adder", 2), ("late", 2)]


def test_disconnect_during_emit_does_not_skip_current_pass():
    bus = EventBus()
    log = []
    victim = Sub("victim", log)

    def remover(sender, payload):
        log.append(("remover", sender, payload))
        bus.disconnect(victim, victim.handle)

    bus.connect("remover", remover)
    bus.connect(victim, victim.handle)

    bus.emit(1)
    bus.emit(2)

    assert [(n, p) for n, _, p in log] == [("remover", 1), ("victim", 1), ("remover", 2)]


def test_disconnect_all_for_one_subscriber():
    bus = EventBus()
    log = []
    a, b = Sub("a", log), Sub("b", log)
    bus.connect(a, a.handle)
    bus.connect(b, b.handle)

    bus.disconnect_all(a)
    bus.emit(0)

    assert [n for n, _, _ in log] == ["b"]
