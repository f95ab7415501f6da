# tests/test_boot.py
import asyncio

import pytest

from feedsim.boot import BootOrchestrator, Stage
from feedsim.sinks import BindingError


def _ambiguous():
    raise BindingError("found 2")


def test_boot_runs_steps_in_order():
    calls = []

    async def start_timers():
        calls.append("timers")

    async def go():
        boot = BootOrchestrator(
            build_graph=lambda: calls.append("graph"),
            bind_sinks=lambda: calls.append("sinks"),
            start_timers=start_timers,
        )
        await boot.run()
        return boot

    boot = asyncio.run(go())
    assert calls == ["graph", "sinks", "timers"]
    assert boot.ready and boot.state.stage is Stage.READY
    assert boot.state.attempts == {"graph": 1, "sinks": 1, "timers": 1}


def test_sink_binding_failure_does_not_block_ready():
    async def go():
        boot = BootOrchestrator(
            build_graph=lambda: None,
            bind_sinks=_ambiguous,
            start_timers=lambda: None,
        )
        await boot.run()
        return boot

    boot = asyncio.run(go())
    assert boot.ready
    assert boot.state.errors["sinks"] == "non-fatal: found 2"


def test_graph_failure_aborts_boot():
    def broken():
        raise RuntimeError("no graph")

    async def go():
        boot = BootOrchestrator(build_graph=broken, bind_sinks=lambda: None, start_timers=lambda: None)
        with pytest.raises(RuntimeError):
            await boot.run()
        return boot

    boot = asyncio.run(go())
    assert not boot.ready
    assert boot.state.stage is Stage.GRAPH
    assert boot.state.errors["graph"] == "no graph"
