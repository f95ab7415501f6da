# feedsim/boot.py
from __future__ import annotations
import asyncio, inspect, logging, time
from dataclasses import dataclass, field
from enum import Enum

from .config import BOOT_FAILFAST, STEP_TIMEOUT_SEC

log = logging.getLogger("startup")


class Stage(Enum):
    BOOTING = "BOOTING"    # process up, HTTP serving
    GRAPH = "GRAPH"        # nodes built, trade generator running
    SINKS = "SINKS"        # trade feed bound to the plot sink
    TIMERS = "TIMERS"      # periodic ticks started
    READY = "READY"


@dataclass
class BootState:
    stage: Stage = Stage.BOOTING
    started_at: float = field(default_factory=time.time)
    ready_at: float | None = None
    errors: dict[str, str] = field(default_factory=dict)   # step -> last error
    attempts: dict[str, int] = field(default_factory=dict) # step -> tries


async def _call(fn):
    res = fn()
    if inspect.isawaitable(res):
        res = await res
    return res


class BootOrchestrator:
    def __init__(self, *, build_graph, bind_sinks, start_timers):
        self.state = BootState()
        self._ready_event = asyncio.Event()
        self._build_graph = build_graph
        self._bind_sinks = bind_sinks
        self._start_timers = start_timers

    @property
    def ready(self) -> bool:
        return self._ready_event.is_set()

    async def _run_step(self, name: str, fn, timeout: float, retryable: bool = True):
        backoff = 1.0
        while True:
            try:
                self.state.attempts[name] = self.state.attempts.get(name, 0) + 1
                res = await asyncio.wait_for(_call(fn), timeout=timeout)
                self.state.errors.pop(name, None)
                log.info("boot step %s ok", name)
                return res
            except Exception as e:
                self.state.errors[name] = str(e)
                if BOOT_FAILFAST or not retryable:
                    raise
                log.warning("boot step %s failed (%s), retrying in %.1fs", name, e, backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 30.0)

    async def run(self):
        # Stage 1: nodes in dependency order, trade generator kicked
        self.state.stage = Stage.GRAPH
        await self._run_step("graph", self._build_graph, STEP_TIMEOUT_SEC, retryable=False)

        # Stage 2: default sink discovery; a missing or ambiguous plot must not block the feed
        self.state.stage = Stage.SINKS
        try:
            await self._run_step("sinks", self._bind_sinks, STEP_TIMEOUT_SEC, retryable=False)
        except Exception as e:
            self.state.errors["sinks"] = f"non-fatal: {e}"
            log.error("sink binding skipped: %s", e)

        # Stage 3: timers
        self.state.stage = Stage.TIMERS
        await self._run_step("timers", self._start_timers, STEP_TIMEOUT_SEC)

        self.state.stage = Stage.READY
        self.state.ready_at = time.time()
        self._ready_event.set()
        log.info("feed ready in %.3fs", self.state.ready_at - self.state.started_at)
