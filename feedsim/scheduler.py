# feedsim/scheduler.py

from __future__ import annotations
import asyncio, logging, time
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import TRADE_INTERVAL_SEC, MARKET_INTERVAL_SEC
from .providers import FeedGraph, GENERATORS

log = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Supervising wrapper — restarts a background loop with backoff
# -----------------------------------------------------------------------------
async def supervise(name: str, factory: Callable[[], Awaitable[None]]):
    backoff = 1.0
    while True:
        try:
            await factory()
        except asyncio.CancelledError:
            raise
        except Exception:
            log.exception("%s loop crashed, restarting in %.1fs", name, backoff)
            await asyncio.sleep(backoff)
            backoff = min(backoff * 2, 30.0)
        else:
            backoff = 1.0


class FeedScheduler:
    """
    Two periodic timers push tick requests into one queue; a single dispatch
    loop drains it. Each tick runs its whole cascade synchronously, so no two
    cascades ever interleave.
    """

    def __init__(
        self,
        graph: FeedGraph,
        trade_interval: float = TRADE_INTERVAL_SEC,
        market_interval: float = MARKET_INTERVAL_SEC,
    ):
        self.graph = graph
        self.intervals: Dict[str, float] = {"trades": float(trade_interval), "market": float(market_interval)}
        self._queue: Optional[asyncio.Queue] = None
        self._tasks: List[asyncio.Task] = []
        self._ticks: Dict[str, int] = {name: 0 for name in GENERATORS}
        self._last_tick: Dict[str, float] = {}

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks)

    def run_once(self, name: str) -> Any:
        """Run one tick of a generating node now, cascade included."""
        if name not in GENERATORS:
            raise KeyError(f"{name!r} is not a timer-driven node; expected one of {GENERATORS}")
        event = self.graph.get(name).tick()
        if event is not None:
            self._ticks[name] += 1
            self._last_tick[name] = time.time()
        return event

    # -------------------------------------------------------------------------
    # loops
    # -------------------------------------------------------------------------
    async def _timer(self, name: str):
        interval = self.intervals[name]
        while True:
            await asyncio.sleep(interval)
            await self._queue.put(name)

    async def _dispatch_forever(self):
        while True:
            name = await self._queue.get()
            try:
                self.run_once(name)
            finally:
                self._queue.task_done()

    async def start(self) -> str:
        if self.running:
            return "already_running"
        self._queue = asyncio.Queue()
        self._tasks = [
            asyncio.create_task(supervise("dispatch", self._dispatch_forever)),
            *(asyncio.create_task(supervise(f"timer:{n}", lambda n=n: self._timer(n))) for n in GENERATORS),
        ]
        log.info("feed scheduler started: %s", self.intervals)
        return "timers_started"

    async def drain(self):
        """Wait until every queued tick has been dispatched."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self):
        tasks, self._tasks = self._tasks, []
        for t in tasks:
            t.cancel()
        for t in tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
        if tasks:
            log.info("feed scheduler stopped")

    def stats(self) -> Dict[str, Dict[str, Any]]:
        res = {}
        for name in GENERATORS:
            ts = self._last_tick.get(name)
            res[name] = {
                "interval_sec": self.intervals[name],
                "ticks": self._ticks[name],
                "last_tick": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(ts)) + "Z" if ts else None,
            }
        return res
