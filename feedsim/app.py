# feedsim/app.py
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from .boot import BootOrchestrator
from .config import SINK_COLUMNS, SINK_NAME, SINK_ROLLOVER, WS_QUEUE_MAX
from .providers import FeedGraph, GENERATORS, build_graph
from .providers.base import DataProvider
from .scheduler import FeedScheduler
from .sinks import REGISTRY, BindingError, ColumnSink, Renderer, SinkContainer, resolve_sink

log = logging.getLogger("startup")

app = FastAPI(title="Feed Simulator", default_response_class=JSONResponse)

graph: FeedGraph | None = None
scheduler: FeedScheduler | None = None
boot: BootOrchestrator | None = None


def register_default_sink() -> None:
    """Stand in for the host page's plot: one container wrapping a column sink."""
    if not SINK_NAME or REGISTRY.get(SINK_NAME) is not None:
        return
    REGISTRY.register(SINK_NAME, SinkContainer([Renderer(ColumnSink(SINK_COLUMNS, SINK_ROLLOVER))]))


def _build_graph():
    global graph, scheduler
    graph = build_graph()
    graph.trades.initialise()
    scheduler = FeedScheduler(graph)
    return "graph_built"


def _bind_default_sink():
    graph.trades.bind_sink(None)
    return "sink_bound"


async def _start_timers():
    return await scheduler.start()


@app.on_event("startup")
async def startup():
    global boot
    register_default_sink()
    boot = BootOrchestrator(
        build_graph=_build_graph,
        bind_sinks=_bind_default_sink,
        start_timers=_start_timers,
    )
    await boot.run()


@app.on_event("shutdown")
async def shutdown():
    if scheduler:
        await scheduler.stop()


def _node(name: str) -> DataProvider:
    if graph is None:
        raise HTTPException(status_code=503, detail="feed not built yet")
    node = graph.get(name)
    if node is None:
        raise HTTPException(status_code=404, detail=f"unknown node {name!r}")
    return node


def _boot_info() -> dict:
    st = boot.state if boot else None
    return {
        "ready": bool(boot and boot.ready),
        "stage": st.stage.value if st else "BOOTING",
        "errors": st.errors if st else {},
        "attempts": st.attempts if st else {},
    }


@app.get("/health")
async def health():
    return {"status": "up"}


@app.get("/status")
async def status():
    return {"status": "up", **_boot_info()}


@app.get("/ready")
async def ready():
    return {**_boot_info(), "timers": scheduler.stats() if scheduler else {}}


@app.get("/nodes")
async def nodes():
    if graph is None:
        return {"nodes": {}}
    return {
        "nodes": {
            name: {"row_count": n.row_count(), "column_count": n.column_count(), "sink": n.sink is not None}
            for name, n in graph.nodes().items()
        }
    }


@app.get("/trades")
async def trades(limit: int = Query(20, ge=1, le=1000)):
    trade_log = _node("trades").state
    return {"count": len(trade_log), "trades": [t.as_record() for t in trade_log[-limit:]]}


@app.get("/positions")
async def positions():
    return _node("positions").snapshot().to_json()


@app.get("/market")
async def market():
    return _node("market").snapshot().to_json()


@app.get("/pnl")
async def pnl():
    return _node("pnl").snapshot().to_json()


@app.post("/simulate/tick")
async def simulate_tick(node: str = Query(..., description="trades | market")):
    if node not in GENERATORS:
        raise HTTPException(status_code=404, detail=f"{node!r} is not a timer-driven node")
    _node(node)
    event = scheduler.run_once(node)
    if event is None:
        return {"ok": False, "node": node, "reason": "idle"}
    if node == "trades":
        return {"ok": True, "node": node, "event": event.as_record()}
    inst, delta = event
    return {"ok": True, "node": node, "event": {"instrument": inst, "delta": delta}}


@app.get("/sinks")
async def sinks():
    return {"sinks": REGISTRY.names()}


@app.get("/sinks/{name}")
async def sink_data(name: str):
    handle = REGISTRY.get(name)
    if handle is None:
        raise HTTPException(status_code=404, detail=f"unknown sink {name!r}")
    try:
        sink = resolve_sink(handle)
    except BindingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    data = sink.data() if hasattr(sink, "data") else {}
    return {"sink": name, "data": data}


@app.post("/sinks/bind")
async def bind(node: str, sink: Optional[str] = None):
    target = None
    if sink is not None:
        target = REGISTRY.get(sink)
        if target is None:
            raise HTTPException(status_code=404, detail=f"unknown sink {sink!r}")
    try:
        _node(node).bind_sink(target)
    except BindingError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"ok": True, "node": node, "sink": sink}


@app.websocket("/ws/{name}")
async def stream(ws: WebSocket, name: str):
    node = graph.get(name) if graph else None
    if node is None:
        await ws.close(code=1008)
        return
    q: asyncio.Queue = asyncio.Queue(maxsize=WS_QUEUE_MAX)

    def _push(sender, payload):
        try:
            q.put_nowait(payload.to_json())
        except asyncio.QueueFull:
            # slow consumer: drop it
            node.changed.disconnect(ws, _push)
            while not q.empty():
                q.get_nowait()
            q.put_nowait(None)

    # subscribe before accepting so nothing emitted after the handshake is missed
    node.changed.connect(ws, _push)
    reader: asyncio.Task | None = None
    try:
        await ws.accept()
        reader = asyncio.create_task(_until_closed(ws))
        while True:
            getter = asyncio.create_task(q.get())
            done, _ = await asyncio.wait({getter, reader}, return_when=asyncio.FIRST_COMPLETED)
            if reader in done:
                getter.cancel()
                return
            msg = getter.result()
            if msg is None:
                await ws.close(code=1013)
                return
            await ws.send_json(msg)
    except WebSocketDisconnect:
        pass
    finally:
        node.changed.disconnect(ws, _push)
        if reader is not None:
            reader.cancel()


async def _until_closed(ws: WebSocket):
    while True:
        msg = await ws.receive()
        if msg["type"] == "websocket.disconnect":
            return
