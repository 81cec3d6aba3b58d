from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Deque, Dict, List, Set

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..sim.core.config import AppConfig, SimulationConfig
from ..sim.core.simulation import Simulation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SnapshotBacklog:
    """
    Serialized snapshots not yet acknowledged by the client, oldest first.

    Holds at most ``limit`` entries; pushing past that drops the oldest, so a
    client that never acks costs a fixed amount of memory.
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"backlog limit must be at least 1, got {limit}")
        self._items: Deque[QueuedSnapshot] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._items.maxlen or 0

    def __len__(self) -> int:
        return len(self._items)

    def ticks(self) -> List[int]:
        return [item.tick for item in self._items]

    def push(self, item: QueuedSnapshot) -> None:
        if len(self._items) == self._items.maxlen:
            logger.debug("snapshot backlog full, dropping tick %d", self._items[0].tick)
        self._items.append(item)

    def acknowledge(self, tick: int) -> None:
        while self._items and self._items[0].tick <= tick:
            self._items.popleft()

    def after(self, tick: int) -> List[QueuedSnapshot]:
        return [item for item in self._items if item.tick > tick]

    def clear(self) -> None:
        self._items.clear()


class SimulationController:
    """Runs the simulation loop and fans snapshots out to websocket clients."""

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1, backlog_limit: int = 120):
        self.config = config
        self.simulation = Simulation(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self.backlog = SnapshotBacklog(backlog_limit)
        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.simulation.reset()
            self.tick = 0
        self.backlog.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.time_step / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                self.simulation.step(self.tick)
                self.tick += 1
            if self.tick % self.broadcast_interval == 0:
                await self._broadcast_snapshot()

    async def handle_message(self, message: Dict[str, Any]) -> None:
        """Apply one host input message; the flock is never touched mid-update."""
        kind = message.get("type")
        if kind == "ack":
            await self.acknowledge(int(message["tick"]))
            return
        async with self._lock:
            flock = self.simulation.flock
            if kind == "resize":
                self.simulation.resize(float(message["width"]), float(message["height"]))
            elif kind == "repulsor":
                flock.set_repulsor(float(message["x"]), float(message["y"]))
            elif kind == "clear_repulsor":
                flock.clear_repulsor()
            elif kind == "attractor":
                flock.set_attractor(float(message["x"]), float(message["y"]))
            elif kind == "clear_attractor":
                flock.clear_attractor()
            else:
                raise ValueError(f"Unknown message type: {kind!r}")

    async def acknowledge(self, tick: int) -> None:
        self.backlog.acknowledge(tick)

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.simulation.snapshot(self.tick)
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "boids": snapshot.boids,
                "arena": asdict(snapshot.arena),
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        for item in self.backlog.after(last_sent):
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        if not self.clients:
            # Nobody to ack; a newcomer only needs the current state.
            self.backlog.clear()
        self.backlog.push(self._serialize_snapshot())
        stale: Set[WebSocket] = set()
        for client in list(self.clients):
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app = FastAPI(title="Flock Simulation")
app_config = AppConfig()
controller = SimulationController(
    app_config.simulation,
    broadcast_interval=app_config.broadcast_interval,
    backlog_limit=app_config.snapshot_backlog,
)
static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.simulation.snapshot(controller.tick)
    return JSONResponse(
        {
            "running": controller.running,
            "tick": controller.tick,
            "count": controller.simulation.flock.count,
            "arena": asdict(snapshot.arena),
            "metrics": asdict(snapshot.metrics),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "tick": controller.tick})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/arena")
async def set_arena(payload: dict) -> JSONResponse:
    try:
        width = float(payload["width"])
        height = float(payload["height"])
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail="width and height must be numbers") from exc
    await controller.handle_message({"type": "resize", "width": width, "height": height})
    flock = controller.simulation.flock
    return JSONResponse({"width": flock.width, "height": flock.height})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    logger.info("client connected (%d total)", len(controller.clients))
    await controller._broadcast_snapshot()
    try:
        while True:
            text = await websocket.receive_text()
            try:
                await controller.handle_message(json.loads(text))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("rejected client message %r: %s", text, exc)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)
        logger.info("client disconnected (%d left)", len(controller.clients))


def main() -> None:
    parser = argparse.ArgumentParser(description="Flock simulation web server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


__all__ = ["app", "controller"]


if __name__ == "__main__":
    main()
