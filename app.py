"""
FastAPI application — read/control API for the live activity monitor.

Endpoints:
  GET  /health                  — Health check
  GET  /activity                — Recent records (optional search / agent filter)
  GET  /activity/progress       — Current overall progress
  GET  /activity/agents         — Per-agent performance table
  GET  /activity/agents/names   — Agents present in the current records
  GET  /activity/summary        — Counts by level/type plus monitor state
  POST /activity/frames         — Ingest one frame (text line or structured)
  POST /activity/pause          — Stop recording incoming frames
  POST /activity/resume         — Resume recording
  POST /activity/clear          — Drop records, progress and agent stats
  POST /activity/connection     — Transport connectivity signal

All endpoints are ``async def`` so they run on the event loop thread and
frames are handled strictly one at a time.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException
from pydantic import BaseModel

import config
from features.activity import ActivityMonitor
from features.activity.query import ALL_AGENTS

load_dotenv()

logging.basicConfig(
    level=config.LOG_LEVEL,
    format=config.LOG_FORMAT,
    datefmt=config.LOG_DATEFMT,
)
log = logging.getLogger(__name__)

monitor: ActivityMonitor | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global monitor
    monitor = ActivityMonitor()
    log.info("Activity monitor started (capacity %d)", monitor.history.capacity)
    try:
        yield
    finally:
        monitor.close()
        log.info("Activity monitor closed")


app = FastAPI(
    title="Synth Monitor",
    description="Live classification of the synthetic data generation pipeline's activity stream",
    version="1.0.0",
    lifespan=lifespan,
)


def _monitor() -> ActivityMonitor:
    if monitor is None or monitor.closed:
        raise HTTPException(status_code=503, detail="Activity monitor is not running")
    return monitor


# ── Models ────────────────────────────────────────────────────────────

class ActivityRecordOut(BaseModel):
    id: str
    timestamp: str
    type: str
    status: str
    level: str
    agent: str
    message: str
    progress: int | None = None
    metadata: dict[str, Any] = {}


class ActivityListResponse(BaseModel):
    records: list[ActivityRecordOut]
    count: int
    total: int


class AgentPerformanceOut(BaseModel):
    name: str
    status: str
    tasks_completed: int
    avg_response_time: float
    success_rate: float
    last_activity: str | None = None


class ProgressResponse(BaseModel):
    progress: int


class ControlResponse(BaseModel):
    status: str
    paused: bool
    records: int


class ConnectionRequest(BaseModel):
    connected: bool


# ── Health ────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "synth-monitor",
        "monitor_running": monitor is not None and not monitor.closed,
        "paused": bool(monitor and monitor.paused),
        "connected": bool(monitor and monitor.connected),
    }


# ── Reads ─────────────────────────────────────────────────────────────

@app.get("/activity", response_model=ActivityListResponse)
async def list_activity(search: str = "", agent: str = ALL_AGENTS, limit: int | None = None):
    """Most-recent-first records, filtered by search term AND agent."""
    mon = _monitor()
    total = len(mon.history)
    records = mon.query(search, agent)
    if limit is not None:
        if limit < 0:
            raise HTTPException(status_code=400, detail="limit must be >= 0")
        records = records[:limit]
    return ActivityListResponse(
        records=[ActivityRecordOut(**r.to_dict()) for r in records],
        count=len(records),
        total=total,
    )


@app.get("/activity/progress", response_model=ProgressResponse)
async def get_progress():
    return ProgressResponse(progress=_monitor().progress)


@app.get("/activity/agents", response_model=list[AgentPerformanceOut])
async def get_agents():
    return [AgentPerformanceOut(**a.to_dict()) for a in _monitor().agents()]


@app.get("/activity/agents/names")
async def get_agent_names():
    return {"agents": _monitor().agent_names()}


@app.get("/activity/summary")
async def get_summary():
    return _monitor().summary()


# ── Ingest + controls ─────────────────────────────────────────────────

@app.post("/activity/frames")
async def ingest_frame(frame: Any = Body(...)):
    """Ingest one frame: a JSON string (text line) or a JSON object."""
    record = _monitor().ingest(frame)
    if record is None:
        return {"accepted": False, "paused": _monitor().paused}
    return {"accepted": True, "record": record.to_dict()}


@app.post("/activity/pause", response_model=ControlResponse)
async def pause():
    mon = _monitor()
    mon.pause()
    return ControlResponse(status="paused", paused=mon.paused, records=len(mon.history))


@app.post("/activity/resume", response_model=ControlResponse)
async def resume():
    mon = _monitor()
    mon.resume()
    return ControlResponse(status="running", paused=mon.paused, records=len(mon.history))


@app.post("/activity/clear", response_model=ControlResponse)
async def clear():
    mon = _monitor()
    mon.clear()
    return ControlResponse(
        status="paused" if mon.paused else "running",
        paused=mon.paused,
        records=len(mon.history),
    )


@app.post("/activity/connection")
async def set_connection(req: ConnectionRequest):
    mon = _monitor()
    mon.set_connected(req.connected)
    return {"connected": mon.connected}
