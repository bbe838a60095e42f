"""Orbital API - FastAPI service for space weather data and chat delivery.

Public endpoints serve the current snapshot, recorded history and
subscription statistics. The LINE webhook lands on /webhook. Admin
endpoints (broadcast, test push, manual ticks) require the X-Admin-Key
header.
"""

import asyncio
import json
import logging
import os
from dataclasses import asdict
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from orbital.core.snapshot import Snapshot
from orbital.main import get_orchestrator, run_tick
from orbital.orchestrator import Orchestrator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Orbital API",
    description="Space weather readings, alerts and subscription delivery",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


TICK_NAMES = ("scheduled-delivery", "alert-check", "recording")


# ===== Request Models =====

class BroadcastRequest(BaseModel):
    type: str | None = None
    message: str | None = None


class TestPushRequest(BaseModel):
    userId: str | None = None
    type: str = "space-weather"


# ===== Helpers =====

def _verify_admin_key(orchestrator: Orchestrator, x_admin_key: str | None) -> None:
    """Verify admin API key."""
    admin_key = orchestrator.config.admin_api_key or os.environ.get("ADMIN_API_KEY")
    if not admin_key:
        raise HTTPException(status_code=500, detail="Admin API key not configured")

    if x_admin_key != admin_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")


def _subscription_to_dict(subscription: Any) -> dict[str, Any]:
    return {
        "topic": subscription.topic.value,
        "display_name": subscription.display_name,
        "schedule": subscription.schedule,
        "status": subscription.status.value,
        "subscribed_at": subscription.subscribed_at.isoformat(),
        "last_delivered_at": (
            subscription.last_delivered_at.isoformat() if subscription.last_delivered_at else None
        ),
    }


def _current_snapshot(orchestrator: Orchestrator) -> Snapshot | None:
    result = orchestrator.get_snapshot()
    return result.snapshot if result.success else result.stale


# ===== Public Endpoints =====

@app.get("/api/space-weather")
def get_space_weather(
    refresh: bool = Query(default=False),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Current space weather snapshot."""
    result = orchestrator.get_snapshot(force_refresh=refresh)

    if not result.success:
        return {
            "success": False,
            "error": result.error,
            "stale": asdict(result.stale) if result.stale else None,
        }

    return {
        "success": True,
        "cached": result.from_cache,
        "data": asdict(result.snapshot),
    }


@app.get("/api/iss")
def get_iss(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Current ISS position."""
    snapshot = _current_snapshot(orchestrator)
    if snapshot is None or snapshot.satellite is None:
        return {"success": False, "message": "ISS data unavailable"}
    return {"success": True, **asdict(snapshot.satellite)}


@app.get("/api/cme")
def get_cmes(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Recent coronal mass ejections."""
    snapshot = _current_snapshot(orchestrator)
    if snapshot is None:
        return {"success": False, "message": "CME data unavailable"}
    return {"success": True, "data": [asdict(cme) for cme in snapshot.cmes]}


@app.get("/api/flares")
def get_flares(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Recent solar flares."""
    snapshot = _current_snapshot(orchestrator)
    if snapshot is None:
        return {"success": False, "message": "Flare data unavailable"}
    return {"success": True, "data": [asdict(flare) for flare in snapshot.flares]}


@app.get("/api/history/{category}")
def get_history(
    category: str,
    days: int = Query(default=7, ge=1, le=90),
    limit: int = Query(default=100, ge=1, le=1000),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Recorded readings for a category, newest first."""
    try:
        rows = orchestrator.history(category, days=days, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"success": True, "category": category, "count": len(rows), "data": rows}


@app.get("/api/stats/subscriptions")
def get_subscription_stats(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Active subscription counts per topic."""
    return {"success": True, "stats": orchestrator.subscription_stats()}


@app.get("/health")
def health_check(orchestrator: Orchestrator = Depends(get_orchestrator)):
    """Health check endpoint for Cloud Run."""
    return orchestrator.health()


# ===== Chat Webhook =====

@app.post("/webhook")
async def webhook(
    request: Request,
    x_line_signature: str | None = Header(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """LINE webhook receiver."""
    body = await request.body()

    if not orchestrator.verify_signature(body, x_line_signature):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    # Replies and storage writes block; keep them off the event loop
    result = await asyncio.to_thread(orchestrator.handle_chat_events, payload.get("events", []))
    return {"status": "ok", "handled": result.handled}


# ===== Admin Endpoints =====

@app.get("/api/subscriptions/{subscriber_id}")
def admin_list_subscriptions(
    subscriber_id: str,
    x_admin_key: str | None = Header(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Active subscriptions of one subscriber."""
    _verify_admin_key(orchestrator, x_admin_key)

    subscriptions = orchestrator.list_subscriptions(subscriber_id)
    return {
        "success": True,
        "subscriptions": [_subscription_to_dict(s) for s in subscriptions],
    }


@app.post("/api/admin/broadcast")
def admin_broadcast(
    body: BroadcastRequest,
    x_admin_key: str | None = Header(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Push a message to every active subscriber of a topic."""
    _verify_admin_key(orchestrator, x_admin_key)

    result = orchestrator.broadcast(body.type, body.message)
    if not result.success:
        return {"success": False, "message": result.message}
    return {"success": True, "sent": result.sent, "total": result.total}


@app.post("/api/admin/test-push")
def admin_test_push(
    body: TestPushRequest,
    x_admin_key: str | None = Header(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Push a freshly rendered message to one user."""
    _verify_admin_key(orchestrator, x_admin_key)

    result = orchestrator.test_push(body.userId, body.type)
    return {"success": result.success, "message": result.message}


@app.post("/api/admin/ticks/{name}")
def admin_run_tick(
    name: str,
    x_admin_key: str | None = Header(default=None),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Run one periodic tick immediately."""
    _verify_admin_key(orchestrator, x_admin_key)

    if name not in TICK_NAMES:
        raise HTTPException(status_code=404, detail=f"Unknown tick '{name}'")

    body, _ = run_tick(name, orchestrator)
    return body
