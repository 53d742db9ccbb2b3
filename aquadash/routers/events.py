# aquadash/routers/events.py
"""
Live events relayed from the farm API's socket channel.

- POST /api/events/{event}  - X-Events-Secret; body is the event payload
- GET  /api/events/activity - latest events as the activity feed shows them
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from aquadash.deps import get_current_user, get_hub, verify_events_secret
from aquadash.realtime.hub import LiveHub
from aquadash.realtime.socket import ALL_EVENTS

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.post("/{event}", dependencies=[Depends(verify_events_secret)])
def relay_event(
    event: str,
    payload: Any = Body(None),
    hub: LiveHub = Depends(get_hub),
):
    if event not in ALL_EVENTS:
        raise HTTPException(status_code=404, detail=f"Unknown event: {event}")
    delivered = hub.publish(event, payload)
    log.debug("relayed %s to %d handlers", event, delivered)
    return {"event": event, "delivered": delivered}


@router.get("/activity")
def recent_activity(
    limit: int = 10,
    hub: LiveHub = Depends(get_hub),
    current_user: dict = Depends(get_current_user),
):
    return [
        {"kind": n.kind, "message": n.message, "at": n.at.isoformat()}
        for n in hub.activity.recent(limit)
    ]
