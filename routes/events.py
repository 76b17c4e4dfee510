from fastapi import APIRouter, Body, Depends
from typing import Any, Dict
from db.mongo import get_db
from services.event_db import EventDBService
from services.serialization import make_serializable
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


def get_event_db(db=Depends(get_db)) -> EventDBService:
    return EventDBService(db)


def init_events_routes():
    """
    Initialize event routes, including the event <-> todo list relation.
    Returns the router with all event endpoints configured.
    """

    @router.get("")
    async def get_events(event_db: EventDBService = Depends(get_event_db)):
        """Get all events that are not cancelled, with their todo lists"""
        events = await event_db.get_live_events()
        logger.info(f"Retrieved {len(events)} events")
        return make_serializable(events)

    @router.get("/{event_id}")
    async def get_event(event_id: str, event_db: EventDBService = Depends(get_event_db)):
        """Get a single event with its todo lists"""
        event = await event_db.get_event(event_id)
        return make_serializable(event)

    @router.post("", status_code=201)
    async def create_event(
        payload: Dict[str, Any] = Body(...),
        event_db: EventDBService = Depends(get_event_db),
    ):
        """Create a new event; calendar, owner and organizer are assigned here"""
        event = await event_db.create_event(payload)
        return make_serializable(event)

    @router.put("/{event_id}")
    async def update_event(
        event_id: str,
        payload: Dict[str, Any] = Body(...),
        event_db: EventDBService = Depends(get_event_db),
    ):
        """Update an event"""
        event = await event_db.update_event(event_id, payload)
        return make_serializable(event)

    @router.delete("/{event_id}")
    async def delete_event(event_id: str, event_db: EventDBService = Depends(get_event_db)):
        """Cancel an event. The document is kept."""
        event = await event_db.cancel_event(event_id)
        return {
            "message": "Event cancelled successfully",
            "event": make_serializable(event),
        }

    @router.post("/{event_id}/assign-list/{list_id}")
    async def assign_todo_list(
        event_id: str,
        list_id: str,
        event_db: EventDBService = Depends(get_event_db),
    ):
        """Assign todo list to event"""
        event = await event_db.attach_todo_list(event_id, list_id)
        return make_serializable(event)

    @router.delete("/{event_id}/remove-list/{list_id}")
    async def remove_todo_list(
        event_id: str,
        list_id: str,
        event_db: EventDBService = Depends(get_event_db),
    ):
        """Remove todo list from event"""
        event = await event_db.detach_todo_list(event_id, list_id)
        return make_serializable(event)

    return router
