from typing import List, Optional, Dict, Any
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from db.mongo import EVENTS_COLLECTION
from models.base import parse_object_id, utcnow
from models.event import AttendeeStatus, Event, EventStatus
from services.errors import NotFoundError, StoreError, ValidationError
from services.query import event_search_filter, live_events_filter
from services.serialization import validate_document
from services.todo_list_db import TodoListDBService
import logging

logger = logging.getLogger(__name__)

EVENT_NOT_FOUND = "Event not found"
EVENT_UPDATABLE_FIELDS = tuple(Event.model_fields)


def assign_attendee_ids(attendees: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**attendee, "_id": attendee.get("_id") or ObjectId()} for attendee in attendees]


class EventDBService:
    """Events collection plus the event -> todo list reference relation"""

    def __init__(self, db):
        self.collection_name = EVENTS_COLLECTION
        self.collection = db[self.collection_name]
        self.todo_lists = TodoListDBService(db)

    async def get_live_events(self) -> List[Dict[str, Any]]:
        """All events that are not cancelled, todo lists populated"""
        try:
            cursor = self.collection.find(live_events_filter())
            events = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error listing events: {str(e)}")
            raise StoreError(str(e)) from e
        return await self.populate(events)

    async def get_event(self, event_id: str) -> Dict[str, Any]:
        """Get an event by id, whatever its status"""
        event = await self._find_event(event_id)
        return (await self.populate([event]))[0]

    async def create_event(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new event owned by a freshly generated calendar/owner"""
        fields = validate_document(Event, "Event", data)
        now = utcnow()
        event = {
            **fields,
            "calendarId": ObjectId(),
            "ownerId": ObjectId(),
            "attendees": [{
                "_id": ObjectId(),
                "userId": ObjectId(),
                "status": AttendeeStatus.ACCEPTED.value,
                "isOrganizer": True,
            }],
            "createdAt": now,
            "updatedAt": now,
            "__v": 0,
        }
        try:
            result = await self.collection.insert_one(event)
        except PyMongoError as e:
            logger.error(f"Error creating event: {str(e)}")
            raise StoreError(str(e)) from e
        event["_id"] = result.inserted_id
        logger.info(f"Created event {event['_id']} '{event['title']}'")
        return (await self.populate([event]))[0]

    async def update_event(self, event_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Validate changes merged over the stored event, then write only the changed fields.

        todoLists and attendees are left alone unless the request names them, so an
        attach or detach that lands between the read and the write is kept.
        """
        if not isinstance(changes, dict):
            raise ValidationError("Event validation failed: expected an object")
        existing = await self._find_event(event_id)
        if (
            existing.get("status") == EventStatus.CANCELLED.value
            and changes.get("status", EventStatus.CANCELLED.value) != EventStatus.CANCELLED.value
        ):
            raise ValidationError("Cancelled events cannot be restored")

        current = {field: existing[field] for field in EVENT_UPDATABLE_FIELDS if field in existing}
        merged = validate_document(Event, "Event", {**current, **changes})
        fields = {field: merged[field] for field in EVENT_UPDATABLE_FIELDS if field in changes}
        if "attendees" in fields:
            fields["attendees"] = assign_attendee_ids(fields["attendees"])
        fields["updatedAt"] = utcnow()
        event = await self._find_and_update({"_id": existing["_id"]}, {"$set": fields})
        if event is None:
            raise NotFoundError(EVENT_NOT_FOUND)
        logger.info(f"Updated event {event_id}")
        return (await self.populate([event]))[0]

    async def cancel_event(self, event_id: str) -> Dict[str, Any]:
        """Soft delete. Cancelling twice leaves the event cancelled."""
        existing = await self._find_event(event_id)
        event = await self._find_and_update(
            {"_id": existing["_id"]},
            {"$set": {"status": EventStatus.CANCELLED.value, "updatedAt": utcnow()}},
        )
        if event is None:
            raise NotFoundError(EVENT_NOT_FOUND)
        logger.info(f"Cancelled event {event_id}")
        return event

    async def attach_todo_list(self, event_id: str, list_id: str) -> Dict[str, Any]:
        """Add list_id to event.todoLists once; attaching again changes nothing"""
        event = await self._find_event(event_id)
        todo_list = await self.todo_lists.get_list(list_id)
        list_oid = todo_list["_id"]

        attached = await self._find_and_update(
            {"_id": event["_id"], "todoLists": {"$ne": list_oid}},
            {"$addToSet": {"todoLists": list_oid}, "$set": {"updatedAt": utcnow()}, "$inc": {"__v": 1}},
        )
        if attached is not None:
            logger.info(f"Attached todo list {list_id} to event {event_id}")
            event = attached
        else:
            event = await self._find_event(event_id)
        return (await self.populate([event]))[0]

    async def detach_todo_list(self, event_id: str, list_id: str) -> Dict[str, Any]:
        """Remove list_id from event.todoLists. The list itself is not checked."""
        event = await self._find_event(event_id)
        list_oid = parse_object_id(list_id)
        if list_oid is not None:
            detached = await self._find_and_update(
                {"_id": event["_id"], "todoLists": list_oid},
                {"$pull": {"todoLists": list_oid}, "$set": {"updatedAt": utcnow()}, "$inc": {"__v": 1}},
            )
            if detached is not None:
                logger.info(f"Detached todo list {list_id} from event {event_id}")
                event = detached
        return (await self.populate([event]))[0]

    async def search(self, query: str) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(event_search_filter(query))
            events = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error searching events: {str(e)}")
            raise StoreError(str(e)) from e
        return await self.populate(events)

    async def populate(self, events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Replace todoLists ids with the list documents.

        All events are resolved with a single query. Ids without a matching
        list are left out of the result; the stored ids are not touched.
        """
        wanted = [list_id for event in events for list_id in event.get("todoLists", [])]
        resolved = await self.todo_lists.get_lists_by_ids(wanted)
        populated = []
        for event in events:
            lists = []
            for list_id in event.get("todoLists", []):
                todo_list = resolved.get(list_id)
                if todo_list is None:
                    logger.warning(f"Event {event['_id']} references missing todo list {list_id}")
                    continue
                lists.append(todo_list)
            populated.append({**event, "todoLists": lists})
        return populated

    async def _find_event(self, event_id: str) -> Dict[str, Any]:
        oid = parse_object_id(event_id)
        if oid is None:
            raise NotFoundError(EVENT_NOT_FOUND)
        try:
            event = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Error getting event {event_id}: {str(e)}")
            raise StoreError(str(e)) from e
        if not event:
            raise NotFoundError(EVENT_NOT_FOUND)
        return event

    async def _find_and_update(self, query: Dict[str, Any], update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one_and_update(
                query, update, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            logger.error(f"Error updating event: {str(e)}")
            raise StoreError(str(e)) from e
