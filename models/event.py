from pydantic import Field, field_validator
from typing import List, Optional
from enum import Enum
from models.base import DocumentModel, ObjectIdField, UTCDateTime


class EventStatus(str, Enum):
    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class AttendeeStatus(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"
    NEEDS_ACTION = "needs_action"


class Attendee(DocumentModel):
    id: Optional[ObjectIdField] = Field(None, alias="_id")
    userId: Optional[ObjectIdField] = None
    status: AttendeeStatus = AttendeeStatus.NEEDS_ACTION
    isOrganizer: bool = False


class Event(DocumentModel):
    """Client-writable part of an event document.

    calendarId, ownerId, timestamps and the version counter are assigned by
    the server and never read from a request body.
    """
    title: str = Field(..., min_length=1)
    description: str = ""
    location: str = ""
    startTime: UTCDateTime
    endTime: UTCDateTime
    isAllDay: bool = False
    # Stored as-is, never expanded
    recurrenceRule: Optional[str] = None
    status: EventStatus = EventStatus.CONFIRMED
    todoLists: List[ObjectIdField] = []
    attendees: List[Attendee] = []

    @field_validator("todoLists")
    @classmethod
    def unique_todo_lists(cls, v):
        seen = []
        for list_id in v:
            if list_id not in seen:
                seen.append(list_id)
        return seen
