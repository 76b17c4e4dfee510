"""Filter construction for list views and text search.

List and search endpoints only ever see "live" documents: events that are
not cancelled and todo lists that are not archived. Lookups by id bypass
these filters.
"""
import re
from typing import Any, Dict, Iterable

from models.event import EventStatus
from models.todo_list import TodoListStatus

EVENT_SEARCH_FIELDS = ("title", "description", "location")
TODO_LIST_SEARCH_FIELDS = ("title", "description", "items.text")


def live_events_filter() -> Dict[str, Any]:
    return {"status": {"$ne": EventStatus.CANCELLED.value}}


def live_todo_lists_filter() -> Dict[str, Any]:
    return {"status": {"$ne": TodoListStatus.ARCHIVED.value}}


def substring_pattern(query: str) -> Dict[str, str]:
    """Case-insensitive literal substring matcher.

    User input is escaped so characters like `(` or `.*` match themselves
    instead of being interpreted by the regex engine.
    """
    return {"$regex": re.escape(query), "$options": "i"}


def search_filter(fields: Iterable[str], query: str, live: Dict[str, Any]) -> Dict[str, Any]:
    pattern = substring_pattern(query)
    return {
        "$or": [{field: dict(pattern)} for field in fields],
        **live,
    }


def event_search_filter(query: str) -> Dict[str, Any]:
    return search_filter(EVENT_SEARCH_FIELDS, query, live_events_filter())


def todo_list_search_filter(query: str) -> Dict[str, Any]:
    return search_filter(TODO_LIST_SEARCH_FIELDS, query, live_todo_lists_filter())
