from typing import Any, Dict, List, Optional
from services.errors import ValidationError
from services.event_db import EventDBService
from services.todo_list_db import TodoListDBService
import logging

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("events", "todolists")


class SearchService:
    """Case-insensitive substring search over live events and todo lists"""

    def __init__(self, db):
        self.event_db = EventDBService(db)
        self.todo_list_db = TodoListDBService(db)

    async def search(self, query: Optional[str], search_type: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        if not query:
            raise ValidationError("Search query is required")
        if search_type and search_type not in SEARCH_TYPES:
            raise ValidationError(f"Search type must be one of: {', '.join(SEARCH_TYPES)}")

        results = {}
        if not search_type or search_type == "events":
            results["events"] = await self.event_db.search(query)
        if not search_type or search_type == "todolists":
            results["todoLists"] = await self.todo_list_db.search(query)

        logger.info(
            f"Search '{query}' (type={search_type or 'all'}) matched "
            + ", ".join(f"{len(found)} {key}" for key, found in results.items())
        )
        return results
