from typing import Any, Callable, Dict, Iterable, List, Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from db.mongo import TODO_LISTS_COLLECTION
from models.base import parse_object_id, utcnow
from models.todo_list import (
    TodoItem,
    TodoList,
    TodoListCreate,
    TodoListStatus,
    TODO_ITEM_UPDATABLE_FIELDS,
    TODO_LIST_UPDATABLE_FIELDS,
)
from services.errors import ConflictError, NotFoundError, StoreError, ValidationError
from services.query import live_todo_lists_filter, todo_list_search_filter
from services.serialization import validate_document
import logging

logger = logging.getLogger(__name__)

LIST_NOT_FOUND = "Todo list not found"
ITEM_NOT_FOUND = "Todo item not found"
MAX_SAVE_ATTEMPTS = 3


def build_item(fields: Dict[str, Any], now) -> Dict[str, Any]:
    """Storable embedded item with its own id and timestamps"""
    return {"_id": ObjectId(), **fields, "createdAt": now, "updatedAt": now}


def find_item_index(items: List[Dict[str, Any]], item_id: str) -> int:
    oid = parse_object_id(item_id)
    for index, item in enumerate(items):
        if oid is not None and item.get("_id") == oid:
            return index
    raise NotFoundError(ITEM_NOT_FOUND)


class TodoListDBService:
    def __init__(self, db):
        self.collection_name = TODO_LISTS_COLLECTION
        self.collection = db[self.collection_name]

    async def get_live_lists(self) -> List[Dict[str, Any]]:
        """All lists that are not archived"""
        try:
            cursor = self.collection.find(live_todo_lists_filter())
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error listing todo lists: {str(e)}")
            raise StoreError(str(e)) from e

    async def get_list(self, list_id: str) -> Dict[str, Any]:
        """Get a todo list by id, whatever its status"""
        oid = parse_object_id(list_id)
        if oid is None:
            raise NotFoundError(LIST_NOT_FOUND)
        try:
            todo_list = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error(f"Error getting todo list {list_id}: {str(e)}")
            raise StoreError(str(e)) from e
        if not todo_list:
            raise NotFoundError(LIST_NOT_FOUND)
        return todo_list

    async def get_lists_by_ids(self, list_ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
        """Resolve ids in one query, keyed by id. Unknown ids are absent."""
        ids = list(dict.fromkeys(list_ids))
        if not ids:
            return {}
        try:
            cursor = self.collection.find({"_id": {"$in": ids}})
            lists = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error resolving todo lists: {str(e)}")
            raise StoreError(str(e)) from e
        return {todo_list["_id"]: todo_list for todo_list in lists}

    async def create_list(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a new todo list, optionally with initial items"""
        fields = validate_document(TodoListCreate, "TodoList", data)
        now = utcnow()
        fields["items"] = [build_item(item, now) for item in fields.get("items", [])]
        todo_list = {**fields, "createdAt": now, "updatedAt": now, "__v": 0}
        try:
            result = await self.collection.insert_one(todo_list)
        except PyMongoError as e:
            logger.error(f"Error creating todo list: {str(e)}")
            raise StoreError(str(e)) from e
        todo_list["_id"] = result.inserted_id
        logger.info(f"Created todo list {todo_list['_id']} '{todo_list['title']}'")
        return todo_list

    async def update_list(self, list_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Merge changes into the list's own fields and re-validate"""
        if not isinstance(changes, dict):
            raise ValidationError("TodoList validation failed: expected an object")
        existing = await self.get_list(list_id)
        current = {field: existing[field] for field in TODO_LIST_UPDATABLE_FIELDS if field in existing}
        fields = validate_document(TodoList, "TodoList", {**current, **changes})
        fields["updatedAt"] = utcnow()
        return await self._set_fields(existing["_id"], fields)

    async def archive_list(self, list_id: str) -> Dict[str, Any]:
        """Soft delete. Repeating it is harmless."""
        existing = await self.get_list(list_id)
        todo_list = await self._set_fields(
            existing["_id"],
            {"status": TodoListStatus.ARCHIVED.value, "updatedAt": utcnow()},
        )
        logger.info(f"Archived todo list {list_id}")
        return todo_list

    async def search(self, query: str) -> List[Dict[str, Any]]:
        try:
            cursor = self.collection.find(todo_list_search_filter(query))
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"Error searching todo lists: {str(e)}")
            raise StoreError(str(e)) from e

    async def add_item(self, list_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.add_items(list_id, [data])

    async def add_items(self, list_id: str, entries: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Append items in order. All entries are validated before any is stored."""
        await self.get_list(list_id)
        if not isinstance(entries, list):
            raise ValidationError("Items must be an array")
        validated = [validate_document(TodoItem, "TodoItem", entry) for entry in entries]

        def append(items):
            now = utcnow()
            return items + [build_item(fields, now) for fields in validated]

        todo_list = await self._mutate_items(list_id, append)
        logger.info(f"Added {len(validated)} item(s) to todo list {list_id}")
        return todo_list

    async def update_item(self, list_id: str, item_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(changes, dict):
            raise ValidationError("TodoItem validation failed: expected an object")

        def merge(items):
            index = find_item_index(items, item_id)
            existing = items[index]
            current = {field: existing[field] for field in TODO_ITEM_UPDATABLE_FIELDS if field in existing}
            fields = validate_document(TodoItem, "TodoItem", {**current, **changes})
            items[index] = {**existing, **fields, "updatedAt": utcnow()}
            return items

        return await self._mutate_items(list_id, merge)

    async def remove_item(self, list_id: str, item_id: str) -> Dict[str, Any]:
        def remove(items):
            index = find_item_index(items, item_id)
            return items[:index] + items[index + 1:]

        todo_list = await self._mutate_items(list_id, remove)
        logger.info(f"Removed item {item_id} from todo list {list_id}")
        return todo_list

    async def toggle_item(self, list_id: str, item_id: str) -> Dict[str, Any]:
        def toggle(items):
            index = find_item_index(items, item_id)
            item = items[index]
            items[index] = {**item, "completed": not item.get("completed", False), "updatedAt": utcnow()}
            return items

        return await self._mutate_items(list_id, toggle)

    async def _mutate_items(self, list_id: str, mutate: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> Dict[str, Any]:
        """Load the list, apply mutate to a copy of its items and store them.

        The store only succeeds if nobody saved the list in between (same
        version counter); otherwise the whole sequence is repeated.
        """
        for attempt in range(1, MAX_SAVE_ATTEMPTS + 1):
            todo_list = await self.get_list(list_id)
            items = mutate(list(todo_list.get("items", [])))
            saved = await self._store_items(todo_list["_id"], todo_list.get("__v"), items)
            if saved is not None:
                return saved
            logger.warning(f"Todo list {list_id} changed while saving items (attempt {attempt})")
        raise ConflictError("Todo list was modified concurrently, please retry")

    async def _store_items(self, oid: ObjectId, version: Optional[int], items: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Write items if the stored version still matches. None on mismatch."""
        version_filter = version if version is not None else {"$exists": False}
        try:
            return await self.collection.find_one_and_update(
                {"_id": oid, "__v": version_filter},
                {"$set": {"items": items, "updatedAt": utcnow()}, "$inc": {"__v": 1}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Error saving items of todo list {oid}: {str(e)}")
            raise StoreError(str(e)) from e

    async def _set_fields(self, oid: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            todo_list = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"Error updating todo list {oid}: {str(e)}")
            raise StoreError(str(e)) from e
        if not todo_list:
            raise NotFoundError(LIST_NOT_FOUND)
        return todo_list
