from fastapi import APIRouter, Body, Depends
from typing import Any, Dict
from db.mongo import get_db
from services.todo_list_db import TodoListDBService
from services.serialization import make_serializable
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/todolists", tags=["todolists"])


def get_todo_list_db(db=Depends(get_db)) -> TodoListDBService:
    return TodoListDBService(db)


def init_todo_lists_routes():
    """
    Initialize todo list routes and the routes for items embedded in a list.
    Returns the router with all todo list endpoints configured.
    """

    @router.get("")
    async def get_todo_lists(todo_list_db: TodoListDBService = Depends(get_todo_list_db)):
        """Get all todo lists that are not archived"""
        lists = await todo_list_db.get_live_lists()
        logger.info(f"Retrieved {len(lists)} todo lists")
        return make_serializable(lists)

    @router.get("/{list_id}")
    async def get_todo_list(list_id: str, todo_list_db: TodoListDBService = Depends(get_todo_list_db)):
        """Get a single todo list"""
        return make_serializable(await todo_list_db.get_list(list_id))

    @router.post("", status_code=201)
    async def create_todo_list(
        payload: Dict[str, Any] = Body(...),
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Create a new todo list"""
        return make_serializable(await todo_list_db.create_list(payload))

    @router.put("/{list_id}")
    async def update_todo_list(
        list_id: str,
        payload: Dict[str, Any] = Body(...),
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Update a todo list"""
        return make_serializable(await todo_list_db.update_list(list_id, payload))

    @router.delete("/{list_id}")
    async def delete_todo_list(list_id: str, todo_list_db: TodoListDBService = Depends(get_todo_list_db)):
        """Archive a todo list. Events referencing it keep the reference."""
        todo_list = await todo_list_db.archive_list(list_id)
        return {
            "message": "Todo list archived successfully",
            "todoList": make_serializable(todo_list),
        }

    # Items

    @router.post("/{list_id}/items", status_code=201)
    async def add_item(
        list_id: str,
        payload: Dict[str, Any] = Body(...),
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Add item to todo list"""
        return make_serializable(await todo_list_db.add_item(list_id, payload))

    @router.post("/{list_id}/items/bulk", status_code=201)
    async def add_items(
        list_id: str,
        payload: Dict[str, Any] = Body(...),
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Add multiple items to todo list"""
        return make_serializable(await todo_list_db.add_items(list_id, payload.get("items")))

    @router.put("/{list_id}/items/{item_id}")
    async def update_item(
        list_id: str,
        item_id: str,
        payload: Dict[str, Any] = Body(...),
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Update a todo item"""
        return make_serializable(await todo_list_db.update_item(list_id, item_id, payload))

    @router.delete("/{list_id}/items/{item_id}")
    async def delete_item(
        list_id: str,
        item_id: str,
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Delete a todo item"""
        return make_serializable(await todo_list_db.remove_item(list_id, item_id))

    @router.patch("/{list_id}/items/{item_id}/toggle")
    async def toggle_item(
        list_id: str,
        item_id: str,
        todo_list_db: TodoListDBService = Depends(get_todo_list_db),
    ):
        """Toggle todo item completion"""
        return make_serializable(await todo_list_db.toggle_item(list_id, item_id))

    return router
