from pydantic import Field
from typing import List, Optional
from enum import Enum
from models.base import DocumentModel, UTCDateTime

DEFAULT_LIST_COLOR = "#007bff"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TodoListStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TodoItem(DocumentModel):
    """Writable fields of an item embedded in TodoList.items"""
    text: str = Field(..., min_length=1)
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    dueDate: Optional[UTCDateTime] = None
    notes: str = ""


class TodoList(DocumentModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    color: str = DEFAULT_LIST_COLOR
    status: TodoListStatus = TodoListStatus.ACTIVE


class TodoListCreate(TodoList):
    items: List[TodoItem] = []


# Fields a PUT on a list may touch; items go through the item endpoints
TODO_LIST_UPDATABLE_FIELDS = tuple(TodoList.model_fields)
TODO_ITEM_UPDATABLE_FIELDS = tuple(TodoItem.model_fields)
