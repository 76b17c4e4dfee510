from datetime import datetime, date
from enum import Enum
from typing import Any, Dict, Type
from bson import ObjectId
import pydantic
from models.base import as_utc
from services.errors import ValidationError


def format_datetime(value: datetime) -> str:
    """UTC with millisecond precision and a Z suffix, the resolution BSON dates keep"""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_serializable(obj):
    """Convert MongoDB documents to a JSON serializable structure"""
    if isinstance(obj, dict):
        return {k: make_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [make_serializable(item) for item in obj]
    elif isinstance(obj, ObjectId):
        return str(obj)
    elif isinstance(obj, datetime):
        return format_datetime(obj)
    elif isinstance(obj, date):
        return obj.isoformat()
    elif isinstance(obj, Enum):
        return obj.value
    elif obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    else:
        return str(obj)


def format_validation_error(entity: str, error: pydantic.ValidationError) -> str:
    """Render pydantic errors as `<Entity> validation failed: field: reason; ...`"""
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return f"{entity} validation failed: " + "; ".join(parts)


def validate_document(model: Type[pydantic.BaseModel], entity: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate data against model and return the storable field dict"""
    if not isinstance(data, dict):
        raise ValidationError(f"{entity} validation failed: expected an object")
    try:
        return model.model_validate(data).model_dump(by_alias=True)
    except pydantic.ValidationError as e:
        raise ValidationError(format_validation_error(entity, e)) from e
