from datetime import datetime, timezone
from typing import Annotated, Any

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str):
        try:
            return ObjectId(value)
        except InvalidId:
            pass
    raise ValueError(f"'{value}' is not a valid id")


def parse_object_id(value: Any):
    """Return an ObjectId for value, or None when it can never be one"""
    try:
        return coerce_object_id(value)
    except ValueError:
        return None


ObjectIdField = Annotated[ObjectId, BeforeValidator(coerce_object_id)]
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class DocumentModel(BaseModel):
    """Base for the client-writable part of a stored document"""
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        use_enum_values=True,
        extra="ignore",
        validate_default=True,
        populate_by_name=True,
    )
