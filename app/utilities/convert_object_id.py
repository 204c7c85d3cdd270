from typing import Optional, Type, TypeVar
from bson import ObjectId
from bson.errors import InvalidId

from app.models.base import Document

T = TypeVar("T", bound=Document)


def to_object_id(value) -> Optional[ObjectId]:
    """ObjectId for `value`, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_document(model: Document) -> dict:
    """Mongo document for a stored entity; `_id` is left to the driver."""
    return model.model_dump(exclude={"id"})


def from_document(model_cls: Type[T], doc: Optional[dict]) -> Optional[T]:
    if doc is None:
        return None
    doc = dict(doc)
    doc["_id"] = str(doc["_id"])
    return model_cls.model_validate(doc)
