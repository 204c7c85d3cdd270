from datetime import datetime, timezone
from typing import Optional
from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python. Both spellings are accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


class Document(ApiModel):
    """A stored entity: serialized with its identifier under `_id`."""

    id: Optional[str] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=utcnow)
