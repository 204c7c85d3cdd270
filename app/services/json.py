from typing import Any, Iterable, List
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.models.user.user import User


def dump(model: BaseModel) -> dict:
    """Wire representation of a model: camelCase keys, `_id`, no password hashes."""
    if isinstance(model, User):
        return model.public()
    return model.model_dump(mode="json", by_alias=True)


def dump_all(models: Iterable[BaseModel]) -> List[dict]:
    return [dump(model) for model in models]


def return_json(content: Any = None, code: int = status.HTTP_200_OK):
    if isinstance(content, BaseModel):
        content = dump(content)
    return JSONResponse(status_code=code, content=jsonable_encoder(content))


def return_message(message: str = "Success", code: int = status.HTTP_200_OK, **data):
    return return_json({"message": message, **data}, code)
