from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from friendgraph.core.errors import InvalidIdError


def parse_object_id(value: Any, label: str = "id") -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidIdError(f"Invalid {label}") from None
