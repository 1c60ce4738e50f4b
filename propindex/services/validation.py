from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ValidationError
from ..schemas import LookupRequest

def validate_lookup(payload: Any) -> LookupRequest:
    """Parse a raw JSON body into a LookupRequest.

    Every violated constraint is reported, not just the first one. Each
    entry is ``{"field": ..., "message": ..., "type": ...}`` where ``field``
    is the JSON field name (``""`` when the body itself is wrong).
    """
    if not isinstance(payload, dict):
        raise ValidationError([
            {"field": "", "message": "Request body must be a JSON object", "type": "model_type"}
        ])
    try:
        return LookupRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError([_field_error(e) for e in exc.errors()]) from exc

def _field_error(err: dict[str, Any]) -> dict[str, Any]:
    return {
        "field": str(err["loc"][0]) if err.get("loc") else "",
        "message": err["msg"].removeprefix("Value error, "),
        "type": err["type"],
    }
