# schemas/common.py
import json
from typing import Annotated, Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, StringConstraints, ValidationError

from core.errors import BadRequestError

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

ModelT = TypeVar("ModelT", bound=BaseModel)


def validation_errors(exc: ValidationError) -> List[dict]:
    return [
        {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
        for e in exc.errors()
    ]


def parse_form(model: Type[ModelT], **fields: Any) -> ModelT:
    """Validate multipart form fields against a model; unset fields are dropped."""
    data = {k: v for k, v in fields.items() if v is not None}
    try:
        return model(**data)
    except ValidationError as e:
        raise BadRequestError("Validation error", error=validation_errors(e))


def json_list(raw: Optional[str], field: str) -> Optional[List[str]]:
    """Decode a JSON-encoded array sent as a form field."""
    if raw is None or raw == "":
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        raise BadRequestError(f"{field} must be a JSON array")
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise BadRequestError(f"{field} must be a JSON array of strings")
    return value
