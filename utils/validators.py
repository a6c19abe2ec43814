"""
Request validation helpers.

Pydantic does the structural parsing; these helpers turn its failures into
``FieldIssue`` lists and apply the checks a schema cannot express.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from utils.errors import ValidationError
from utils.schemas import FieldIssue, TaskUpdate


ModelT = TypeVar("ModelT", bound=BaseModel)

# Location prefixes FastAPI adds in front of the field path.
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _field_name(loc: Iterable[Any]) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(parts) or "body"


def issues_from_errors(errors: Iterable[Mapping[str, Any]]) -> List[FieldIssue]:
    """Convert pydantic / FastAPI error dicts into one issue per failure."""
    return [
        FieldIssue(field=_field_name(err.get("loc", ())), message=err.get("msg", "Invalid value"))
        for err in errors
    ]


def parse_model(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate untyped *data* against *model*.

    Returns the typed model or raises ``ValidationError`` listing every
    failing field, not just the first.
    """
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            "Validation failed", issues_from_errors(exc.errors())
        ) from exc


def require_task_changes(update: TaskUpdate) -> Dict[str, Any]:
    """Return the fields to change, rejecting an update that changes nothing."""
    changes = update.changes()
    if not changes:
        raise ValidationError("No data provided for update")
    return changes
