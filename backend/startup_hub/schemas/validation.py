"""
Non-raising validation entry point shared by the wizard, the intake endpoint
and owner edits.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

FORM_ERROR_KEY = "__all__"


@dataclass
class ValidationResult(Generic[SchemaT]):
    value: Optional[SchemaT] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def errors_by_field(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a pydantic ValidationError into field -> messages"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        ctx = error.get("ctx") or {}
        if error["loc"]:
            key = ".".join(str(part) for part in error["loc"])
        else:
            # model-level checks name their target field in the error context
            key = ctx.get("field", FORM_ERROR_KEY)

        if error["type"] == "value_error" and "error" in ctx:
            message = str(ctx["error"])
        else:
            message = error["msg"]
        errors.setdefault(key, []).append(message)
    return errors


def validate(schema: Type[SchemaT], data: Any) -> ValidationResult[SchemaT]:
    """Validate data against schema, returning the typed value or field errors"""
    try:
        return ValidationResult(value=schema.model_validate(data))
    except ValidationError as e:
        return ValidationResult(errors=errors_by_field(e))
