from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from strawberry.extensions import SchemaExtension

from accounts_api.core.exceptions import AppError, ValidationError


class AppErrorExtensions(SchemaExtension):
    """Expose ``AppError`` code and status in GraphQL error extensions."""

    def on_operation(self) -> Iterator[None]:
        yield
        errors = getattr(self.execution_context.result, "errors", None)
        for error in errors or ():
            original = error.original_error
            if isinstance(original, AppError):
                error.extensions = {
                    **(error.extensions or {}),
                    "code": original.code,
                    "status": original.status_code,
                }


def validated(schema: type[BaseModel], data: dict[str, Any]) -> Any:
    """Validate resolver input with pydantic, reporting failures as ``ValidationError``."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or None
        message = f"{location}: {first['msg']}" if location else first["msg"]
        raise ValidationError(message, key=location) from exc
