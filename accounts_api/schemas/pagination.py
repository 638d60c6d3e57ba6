"""Public pagination request and the per-field metadata a paginator is built from."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel, StrictInt

SORT_DIRECTIONS = ("asc", "desc")


class PaginationFilter(BaseModel):
    include: dict[str, Any] | None = None
    exclude: dict[str, Any] | None = None


class PaginationRequest(BaseModel):
    """Untrusted query shape as received from the API.

    The window must be plain integers. Section values stay loose; the
    paginator validates every key and value against the document schema
    and reports its own errors.
    """

    offset: StrictInt
    limit: StrictInt
    search: dict[str, Any] | None = None
    sort: dict[str, Any] = {}
    filter: PaginationFilter | None = None


class FieldKind(str, enum.Enum):
    SCALAR = "scalar"
    ARRAY = "array"


@dataclass(frozen=True)
class FieldSpec:
    kind: FieldKind = FieldKind.SCALAR
    required: bool = False
    coerce: Callable[[Any], Any] | None = None


def as_uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())


def as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    else:
        text = str(value).strip()
        if not text:
            raise ValueError("empty datetime")
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
