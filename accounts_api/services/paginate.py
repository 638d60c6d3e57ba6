"""Generic pagination over SQLAlchemy-mapped documents.

A :class:`Paginator` is built once per document type from a static field
table and an optional alias table. Each call translates an untrusted
:class:`PaginationRequest` into a :class:`ResolvedQuerySpec`, rejecting
unknown keys and malformed values before any store access, and then runs the
count and the windowed fetch concurrently on two sessions.

Trusted server-side constraints travel separately as a :class:`PrivateFilter`
and are never validated against the public schema.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import String, and_, asc, cast, desc, func, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.inspection import inspect as sa_inspect
from sqlalchemy.sql.elements import ColumnElement

from accounts_api.core.exceptions import ValidationError
from accounts_api.schemas.pagination import SORT_DIRECTIONS, FieldKind, FieldSpec, PaginationRequest

_LOG = logging.getLogger("accounts_api.paginate")

T = TypeVar("T")

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


@dataclass
class Paginated(Generic[T]):
    total: int
    data: list[T]


@dataclass(frozen=True)
class PrivateFilter:
    """Trusted criteria supplied by resolvers, not by API callers.

    ``criteria`` are ready SQLAlchemy expressions; ``match`` maps internal
    attribute names to a literal (equality) or a sequence of literals (IN).
    """

    criteria: tuple[ColumnElement[bool], ...] = ()
    match: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def where(cls, *criteria: ColumnElement[bool], **match: Any) -> PrivateFilter:
        return cls(criteria=tuple(criteria), match=match)


@dataclass(frozen=True)
class ResolvedQuerySpec:
    where: tuple[ColumnElement[bool], ...]
    order_by: tuple[Any, ...]
    offset: int
    limit: int


def _is_many(value: Any) -> bool:
    return isinstance(value, _SEQUENCE_TYPES)


def _null_exclusion_error(public_key: str) -> ValidationError:
    return ValidationError(f"Cannot exclude null values of the required field '{public_key}'", key=public_key)


class BoundField(ABC):
    """A schema field bound to its mapped column."""

    kind: FieldKind

    def __init__(self, name: str, column: Any, spec: FieldSpec):
        self.name = name
        self.column = column
        self.required = spec.required
        self._coerce = spec.coerce

    def coerce(self, public_key: str, value: Any) -> Any:
        if isinstance(value, Mapping) or _is_many(value):
            raise ValidationError(f"Invalid value for query key '{public_key}': {value}", key=public_key)
        if value is None or self._coerce is None:
            return value
        try:
            return self._coerce(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid value for query key '{public_key}': {value}", key=public_key) from exc

    def literals(self, public_key: str, value: Any) -> tuple[list[Any], bool]:
        """Split a filter value into coerced non-null literals and a has-null flag."""
        items = list(value) if _is_many(value) else [value]
        values = [self.coerce(public_key, item) for item in items if item is not None]
        return values, len(values) < len(items)

    def search(self, term: str) -> ColumnElement[bool]:
        target = self.column if isinstance(self.column.type, String) else cast(self.column, String)
        return target.icontains(term, autoescape=True)

    def order(self, direction: str) -> Any:
        return asc(self.column) if direction == "asc" else desc(self.column)

    @abstractmethod
    def include(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        """Clause keeping rows whose value matches, or ``None`` when nothing is filtered."""

    @abstractmethod
    def exclude(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        """Clause dropping rows whose value matches, or ``None`` when nothing is filtered."""


class ScalarField(BoundField):
    kind = FieldKind.SCALAR

    def include(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        if not _is_many(value):
            return self.column == self.coerce(public_key, value)
        values, has_null = self.literals(public_key, value)
        clause = self.column.in_(values)
        if has_null and not self.required:
            return or_(clause, self.column.is_(None))
        return clause

    def exclude(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        values, has_null = self.literals(public_key, value)
        if has_null:
            if self.required:
                raise _null_exclusion_error(public_key)
            if not values:
                return self.column.is_not(None)
            return and_(self.column.is_not(None), self.column.not_in(values))
        if not values:
            return None
        if self.required:
            return self.column.not_in(values)
        return or_(self.column.is_(None), self.column.not_in(values))


class ArrayField(BoundField):
    kind = FieldKind.ARRAY

    def include(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        values, _ = self.literals(public_key, value)
        if not values:
            return None
        return self.column.contains(values)

    def exclude(self, public_key: str, value: Any) -> ColumnElement[bool] | None:
        values, has_null = self.literals(public_key, value)
        if has_null and self.required:
            raise _null_exclusion_error(public_key)
        clause = not_(self.column.overlap(values)) if values else None
        if has_null:
            present = self.column.is_not(None)
            return present if clause is None else and_(present, clause)
        if clause is None or self.required:
            return clause
        return or_(self.column.is_(None), clause)


_FIELD_CLASSES = {FieldKind.SCALAR: ScalarField, FieldKind.ARRAY: ArrayField}


def _bind_field(model: type, name: str, spec: FieldSpec) -> BoundField:
    column = getattr(model, name, None)
    if column is None:
        raise ValueError(f"{model.__name__} has no attribute '{name}'")
    return _FIELD_CLASSES[spec.kind](name, column, spec)


def _window_value(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer, but got {value}", key=name)
    return value


class Paginator(Generic[T]):
    """Paginates documents of one mapped model.

    :param model:   mapped class whose rows are paginated.
    :param fields:  internal field name -> :class:`FieldSpec`; only these
                    fields may appear in a public request.
    :param aliases: internal field name -> public alias, e.g.
                    ``{"created_at": "init_date"}``. Internal names stay
                    usable as-is.
    """

    def __init__(
        self,
        model: type[T],
        fields: Mapping[str, FieldSpec],
        aliases: Mapping[str, str] | None = None,
    ):
        self.model = model
        self._fields = MappingProxyType({name: _bind_field(model, name, spec) for name, spec in fields.items()})

        public_to_internal: dict[str, str] = {}
        for internal, alias in (aliases or {}).items():
            if internal not in self._fields:
                raise ValueError(f"alias '{alias}' points to unknown field '{internal}'")
            public_to_internal[alias] = internal
        self._aliases = MappingProxyType(public_to_internal)

        mapper = sa_inspect(model)
        self._tiebreak = tuple(mapper.get_property_by_column(column).key for column in mapper.primary_key)

    def resolve_key(self, public_key: str) -> str:
        return self._aliases.get(public_key, public_key)

    def field(self, public_key: str) -> BoundField:
        bound = self._fields.get(self.resolve_key(public_key))
        if bound is None:
            raise ValidationError(f"invalid query key '{public_key}'", key=public_key)
        return bound

    def translate(
        self,
        request: PaginationRequest | Mapping[str, Any],
        private_filter: PrivateFilter | None = None,
    ) -> ResolvedQuerySpec:
        request = _as_request(request)
        offset = _window_value("offset", request.offset)
        limit = _window_value("limit", request.limit)

        where = self._search_clauses(request.search or {})
        if request.filter is not None:
            where.extend(self._filter_clauses(request.filter.include or {}, include=True))
            where.extend(self._filter_clauses(request.filter.exclude or {}, include=False))
        if private_filter is not None:
            where.extend(self._private_clauses(private_filter))

        return ResolvedQuerySpec(
            where=tuple(where),
            order_by=self._order_by(request.sort or {}),
            offset=offset,
            limit=limit,
        )

    async def execute(self, sessions: async_sessionmaker[AsyncSession], spec: ResolvedQuerySpec) -> Paginated[T]:
        count_stmt = select(func.count()).select_from(self.model).where(*spec.where)
        page_stmt = (
            select(self.model)
            .where(*spec.where)
            .order_by(*spec.order_by)
            .offset(spec.offset)
            .limit(spec.limit)
        )
        async with sessions() as count_session, sessions() as page_session:
            total, rows = await asyncio.gather(
                count_session.scalar(count_stmt),
                page_session.scalars(page_stmt),
            )
            data = list(rows.all())

        _LOG.debug(
            "paginated %s offset=%s limit=%s total=%s returned=%s",
            self.model.__name__,
            spec.offset,
            spec.limit,
            total,
            len(data),
        )
        return Paginated(total=int(total or 0), data=data)

    async def paginate(
        self,
        sessions: async_sessionmaker[AsyncSession],
        request: PaginationRequest | Mapping[str, Any],
        private_filter: PrivateFilter | None = None,
    ) -> Paginated[T]:
        spec = self.translate(request, private_filter)
        _LOG.debug("translated %s request into %s clauses", self.model.__name__, len(spec.where))
        return await self.execute(sessions, spec)

    def _search_clauses(self, search: Mapping[str, Any]) -> list[ColumnElement[bool]]:
        clauses = []
        for key, term in search.items():
            bound = self.field(key)
            if term is None:
                continue
            if not isinstance(term, str):
                raise ValidationError(f"Expected string value for the search query, but got {term}", key=key)
            clauses.append(bound.search(term))
        return clauses

    def _filter_clauses(self, values: Mapping[str, Any], *, include: bool) -> list[ColumnElement[bool]]:
        clauses = []
        for key, value in values.items():
            bound = self.field(key)
            if include:
                clause = None if value is None else bound.include(key, value)
            else:
                clause = bound.exclude(key, value)
            if clause is not None:
                clauses.append(clause)
        return clauses

    def _private_clauses(self, private_filter: PrivateFilter) -> list[ColumnElement[bool]]:
        clauses = list(private_filter.criteria)
        for name, value in private_filter.match.items():
            column = getattr(self.model, name)
            clauses.append(column.in_(list(value)) if _is_many(value) else column == value)
        return clauses

    def _order_by(self, sort: Mapping[str, Any]) -> tuple[Any, ...]:
        order_by = []
        sorted_names = set()
        for key, direction in sort.items():
            bound = self.field(key)
            if direction is None:
                continue
            if not isinstance(direction, str) or direction not in SORT_DIRECTIONS:
                raise ValidationError(
                    f"Sort value was expected to be only 'asc' or 'desc', but was '{direction}'",
                    key=key,
                )
            order_by.append(bound.order(direction))
            sorted_names.add(bound.name)
        order_by.extend(asc(getattr(self.model, name)) for name in self._tiebreak if name not in sorted_names)
        return tuple(order_by)


def _as_request(request: PaginationRequest | Mapping[str, Any]) -> PaginationRequest:
    if isinstance(request, PaginationRequest):
        return request
    try:
        return PaginationRequest.model_validate(request)
    except PydanticValidationError as exc:
        raise ValidationError(f"malformed pagination request: {exc.errors()[0]['msg']}") from exc
