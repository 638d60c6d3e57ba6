"""Exception-driven CRUD helpers bound to one mapped model."""

from __future__ import annotations

import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.inspection import inspect as sa_inspect

from accounts_api.core.exceptions import NotFoundError

ModelT = TypeVar("ModelT")


class IdNotFoundError(NotFoundError):
    def __init__(self, entity_id: Any, target_name: str = "instance"):
        self.entity_id = entity_id
        super().__init__(f"no '{target_name}' was found for id '{entity_id}'")


class TryCrud(Generic[ModelT]):
    """Look up, update and delete rows, raising ``NotFoundError`` instead of returning ``None``."""

    def __init__(self, model: type[ModelT], target_name: str = "instance"):
        self.model = model
        self.target_name = target_name
        self._columns = {column.key for column in sa_inspect(model).column_attrs}

    async def try_find_by_id(self, db: AsyncSession, entity_id: uuid.UUID) -> ModelT:
        row = await db.get(self.model, entity_id)
        if row is None:
            raise IdNotFoundError(entity_id, self.target_name)
        return row

    async def try_find_one(self, db: AsyncSession, **criteria: Any) -> ModelT:
        stmt = select(self.model).filter_by(**criteria).limit(1)
        row = (await db.scalars(stmt)).first()
        if row is None:
            raise NotFoundError()
        return row

    async def try_update_by_id(self, db: AsyncSession, entity_id: uuid.UUID, update: dict[str, Any]) -> ModelT:
        row = await self.try_find_by_id(db, entity_id)
        for key, value in update.items():
            if key == "id" or key not in self._columns:
                continue
            setattr(row, key, value)
        await db.commit()
        await db.refresh(row)
        return row

    async def try_delete_by_id(self, db: AsyncSession, entity_id: uuid.UUID) -> ModelT:
        row = await self.try_find_by_id(db, entity_id)
        await db.delete(row)
        await db.commit()
        return row
