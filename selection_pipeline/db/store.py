"""
Data store contract.

Every service reads and writes through one uniform async row contract
(query / get_one / insert / update / delete over named collections), so the
progression engine never depends on a particular query syntax.
``SqlAlchemyDataStore`` is the production implementation on top of an
``AsyncSession``.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Type
from uuid import UUID

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from selection_pipeline.db.base import Base
from selection_pipeline.errors import ConflictError, DependencyError, NotFoundError
from selection_pipeline.models import (
    ApplicantStagePointer,
    StageDefinition,
    StageProgress,
    StageTransitionRule,
    StatusDefinition,
    TaskDefinition,
    TaskInstance,
)

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

STAGE_DEFINITIONS = "stage_definitions"
STATUS_DEFINITIONS = "status_definitions"
TASK_DEFINITIONS = "task_definitions"
TASK_INSTANCES = "task_instances"
STAGE_PROGRESS = "stage_progress"
APPLICANT_STAGE_POINTERS = "applicant_stage_pointers"
STAGE_TRANSITION_RULES = "stage_transition_rules"

COLLECTIONS: Dict[str, Type[Base]] = {
    STAGE_DEFINITIONS: StageDefinition,
    STATUS_DEFINITIONS: StatusDefinition,
    TASK_DEFINITIONS: TaskDefinition,
    TASK_INSTANCES: TaskInstance,
    STAGE_PROGRESS: StageProgress,
    APPLICANT_STAGE_POINTERS: ApplicantStagePointer,
    STAGE_TRANSITION_RULES: StageTransitionRule,
}


class DataStore(ABC):
    """
    Async row store keyed by collection name.

    Rows are plain dicts. ``insert`` assigns ``id``, ``created_at`` and
    ``updated_at``; ``update`` refreshes ``updated_at``. ``order_by`` takes
    field names, a leading ``-`` sorts descending.
    """

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        """Return rows whose fields equal every filter value."""

    @abstractmethod
    async def get_one(self, collection: str, row_id: UUID) -> Optional[Row]:
        """Return one row by id, or None."""

    @abstractmethod
    async def insert(self, collection: str, row: Mapping[str, Any]) -> Row:
        """Insert a row and return it with store-assigned fields."""

    @abstractmethod
    async def update(self, collection: str, row_id: UUID, partial: Mapping[str, Any]) -> Row:
        """Apply a partial update; raises NotFoundError for an unknown id."""

    @abstractmethod
    async def delete(self, collection: str, row_id: UUID) -> None:
        """Physically remove a row; raises NotFoundError for an unknown id."""

    @abstractmethod
    def transaction(self):
        """Async context manager; writes inside it commit together or not at all."""


def _to_row(obj: Base) -> Row:
    return {attr.key: getattr(obj, attr.key) for attr in sa_inspect(obj).mapper.column_attrs}


class SqlAlchemyDataStore(DataStore):
    """DataStore backed by one request-scoped AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _model(self, collection: str) -> Type[Base]:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def _flush(self, collection: str, action: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as exc:
            logger.warning("Integrity conflict on %s %s: %s", action, collection, exc.orig)
            raise ConflictError(f"{collection} {action} conflicts with an existing row") from exc
        except SQLAlchemyError as exc:
            logger.error("Store failure on %s %s", action, collection, exc_info=True)
            raise DependencyError(f"Failed to {action} {collection}", exc) from exc

    async def _get(self, collection: str, row_id: UUID) -> Optional[Base]:
        model = self._model(collection)
        try:
            return await self.db.get(model, row_id)
        except SQLAlchemyError as exc:
            logger.error("Store failure reading %s %s", collection, row_id, exc_info=True)
            raise DependencyError(f"Failed to read {collection}", exc) from exc

    async def query(
        self,
        collection: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        model = self._model(collection)
        stmt = select(model)
        for field, value in (filters or {}).items():
            stmt = stmt.where(getattr(model, field) == value)
        for key in order_by or []:
            column = getattr(model, key.lstrip("-"))
            stmt = stmt.order_by(column.desc() if key.startswith("-") else column.asc())

        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("Store failure querying %s", collection, exc_info=True)
            raise DependencyError(f"Failed to query {collection}", exc) from exc
        return [_to_row(obj) for obj in result.scalars().all()]

    async def get_one(self, collection: str, row_id: UUID) -> Optional[Row]:
        obj = await self._get(collection, row_id)
        return _to_row(obj) if obj is not None else None

    async def insert(self, collection: str, row: Mapping[str, Any]) -> Row:
        model = self._model(collection)
        values = {key: value for key, value in row.items() if key not in ("id", "created_at", "updated_at")}
        obj = model(id=uuid.uuid4(), **values)
        self.db.add(obj)
        await self._flush(collection, "insert")
        await self.db.refresh(obj)
        return _to_row(obj)

    async def update(self, collection: str, row_id: UUID, partial: Mapping[str, Any]) -> Row:
        obj = await self._get(collection, row_id)
        if obj is None:
            raise NotFoundError(collection, row_id)

        for field, value in partial.items():
            setattr(obj, field, value)
        # Wall-clock time; now() would repeat the transaction start for every update
        obj.updated_at = func.clock_timestamp()
        await self._flush(collection, "update")
        await self.db.refresh(obj)
        return _to_row(obj)

    async def delete(self, collection: str, row_id: UUID) -> None:
        obj = await self._get(collection, row_id)
        if obj is None:
            raise NotFoundError(collection, row_id)
        await self.db.delete(obj)
        await self._flush(collection, "delete")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqlAlchemyDataStore"]:
        # SAVEPOINT inside the request transaction; get_db commits at the end
        try:
            async with self.db.begin_nested():
                yield self
        except SQLAlchemyError as exc:
            logger.error("Store transaction failed", exc_info=True)
            raise DependencyError("Store transaction failed", exc) from exc
