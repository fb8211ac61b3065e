"""
Scoped Repository Pattern
Generic repository whose every operation is filtered by the acting user's scope
"""

from datetime import date
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import Select, select, func
from pydantic import BaseModel
import structlog

from timetracker.core.context import ActorContext
from timetracker.core.database import Base
from timetracker.core.exceptions import RecordNotFound, ScopeViolation
from timetracker.core.logging import get_audit_logger
from timetracker.core.scoping import Clause
from timetracker.core.timekeeping import today as app_today

logger = structlog.get_logger()

ModelType = TypeVar("ModelType", bound=Base)


def ensure_actor(actor: Any) -> ActorContext:
    if not isinstance(actor, ActorContext):
        raise TypeError(f"Scoped repository calls require an ActorContext, got {type(actor).__name__}")
    return actor


def as_uuid(value: Union[UUID, str]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class ScopedRepository(Generic[ModelType]):
    """
    Base repository with actor-scoped database operations

    Subclasses describe visibility with `visibility_clause` (None means
    unrestricted) and may extend `base_query` with joins the clause needs.
    Reads outside the actor's scope behave exactly like missing records.
    """

    entity_name = "Record"

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def visibility_clause(self, actor: ActorContext, *, today: date) -> Clause:
        return None

    def base_query(self) -> Select:
        return select(self.model)

    def scoped_query(self, actor: ActorContext, *, today: date) -> Select:
        query = self.base_query()
        clause = self.visibility_clause(actor, today=today)
        if clause is not None:
            query = query.where(clause)
        return query

    def _apply_filters(self, query: Select, filters: Optional[Dict[str, Any]]) -> Select:
        if not filters:
            return query
        for field, value in filters.items():
            if value is None or not hasattr(self.model, field):
                continue
            column = getattr(self.model, field)
            if isinstance(value, list):
                query = query.where(column.in_(value))
            elif isinstance(value, dict) and 'like' in value:
                query = query.where(column.ilike(f"%{value['like']}%"))
            else:
                query = query.where(column == value)
        return query

    def _apply_order(self, query: Select, order_by: Optional[str]) -> Select:
        if order_by:
            descending = order_by.startswith('-')
            field = order_by.lstrip('-')
            if hasattr(self.model, field):
                column = getattr(self.model, field)
                return query.order_by(column.desc() if descending else column)
        if hasattr(self.model, 'created_at'):
            return query.order_by(self.model.created_at.desc())
        return query

    async def get(
        self,
        db: AsyncSession,
        actor: ActorContext,
        id: Union[UUID, str],
        *,
        today: Optional[date] = None,
    ) -> Optional[ModelType]:
        """
        Get a single record by ID, or None when missing or out of scope
        """
        ensure_actor(actor)
        record_id = as_uuid(id)
        if record_id is None:
            return None

        query = self.scoped_query(actor, today=self._today(today)).where(self.model.id == record_id)
        result = await db.execute(query)
        record = result.scalar_one_or_none()

        logger.debug(
            "Record retrieved" if record else "Record not visible",
            model=self.model.__name__,
            id=str(record_id),
            actor_id=str(actor.user_id),
        )
        return record

    async def get_multi(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[ModelType]:
        """Get visible records with pagination and filtering"""
        ensure_actor(actor)
        query = self.scoped_query(actor, today=self._today(today))
        query = self._apply_filters(query, filters)
        query = self._apply_order(query, order_by)
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        records = list(result.scalars().all())

        logger.debug(
            "Multiple records retrieved",
            model=self.model.__name__,
            count=len(records),
            skip=skip,
            limit=limit
        )
        return records

    async def count(
        self,
        db: AsyncSession,
        actor: ActorContext,
        *,
        filters: Optional[Dict[str, Any]] = None,
        today: Optional[date] = None,
    ) -> int:
        """Count visible records"""
        ensure_actor(actor)
        query = self._apply_filters(self.scoped_query(actor, today=self._today(today)), filters)
        result = await db.execute(select(func.count()).select_from(query.subquery()))
        return result.scalar() or 0

    async def get_or_404(
        self,
        db: AsyncSession,
        actor: ActorContext,
        id: Union[UUID, str],
        *,
        today: Optional[date] = None,
    ) -> ModelType:
        record = await self.get(db, actor, id, today=today)
        if record is None:
            raise RecordNotFound(self.entity_name, id)
        return record

    def deny(self, actor: ActorContext, operation: str, record: Any = None) -> ScopeViolation:
        """Audit a scope breach and build the exception to raise"""
        target = getattr(record, "id", record)
        get_audit_logger().warning(
            "authz.scope_violation",
            operation=operation,
            entity=self.entity_name,
            target=None if target is None else str(target),
            **actor.log_context(),
        )
        return ScopeViolation(
            f"{operation} outside actor scope",
            operation=operation,
            entity=self.entity_name,
        )

    async def _save(self, db: AsyncSession, db_obj: ModelType, *, commit: bool = True) -> ModelType:
        db.add(db_obj)
        try:
            if commit:
                await db.commit()
                await db.refresh(db_obj)
            else:
                await db.flush()
        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error saving record", model=self.model.__name__, error=str(e))
            raise
        return db_obj

    async def _insert(
        self,
        db: AsyncSession,
        obj_in: Union[BaseModel, Dict[str, Any]],
        *,
        commit: bool = True,
        **extra: Any,
    ) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        data = {**data, **extra}
        db_obj = self.model(**{k: v for k, v in data.items() if hasattr(self.model, k)})
        db_obj = await self._save(db, db_obj, commit=commit)
        logger.info("Record created", model=self.model.__name__, id=str(db_obj.id))
        return db_obj

    async def _apply_update(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        obj_in: Union[BaseModel, Dict[str, Any]],
        *,
        commit: bool = True,
    ) -> ModelType:
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if field != "id" and hasattr(db_obj, field):
                setattr(db_obj, field, value)

        db_obj = await self._save(db, db_obj, commit=commit)
        logger.info("Record updated", model=self.model.__name__, id=str(db_obj.id))
        return db_obj

    async def _remove(self, db: AsyncSession, db_obj: ModelType, *, commit: bool = True) -> None:
        record_id = db_obj.id
        await db.delete(db_obj)
        try:
            if commit:
                await db.commit()
            else:
                await db.flush()
        except Exception as e:
            if commit:
                await db.rollback()
            logger.error("Error deleting record", model=self.model.__name__, id=str(record_id), error=str(e))
            raise
        logger.info("Record deleted", model=self.model.__name__, id=str(record_id))

    @staticmethod
    def _today(value: Optional[date]) -> date:
        return value if value is not None else app_today()
