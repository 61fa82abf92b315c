"""
Audit-aware mutation engine.

Every write to a catalog or user row goes through here: open a transaction,
load and guard the current row, snapshot it, apply the change, read the row
back, append an audit row with both snapshots, commit. Any failure rolls the
whole unit back and re-raises the original exception.

Entity types are described declaratively by EntitySchema, so categories,
items and users share one implementation.
"""

import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forumshop.db.models.audit import CategoryAudit, ItemAudit, UserAudit
from forumshop.db.models.category import Category
from forumshop.db.models.item import Item, item_categories
from forumshop.db.models.user import User
from forumshop.errors import AlreadyDeleted, CannotModifyDeleted, NotFound, VerificationFailed

logger = logging.getLogger(__name__)

RelatedLoader = Callable[[AsyncSession, int], Awaitable[dict[str, Any]]]


class AuditAction(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def dump_snapshot(values: Mapping[str, Any] | None) -> str | None:
    if values is None:
        return None
    return json.dumps(values, default=to_jsonable, sort_keys=True)


@dataclass(frozen=True)
class EntitySchema:
    """What the engine needs to know about one audited table."""

    label: str
    model: type
    audit_model: type
    audit_key: str
    fields: tuple[str, ...]
    soft_delete: bool = True
    related: RelatedLoader | None = field(default=None, compare=False)

    async def capture(self, session: AsyncSession, entity: Any) -> dict[str, Any]:
        values = {name: to_jsonable(getattr(entity, name)) for name in self.fields}
        if self.related is not None:
            values.update(await self.related(session, entity.id))
        return values


async def _item_category_ids(session: AsyncSession, item_id: int) -> dict[str, Any]:
    result = await session.execute(
        select(item_categories.c.category_id)
        .where(item_categories.c.item_id == item_id)
        .order_by(item_categories.c.category_id)
    )
    return {"categories": list(result.scalars().all())}


_CATALOG_FIELDS = ("id", "name", "image", "is_active", "is_deleted", "edited_at", "created_by", "edited_by")

CATEGORY = EntitySchema(
    label="Category",
    model=Category,
    audit_model=CategoryAudit,
    audit_key="category_id",
    fields=_CATALOG_FIELDS,
)

ITEM = EntitySchema(
    label="Item",
    model=Item,
    audit_model=ItemAudit,
    audit_key="item_id",
    fields=_CATALOG_FIELDS + ("description", "price"),
    related=_item_category_ids,
)

USER = EntitySchema(
    label="User",
    model=User,
    audit_model=UserAudit,
    audit_key="user_id",
    fields=("id", "user_id", "credits"),
    soft_delete=False,
)

Change = Callable[[Any], Awaitable[None]]


class MutationEngine:
    """Transaction-scoped read-modify-audit-write over one request session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on success; on any exception roll back and re-raise it unchanged."""
        try:
            yield self.session
            await self.session.commit()
        except Exception:
            await self._rollback()
            raise

    async def _rollback(self) -> None:
        try:
            await self.session.rollback()
        except Exception:
            # Caller still gets the exception that caused the rollback
            logger.exception("Rollback failed")

    async def create(
        self,
        schema: EntitySchema,
        values: Mapping[str, Any],
        *,
        actor_id: int | None,
        after_insert: Change | None = None,
    ) -> Any:
        async with self.transaction():
            entity = await self.insert(schema, values, actor_id=actor_id, after_insert=after_insert)
        return entity

    async def insert(
        self,
        schema: EntitySchema,
        values: Mapping[str, Any],
        *,
        actor_id: int | None,
        after_insert: Change | None = None,
    ) -> Any:
        """INSERT plus audit inside the caller's transaction."""
        entity = schema.model(**values)
        self.session.add(entity)
        await self.session.flush()
        if after_insert is not None:
            await after_insert(entity)
            await self.session.flush()
        entity = await self._reload(schema, entity.id, AuditAction.INSERT)
        new_values = await schema.capture(self.session, entity)
        await self.record(schema, entity.id, AuditAction.INSERT, None, new_values, actor_id=actor_id)
        return entity

    async def mutate(
        self,
        schema: EntitySchema,
        entity_id: int,
        change: Change,
        *,
        actor_id: int | None,
        action: AuditAction = AuditAction.UPDATE,
    ) -> Any:
        """Load, guard, snapshot, change, verify, audit, commit."""
        async with self.transaction():
            entity = await self.load(schema, entity_id, action)
            old_values = await schema.capture(self.session, entity)
            entity = await self.apply(
                schema, entity, change, actor_id=actor_id, action=action, old_values=old_values
            )
        return entity

    async def apply(
        self,
        schema: EntitySchema,
        entity: Any,
        change: Change,
        *,
        actor_id: int | None,
        action: AuditAction,
        old_values: dict[str, Any] | None = None,
    ) -> Any:
        """Change one already-loaded row and audit it inside the caller's transaction."""
        if old_values is None:
            old_values = await schema.capture(self.session, entity)
        entity_id = entity.id
        await change(entity)
        await self.session.flush()
        entity = await self._reload(schema, entity_id, action)
        new_values = await schema.capture(self.session, entity)
        await self.record(schema, entity_id, action, old_values, new_values, actor_id=actor_id)
        return entity

    async def record(
        self,
        schema: EntitySchema,
        entity_id: int,
        action: AuditAction,
        old_values: Mapping[str, Any] | None,
        new_values: Mapping[str, Any] | None,
        *,
        actor_id: int | None,
    ) -> None:
        audit = schema.audit_model(
            **{schema.audit_key: entity_id},
            actor_id=actor_id,
            action_type=action.value,
            old_values=dump_snapshot(old_values),
            new_values=dump_snapshot(new_values),
        )
        self.session.add(audit)
        await self.session.flush()

    async def load(
        self, schema: EntitySchema, entity_id: int, action: AuditAction = AuditAction.UPDATE
    ) -> Any:
        """Lock the current row and refuse to touch a soft-deleted one."""
        result = await self.session.execute(
            select(schema.model)
            .where(schema.model.id == entity_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise NotFound(f"{schema.label} not found")
        self._guard(schema, entity, action)
        return entity

    async def _reload(self, schema: EntitySchema, entity_id: int, action: AuditAction) -> Any:
        result = await self.session.execute(
            select(schema.model)
            .where(schema.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        entity = result.scalar_one_or_none()
        if entity is None:
            raise VerificationFailed(f"Failed to verify {schema.label.lower()} {action.value.lower()}")
        return entity

    @staticmethod
    def _guard(schema: EntitySchema, entity: Any, action: AuditAction) -> None:
        if not schema.soft_delete or not entity.is_deleted:
            return
        if action is AuditAction.DELETE:
            raise AlreadyDeleted(f"{schema.label} is already deleted")
        raise CannotModifyDeleted(f"Cannot update a deleted {schema.label.lower()}")


def soft_delete(actor_id: int) -> Change:
    async def change(entity: Any) -> None:
        entity.is_active = False
        entity.is_deleted = True
        entity.edited_by = actor_id

    return change
