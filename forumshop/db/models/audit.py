"""
Audit trail - append-only rows holding JSON snapshots of each mutation.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from forumshop.db.base import Base


class AuditMixin:
    """actor_id is the forum user who asked for the change; NULL for system changes."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    actor_id: Mapped[int | None] = mapped_column(nullable=True)
    action_type: Mapped[str] = mapped_column(String(10), nullable=False)
    old_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_values: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class CategoryAudit(AuditMixin, Base):
    __tablename__ = "categories_audit"

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False, index=True)


class ItemAudit(AuditMixin, Base):
    __tablename__ = "items_audit"

    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)


class UserAudit(AuditMixin, Base):
    __tablename__ = "users_audit"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)


class PurchaseAudit(Base):
    """One summary row per purchase, items serialized as JSON."""

    __tablename__ = "purchases_audit"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_transactions.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    credits_before: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    credits_after: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_credits_spent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    items_purchased: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
