"""
Inventory model - one row per (user, item); absence means zero quantity.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from forumshop.db.base import Base


class Inventory(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_inventory_user_item"),
        CheckConstraint("total_quantity >= 0", name="ck_inventory_total_non_negative"),
        CheckConstraint(
            "quantity_in_bag >= 0 AND quantity_in_bag <= total_quantity",
            name="ck_inventory_bag_within_total",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False)
    total_quantity: Mapped[int] = mapped_column(nullable=False, default=0)
    quantity_in_bag: Mapped[int] = mapped_column(nullable=False, default=0)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return (
            f"<Inventory(user_id={self.user_id}, item_id={self.item_id}, "
            f"total={self.total_quantity}, in_bag={self.quantity_in_bag})>"
        )
