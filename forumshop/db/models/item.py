"""
Item model and the item_categories join table.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Column, ForeignKey, Numeric, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forumshop.db.base import Base, SoftDeleteMixin

if TYPE_CHECKING:
    from forumshop.db.models.category import Category

item_categories = Table(
    "item_categories",
    Base.metadata,
    Column("category_id", ForeignKey("categories.id"), primary_key=True),
    Column("item_id", ForeignKey("items.id"), primary_key=True, index=True),
)


class Item(SoftDeleteMixin, Base):
    """Purchasable item. Belongs to at least one category at creation time."""

    __tablename__ = "items"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_items_price_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    image: Mapped[str] = mapped_column(String(500), nullable=False)

    categories: Mapped[list["Category"]] = relationship(
        "Category", secondary=item_categories, back_populates="items", order_by="Category.id"
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name={self.name})>"
