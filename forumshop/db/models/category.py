"""
Category model - soft-deletable catalog grouping, many-to-many with items.
"""

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forumshop.db.base import Base, SoftDeleteMixin

if TYPE_CHECKING:
    from forumshop.db.models.item import Item


class Category(SoftDeleteMixin, Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    image: Mapped[str] = mapped_column(String(500), nullable=False)

    # Loaded explicitly (selectinload with soft-delete criteria), never lazily
    items: Mapped[list["Item"]] = relationship(
        "Item", secondary="item_categories", back_populates="categories", order_by="Item.id"
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"
