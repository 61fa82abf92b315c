"""
User model - a forum identity with a credit balance.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column

from forumshop.db.base import Base


class User(Base):
    """Created lazily the first time a forum user_id is referenced."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # External forum identity; unique so concurrent lazy registration cannot duplicate it
    user_id: Mapped[int] = mapped_column(unique=True, index=True, nullable=False)
    credits: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    edited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, user_id={self.user_id})>"
