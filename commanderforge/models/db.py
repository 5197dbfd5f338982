"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserCollectionDB(Base):
    """
    A user's card collection stored in the database.

    Each user has one collection containing their owned cards.
    """

    __tablename__ = "user_collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Ordered by insertion so generation tie-breaks follow import order
    cards: Mapped[list["CardOwnershipDB"]] = relationship(
        back_populates="collection",
        cascade="all, delete-orphan",
        order_by="CardOwnershipDB.id",
    )

    def __repr__(self) -> str:
        return f"<UserCollectionDB(id={self.id}, user_id={self.user_id})>"


class CardOwnershipDB(Base):
    """
    Individual card ownership record.

    Tracks how many copies of a card (optionally a specific printing) a
    user owns.
    """

    __tablename__ = "card_ownership"
    __table_args__ = (
        UniqueConstraint("collection_id", "card_name", "set_code", name="uq_collection_card_set"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_collections.id", ondelete="CASCADE"), index=True
    )
    card_name: Mapped[str] = mapped_column(String(255), index=True)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)

    collection: Mapped["UserCollectionDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CardOwnershipDB(card={self.card_name}, set={self.set_code}, qty={self.quantity})>"
