# catalog_api/models.py
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class Transaction(Base):
    """One product transaction from the seed dataset."""

    __tablename__ = "transactions"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Identifier from the source dataset, not the storage key
    external_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    image: Mapped[Optional[str]] = mapped_column(Text)
    sold: Mapped[bool] = mapped_column(Boolean, nullable=False)
    # Naive UTC instant
    date_of_sale: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<Transaction id={self.external_id} title={self.title!r}>"
