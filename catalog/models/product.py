"""Product model definition."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.schemas.product import PRICE_PRECISION, PRICE_SCALE, status_from_storage, status_token

from .base import Base

if TYPE_CHECKING:
    from catalog.schemas.product import Product


class ProductRecord(Base):
    """Persisted row of the ``product`` table."""

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    description: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    brand: Mapped[str] = mapped_column(String(30), nullable=False)
    content: Mapped[str] = mapped_column(String(30), nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False)
    status: Mapped[str] = mapped_column(String(15), nullable=False)
    date_made: Mapped[date] = mapped_column("dateMade", Date, nullable=False)
    expiration_date: Mapped[date | None] = mapped_column("expirationDate", Date, nullable=True)

    @property
    def active(self) -> bool:
        return status_from_storage(self.status)

    @classmethod
    def from_product(cls, product: Product) -> ProductRecord:
        record = cls(id=product.id)
        record.apply(product)
        return record

    def apply(self, product: Product) -> None:
        """Copy every mutable column from a validated product."""
        self.description = product.description
        self.brand = product.brand
        self.content = product.content
        self.category = product.category
        self.price = product.price
        self.status = status_token(product.active)
        self.date_made = product.date_made
        self.expiration_date = product.expiration_date
