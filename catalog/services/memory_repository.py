"""In-memory product store used when no database is reachable."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from catalog.schemas.product import Category, Product

from .exceptions import DuplicateKeyError
from .product_repository import ProductRepository, ensure_valid_id, prepare_for_write
from .validation import is_valid_id

logger = logging.getLogger(__name__)


class InMemoryProductRepository(ProductRepository):
    """Dictionary-backed repository with the same invariants as the SQL one.

    Stored records are copied on the way in and on the way out so callers
    can never mutate the store behind its back.
    """

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[int, Product] = {}
        for product in products:
            self.create(product)

    def create(self, product: Product) -> Product:
        product = prepare_for_write(product)
        if product.id in self._products:
            raise DuplicateKeyError(product.id)
        self._products[product.id] = product.model_copy()
        logger.info("Created product %s in memory", product.id)
        return product

    def update(self, product: Product) -> bool:
        product = prepare_for_write(product)
        if product.id not in self._products:
            return False
        self._products[product.id] = product.model_copy()
        return True

    def delete_by_id(self, product_id: int) -> bool:
        ensure_valid_id(product_id)
        return self._products.pop(product_id, None) is not None

    def find_by_id(self, product_id: int) -> Product | None:
        product = self._products.get(product_id) if is_valid_id(product_id) else None
        return product.model_copy() if product is not None else None

    def find_all(self) -> list[Product]:
        return [self._products[key].model_copy() for key in sorted(self._products)]

    def search_by_description(self, pattern: str) -> list[Product]:
        needle = pattern.lower()
        matches = [p for p in self._products.values() if needle in p.description.lower()]
        return [p.model_copy() for p in sorted(matches, key=lambda p: (p.description, p.id))]

    def count(self) -> int:
        return len(self._products)

    def exists_by_id(self, product_id: int) -> bool:
        return is_valid_id(product_id) and product_id in self._products


def demo_products(today: date | None = None) -> list[Product]:
    """Sample records shown when the application runs without a database."""
    today = today or date.today()
    return [
        Product(
            id=1,
            description="Sample product A",
            brand="Generic",
            content="1 unit",
            category=Category.GROCERIES.value,
            price=Decimal("12.50"),
            active=True,
            date_made=today,
        ),
        Product(
            id=2,
            description="Sample product B",
            brand="BrandZ",
            content="1 unit",
            category=Category.PERSONAL_HYGIENE.value,
            price=Decimal("35.00"),
            active=False,
            date_made=today,
        ),
    ]
