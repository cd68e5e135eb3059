"""Summary statistics over the product catalog."""
from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from pydantic import BaseModel, Field

from catalog.schemas.product import Product

TOP_N = 5
CENT = Decimal("0.01")


class CatalogStatistics(BaseModel):
    """Aggregates shown on the statistics view."""

    total_products: int = Field(ge=0)
    active_products: int = Field(ge=0)
    inactive_products: int = Field(ge=0)
    total_value: Decimal = Field(description="Sum of all prices")
    average_price: Decimal
    min_price: Decimal
    max_price: Decimal
    category_count: int = Field(ge=0, description="Number of distinct categories")
    top_categories: list[tuple[str, int]] = Field(default_factory=list)
    top_brands: list[tuple[str, int]] = Field(default_factory=list)


def _top(counter: Counter[str], limit: int) -> list[tuple[str, int]]:
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))[:limit]


def compute_statistics(products: Sequence[Product], *, top: int = TOP_N) -> CatalogStatistics:
    """Aggregate counts, price figures and frequency tables.

    Price figures are zero for an empty catalog. Frequency tables list at
    most ``top`` entries, most frequent first, ties broken alphabetically.
    """
    total = len(products)
    active = sum(1 for p in products if p.active)
    prices = [p.price for p in products]
    total_value = sum(prices, Decimal("0"))

    categories = Counter(p.category for p in products)
    brands = Counter(p.brand for p in products)

    return CatalogStatistics(
        total_products=total,
        active_products=active,
        inactive_products=total - active,
        total_value=total_value,
        average_price=(total_value / total).quantize(CENT, rounding=ROUND_HALF_UP) if total else Decimal("0"),
        min_price=min(prices, default=Decimal("0")),
        max_price=max(prices, default=Decimal("0")),
        category_count=len(categories),
        top_categories=_top(categories, top),
        top_brands=_top(brands, top),
    )
