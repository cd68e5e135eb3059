"""Field and record-level validation for catalog products."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from catalog.schemas.product import (
    MAX_PRODUCT_ID,
    MAX_TEXT_LENGTH,
    MIN_PRODUCT_ID,
    PRICE_PRECISION,
    PRICE_SCALE,
    Category,
    Product,
    ProductCandidate,
    parse_status,
)

PRICE_STEP = Decimal(1).scaleb(-PRICE_SCALE)
PRICE_LIMIT = Decimal(10) ** (PRICE_PRECISION - PRICE_SCALE)


@dataclass
class ValidationResult:
    """Ordered list of violations found for a candidate."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_valid_id(value: Any) -> bool:
    if not isinstance(value, int) or isinstance(value, bool):
        return False
    return MIN_PRODUCT_ID <= value <= MAX_PRODUCT_ID


def is_valid_text(value: Any) -> bool:
    """Non-empty after trimming and at most 30 characters."""
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return 0 < len(stripped) <= MAX_TEXT_LENGTH


def is_valid_category(value: Any) -> bool:
    return Category.parse(value) is not None


def _as_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return price if price.is_finite() else None


def is_valid_price(value: Any) -> bool:
    price = _as_decimal(value)
    return price is not None and price > 0


def fits_price_column(value: Any) -> bool:
    """At most two decimals and small enough for NUMERIC(10, 2).

    Values that are not numbers at all are left to :func:`is_valid_price`.
    """
    price = _as_decimal(value)
    if price is None:
        return True
    if abs(price) >= PRICE_LIMIT:
        return False
    return price == price.quantize(PRICE_STEP)


def is_valid_status(value: Any) -> bool:
    return parse_status(value) is not None


def are_dates_valid(date_made: date | None, expiration_date: date | None) -> bool:
    if date_made is None:
        return False
    if expiration_date is None:
        return True
    return date_made < expiration_date


Rule = tuple[Callable[[ProductCandidate], bool], str]

RULES: list[Rule] = [
    (lambda c: is_valid_id(c.id), "ID must be integer between 1 and 9999."),
    (lambda c: is_valid_text(c.description), "Description required; max 30 chars."),
    (lambda c: is_valid_text(c.brand), "Brand required; max 30 chars."),
    (lambda c: is_valid_text(c.content), "Content required; max 30 chars."),
    (lambda c: is_valid_category(c.category), "Category must be one of the allowed categories."),
    (lambda c: is_valid_price(c.price), "Price must be greater than 0."),
    (lambda c: fits_price_column(c.price), "Price must have at most 2 decimals and 8 integer digits."),
    (lambda c: is_valid_status(c.status), "Status must be 'Active' or 'Inactive'."),
    (
        lambda c: are_dates_valid(c.date_made, c.expiration_date),
        "dateMade must be before expirationDate (or expirationDate empty).",
    ),
]


def validate(candidate: ProductCandidate | Product) -> ValidationResult:
    """Evaluate every rule against a candidate and collect the violations.

    Rules are independent: a failing rule never stops the remaining ones,
    so the result lists every problem with the input in rule order.

    Args:
        candidate: Raw input or an existing record to re-check

    Returns:
        ValidationResult, valid when no rule failed
    """
    if isinstance(candidate, Product):
        candidate = ProductCandidate.from_product(candidate)

    return ValidationResult(errors=[message for check, message in RULES if not check(candidate)])
