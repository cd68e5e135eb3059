"""Public schema exports."""

from .product import (
    ACTIVE_TOKEN,
    INACTIVE_TOKEN,
    Category,
    Product,
    ProductCandidate,
    format_date,
    parse_date,
    parse_status,
    status_token,
)

__all__ = [
    "ACTIVE_TOKEN",
    "INACTIVE_TOKEN",
    "Category",
    "Product",
    "ProductCandidate",
    "format_date",
    "parse_date",
    "parse_status",
    "status_token",
]
