"""Catalog domain exceptions.

Raised by repositories when a write is rejected or the store fails. The
application service catches these and turns them into user-facing
outcomes. A missing row is reported as ``None``/``False``, never raised.
"""
from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog errors."""


class ValidationError(CatalogError):
    """One or more product invariants are violated."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class DuplicateKeyError(CatalogError):
    """A product with the same ID already exists."""

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} already exists")


class ConnectivityError(CatalogError):
    """The record store is unreachable or misconfigured."""


class ParseError(CatalogError):
    """A single CSV record could not be converted into a candidate."""

    def __init__(self, line_number: int, reason: str, raw_line: str = "") -> None:
        self.line_number = line_number
        self.reason = reason
        self.raw_line = raw_line
        super().__init__(f"Line {line_number}: {reason}")
