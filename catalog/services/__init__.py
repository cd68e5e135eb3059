"""Services module for business logic."""
from __future__ import annotations

from .catalog_service import ActionResult, CatalogService, ImportSummary, Outcome, SearchField
from .csv_transfer import CsvTransferService, RowOutcome
from .exceptions import CatalogError, ConnectivityError, DuplicateKeyError, ParseError, ValidationError
from .memory_repository import InMemoryProductRepository, demo_products
from .product_repository import ProductRepository, SqlProductRepository
from .statistics import CatalogStatistics, compute_statistics
from .validation import ValidationResult, validate

__all__ = [
    "ActionResult",
    "CatalogService",
    "ImportSummary",
    "Outcome",
    "SearchField",
    "CsvTransferService",
    "RowOutcome",
    "CatalogError",
    "ConnectivityError",
    "DuplicateKeyError",
    "ParseError",
    "ValidationError",
    "InMemoryProductRepository",
    "demo_products",
    "ProductRepository",
    "SqlProductRepository",
    "CatalogStatistics",
    "compute_statistics",
    "ValidationResult",
    "validate",
]
