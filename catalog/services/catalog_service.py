"""Application service orchestrating catalog actions for the UI layer."""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from catalog.schemas.product import Product, ProductCandidate

from .csv_transfer import CsvTransferService
from .exceptions import ConnectivityError, DuplicateKeyError, ValidationError
from .memory_repository import InMemoryProductRepository, demo_products
from .product_repository import ProductRepository
from .statistics import CatalogStatistics, compute_statistics
from .validation import validate

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "Switching to in-memory storage."


class Outcome(str, Enum):
    """User-facing category of an action result."""

    SUCCESS = "success"
    VALIDATION = "validation"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    CONNECTIVITY = "connectivity"
    FILE_ERROR = "file_error"


class SearchField(str, Enum):
    """Fields a search can be scoped to."""

    ALL = "all"
    DESCRIPTION = "description"
    BRAND = "brand"
    CATEGORY = "category"
    ID = "id"


class ActionResult(BaseModel):
    """Outcome of a single user action."""

    outcome: Outcome
    message: str = ""
    errors: list[str] = Field(default_factory=list)
    product: Product | None = None
    products: list[Product] = Field(default_factory=list)
    statistics: CatalogStatistics | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class ImportSummary(BaseModel):
    """Tally of a CSV import."""

    outcome: Outcome = Outcome.SUCCESS
    message: str = ""
    imported: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)


def matches_query(product: Product, query: str, field: SearchField) -> bool:
    """Case-insensitive containment test; IDs match exactly."""
    needle = query.strip().lower()

    if field is SearchField.ID:
        try:
            return product.id == int(needle)
        except ValueError:
            return False

    if field is SearchField.DESCRIPTION:
        haystacks = [product.description]
    elif field is SearchField.BRAND:
        haystacks = [product.brand]
    elif field is SearchField.CATEGORY:
        haystacks = [product.category]
    else:
        haystacks = [product.description, product.brand, product.category, product.content, str(product.id)]

    return any(needle in (value or "").lower() for value in haystacks)


class CatalogService:
    """Runs UI-triggered actions against a product repository.

    Input is validated before the repository is touched. Repository failures
    are mapped to an :class:`Outcome` so that callers never see storage
    exceptions. After a connectivity failure the service can swap to an
    in-memory store seeded with demo records so the UI keeps working.
    """

    def __init__(
        self,
        repository: ProductRepository,
        *,
        csv_service: CsvTransferService | None = None,
        fallback_to_memory: bool = True,
    ) -> None:
        self._repository = repository
        self._csv = csv_service or CsvTransferService()
        self._fallback_to_memory = fallback_to_memory
        self._using_fallback = False

    @property
    def repository(self) -> ProductRepository:
        return self._repository

    @property
    def using_fallback(self) -> bool:
        return self._using_fallback

    def switch_to_fallback(self) -> None:
        """Replace the repository with a demo-seeded in-memory store."""
        if self._using_fallback:
            return
        logger.warning("Falling back to in-memory product storage")
        self._repository = InMemoryProductRepository(demo_products())
        self._using_fallback = True

    def add(self, candidate: ProductCandidate) -> ActionResult:
        result = validate(candidate)
        if not result.is_valid:
            return ActionResult(outcome=Outcome.VALIDATION, message="Cannot add product", errors=result.errors)

        def operation() -> ActionResult:
            created = self._repository.create(candidate.to_product())
            return ActionResult(outcome=Outcome.SUCCESS, message="Product added successfully!", product=created)

        return self._call("Failed to add product", operation)

    def update(self, candidate: ProductCandidate) -> ActionResult:
        if candidate.id is None:
            return ActionResult(
                outcome=Outcome.VALIDATION,
                message="No product ID present; use Add for new products",
            )

        result = validate(candidate)
        if not result.is_valid:
            return ActionResult(outcome=Outcome.VALIDATION, message="Cannot update product", errors=result.errors)

        def operation() -> ActionResult:
            product = candidate.to_product()
            if not self._repository.update(product):
                return ActionResult(
                    outcome=Outcome.NOT_FOUND,
                    message=f"Update reported no rows changed (product {product.id} not found)",
                )
            return ActionResult(outcome=Outcome.SUCCESS, message="Product updated successfully!", product=product)

        return self._call("Failed to update product", operation)

    def delete(self, product_id: int) -> ActionResult:
        def operation() -> ActionResult:
            if not self._repository.delete_by_id(product_id):
                return ActionResult(
                    outcome=Outcome.NOT_FOUND,
                    message=f"Delete reported no rows changed (product {product_id} not found)",
                )
            return ActionResult(outcome=Outcome.SUCCESS, message="Product deleted successfully!")

        return self._call("Failed to delete product", operation)

    def consult(self, product_id: int) -> ActionResult:
        def operation() -> ActionResult:
            product = self._repository.find_by_id(product_id)
            if product is None:
                return ActionResult(outcome=Outcome.NOT_FOUND, message=f"Product {product_id} not found")
            return ActionResult(outcome=Outcome.SUCCESS, product=product)

        return self._call("Failed to consult product", operation)

    def refresh(self) -> ActionResult:
        def operation() -> ActionResult:
            products = self._repository.find_all()
            return ActionResult(outcome=Outcome.SUCCESS, message=f"{len(products)} product(s)", products=products)

        return self._call("Failed to load products", operation)

    def search(self, query: str, field: SearchField = SearchField.ALL) -> ActionResult:
        """Filter the catalog by a query scoped to one field or all of them.

        A blank query behaves like :meth:`refresh`. Description searches are
        delegated to the repository and come back ordered by description;
        every other scope keeps ID order.
        """
        if not query or not query.strip():
            return self.refresh()

        def operation() -> ActionResult:
            if field is SearchField.DESCRIPTION:
                products = self._repository.search_by_description(query.strip())
            else:
                products = [p for p in self._repository.find_all() if matches_query(p, query, field)]
            return ActionResult(outcome=Outcome.SUCCESS, message=f"{len(products)} product(s) found", products=products)

        return self._call("Failed to search products", operation)

    def stats(self) -> ActionResult:
        def operation() -> ActionResult:
            statistics = compute_statistics(self._repository.find_all())
            return ActionResult(outcome=Outcome.SUCCESS, statistics=statistics)

        return self._call("Failed to load statistics", operation)

    def export_csv(self, path: str | Path) -> ActionResult:
        def operation() -> ActionResult:
            products = self._repository.find_all()
            try:
                written, target = self._csv.export_file(products, path)
            except OSError as exc:
                logger.error("Export to %s failed: %s", path, exc)
                return ActionResult(outcome=Outcome.FILE_ERROR, message=f"Export failed: {exc}")
            return ActionResult(
                outcome=Outcome.SUCCESS,
                message=f"Successfully exported {written} products to: {target}",
            )

        return self._call("Failed to export products", operation)

    def import_csv(self, path: str | Path) -> ImportSummary:
        """Validate and insert every record of a CSV file.

        Each record is handled on its own: parse errors, violations and
        duplicate IDs are counted as failures and the import moves on. A
        connectivity failure ends the import, keeping the counts so far.
        """
        summary = ImportSummary()

        try:
            handle = open(path, "r", encoding="utf-8", errors="surrogateescape", newline="")
        except OSError as exc:
            logger.error("Import from %s failed: %s", path, exc)
            return ImportSummary(outcome=Outcome.FILE_ERROR, message=f"Import failed: {exc}")

        with handle:
            for row in self._csv.read_rows(handle):
                if row.candidate is None:
                    self._record_failure(summary, str(row.error))
                    continue

                result = validate(row.candidate)
                if not result.is_valid:
                    self._record_failure(summary, f"Line {row.line_number}: {'; '.join(result.errors)}")
                    continue

                try:
                    self._repository.create(row.candidate.to_product())
                except (DuplicateKeyError, ValidationError) as exc:
                    self._record_failure(summary, f"Line {row.line_number}: {exc}")
                    continue
                except ConnectivityError as exc:
                    self._record_failure(summary, f"Line {row.line_number}: {exc}")
                    failure = self._connectivity_failure("Import interrupted", exc)
                    summary.outcome = failure.outcome
                    summary.message = f"{failure.message} Imported: {summary.imported}, failed: {summary.failed}"
                    return summary

                summary.imported += 1

        summary.message = f"Import completed! Successfully imported: {summary.imported}, failed: {summary.failed}"
        logger.info("Imported %d products from %s (%d failed)", summary.imported, path, summary.failed)
        return summary

    @staticmethod
    def _record_failure(summary: ImportSummary, message: str) -> None:
        logger.warning("Import row rejected: %s", message)
        summary.failed += 1
        summary.errors.append(message)

    def _call(self, title: str, operation: Callable[[], ActionResult]) -> ActionResult:
        try:
            return operation()
        except ValidationError as exc:
            return ActionResult(outcome=Outcome.VALIDATION, message=title, errors=exc.errors)
        except DuplicateKeyError as exc:
            logger.warning("Duplicate product id %s", exc.product_id)
            return ActionResult(
                outcome=Outcome.DUPLICATE,
                message=f"Product with ID {exc.product_id} already exists. Please use a different ID.",
            )
        except ConnectivityError as exc:
            return self._connectivity_failure(title, exc)

    def _connectivity_failure(self, title: str, exc: ConnectivityError) -> ActionResult:
        logger.error("%s: %s", title, exc)
        message = f"{title}: {exc}"
        if self._fallback_to_memory and not self._using_fallback:
            self.switch_to_fallback()
            message = f"{message} {FALLBACK_NOTICE}"
        return ActionResult(outcome=Outcome.CONNECTIVITY, message=message)
