"""Product repository contract and its SQLAlchemy implementation."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from catalog.core.db import session_scope
from catalog.models.product import ProductRecord
from catalog.schemas.product import Product

from .exceptions import ConnectivityError, DuplicateKeyError, ValidationError
from .validation import is_valid_id, validate

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


class ProductRepository(ABC):
    """CRUD, search and count operations over the product records.

    Writes re-validate their input and raise :class:`ValidationError` when it
    is invalid. Absence is reported as ``None`` or ``False``.
    """

    @abstractmethod
    def create(self, product: Product) -> Product:
        """Insert a new product and return the persisted record.

        Raises:
            ValidationError: If the product violates an invariant
            DuplicateKeyError: If a product with the same ID exists
        """

    @abstractmethod
    def update(self, product: Product) -> bool:
        """Overwrite every mutable column of an existing product.

        Returns:
            True if a row was updated, False if the ID was not found
        """

    @abstractmethod
    def delete_by_id(self, product_id: int) -> bool:
        """Delete a product by ID, returning whether a row was removed."""

    @abstractmethod
    def find_by_id(self, product_id: int) -> Product | None:
        """Return the product with this ID, or None."""

    @abstractmethod
    def find_all(self) -> list[Product]:
        """Return every product ordered by ID."""

    @abstractmethod
    def search_by_description(self, pattern: str) -> list[Product]:
        """Return products whose description contains the pattern (case-insensitive)."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored products."""

    @abstractmethod
    def exists_by_id(self, product_id: int) -> bool:
        """Return whether a product with this ID exists; False for invalid IDs."""


def prepare_for_write(product: Product) -> Product:
    """Re-validate a product before it is written and normalise its text.

    Raises:
        ValidationError: If the product violates an invariant
    """
    result = validate(product)
    if not result.is_valid:
        raise ValidationError(result.errors)
    return product.normalized()


def ensure_valid_id(product_id: int) -> None:
    if not is_valid_id(product_id):
        raise ValidationError(["ID must be integer between 1 and 9999."])


class SqlProductRepository(ProductRepository):
    """Handles database operations for products through SQLAlchemy.

    Every call runs in its own session, committed on success and rolled back
    and closed on failure. Driver errors are translated into
    :class:`ConnectivityError`, duplicate inserts into :class:`DuplicateKeyError`.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Factory producing sessions bound to the store
        """
        self._session_factory = session_factory

    @contextmanager
    def _scope(self, action: str) -> Generator[Session, None, None]:
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except DBAPIError as exc:
            logger.error("Database error while trying to %s: %s", action, exc.orig)
            diagnostic = str(exc.orig).strip().splitlines()[0] if str(exc.orig).strip() else type(exc.orig).__name__
            msg = f"Database unavailable while trying to {action}: {diagnostic}"
            raise ConnectivityError(msg) from exc
        except SQLAlchemyError as exc:
            logger.error("Storage error while trying to %s: %s", action, exc)
            msg = f"Storage error while trying to {action}: {exc}"
            raise ConnectivityError(msg) from exc

    def create(self, product: Product) -> Product:
        product = prepare_for_write(product)

        with self._scope("create product") as session:
            if session.get(ProductRecord, product.id) is not None:
                raise DuplicateKeyError(product.id)
            session.add(ProductRecord.from_product(product))
            try:
                session.flush()
            except IntegrityError as exc:
                # Lost a race with another writer on the primary key
                raise DuplicateKeyError(product.id) from exc

        logger.info("Created product %s (%s)", product.id, product.description)
        return product

    def update(self, product: Product) -> bool:
        product = prepare_for_write(product)

        with self._scope("update product") as session:
            record = session.get(ProductRecord, product.id)
            if record is None:
                logger.info("Update skipped, product %s not found", product.id)
                return False
            record.apply(product)

        logger.info("Updated product %s", product.id)
        return True

    def delete_by_id(self, product_id: int) -> bool:
        ensure_valid_id(product_id)

        with self._scope("delete product") as session:
            record = session.get(ProductRecord, product_id)
            if record is None:
                return False
            session.delete(record)

        logger.info("Deleted product %s", product_id)
        return True

    def find_by_id(self, product_id: int) -> Product | None:
        if not is_valid_id(product_id):
            return None

        with self._scope("load product") as session:
            record = session.get(ProductRecord, product_id)
            return Product.model_validate(record) if record is not None else None

    def find_all(self) -> list[Product]:
        with self._scope("load products") as session:
            records = session.query(ProductRecord).order_by(ProductRecord.id).all()
            return [Product.model_validate(record) for record in records]

    def search_by_description(self, pattern: str) -> list[Product]:
        escaped = (
            pattern.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
            .replace("%", f"{LIKE_ESCAPE}%")
            .replace("_", f"{LIKE_ESCAPE}_")
        )

        with self._scope("search products") as session:
            records = (
                session.query(ProductRecord)
                .filter(ProductRecord.description.ilike(f"%{escaped}%", escape=LIKE_ESCAPE))
                .order_by(ProductRecord.description, ProductRecord.id)
                .all()
            )
            return [Product.model_validate(record) for record in records]

    def count(self) -> int:
        with self._scope("count products") as session:
            return session.query(ProductRecord).count()

    def exists_by_id(self, product_id: int) -> bool:
        if not is_valid_id(product_id):
            return False

        with self._scope("check product") as session:
            return session.query(ProductRecord.id).filter(ProductRecord.id == product_id).first() is not None
