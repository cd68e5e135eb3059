"""Tests for the product repositories."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from catalog.core.db import session_scope
from catalog.models import ProductRecord
from catalog.services import (
    ConnectivityError,
    DuplicateKeyError,
    InMemoryProductRepository,
    SqlProductRepository,
    ValidationError,
)


class TestProductRepositoryContract:
    """Behaviour shared by the SQL and in-memory repositories."""

    def test_create_find_duplicate_delete_lifecycle(self, repository, product_factory) -> None:
        """Test the full lifecycle of a single record."""
        product = product_factory(id=100, price=Decimal("12.50"), category="Groceries")

        created = repository.create(product)

        assert created == product
        assert repository.find_by_id(100) == product

        with pytest.raises(DuplicateKeyError) as exc_info:
            repository.create(product)
        assert exc_info.value.product_id == 100

        assert repository.delete_by_id(100) is True
        assert repository.exists_by_id(100) is False
        assert repository.find_by_id(100) is None

    def test_create_rejects_invalid_product(self, repository, product_factory) -> None:
        """Test that writes re-validate and never persist invalid input."""
        with pytest.raises(ValidationError) as exc_info:
            repository.create(product_factory(price=Decimal("0"), category="Toys"))

        assert exc_info.value.errors == [
            "Category must be one of the allowed categories.",
            "Price must be greater than 0.",
        ]
        assert repository.count() == 0

    def test_create_rejects_price_beyond_cents(self, repository, product_factory) -> None:
        """Test that a price the store would round is refused, not truncated."""
        with pytest.raises(ValidationError) as exc_info:
            repository.create(product_factory(price=Decimal("0.001")))

        assert exc_info.value.errors == ["Price must have at most 2 decimals and 8 integer digits."]
        assert repository.exists_by_id(100) is False

    def test_stored_price_matches_created_price(self, repository, product_factory) -> None:
        """Test that a cent-precise price is read back unchanged."""
        created = repository.create(product_factory(price=Decimal("99999999.99")))

        assert repository.find_by_id(100).price == created.price

    def test_create_normalises_text_and_category(self, repository, product_factory) -> None:
        """Test that text is trimmed and the category label made canonical."""
        repository.create(product_factory(description="  Chocolate Bar ", category="personal hygiene"))

        stored = repository.find_by_id(100)

        assert stored.description == "Chocolate Bar"
        assert stored.category == "Personal Hygiene"

    def test_update_overwrites_every_column(self, repository, product_factory) -> None:
        """Test that update replaces all mutable fields."""
        repository.create(product_factory())
        changed = product_factory(
            description="Dark Chocolate",
            brand="Other",
            content="200 g",
            category="Wines & Liquors",
            price=Decimal("20.00"),
            active=False,
            expiration_date=None,
        )

        assert repository.update(changed) is True
        assert repository.find_by_id(100) == changed

    def test_update_missing_id_reports_no_row(self, repository, product_factory) -> None:
        """Test that updating an unknown ID returns False and creates nothing."""
        assert repository.update(product_factory(id=4242)) is False
        assert repository.count() == 0
        assert repository.exists_by_id(4242) is False

    def test_delete_missing_id_returns_false(self, repository) -> None:
        """Test that deleting an unknown ID is not an error."""
        assert repository.delete_by_id(77) is False

    def test_delete_invalid_id_raises(self, repository) -> None:
        """Test that delete requires a syntactically valid ID."""
        with pytest.raises(ValidationError):
            repository.delete_by_id(0)

    @pytest.mark.parametrize("product_id", [0, -1, 10000])
    def test_lookups_with_invalid_id_report_absence(self, repository, product_id: int) -> None:
        """Test that lookups treat invalid IDs as not found."""
        assert repository.find_by_id(product_id) is None
        assert repository.exists_by_id(product_id) is False

    def test_search_by_description_is_case_insensitive(self, repository, product_factory) -> None:
        """Test that 'choc' only matches the chocolate record."""
        repository.create(product_factory(id=501, description="Chocolate Bar"))
        repository.create(product_factory(id=502, description="Vanilla Ice Cream"))

        results = repository.search_by_description("choc")

        assert [p.id for p in results] == [501]

    def test_search_by_description_orders_by_description(self, repository, product_factory) -> None:
        """Test that search results are ordered by description."""
        repository.create(product_factory(id=1, description="Milk chocolate"))
        repository.create(product_factory(id=2, description="Chocolate Bar"))
        repository.create(product_factory(id=3, description="Dark chocolate"))

        results = repository.search_by_description("CHOCOLATE")

        assert [p.description for p in results] == ["Chocolate Bar", "Dark chocolate", "Milk chocolate"]

    def test_search_treats_wildcards_literally(self, repository, product_factory) -> None:
        """Test that % and _ in the pattern are matched as plain characters."""
        repository.create(product_factory(id=1, description="100% Juice"))
        repository.create(product_factory(id=2, description="1000 Juice"))
        repository.create(product_factory(id=3, description="Snack_Pack"))

        assert [p.id for p in repository.search_by_description("0%")] == [1]
        assert [p.id for p in repository.search_by_description("k_P")] == [3]

    def test_find_all_is_ordered_and_idempotent(self, repository, product_factory) -> None:
        """Test that find_all returns the same ID-ordered list every time."""
        for product_id in (30, 10, 20):
            repository.create(product_factory(id=product_id))

        first = repository.find_all()
        second = repository.find_all()

        assert [p.id for p in first] == [10, 20, 30]
        assert first == second

    def test_count_and_exists(self, repository, product_factory) -> None:
        """Test record counting and existence checks."""
        assert repository.count() == 0

        repository.create(product_factory(id=5))
        repository.create(product_factory(id=6))

        assert repository.count() == 2
        assert repository.exists_by_id(5) is True
        assert repository.exists_by_id(7) is False

    def test_returned_records_are_detached_copies(self, repository, product_factory) -> None:
        """Test that mutating a returned record does not change the store."""
        repository.create(product_factory())

        found = repository.find_by_id(100)
        found.description = "Tampered"

        assert repository.find_by_id(100).description == "Chocolate Bar"


class TestSqlProductRepository:
    """SQL-specific behaviour."""

    def test_null_expiration_round_trips(self, sql_repository, product_factory) -> None:
        """Test that an empty expiration date is stored as NULL."""
        sql_repository.create(product_factory(expiration_date=None))

        assert sql_repository.find_by_id(100).expiration_date is None

    def test_status_is_stored_as_token(self, sql_repository, session_factory, product_factory) -> None:
        """Test that the active flag is persisted as Active/Inactive."""
        sql_repository.create(product_factory(id=1, active=True))
        sql_repository.create(product_factory(id=2, active=False))

        with session_scope(session_factory) as session:
            statuses = {record.id: record.status for record in session.query(ProductRecord)}

        assert statuses == {1: "Active", 2: "Inactive"}

    @pytest.mark.parametrize(("stored", "expected"), [("Checked", True), ("Unchecked", False), ("active", True)])
    def test_reads_legacy_status_tokens(self, sql_repository, session_factory, stored: str, expected: bool) -> None:
        """Test that rows written with older status tokens are still readable."""
        with session_scope(session_factory) as session:
            session.add(
                ProductRecord(
                    id=9,
                    description="Legacy",
                    brand="Old",
                    content="1 unit",
                    category="Groceries",
                    price=Decimal("1.00"),
                    status=stored,
                    date_made=date(2020, 1, 1),
                    expiration_date=None,
                )
            )

        assert sql_repository.find_by_id(9).active is expected

    def test_unreachable_store_raises_connectivity_error(self, unreachable_session_factory, product_factory) -> None:
        """Test that driver failures surface as ConnectivityError."""
        repository = SqlProductRepository(unreachable_session_factory)

        with pytest.raises(ConnectivityError, match="Database unavailable while trying to create product"):
            repository.create(product_factory())

        with pytest.raises(ConnectivityError):
            repository.find_all()

    def test_validation_precedes_connectivity(self, unreachable_session_factory, product_factory) -> None:
        """Test that invalid input is reported without touching the store."""
        repository = SqlProductRepository(unreachable_session_factory)

        with pytest.raises(ValidationError):
            repository.create(product_factory(id=0))


class TestInMemoryProductRepository:
    """In-memory specific behaviour."""

    def test_seeded_with_initial_products(self, product_factory) -> None:
        """Test that constructor records are validated and stored."""
        repository = InMemoryProductRepository([product_factory(id=1), product_factory(id=2)])

        assert [p.id for p in repository.find_all()] == [1, 2]

    def test_seeding_with_duplicates_fails(self, product_factory) -> None:
        """Test that the seed list obeys the duplicate-key rule."""
        with pytest.raises(DuplicateKeyError):
            InMemoryProductRepository([product_factory(id=1), product_factory(id=1)])
