"""Pydantic schemas for catalog products."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MIN_PRODUCT_ID = 1
MAX_PRODUCT_ID = 9999
MAX_TEXT_LENGTH = 30

# Stored as NUMERIC(10, 2)
PRICE_PRECISION = 10
PRICE_SCALE = 2

ACTIVE_TOKEN = "Active"
INACTIVE_TOKEN = "Inactive"

# Rows written by older releases used Checked/Unchecked
_STORED_ACTIVE_TOKENS = {"active", "checked", "true"}

DATE_FORMAT = "%d/%m/%Y"


class Category(str, Enum):
    """Enumerates the categories a product can be filed under."""

    GROCERIES = "Groceries"
    PERSONAL_HYGIENE = "Personal Hygiene"
    FRUITS_VEGETABLES = "Fruits & Vegetables"
    WINES_LIQUORS = "Wines & Liquors"

    @classmethod
    def parse(cls, value: str | None) -> Category | None:
        """Match a label case-insensitively, ignoring surrounding whitespace."""
        if not isinstance(value, str):
            return None
        needle = value.strip().lower()
        for category in cls:
            if category.value.lower() == needle:
                return category
        return None


def status_token(active: bool) -> str:
    """Return the textual status persisted for an active flag."""
    return ACTIVE_TOKEN if active else INACTIVE_TOKEN


def parse_status(value: str | None) -> bool | None:
    """Map an ``Active``/``Inactive`` token to a flag, or None when it is neither."""
    if not isinstance(value, str):
        return None
    token = value.strip().lower()
    if token == ACTIVE_TOKEN.lower():
        return True
    if token == INACTIVE_TOKEN.lower():
        return False
    return None


def status_from_storage(value: str | None) -> bool:
    """Interpret a stored status column, accepting legacy tokens."""
    return isinstance(value, str) and value.strip().lower() in _STORED_ACTIVE_TOKENS


def format_date(value: date | None) -> str:
    return value.strftime(DATE_FORMAT) if value is not None else ""


def parse_date(value: str) -> date:
    """Parse a ``dd/mm/yyyy`` string.

    Raises:
        ValueError: If the text does not match the format
    """
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


class Product(BaseModel):
    """A catalog record as stored by a repository.

    Only the field types are enforced here; the business invariants are
    checked by :func:`catalog.services.validation.validate` so that an
    invalid record is reported rather than rejected at construction time.
    """

    id: int = Field(description="Caller-supplied identifier (1-9999)")
    description: str = Field(description="Short product description")
    brand: str = Field(description="Brand or manufacturer")
    content: str = Field(description="Free-form quantity/size descriptor")
    category: str = Field(description="One of the canonical category labels")
    price: Decimal = Field(description="Unit price, strictly positive")
    active: bool = Field(default=True, description="Whether the product is sellable")
    date_made: date = Field(description="Manufacturing date")
    expiration_date: date | None = Field(default=None, description="Optional expiry, after date_made")

    model_config = ConfigDict(from_attributes=True)

    @property
    def status(self) -> str:
        return status_token(self.active)

    def normalized(self) -> Product:
        """Return a copy with trimmed text and the canonical category label."""
        category = Category.parse(self.category)
        return self.model_copy(
            update={
                "description": self.description.strip(),
                "brand": self.brand.strip(),
                "content": self.content.strip(),
                "category": category.value if category else self.category.strip(),
            }
        )


class ProductCandidate(BaseModel):
    """Unvalidated product input coming from a form, the CLI or a CSV row.

    Every field is optional so that incomplete input can still be
    represented and reported on by the validation engine.
    """

    id: int | None = None
    description: str | None = None
    brand: str | None = None
    content: str | None = None
    category: str | None = None
    price: Decimal | None = None
    status: str | None = ACTIVE_TOKEN
    date_made: date | None = None
    expiration_date: date | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductCandidate:
        return cls(
            id=product.id,
            description=product.description,
            brand=product.brand,
            content=product.content,
            category=product.category,
            price=product.price,
            status=product.status,
            date_made=product.date_made,
            expiration_date=product.expiration_date,
        )

    def to_product(self) -> Product:
        """Build the record for a candidate that passed validation.

        Raises:
            ValueError: If a required field is missing
        """
        active = parse_status(self.status)
        missing = [
            name
            for name, value in (
                ("id", self.id),
                ("description", self.description),
                ("brand", self.brand),
                ("content", self.content),
                ("category", self.category),
                ("price", self.price),
                ("status", active),
                ("date_made", self.date_made),
            )
            if value is None
        ]
        if missing:
            msg = f"Candidate is incomplete: {', '.join(missing)}"
            raise ValueError(msg)

        return Product(
            id=self.id,
            description=self.description,
            brand=self.brand,
            content=self.content,
            category=self.category,
            price=self.price,
            active=active,
            date_made=self.date_made,
            expiration_date=self.expiration_date,
        ).normalized()
