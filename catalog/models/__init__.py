"""ORM models exposed for external modules."""
from .base import Base
from .product import ProductRecord

__all__ = [
    "Base",
    "ProductRecord",
]
