"""Initial database schema with the product table."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("description", sa.String(length=30), nullable=False),
        sa.Column("brand", sa.String(length=30), nullable=False),
        sa.Column("content", sa.String(length=30), nullable=False),
        sa.Column("category", sa.String(length=30), nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("status", sa.String(length=15), nullable=False),
        sa.Column("dateMade", sa.Date(), nullable=False),
        sa.Column("expirationDate", sa.Date(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # Description lookups back the search view
    op.create_index("ix_product_description", "product", ["description"])


def downgrade() -> None:
    op.drop_index("ix_product_description", table_name="product")
    op.drop_table("product")
