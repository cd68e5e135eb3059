"""Command-line front end for the catalog manager.

Every subcommand builds a candidate or query from its arguments, hands it
to :class:`CatalogService` and prints the outcome. Exit status is 0 when
the action succeeded and 1 otherwise.
"""
from __future__ import annotations

import argparse
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError

from catalog.core.config import Settings, get_settings
from catalog.core.db import create_db_engine, create_schema, create_session_factory
from catalog.core.logging import setup_logging
from catalog.schemas.product import ACTIVE_TOKEN, Product, ProductCandidate, format_date, parse_date, status_token
from catalog.services import (
    ActionResult,
    CatalogService,
    CatalogStatistics,
    ConnectivityError,
    ImportSummary,
    InMemoryProductRepository,
    Outcome,
    SearchField,
    SqlProductRepository,
)

logger = logging.getLogger(__name__)


def build_service(settings: Settings | None = None) -> CatalogService:
    """Wire a service to the configured database.

    When the database cannot be opened and ``fallback_to_memory`` is set,
    the service starts on the in-memory demo store instead.

    Raises:
        ConnectivityError: If the database cannot be opened and fallback is disabled
    """
    settings = settings or get_settings()

    try:
        engine = create_db_engine(settings.database_url, echo=settings.database_echo)
        if settings.auto_create_schema:
            create_schema(engine)
    except (SQLAlchemyError, ImportError) as exc:
        if not settings.fallback_to_memory:
            msg = f"Cannot open database: {exc}"
            raise ConnectivityError(msg) from exc
        logger.error("Cannot open database, using in-memory storage: %s", exc)
        service = CatalogService(InMemoryProductRepository(), fallback_to_memory=True)
        service.switch_to_fallback()
        return service

    repository = SqlProductRepository(create_session_factory(engine))
    return CatalogService(repository, fallback_to_memory=settings.fallback_to_memory)


def _date_arg(value: str):
    try:
        return parse_date(value)
    except ValueError as exc:
        msg = f"invalid date '{value}', expected dd/mm/yyyy"
        raise argparse.ArgumentTypeError(msg) from exc


def _decimal_arg(value: str) -> Decimal:
    msg = f"invalid price '{value}'"
    try:
        price = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(msg) from exc
    if not price.is_finite():
        raise argparse.ArgumentTypeError(msg)
    return price


def _add_product_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--id", type=int, help="Product ID (1-9999)")
    parser.add_argument("--description", help="Description (max 30 chars)")
    parser.add_argument("--brand", help="Brand (max 30 chars)")
    parser.add_argument("--content", help="Content, e.g. '500 g' (max 30 chars)")
    parser.add_argument("--category", help="Groceries, Personal Hygiene, Fruits & Vegetables or Wines & Liquors")
    parser.add_argument("--price", type=_decimal_arg, help="Unit price, greater than 0")
    parser.add_argument("--status", default=ACTIVE_TOKEN, help="Active or Inactive (default: Active)")
    parser.add_argument("--made", type=_date_arg, help="Date made, dd/mm/yyyy")
    parser.add_argument("--expires", type=_date_arg, help="Expiration date, dd/mm/yyyy (optional)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalog", description="Manage the product catalog")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the product table if it does not exist")

    _add_product_arguments(subparsers.add_parser("add", help="Add a new product"))
    _add_product_arguments(subparsers.add_parser("update", help="Overwrite an existing product"))

    delete = subparsers.add_parser("delete", help="Delete a product by ID")
    delete.add_argument("id", type=int)

    show = subparsers.add_parser("show", help="Show a single product")
    show.add_argument("id", type=int)

    subparsers.add_parser("list", help="List every product")

    search = subparsers.add_parser("search", help="Search products")
    search.add_argument("query")
    search.add_argument(
        "--field",
        choices=[field.value for field in SearchField],
        default=SearchField.ALL.value,
        help="Restrict the search to one field (default: all)",
    )

    export = subparsers.add_parser("export", help="Export all products to CSV")
    export.add_argument("path")

    import_ = subparsers.add_parser("import", help="Import products from CSV")
    import_.add_argument("path")

    subparsers.add_parser("stats", help="Show catalog statistics")

    return parser


def _candidate_from_args(args: argparse.Namespace) -> ProductCandidate:
    return ProductCandidate(
        id=args.id,
        description=args.description,
        brand=args.brand,
        content=args.content,
        category=args.category,
        price=args.price,
        status=args.status,
        date_made=args.made,
        expiration_date=args.expires,
    )


def format_product(product: Product) -> str:
    return (
        f"{product.id:>4}  {product.description:<30}  {product.brand:<20}  {product.content:<12}  "
        f"{product.category:<19}  {product.price:>9}  {status_token(product.active):<8}  "
        f"{format_date(product.date_made):<10}  {format_date(product.expiration_date)}"
    ).rstrip()


def format_statistics(statistics: CatalogStatistics) -> list[str]:
    lines = [
        f"Total products:    {statistics.total_products}",
        f"Active products:   {statistics.active_products}",
        f"Inactive products: {statistics.inactive_products}",
        f"Total value:       ${statistics.total_value:.2f}",
        f"Average price:     ${statistics.average_price:.2f}",
        f"Max price:         ${statistics.max_price:.2f}",
        f"Min price:         ${statistics.min_price:.2f}",
        f"Categories:        {statistics.category_count}",
        "Top categories:",
    ]
    lines.extend(f"  - {label}: {count}" for label, count in statistics.top_categories)
    lines.append("Top brands:")
    lines.extend(f"  - {label}: {count}" for label, count in statistics.top_brands)
    return lines


def _print_result(result: ActionResult) -> int:
    if result.message:
        print(result.message)
    for error in result.errors:
        print(f"  - {error}")
    if result.product is not None:
        print(format_product(result.product))
    for product in result.products:
        print(format_product(product))
    if result.statistics is not None:
        print("\n".join(format_statistics(result.statistics)))
    return 0 if result.ok else 1


def _print_summary(summary: ImportSummary) -> int:
    print(summary.message)
    for error in summary.errors:
        print(f"  - {error}")
    return 0 if summary.outcome is Outcome.SUCCESS else 1


def _init_db(settings: Settings) -> int:
    try:
        create_schema(create_db_engine(settings.database_url, echo=settings.database_echo))
    except (SQLAlchemyError, ImportError) as exc:
        logger.error("Schema creation failed: %s", exc)
        print(f"Cannot create schema: {exc}")
        return 1
    print("Product table is ready.")
    return 0


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    """Parse arguments, run one action and return the exit status."""
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    setup_logging(settings)

    if args.command == "init-db":
        return _init_db(settings)

    try:
        service = build_service(settings)
    except ConnectivityError as exc:
        print(str(exc))
        return 1

    if service.using_fallback:
        print("Database unavailable; working on in-memory demo data.")

    if args.command == "import":
        return _print_summary(service.import_csv(args.path))

    handlers = {
        "add": lambda: service.add(_candidate_from_args(args)),
        "update": lambda: service.update(_candidate_from_args(args)),
        "delete": lambda: service.delete(args.id),
        "show": lambda: service.consult(args.id),
        "list": service.refresh,
        "search": lambda: service.search(args.query, SearchField(args.field)),
        "export": lambda: service.export_csv(args.path),
        "stats": service.stats,
    }
    return _print_result(handlers[args.command]())


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
