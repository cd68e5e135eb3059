"""CSV export and import of product records."""
from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from catalog.schemas.product import (
    Product,
    ProductCandidate,
    format_date,
    parse_date,
    status_token,
)

from .exceptions import ParseError

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "ID",
    "Description",
    "Brand",
    "Content",
    "Price",
    "Category",
    "Status",
    "DateMade",
    "ExpirationDate",
]


@dataclass
class RowOutcome:
    """Result of parsing one CSV record."""

    line_number: int
    raw_line: str
    candidate: ProductCandidate | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CsvTransferService:
    """Serializes products to CSV and parses CSV back into candidates.

    Quoting follows RFC 4180: a field containing a comma, a quote or a line
    break is wrapped in quotes with internal quotes doubled. Dates use
    ``dd/mm/yyyy`` and the active flag is written as ``Active``/``Inactive``.
    """

    def export(self, records: Iterable[Product], sink: TextIO) -> int:
        """Write the header and one line per record.

        Args:
            records: Products to serialize
            sink: Text stream opened with ``newline=""``

        Returns:
            Number of records written
        """
        writer = csv.writer(sink, lineterminator="\n")
        writer.writerow(CSV_HEADER)

        written = 0
        for product in records:
            writer.writerow(self._to_row(product))
            written += 1
        return written

    def export_file(self, records: Iterable[Product], path: str | Path) -> tuple[int, Path]:
        """Export to a file, appending a ``.csv`` suffix when missing.

        Returns:
            Tuple of (records written, path actually written)
        """
        path = Path(path)
        if path.suffix.lower() != ".csv":
            path = path.with_name(f"{path.name}.csv")

        with open(path, "w", encoding="utf-8", newline="") as f:
            written = self.export(records, f)

        logger.info("Exported %d products to %s", written, path)
        return written, path

    def read_rows(self, source: Iterable[str]) -> Iterator[RowOutcome]:
        """Lazily parse a CSV stream into one outcome per record.

        The header line is skipped. A record that cannot be parsed yields an
        outcome carrying a :class:`ParseError` and parsing carries on with
        the next record, so one bad line never aborts the stream.

        Args:
            source: Text stream or iterable of lines

        Yields:
            RowOutcome for every non-blank record after the header
        """
        records = self._iter_records(source)
        if next(records, None) is None:
            return

        for line_number, raw in records:
            if not raw.strip():
                continue
            try:
                candidate = self._parse_record(line_number, raw)
            except ParseError as exc:
                logger.warning("Skipping CSV record: %s", exc)
                yield RowOutcome(line_number=line_number, raw_line=raw, error=exc)
            else:
                yield RowOutcome(line_number=line_number, raw_line=raw, candidate=candidate)

    def read_candidates(self, source: Iterable[str]) -> Iterator[ProductCandidate]:
        """Yield only the records that parsed successfully."""
        for row in self.read_rows(source):
            if row.candidate is not None:
                yield row.candidate

    @staticmethod
    def _to_row(product: Product) -> list[str]:
        return [
            str(product.id),
            product.description,
            product.brand,
            product.content,
            str(product.price),
            product.category,
            status_token(product.active),
            format_date(product.date_made),
            format_date(product.expiration_date),
        ]

    @staticmethod
    def _iter_records(source: Iterable[str]) -> Iterator[tuple[int, str]]:
        """Group physical lines into records; a quoted field may span lines."""
        buffer: list[str] = []
        start = 0
        for line_number, line in enumerate(source, start=1):
            if not buffer:
                start = line_number
            buffer.append(line)
            record = "".join(buffer)
            if record.count('"') % 2 == 0:
                buffer.clear()
                yield start, record.rstrip("\r\n")

        if buffer:
            # Unterminated quote, left for the parser to report
            yield start, "".join(buffer).rstrip("\r\n")

    @staticmethod
    def _parse_record(line_number: int, raw: str) -> ProductCandidate:
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as exc:
            # Undecodable input bytes arrive as lone surrogates
            raise ParseError(line_number, "text is not valid UTF-8", raw) from exc

        try:
            fields = next(csv.reader([raw], strict=True))
        except csv.Error as exc:
            raise ParseError(line_number, f"malformed CSV ({exc})", raw) from exc

        if len(fields) != len(CSV_HEADER):
            raise ParseError(
                line_number,
                f"expected {len(CSV_HEADER)} fields, found {len(fields)}",
                raw,
            )

        (
            raw_id,
            description,
            brand,
            content,
            raw_price,
            category,
            status,
            raw_made,
            raw_expires,
        ) = fields

        try:
            product_id = int(raw_id.strip())
        except ValueError as exc:
            raise ParseError(line_number, f"invalid ID '{raw_id}'", raw) from exc

        try:
            price = Decimal(raw_price.strip())
        except InvalidOperation as exc:
            raise ParseError(line_number, f"invalid price '{raw_price}'", raw) from exc
        if not price.is_finite():
            raise ParseError(line_number, f"invalid price '{raw_price}'", raw)

        dates = []
        for value in (raw_made, raw_expires):
            try:
                dates.append(parse_date(value) if value.strip() else None)
            except ValueError as exc:
                raise ParseError(line_number, f"invalid date '{value}', expected dd/mm/yyyy", raw) from exc

        return ProductCandidate(
            id=product_id,
            description=description,
            brand=brand,
            content=content,
            category=category,
            price=price,
            status=status.strip(),
            date_made=dates[0],
            expiration_date=dates[1],
        )
