"""Bank statement parsing (OFX and CSV) into transaction batches."""

from __future__ import annotations

import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from ..dates import to_date
from ..exceptions import InvalidDateError, StatementParseError
from ..models.transaction import Transaction, TransactionType

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description"

# Known bank exports, matched by case-insensitive header substrings.
CSV_FORMATS: dict[str, tuple[str, ...]] = {
    "nubank": ("date", "category", "title", "amount"),
    "itau": ("data", "lancamento", "valor"),
    "bradesco": ("data", "historico", "valor"),
}

# (date, description, amount, category) header keys per known format
_FORMAT_COLUMNS: dict[str, tuple[str, str, str, Optional[str]]] = {
    "nubank": ("date", "title", "amount", "category"),
    "itau": ("data", "lancamento", "valor", None),
    "bradesco": ("data", "historico", "valor", None),
}


@dataclass(slots=True)
class ColumnMapping:
    """Maps transaction fields to CSV headers for generic exports."""

    date: str
    description: str
    amount: str
    category: str | None = None


@dataclass(slots=True)
class StatementParseResult:
    """Outcome of parsing one statement file."""

    source: str
    transactions: list[Transaction] = field(default_factory=list)
    format: str | None = None
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)
    requires_mapping: bool = False
    file_name: str | None = None

    @property
    def total(self) -> int:
        return len(self.rows) if self.requires_mapping else len(self.transactions)


def detect_file_type(content: str) -> str:
    """Return ``"OFX"``, ``"CSV"`` or ``"UNKNOWN"`` by sniffing the content."""

    trimmed = content.strip()
    if (
        trimmed.startswith("<?xml")
        or trimmed.startswith("OFXHEADER:")
        or "<OFX>" in trimmed.upper()
    ):
        return "OFX"
    first_lines = "\n".join(trimmed.splitlines()[:3])
    if "," in first_lines or ";" in first_lines:
        return "CSV"
    return "UNKNOWN"


def parse_amount(value: Any) -> float:
    """Parse ``1.234,56`` (Brazilian) or ``1,234.56`` (US) style amounts.

    Currency symbols and spaces are ignored; unparseable values give 0.0.
    """

    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    cleaned = re.sub(r"[^\d,.\-+]", "", str(value))
    if not cleaned:
        return 0.0
    if cleaned.find(".") < cleaned.rfind(","):
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    else:
        cleaned = cleaned.replace(",", "")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


_DATE_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(\d{2})/(\d{2})/(\d{4})"), "dmy"),
    (re.compile(r"(\d{2})-(\d{2})-(\d{4})"), "dmy"),
    (re.compile(r"(\d{4})-(\d{2})-(\d{2})"), "ymd"),
    (re.compile(r"(\d{2})/(\d{2})/(\d{2})(?!\d)"), "dmy2"),
    (re.compile(r"^(\d{4})(\d{2})(\d{2})"), "ymd"),
)


def parse_date(value: Any) -> Optional[date]:
    """Parse the date layouts bank exports use; ``None`` when nothing fits."""

    if value is None or value == "":
        return None
    if isinstance(value, date):
        return to_date(value)
    text = str(value).strip()
    for pattern, layout in _DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        first, second, third = match.groups()
        try:
            if layout == "dmy":
                return date(int(third), int(second), int(first))
            if layout == "dmy2":
                year = int(third)
                return date(1900 + year if year > 50 else 2000 + year, int(second), int(first))
            return date(int(first), int(second), int(third))
        except ValueError:
            return None
    try:
        return to_date(text)
    except InvalidDateError:
        return None


def _ofx_to_xml(body: str) -> str:
    """Turn loose OFX SGML (unclosed leaf tags) into well-formed XML."""

    leaf = re.compile(r"^<([A-Za-z0-9_.-]+)>([^<]+)$")
    lines = []
    closed_leaf: Optional[str] = None
    for raw_line in re.sub(r"\s*<", "\n<", body).splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if closed_leaf is not None and line == f"</{closed_leaf}>":
            # the file already closed the leaf we just closed
            closed_leaf = None
            continue
        closed_leaf = None
        line = re.sub(r"&(?!(amp|lt|gt|apos|quot);)", "&amp;", line)
        match = leaf.match(line)
        if match:
            tag, value = match.groups()
            line = f"<{tag}>{value.strip()}</{tag}>"
            closed_leaf = tag
        lines.append(line)
    return "\n".join(lines)


def _text(element: ET.Element, tag: str) -> Optional[str]:
    value = element.findtext(tag)
    return value.strip() if value and value.strip() else None


def _sorted_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: t.date, reverse=True)


def parse_ofx(content: str) -> StatementParseResult:
    """Parse every ``STMTTRN`` of an OFX/QFX statement."""

    start = content.upper().find("<OFX>")
    if start == -1:
        raise StatementParseError("Invalid OFX file: no <OFX> tag found")
    try:
        root = ET.fromstring(_ofx_to_xml(content[start:]))
    except ET.ParseError as exc:
        raise StatementParseError(f"Could not read OFX file: {exc}") from exc

    transactions: list[Transaction] = []
    for trn in root.iter("STMTTRN"):
        raw = {tag: _text(trn, tag) for tag in ("TRNTYPE", "DTPOSTED", "TRNAMT", "FITID", "MEMO", "NAME")}
        posted = parse_date(raw["DTPOSTED"])
        if posted is None:
            logger.warning("Skipping OFX transaction without a valid date", extra={"fitid": raw["FITID"]})
            continue
        amount = parse_amount(raw["TRNAMT"])
        transactions.append(
            Transaction(
                date=posted,
                description=raw["MEMO"] or raw["NAME"] or NO_DESCRIPTION,
                amount=abs(amount),
                type=TransactionType.from_signed_amount(amount),
                id=raw["FITID"],
                source="OFX",
                raw=raw,
            )
        )

    if not transactions:
        raise StatementParseError("No transactions found in OFX file")
    return StatementParseResult(source="OFX", transactions=_sorted_newest_first(transactions))


def _find_column(headers: Iterable[str], key: str) -> Optional[str]:
    needle = key.lower()
    return next((h for h in headers if needle in h.lower()), None)


def detect_csv_format(headers: Iterable[str]) -> str:
    """Return the known bank layout matching ``headers`` or ``"generic"``."""

    header_list = list(headers)
    for bank, expected in CSV_FORMATS.items():
        if all(_find_column(header_list, key) for key in expected):
            return bank
    return "generic"


def _resolve_mapping(headers: list[str], fmt: str, mapping: ColumnMapping | None) -> ColumnMapping:
    if fmt == "generic":
        if mapping is None:
            raise StatementParseError("Generic CSV files need a column mapping")
        return mapping
    if fmt not in _FORMAT_COLUMNS:
        raise StatementParseError(f"Unknown CSV format: {fmt}")
    date_key, description_key, amount_key, category_key = _FORMAT_COLUMNS[fmt]
    return ColumnMapping(
        date=_find_column(headers, date_key) or date_key,
        description=_find_column(headers, description_key) or description_key,
        amount=_find_column(headers, amount_key) or amount_key,
        category=_find_column(headers, category_key) if category_key else None,
    )


def map_csv_rows(
    rows: Iterable[Mapping[str, Any]], fmt: str, mapping: ColumnMapping | None = None
) -> list[Transaction]:
    """Convert CSV rows into transactions, newest first.

    Rows without a parseable date are skipped.
    """

    row_list = list(rows)
    headers = list(row_list[0].keys()) if row_list else []
    columns = _resolve_mapping(headers, fmt, mapping)

    transactions: list[Transaction] = []
    for row in row_list:
        occurred = parse_date(row.get(columns.date))
        if occurred is None:
            continue
        amount = parse_amount(row.get(columns.amount))
        description = str(row.get(columns.description) or "").strip() or NO_DESCRIPTION
        category = str(row.get(columns.category) or "") if columns.category else ""
        transactions.append(
            Transaction(
                date=occurred,
                description=description,
                amount=abs(amount),
                type=TransactionType.from_signed_amount(amount),
                category=category,
                source="CSV",
                raw=dict(row),
            )
        )
    return _sorted_newest_first(transactions)


def _read_frame(content: str) -> pd.DataFrame:
    first_line = content.lstrip().split("\n", 1)[0]
    separator = ";" if first_line.count(";") > first_line.count(",") else ","
    try:
        frame = pd.read_csv(
            io.StringIO(content),
            sep=separator,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise StatementParseError("CSV has no headers") from exc
    except pd.errors.ParserError as exc:
        raise StatementParseError(f"Could not read CSV file: {exc}") from exc
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame


def parse_csv(content: str, mapping: ColumnMapping | None = None) -> StatementParseResult:
    """Parse a CSV export, auto-mapping known bank layouts.

    Generic layouts without ``mapping`` come back with ``requires_mapping`` set
    and the raw rows, so the caller can ask for a column mapping.
    """

    frame = _read_frame(content)
    headers = list(frame.columns)
    if not headers:
        raise StatementParseError("CSV has no headers")
    rows = frame.to_dict(orient="records")
    if not rows:
        raise StatementParseError("CSV is empty: no transactions found")

    fmt = detect_csv_format(headers)
    if fmt == "generic" and mapping is None:
        return StatementParseResult(
            source="CSV", format=fmt, headers=headers, rows=rows, requires_mapping=True
        )
    return StatementParseResult(
        source="CSV",
        format=fmt,
        headers=headers,
        transactions=map_csv_rows(rows, fmt, mapping),
    )


def parse_statement(
    source: Path | str, mapping: ColumnMapping | None = None
) -> StatementParseResult:
    """Parse a statement file (``Path``) or its text content (``str``)."""

    file_name = None
    if isinstance(source, Path):
        file_name = source.name
        content = source.read_text(encoding="utf-8-sig", errors="replace")
    else:
        content = source

    file_type = detect_file_type(content)
    logger.info("Parsing statement", extra={"file_name": file_name, "file_type": file_type})
    if file_type == "OFX":
        result = parse_ofx(content)
    elif file_type == "CSV":
        result = parse_csv(content, mapping)
    else:
        raise StatementParseError("Unrecognized file format. Only OFX and CSV files are supported.")
    result.file_name = file_name
    return result
