"""Statement import flow: parse, flag duplicates, persist."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from ..config import BaseConfig
from ..domain.transaction_store import WritableTransactionStore
from ..exceptions import StatementParseError
from ..models.transaction import Transaction
from .duplicates import find_duplicates
from .statements import ColumnMapping, parse_statement

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Result of an import operation."""

    created: int = 0
    skipped: int = 0
    duplicates: list[Transaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duplicate_check_failed: bool = False


async def import_statement(
    source: Path | str,
    *,
    store: WritableTransactionStore,
    user_id: str,
    mapping: ColumnMapping | None = None,
    now: date | datetime | None = None,
    skip_duplicates: bool = True,
    config: BaseConfig | None = None,
) -> ImportResult:
    """Import one statement for ``user_id``.

    Parse errors end up in ``ImportResult.errors`` and nothing is written.
    Duplicates are left out unless ``skip_duplicates`` is False.
    """

    result = ImportResult()
    try:
        parsed = parse_statement(source, mapping)
    except (StatementParseError, OSError) as exc:
        logger.warning("Statement import failed", extra={"user_id": user_id, "error": str(exc)})
        result.errors.append(str(exc))
        return result

    if parsed.requires_mapping:
        result.errors.append(
            f"Column mapping required for generic CSV (headers: {', '.join(parsed.headers)})"
        )
        return result

    report = await find_duplicates(
        parsed.transactions, store=store, user_id=user_id, now=now, config=config
    )
    result.duplicates = list(report.duplicates)
    result.duplicate_check_failed = report.fetch_failed

    to_persist = list(report.unique) if skip_duplicates else report.all()
    result.skipped = len(parsed.transactions) - len(to_persist)
    result.created = await asyncio.to_thread(store.add_many, user_id, to_persist)

    logger.info(
        "Statement imported",
        extra={
            "user_id": user_id,
            "file_name": parsed.file_name,
            "source": parsed.source,
            "created_count": result.created,
            "skipped_count": result.skipped,
        },
    )
    return result
