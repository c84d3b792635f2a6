"""Shared helpers for loading canonical transactions handed over by the ingestion layer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Tuple, Union

from pydantic import ValidationError

from ..core.models import Transaction
from .multi_leg import ManualGrouping


class TransactionLoadError(ValueError):
    """Raised when ledger input cannot be turned into transactions."""


def parse_transactions(records: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    """Validate raw transaction mappings into :class:`Transaction` models."""
    transactions: List[Transaction] = []
    for index, record in enumerate(records, start=1):
        try:
            transactions.append(Transaction.model_validate(record))
        except ValidationError as exc:
            label = record.get("id") if isinstance(record, Mapping) else None
            where = f"transaction {label!r}" if label else f"transaction #{index}"
            raise TransactionLoadError(f"Invalid {where}: {exc}") from exc
    return transactions


def parse_manual_groupings(records: Iterable[Mapping[str, Any]]) -> List[ManualGrouping]:
    """Read ``{"transaction_ids": [...], "strategy_name": "..."}`` mappings."""
    groupings: List[ManualGrouping] = []
    for index, record in enumerate(records, start=1):
        ids = record.get("transaction_ids")
        name = record.get("strategy_name")
        if not ids or not isinstance(ids, list) or not name:
            raise TransactionLoadError(
                f"Manual grouping #{index} needs transaction_ids and strategy_name"
            )
        groupings.append(
            ManualGrouping(transaction_ids=tuple(str(i) for i in ids), strategy_name=str(name))
        )
    return groupings


def load_ledger(
    source: Union[str, Path],
) -> Tuple[List[Transaction], List[ManualGrouping]]:
    """Load a JSON ledger file.

    The file holds either a list of transactions or an object with ``transactions`` and an
    optional ``manual_groupings`` list.
    """
    path = Path(source)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TransactionLoadError(f"{path} is not valid JSON: {exc}") from exc

    if isinstance(payload, list):
        return parse_transactions(payload), []
    if isinstance(payload, dict) and isinstance(payload.get("transactions"), list):
        groupings = parse_manual_groupings(payload.get("manual_groupings") or [])
        return parse_transactions(payload["transactions"]), groupings
    raise TransactionLoadError(
        f"{path} must contain a list of transactions or an object with a 'transactions' list"
    )
