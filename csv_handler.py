"""
CSV export and import functionality for Who Owes Who
"""
from __future__ import annotations
import csv
import json
import logging
from typing import Dict, List

from models import ExpenseRecord

logger = logging.getLogger(__name__)

HEADER = ['id', 'description', 'total', 'paidBy', 'sharedAmong', 'timestamp']


def _encode_amounts(amounts: Dict[str, float]) -> str:
    return json.dumps(amounts, ensure_ascii=False)


def _decode_amounts(text: str) -> Dict[str, float]:
    """Parse a JSON object cell; names are kept exactly as written"""
    if not text or not text.strip():
        return {}
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object of amounts, got {text!r}")
    return {str(k): float(v) for k, v in data.items()}


def export_expenses_to_csv(expenses: List[ExpenseRecord], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, description, total, paidBy, sharedAmong, timestamp
    paidBy and sharedAmong cells hold JSON objects of name -> amount
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)
        for e in expenses:
            writer.writerow([
                e.id,
                e.description or '',
                e.total,
                _encode_amounts(e.paid_by),
                _encode_amounts(e.shared_among),
                '' if e.timestamp is None else e.timestamp,
            ])
    logger.info("Exported %d expenses to %s", len(expenses), filepath)


def import_expenses_from_csv(filepath: str) -> List[ExpenseRecord]:
    """
    Import expenses list from CSV file
    Returns list of ExpenseRecord objects; malformed amounts raise ValueError
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            ts = (row.get('timestamp') or '').strip()
            expense = ExpenseRecord(
                id=row['id'],
                description=row.get('description') or None,
                total=float(row['total']),
                paid_by=_decode_amounts(row.get('paidBy', '')),
                shared_among=_decode_amounts(row.get('sharedAmong', '')),
                timestamp=int(ts) if ts else None,
            )
            expenses.append(expense)

    logger.info("Imported %d expenses from %s", len(expenses), filepath)
    return expenses
