"""
Configuration and data loading/saving for Who Owes Who
"""
from __future__ import annotations
import json
import logging
import math
import os
from datetime import date
from typing import Any, List, Optional

from models import ExpenseRecord
from utils import app_dir

logger = logging.getLogger(__name__)

CURRENCY = os.environ.get("WHO_OWES_CURRENCY", "$")
LOG_LEVEL = os.environ.get("WHO_OWES_LOG_LEVEL", "INFO").upper()
STORE_FILENAME = "payments.json"

_KNOWN_KEYS = {"id", "description", "total", "paidBy", "sharedAmong", "timestamp", "createdAt"}


class LedgerFileError(ValueError):
    """File does not hold a JSON array of expense records"""


def store_path() -> str:
    """Path of the autosave file"""
    return os.path.join(app_dir(), STORE_FILENAME)


def export_filename(day: Optional[date] = None) -> str:
    """Suggested file name for a JSON export"""
    day = day or date.today()
    return f"who-owes-who-{day.isoformat()}.json"


def _amount_map(d: Any) -> dict:
    return {str(k): float(v) for k, v in (d or {}).items()}


def record_to_dict(e: ExpenseRecord) -> dict:
    """Convert ExpenseRecord to its JSON shape"""
    d = {"id": e.id}
    if e.description is not None:
        d["description"] = e.description
    d["total"] = e.total
    d["paidBy"] = dict(e.paid_by)
    d["sharedAmong"] = dict(e.shared_among)
    if e.timestamp is not None:
        d[e.time_key] = e.timestamp
    d.update(e.extra)
    return d


def _time_value(v: Any) -> Optional[float]:
    # epoch milliseconds; bool is an int subclass but never a time
    if v is None:
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v):
        return v
    raise ValueError(f"time must be epoch milliseconds, got {v!r}")


def dict_to_record(d: dict) -> ExpenseRecord:
    """
    Convert a JSON object to ExpenseRecord, keeping unknown keys.
    Raises ValueError when the description is not text or the time is not a number.
    """
    time_key = "createdAt" if "createdAt" in d and "timestamp" not in d else "timestamp"
    description = d.get("description")
    if description is not None and not isinstance(description, str):
        raise ValueError(f"description must be text, got {description!r}")
    return ExpenseRecord(
        id=str(d["id"]),
        description=description,
        total=float(d.get("total", 0.0)),
        paid_by=_amount_map(d.get("paidBy")),
        shared_among=_amount_map(d.get("sharedAmong")),
        timestamp=_time_value(d.get(time_key)),
        time_key=time_key,
        extra={k: v for k, v in d.items() if k not in _KNOWN_KEYS},
    )


def expenses_to_list(expenses: List[ExpenseRecord]) -> list:
    return [record_to_dict(e) for e in expenses]


def list_to_expenses(data: Any) -> List[ExpenseRecord]:
    """Convert parsed JSON to records; the top level must be an array of objects"""
    if not isinstance(data, list):
        raise LedgerFileError("Invalid file format. Expected a JSON array of payments.")
    out = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or "id" not in item:
            raise LedgerFileError(f"Entry {i} is not a payment object.")
        try:
            out.append(dict_to_record(item))
        except (TypeError, ValueError, AttributeError) as ex:
            raise LedgerFileError(f"Entry {i} is malformed: {ex}") from ex
    return out


def import_expenses(path: str) -> List[ExpenseRecord]:
    """Read a JSON export; raises LedgerFileError when it cannot be used"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as ex:
        raise LedgerFileError("Failed to parse JSON file.") from ex
    expenses = list_to_expenses(data)
    logger.info("Imported %d expenses from %s", len(expenses), path)
    return expenses


def save_expenses(path: str, expenses: List[ExpenseRecord]) -> None:
    """Write expenses as a pretty-printed JSON array"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(expenses_to_list(expenses), f, ensure_ascii=False, indent=2)
    logger.debug("Saved %d expenses to %s", len(expenses), path)


def load_expenses(path: str) -> List[ExpenseRecord]:
    """
    Load the autosave file.
    A missing file is an empty list; an unreadable one is logged and ignored.
    """
    try:
        return import_expenses(path)
    except FileNotFoundError:
        return []
    except LedgerFileError as ex:
        logger.error("Failed to parse saved payments in %s: %s", path, ex)
        return []
