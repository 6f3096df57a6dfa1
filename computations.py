"""
Business logic and computations for Who Owes Who
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional

from models import ExpenseRecord, Transfer
from utils import EPSILON, amounts_match, new_id, now_ms, round_currency


def build_ledger(expenses: Iterable[ExpenseRecord]) -> Dict[str, float]:
    """
    Fold expense records into net balances.
    Positive -> participant is owed money; negative -> participant owes money.
    Unbalanced records are not rejected, they simply shift the balances.
    """
    ledger: Dict[str, float] = {}
    for e in expenses:
        for person, amount in e.paid_by.items():
            ledger[person] = ledger.get(person, 0.0) + amount
        for person, amount in e.shared_among.items():
            ledger[person] = ledger.get(person, 0.0) - amount
    return ledger


def solve_settlements(balances: Mapping[str, float]) -> List[Transfer]:
    """
    Compute transfers to settle debts.
    Greedy largest-first matching: debtors pay creditors until one side runs out.
    Equal magnitudes are ordered by name so the result is reproducible.
    """
    debtors = [[p, -v] for p, v in balances.items() if v <= -EPSILON]
    creditors = [[p, v] for p, v in balances.items() if v >= EPSILON]
    debtors.sort(key=lambda x: (-x[1], x[0]))
    creditors.sort(key=lambda x: (-x[1], x[0]))

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        x = min(debtor[1], creditor[1])
        if x >= EPSILON:
            transfers.append(Transfer(debtor[0], creditor[0], round_currency(x)))
        debtor[1] -= x
        creditor[1] -= x
        if debtor[1] < EPSILON:
            i += 1
        if creditor[1] < EPSILON:
            j += 1

    return transfers


def summarize(expenses: Iterable[ExpenseRecord]) -> Dict[str, dict]:
    """
    Per participant totals.
    Returns dict mapping person -> {paid, shared, net}, in first-seen order.
    """
    paid: Dict[str, float] = {}
    shared: Dict[str, float] = {}
    for e in expenses:
        for p, amt in e.paid_by.items():
            paid[p] = paid.get(p, 0.0) + amt
            shared.setdefault(p, 0.0)
        for p, amt in e.shared_among.items():
            shared[p] = shared.get(p, 0.0) + amt
            paid.setdefault(p, 0.0)

    return {
        p: {
            "paid": paid[p],
            "shared": shared[p],
            "net": paid[p] - shared[p],
        } for p in paid
    }


def record_imbalance(record: ExpenseRecord) -> float:
    """sum(paid_by) - sum(shared_among) for a single record"""
    return sum(record.paid_by.values()) - sum(record.shared_among.values())


def validate_record(record: ExpenseRecord) -> List[str]:
    """
    Checks the expense form runs before saving a record.
    Returns a list of problems; an empty list means the record is well formed.
    """
    problems = []
    names = list(record.paid_by) + list(record.shared_among)
    if any(not n or not n.strip() for n in names):
        problems.append("Participant names must not be empty.")
    if not record.paid_by:
        problems.append("Add at least one person who paid.")
    if not record.shared_among:
        problems.append("Add at least one person who shares the cost.")

    paid = sum(record.paid_by.values())
    shared = sum(record.shared_among.values())
    if not amounts_match(paid, record.total):
        problems.append(f"Paid amounts add up to {paid:.2f}, not {record.total:.2f}.")
    if not amounts_match(shared, record.total):
        problems.append(f"Shared amounts add up to {shared:.2f}, not {record.total:.2f}.")
    return problems


def equal_split(total: float, names: List[str]) -> Dict[str, float]:
    """Split total equally, each share rounded to cents"""
    if not names:
        return {}
    share = round_currency(total / len(names))
    return {n: share for n in names}


def remaining_amount(total: float, amounts: Iterable[float]) -> Optional[float]:
    """What is left of total after the amounts entered so far, or None if nothing is left"""
    remaining = round_currency(total - sum(amounts))
    return remaining if remaining > 0 else None


def draft_record(
    description: str,
    total: float,
    paid_by: Dict[str, float],
    shared_among: Dict[str, float],
    base: Optional[ExpenseRecord] = None,
) -> ExpenseRecord:
    """
    Build the record an expense form saves.
    A blank description is stored as absent. When editing, base keeps its
    id, time and unknown keys; otherwise a new id and the current time are used.
    """
    return ExpenseRecord(
        id=base.id if base else new_id(),
        description=description.strip() or None,
        total=total,
        paid_by=paid_by,
        shared_among=shared_among,
        timestamp=base.timestamp if base else now_ms(),
        time_key=base.time_key if base else "timestamp",
        extra=dict(base.extra) if base else {},
    )


def upsert_expense(expenses: List[ExpenseRecord], record: ExpenseRecord) -> List[ExpenseRecord]:
    """Replace the record with the same id, or append it"""
    if any(e.id == record.id for e in expenses):
        return [record if e.id == record.id else e for e in expenses]
    return list(expenses) + [record]


def remove_expense(expenses: List[ExpenseRecord], expense_id: str) -> List[ExpenseRecord]:
    """Drop the record with the given id"""
    return [e for e in expenses if e.id != expense_id]


def settlement_record(transfer: Transfer, now: Optional[int] = None) -> ExpenseRecord:
    """
    Record a transfer as paid.
    The debtor "pays" the amount on behalf of the creditor, which cancels
    exactly that transfer once folded into the ledger.
    """
    return ExpenseRecord(
        id=new_id(),
        description=f"Settle: {transfer.debtor} → {transfer.creditor}",
        total=transfer.amount,
        paid_by={transfer.debtor: transfer.amount},
        shared_among={transfer.creditor: transfer.amount},
        timestamp=now if now is not None else now_ms(),
    )


def settlement_headlines(transfers: Iterable[Transfer], currency: str = "$") -> List[str]:
    """One "A owes B $10.00" line per transfer"""
    return [f"{t.debtor} owes {t.creditor} {currency}{t.amount:.2f}" for t in transfers]
