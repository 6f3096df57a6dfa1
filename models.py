"""
Data models for Who Owes Who
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ExpenseRecord:
    """One shared expense: who paid how much, who owes how much"""
    id: str
    total: float  # declared amount, advisory only
    paid_by: Dict[str, float] = field(default_factory=dict)
    shared_among: Dict[str, float] = field(default_factory=dict)
    description: Optional[str] = None  # None -> key absent in JSON
    timestamp: Optional[int] = None  # epoch milliseconds
    time_key: str = "timestamp"  # "timestamp" or "createdAt"
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Transfer:
    """Suggested payment from a debtor to a creditor"""
    debtor: str
    creditor: str
    amount: float

    def to_dict(self) -> dict:
        return {"from": self.debtor, "to": self.creditor, "amount": self.amount}
