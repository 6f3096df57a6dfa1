"""
Utility functions for Who Owes Who
"""
from __future__ import annotations
import ast
import operator
import os
import re
import time
import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

# Balances and transfers smaller than this are treated as zero
EPSILON = 0.01

_EXPRESSION_CHARS = re.compile(r"^[\d.+\-*/()\s]+$")
_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def round_currency(amount: float) -> float:
    """Round an amount to 2 decimal places, halves away from zero"""
    rounded = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(rounded)


def is_settled(amount: float) -> bool:
    """True when a balance is too small to matter"""
    return abs(amount) < EPSILON


def amounts_match(a: float, b: float) -> bool:
    """Compare two amounts within EPSILON"""
    return abs(a - b) < EPSILON


def _eval_node(node):
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)):
        return float(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        return _BIN_OPS[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    raise ValueError(f"unsupported expression element: {type(node).__name__}")


def evaluate_amount(text: str) -> float:
    """
    Evaluate an amount field that may contain simple arithmetic.
    Only digits, '.', '+', '-', '*', '/', parentheses and whitespace are accepted.
    Raises ValueError for anything else.
    """
    s = (text or "").strip()
    if not s or not _EXPRESSION_CHARS.match(s):
        raise ValueError(f"not a valid amount: {text!r}")
    try:
        tree = ast.parse(s, mode="eval")
        return _eval_node(tree)
    except (SyntaxError, ZeroDivisionError) as ex:
        raise ValueError(f"not a valid amount: {text!r}") from ex


def safe_float(x: str, default: Optional[float] = 0.0) -> Optional[float]:
    """Evaluate an amount field, returning default on error"""
    try:
        return evaluate_amount(x)
    except ValueError:
        return default


def new_id() -> str:
    """Fresh identifier for an expense record"""
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def format_timestamp(ms: Optional[int]) -> str:
    """Format epoch milliseconds for display"""
    if ms is None:
        return ""
    try:
        return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return ""


def app_dir() -> str:
    """
    Get application data directory.
    Defaults to ~/Library/Application Support/WhoOwesWho; WHO_OWES_HOME overrides it.
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("WHO_OWES_HOME")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "WhoOwesWho")
    os.makedirs(path, exist_ok=True)
    return path
