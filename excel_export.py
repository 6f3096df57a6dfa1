"""
Excel export functionality for Who Owes Who
"""
from __future__ import annotations
import logging
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import ExpenseRecord
from computations import build_ledger, solve_settlements, summarize
from utils import format_timestamp

logger = logging.getLogger(__name__)


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_columns(ws, columns):
    for r in range(2, ws.max_row + 1):
        for c in columns:
            ws.cell(r, c).number_format = "0.00"


def export_excel(expenses: List[ExpenseRecord], filepath: str) -> None:
    """
    Export expenses to Excel file with three sheets:
    - Expenses: one row per participant line of each expense
    - Balances: paid, shared and net per participant
    - Transfers: suggested settlement
    """
    wb = Workbook()
    wb.remove(wb.active)

    ws = wb.create_sheet("Expenses")
    ws.append(["Date", "Description", "Total", "Participant", "Paid", "Shared"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in expenses:
        # title row per expense, then one row per participant
        ws.append([format_timestamp(e.timestamp), e.description or "Untitled payment", e.total])
        ws.cell(ws.max_row, 2).font = Font(bold=True)
        people = list(e.paid_by) + [p for p in e.shared_among if p not in e.paid_by]
        for p in people:
            ws.append(["", "", None, p, e.paid_by.get(p, 0.0), e.shared_among.get(p, 0.0)])
    _money_columns(ws, (3, 5, 6))
    _autosize_columns(ws)

    ws = wb.create_sheet("Balances")
    ws.append(["Person", "Paid", "Shared", "Net (Paid-Shared)"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for p, s in summarize(expenses).items():
        ws.append([p, s["paid"], s["shared"], s["net"]])
    _money_columns(ws, (2, 3, 4))
    _autosize_columns(ws)

    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for t in solve_settlements(build_ledger(expenses)):
        ws.append([t.debtor, t.creditor, t.amount])
    _money_columns(ws, (3,))
    _autosize_columns(ws)

    wb.save(filepath)
    logger.info("Exported Excel report for %d expenses to %s", len(expenses), filepath)
