"""
Dialog windows for Who Owes Who GUI
"""
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import ExpenseRecord
from computations import draft_record, equal_split, remaining_amount, validate_record
from utils import evaluate_amount, safe_float


class AmountRows(ttk.LabelFrame):
    """Editable list of (name, amount) rows"""

    def __init__(self, master, title: str, amounts: Dict[str, float], on_change=None, suggest=None):
        super().__init__(master, text=title, padding=6)
        self.rows: List[Tuple[tk.StringVar, tk.StringVar, ttk.Frame]] = []
        self.on_change = on_change
        self.suggest = suggest  # prefill amount for a new row

        self.body = ttk.Frame(self)
        self.body.grid(row=0, column=0, sticky="ew")
        ttk.Button(self, text="+ Person", command=self._add_clicked).grid(row=1, column=0, sticky="w", pady=(4, 0))

        for name, amt in amounts.items():
            self.add_row(name, str(amt))

    def add_row(self, name: str = "", amount: str = ""):
        """Append an empty or prefilled row"""
        frm = ttk.Frame(self.body)
        frm.pack(fill="x", pady=1)
        v_name = tk.StringVar(value=name)
        v_amount = tk.StringVar(value=amount)
        ttk.Entry(frm, textvariable=v_name, width=16).pack(side="left")
        ttk.Entry(frm, textvariable=v_amount, width=12).pack(side="left", padx=4)
        row = (v_name, v_amount, frm)
        ttk.Button(frm, text="✕", width=2, command=lambda: self._remove(row)).pack(side="left")
        self.rows.append(row)
        if self.on_change:
            v_amount.trace_add("write", lambda *_: self.on_change())
            self.on_change()

    def _add_clicked(self):
        amount = self.suggest() if self.suggest else None
        self.add_row("", "" if amount is None else f"{amount:.2f}")

    def _remove(self, row):
        self.rows.remove(row)
        row[2].destroy()
        if self.on_change:
            self.on_change()

    def names(self) -> List[str]:
        return [v_name.get().strip() for v_name, _, _ in self.rows if v_name.get().strip()]

    def set_amounts(self, amounts: Dict[str, float]):
        for v_name, v_amount, _ in self.rows:
            name = v_name.get().strip()
            if name in amounts:
                v_amount.set(f"{amounts[name]:.2f}")

    def running_total(self) -> float:
        return sum(safe_float(v_amount.get(), 0.0) for _, v_amount, _ in self.rows)

    def read(self) -> Dict[str, float]:
        """Evaluate every named row; raises ValueError on a bad amount"""
        out = {}
        for v_name, v_amount, _ in self.rows:
            name = v_name.get().strip()
            if name:
                out[name] = evaluate_amount(v_amount.get())
        return out


class ExpenseDialog(tk.Toplevel):
    """Dialog for adding/editing an expense"""

    def __init__(self, master, expense: Optional[ExpenseRecord] = None):
        super().__init__(master)
        self.title("New Payment" if expense is None else "Edit Payment")
        self.resizable(False, False)
        self.expense = expense
        self.result: Optional[ExpenseRecord] = None

        self._bind_enter_to_ok()

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_description = tk.StringVar(value=(expense.description or "") if expense else "")
        self.v_total = tk.StringVar(value=str(expense.total) if expense else "")

        r = 0
        ttk.Label(frm, text="What was this for?").grid(row=r, column=0, sticky="w")
        ttk.Entry(frm, textvariable=self.v_description, width=32).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Total Amount").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_total, width=14).grid(row=r, column=1, sticky="w")
        r += 1

        self.balance_var = tk.StringVar(value="")
        self.paid_rows = AmountRows(frm, "Who Paid?", expense.paid_by if expense else {},
                                    on_change=self._update_balance_label,
                                    suggest=self._unpaid_amount)
        self.paid_rows.grid(row=r, column=0, sticky="nsew", pady=(8, 0), padx=(0, 6))
        self.shared_rows = AmountRows(frm, "Shared Among", expense.shared_among if expense else {},
                                      on_change=self._update_balance_label)
        self.shared_rows.grid(row=r, column=1, sticky="nsew", pady=(8, 0))
        r += 1

        ttk.Button(frm, text="Split equally", command=self._split_equally).grid(
            row=r, column=1, sticky="e", pady=(4, 0)
        )
        r += 1

        ttk.Label(frm, textvariable=self.balance_var).grid(row=r, column=0, columnspan=2, sticky="w", pady=(8, 0))
        self.v_total.trace_add("write", lambda *_: self._update_balance_label())
        self._update_balance_label()
        r += 1

        btns = ttk.Frame(frm)
        btns.grid(row=r, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self.grab_set()
        self.transient(master)

    def _bind_enter_to_ok(self):
        """Bind Enter/Return to OK"""

        def on_enter(event=None):
            self._ok()
            return "break"

        self.bind("<Return>", on_enter)
        self.bind("<KP_Enter>", on_enter)

    def _update_balance_label(self):
        """Show paid/shared running totals against the declared total"""
        # rows call back while the dialog is still being built
        if not hasattr(self, "shared_rows"):
            return
        total = safe_float(self.v_total.get(), 0.0)
        self.balance_var.set(
            f"Paid: {self.paid_rows.running_total():.2f}   "
            f"Shared: {self.shared_rows.running_total():.2f}   "
            f"Total: {total:.2f}"
        )

    def _unpaid_amount(self) -> Optional[float]:
        """Part of the total no payer row covers yet"""
        return remaining_amount(safe_float(self.v_total.get(), 0.0), [self.paid_rows.running_total()])

    def _split_equally(self):
        """Fill shared rows with equal shares of the total"""
        total = safe_float(self.v_total.get(), None)
        if total is None:
            messagebox.showerror("Invalid amount", "Enter the total amount first.")
            return
        self.shared_rows.set_amounts(equal_split(total, self.shared_rows.names()))

    def _ok(self):
        """Validate and save expense"""
        try:
            total = evaluate_amount(self.v_total.get())
        except ValueError:
            messagebox.showerror("Invalid amount",
                                 "Please enter a valid total amount (math allowed: +, -, *, /).")
            return
        try:
            paid_by = self.paid_rows.read()
            shared_among = self.shared_rows.read()
        except ValueError:
            messagebox.showerror("Invalid amount",
                                 "Please ensure all participant amounts are valid numbers or expressions.")
            return

        record = draft_record(self.v_description.get(), total, paid_by, shared_among, base=self.expense)
        problems = validate_record(record)
        if problems:
            messagebox.showerror("Totals don't match", "\n".join(problems))
            return

        self.result = record
        self.destroy()

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()
