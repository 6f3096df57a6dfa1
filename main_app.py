"""
Main application window for Who Owes Who GUI
"""
from __future__ import annotations
import logging
import os
from typing import List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from models import ExpenseRecord, Transfer
from config import (
    CURRENCY,
    export_filename,
    import_expenses,
    load_expenses,
    save_expenses,
    store_path,
)
from utils import format_timestamp
from computations import (
    build_ledger,
    remove_expense,
    settlement_headlines,
    settlement_record,
    solve_settlements,
    summarize,
    upsert_expense,
)
from excel_export import export_excel
from gui_dialogs import ExpenseDialog
from csv_handler import export_expenses_to_csv, import_expenses_from_csv

logger = logging.getLogger(__name__)

TITLE = "Who Owes Who"


class WhoOwesApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, path: Optional[str] = None):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title(TITLE)
        self.master.geometry("900x600")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.store_path = path or store_path()
        self.expenses: List[ExpenseRecord] = load_expenses(self.store_path)
        self.transfers: List[Transfer] = []
        logger.info("Loaded %d expenses from %s", len(self.expenses), self.store_path)

        self._build_menu()
        self._build_ui()
        self.refresh_all()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="New", command=self.new_ledger)
        filem.add_separator()
        filem.add_command(label="Import JSON…", command=self.import_json_dialog)
        filem.add_command(label="Export JSON…", command=self.export_json_dialog)
        filem.add_separator()
        filem.add_command(label="Import CSV…", command=self.import_csv_dialog)
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_separator()
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)
        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build main UI with tabs"""
        self.headline = tk.StringVar(value=TITLE)
        ttk.Label(self, textvariable=self.headline, font=("TkDefaultFont", 14, "bold")).grid(
            row=0, column=0, sticky="w", pady=(0, 6))

        nb = ttk.Notebook(self)
        nb.grid(row=1, column=0, sticky="nsew")
        self.rowconfigure(1, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_settlements = ttk.Frame(nb, padding=8)
        nb.add(self.tab_expenses, text="Payments")
        nb.add(self.tab_settlements, text="Settlements")

        self._build_expenses_tab()
        self._build_settlements_tab()

    def _build_expenses_tab(self):
        """Build payment history tab"""
        top = ttk.Frame(self.tab_expenses)
        top.grid(row=0, column=0, sticky="ew")
        self.tab_expenses.columnconfigure(0, weight=1)

        ttk.Button(top, text="Add", command=self.add_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Edit", command=self.edit_selected_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Delete", command=self.delete_selected_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Clear All", command=self.clear_all).pack(side="right", padx=3)

        ttk.Separator(self.tab_expenses, orient="horizontal").grid(row=1, column=0, sticky="ew", pady=6)

        cols = ("date", "description", "total", "paid_by", "shared_among")
        self.exp_tree = ttk.Treeview(self.tab_expenses, columns=cols, show="headings", height=18)
        for c, w in zip(cols, [120, 220, 90, 200, 260]):
            self.exp_tree.heading(c, text=c)
            self.exp_tree.column(c, width=w, anchor="w")
        self.exp_tree.grid(row=2, column=0, sticky="nsew")
        self.tab_expenses.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns")

    def _build_settlements_tab(self):
        """Build balances and transfers tab"""
        self.tab_settlements.columnconfigure(0, weight=1)

        cols = ("person", "paid", "shared", "net")
        self.sum_tree = ttk.Treeview(self.tab_settlements, columns=cols, show="headings", height=8)
        for c, w in zip(cols, [140, 120, 120, 120]):
            self.sum_tree.heading(c, text=c)
            self.sum_tree.column(c, width=w, anchor="w")
        self.sum_tree.grid(row=0, column=0, sticky="nsew", pady=6)
        self.tab_settlements.rowconfigure(0, weight=1)

        bar = ttk.Frame(self.tab_settlements)
        bar.grid(row=1, column=0, sticky="ew", pady=(10, 0))
        ttk.Label(bar, text="Suggested transfers:").pack(side="left")
        ttk.Button(bar, text="Settle Up", command=self.settle_selected).pack(side="right")

        tcols = ("from", "to", "amount")
        self.tr_tree = ttk.Treeview(self.tab_settlements, columns=tcols, show="headings", height=8)
        for c, w in zip(tcols, [140, 140, 120]):
            self.tr_tree.heading(c, text=c)
            self.tr_tree.column(c, width=w, anchor="w")
        self.tr_tree.grid(row=2, column=0, sticky="nsew")
        self.tab_settlements.rowconfigure(2, weight=1)

    # ---------- Store ----------
    def _commit(self, expenses: List[ExpenseRecord]):
        """Replace the expense list, autosave and recompute"""
        self.expenses = expenses
        try:
            save_expenses(self.store_path, self.expenses)
        except OSError as ex:
            logger.error("Autosave to %s failed: %s", self.store_path, ex)
            messagebox.showerror("Save failed", str(ex))
        self.refresh_all()

    # ---------- CRUD: Expenses ----------
    def add_expense(self):
        """Add new expense"""
        dlg = ExpenseDialog(self.master, None)
        self.master.wait_window(dlg)
        if dlg.result:
            self._commit(upsert_expense(self.expenses, dlg.result))

    def edit_selected_expense(self):
        """Edit selected expense"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Edit", "Select a payment row first.")
            return
        e = next((x for x in self.expenses if x.id == sel[0]), None)
        if not e:
            return
        dlg = ExpenseDialog(self.master, e)
        self.master.wait_window(dlg)
        if dlg.result:
            self._commit(upsert_expense(self.expenses, dlg.result))

    def delete_selected_expense(self):
        """Delete selected expense"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Delete", "Select a payment row first.")
            return
        if messagebox.askyesno("Delete", "Delete selected payment?"):
            self._commit(remove_expense(self.expenses, sel[0]))

    def clear_all(self):
        """Remove every expense"""
        if self.expenses and messagebox.askyesno("Clear All", "Are you sure you want to clear all payments?"):
            self._commit([])

    def settle_selected(self):
        """Record the selected transfer as paid"""
        sel = self.tr_tree.selection()
        if not sel:
            messagebox.showinfo("Settle Up", "Select a transfer row first.")
            return
        t = self.transfers[int(sel[0])]
        self._commit(upsert_expense(self.expenses, settlement_record(t)))

    # ---------- File ops ----------
    def new_ledger(self):
        """Start an empty ledger"""
        if messagebox.askyesno("New", "Start a new ledger (all payments will be removed)?"):
            self._commit([])

    def import_json_dialog(self):
        """Replace expenses with a JSON export"""
        fp = filedialog.askopenfilename(
            title="Import JSON",
            filetypes=[("Payments JSON", "*.json"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            imported = import_expenses(fp)
        except (OSError, ValueError) as ex:
            messagebox.showerror("Import failed", str(ex))
            return
        if messagebox.askyesno("Import JSON", "This will replace your current payments. Continue?"):
            self._commit(imported)

    def export_json_dialog(self):
        """Write expenses to a JSON file"""
        fp = filedialog.asksaveasfilename(
            title="Export JSON",
            initialfile=export_filename(),
            defaultextension=".json",
            filetypes=[("Payments JSON", "*.json")]
        )
        if not fp:
            return
        try:
            save_expenses(fp, self.expenses)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def export_excel_dialog(self):
        """Export to Excel file"""
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_excel(self.expenses, fp)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def export_csv_dialog(self):
        """Export current expenses to CSV file"""
        if not self.expenses:
            messagebox.showinfo("Export CSV", "No payments to export.")
            return
        fp = filedialog.asksaveasfilename(
            title="Export Payments to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            export_expenses_to_csv(self.expenses, fp)
            messagebox.showinfo("Export CSV", f"Exported {len(self.expenses)} payments to:\n{fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def import_csv_dialog(self):
        """Import expenses from CSV file"""
        fp = filedialog.askopenfilename(
            title="Import Payments from CSV",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            imported = import_expenses_from_csv(fp)
        except (OSError, KeyError, ValueError) as ex:
            messagebox.showerror("Import failed", str(ex))
            return
        if not imported:
            messagebox.showinfo("Import CSV", "No payments found in CSV file.")
            return

        choice = messagebox.askyesnocancel(
            "Import CSV",
            f"Found {len(imported)} payments in CSV.\n\n"
            "Yes: Append to current payments\n"
            "No: Replace current payments\n"
            "Cancel: Cancel import"
        )
        if choice is None:
            return
        if choice:
            merged = self.expenses
            for e in imported:
                merged = upsert_expense(merged, e)
            self._commit(merged)
        else:
            self._commit(imported)

    # ---------- Refresh ----------
    def refresh_all(self):
        """Refresh all UI elements"""
        self.refresh_expenses()
        self.refresh_settlements()
        if self.store_path:
            self.master.title(f"{TITLE} - {os.path.basename(self.store_path)}")

    def refresh_expenses(self):
        """Refresh payment history view"""
        for iid in self.exp_tree.get_children():
            self.exp_tree.delete(iid)
        for e in self.expenses:
            values = (
                format_timestamp(e.timestamp),
                e.description or "Untitled payment",
                f"{CURRENCY}{e.total:.2f}",
                ", ".join(f"{p}:{a:.2f}" for p, a in e.paid_by.items()),
                ", ".join(f"{p}:{a:.2f}" for p, a in e.shared_among.items()),
            )
            self.exp_tree.insert("", "end", iid=e.id, values=values)

    def refresh_settlements(self):
        """Recompute balances and transfers from scratch"""
        for iid in self.sum_tree.get_children():
            self.sum_tree.delete(iid)
        for p, s in summarize(self.expenses).items():
            self.sum_tree.insert("", "end", values=(
                p, f"{s['paid']:.2f}", f"{s['shared']:.2f}", f"{s['net']:.2f}",
            ))

        for iid in self.tr_tree.get_children():
            self.tr_tree.delete(iid)
        self.transfers = solve_settlements(build_ledger(self.expenses))
        for i, t in enumerate(self.transfers):
            self.tr_tree.insert("", "end", iid=str(i), values=(t.debtor, t.creditor, f"{CURRENCY}{t.amount:.2f}"))

        lines = settlement_headlines(self.transfers, CURRENCY)
        self.headline.set(" | ".join(lines) if lines else f"{TITLE}: no debts to settle!")
