"""
Who Owes Who GUI
- Record shared payments: who paid how much, who owes how much.
- See net balances and a short list of transfers that settles everyone up.
- Import/export JSON and CSV, export an Excel report.

Run:
  python who_owes_gui.py [payments.json]

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging
import sys

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import LOG_LEVEL


def main():
    """Main entry point for the application"""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import WhoOwesApp

    root = tk.Tk()
    WhoOwesApp(root, sys.argv[1] if len(sys.argv) > 1 else None)
    root.mainloop()


if __name__ == "__main__":
    main()
