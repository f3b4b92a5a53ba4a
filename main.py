#!/usr/bin/env python3
"""
Design (main.py)
- Purpose: Application bootstrap: configure logging, open the store, wire repository,
           view model and UI, run the Tk main loop, shut everything down on exit.
- Inputs: Command-line options (data file, in-memory mode, log level).
- Outputs: None.
- Side effects: Opens a window; reads/writes the data file.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import typer

from holiday_planner.config import LOG_DATE_FORMAT, LOG_FORMAT
from holiday_planner.repository import HolidayRepository
from holiday_planner.storage import get_store_path
from holiday_planner.store import DocumentStore
from holiday_planner.view_model import HolidayViewModel

logger = logging.getLogger("holiday_planner")


def build_app(data_file: Optional[Path], memory: bool) -> Tuple[DocumentStore, HolidayViewModel]:
    """Open the store and wire the repository and view model on top of it."""
    path = None if memory else (data_file or get_store_path())
    store = DocumentStore(path)
    view_model = HolidayViewModel(HolidayRepository(store))
    return store, view_model


def run_gui(store: DocumentStore, view_model: HolidayViewModel) -> None:
    # Tk is only needed once a window opens
    import tkinter as tk
    from holiday_planner.ui import AppUI

    root = tk.Tk()
    ui = AppUI(root, view_model)

    def on_close():
        ui.close()
        view_model.close()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    try:
        root.mainloop()
    finally:
        view_model.close()
        store.close()


def main(
    data_file: Optional[Path] = typer.Option(
        None, "--data-file", "-f", envvar="HOLIDAY_PLANNER_DATA", help="JSON file holding the holidays"
    ),
    memory: bool = typer.Option(False, "--memory", help="Keep holidays in memory only (nothing saved)"),
    log_level: str = typer.Option("INFO", "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    """Holiday Planner - plan, search and edit your trips."""
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        typer.echo(f"Error: unknown log level {log_level!r}", err=True)
        raise typer.Exit(1)
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    store, view_model = build_app(data_file, memory)
    logger.info("Starting (%s)", "in-memory" if memory else "persistent store")
    run_gui(store, view_model)


def cli() -> None:
    typer.run(main)


if __name__ == "__main__":
    cli()
