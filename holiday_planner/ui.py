"""
Design (ui.py)
- Purpose: Build and manage the Tkinter UI (search box, Treeview, dialogs, status, logs).
- Inputs: HolidayViewModel (observable state + intents).
- Outputs: None (renders UI, forwards user actions to the view model).
- Side effects: Creates windows; starts short-lived worker threads for writes; may show
                desktop notifications for new errors.
- Thread-safety: UI code runs on main thread; observable callbacks (fired from the store's
                 dispatcher thread or write workers) reschedule themselves via Tk.after().
"""

import logging
import threading
import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Dict, List, Optional

from .config import (
    APP_TITLE,
    BLANK_TITLE_TEXT,
    EMPTY_LIST_TEXT,
    EMPTY_SEARCH_TEXT,
    LOG_MAX_LINES,
)
from .models import Holiday
from .utils import CallbackLogHandler, holiday_row, is_blank, notify
from .view_model import HolidayViewModel

logger = logging.getLogger(__name__)

BG = "#1e1e1e"
FIELD_BG = "#2b2b2b"

# (label, Holiday attribute) for the add/edit dialogs
FORM_FIELDS = (
    ("Title", "title"),
    ("Location", "location"),
    ("Notes", "notes"),
    ("Start date", "start_date"),
    ("End date", "end_date"),
)


class AppUI:
    """
    Design (AppUI)
    - Purpose: Encapsulate all UI creation and behavior.
    - Public attributes:
        enable_notifications (tk.BooleanVar): toggles desktop notifications for errors
        show_logs (tk.BooleanVar): toggles visibility of the logs panel
    - Public methods:
        refresh_list(), refresh_status(): repaint from the view model (main thread only)
        close(): detach observers and the log handler
    """

    def __init__(self, root: tk.Tk, view_model: HolidayViewModel):
        self.root = root
        self.vm = view_model

        self.enable_notifications = tk.BooleanVar(value=True)
        self.show_logs = tk.BooleanVar(value=False)
        self.search_text = tk.StringVar(value=self.vm.query.value)
        self.status_text = tk.StringVar(value="")
        # Treeview item id -> Holiday currently shown in that row
        self._rows: Dict[str, Holiday] = {}

        # Window
        self.root.title(APP_TITLE)
        self.root.rowconfigure(0, weight=1)
        self.root.columnconfigure(0, weight=1)
        self.root.configure(bg=BG)

        # Paned window: top = content (search, tree, buttons), bottom = logs (when shown)
        self.paned = ttk.PanedWindow(self.root, orient=tk.VERTICAL)
        self.paned.grid(row=0, column=0, sticky="nsew")

        content_frame = tk.Frame(self.paned, bg=BG)
        content_frame.rowconfigure(1, weight=1)
        content_frame.columnconfigure(0, weight=1)
        self.paned.add(content_frame, weight=1)

        self.bottom_frame = tk.Frame(self.paned, bg=BG)
        self.logs_box = tk.Text(self.bottom_frame, height=6, bg="#1b1b1b", fg="#dddddd", wrap="none")
        self.logs_box.configure(state="disabled")
        self.paned.add(self.bottom_frame, weight=0)  # start collapsed; expand when Logs checked

        def _keep_sash_collapsed(_event=None):
            if not self.show_logs.get():
                self.paned.update_idletasks()
                total = self.paned.winfo_height()
                if total > 0:
                    self.paned.sashpos(0, total)

        self.paned.bind("<Configure>", _keep_sash_collapsed)

        # Style
        style = ttk.Style(self.root)
        style.theme_use("default")
        style.configure(
            "Treeview",
            background=FIELD_BG,
            foreground="#f0f0f0",
            fieldbackground=FIELD_BG,
            rowheight=24,
            font=("Segoe UI", 10),
        )
        style.configure(
            "Treeview.Heading",
            background=BG,
            foreground="#ffffff",
            font=("Segoe UI", 10, "bold"),
        )
        style.map("Treeview", background=[('selected', '#444')], foreground=[])

        # Search
        search_frame = tk.Frame(content_frame, bg=BG)
        search_frame.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 5))
        search_frame.columnconfigure(1, weight=1)
        tk.Label(search_frame, text="Search holidays...", fg="white", bg=BG).grid(row=0, column=0, padx=(0, 5))
        search_entry = tk.Entry(search_frame, textvariable=self.search_text)
        search_entry.grid(row=0, column=1, sticky="ew")
        self.search_text.trace_add("write", lambda *_: self.vm.set_query(self.search_text.get()))

        # Treeview
        self.columns = ("title", "location", "notes", "start_date", "end_date", "created")
        self.tree = ttk.Treeview(content_frame, columns=self.columns, show="headings")
        self.tree.grid(row=1, column=0, sticky="nsew", padx=10, pady=5)
        headers = {
            "title": "Title",
            "location": "Location",
            "notes": "Notes",
            "start_date": "Start",
            "end_date": "End",
            "created": "Created",
        }
        for col in self.columns:
            self.tree.heading(col, text=headers[col])
        self.tree.bind("<Double-1>", lambda _e: self.edit_holiday())

        self.empty_label = tk.Label(content_frame, text="", fg="gray", bg=FIELD_BG)

        # Status line: "Saving..." while loading, last error otherwise
        status_frame = tk.Frame(content_frame, bg=BG)
        status_frame.grid(row=2, column=0, sticky="ew", padx=10)
        tk.Label(status_frame, textvariable=self.status_text, fg="#FF6A6A", bg=BG, anchor="w").pack(
            side=tk.LEFT, fill=tk.X, expand=True
        )
        self.dismiss_button = ttk.Button(status_frame, text="Dismiss", command=self.vm.clear_error)

        # Buttons & toggles
        button_frame = tk.Frame(content_frame, bg=BG)
        button_frame.grid(row=3, column=0, sticky="ew", padx=10, pady=(5, 10))

        ttk.Button(button_frame, text="Add Holiday", command=self.add_holiday).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Edit Holiday", command=self.edit_holiday).pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Delete Holiday", command=self.delete_holiday).pack(side=tk.LEFT, padx=5)

        tk.Checkbutton(
            button_frame,
            text="Enable Notifications",
            variable=self.enable_notifications,
            fg="white",
            bg=BG,
            selectcolor=FIELD_BG,
            activebackground=BG,
            activeforeground="white",
        ).pack(side=tk.LEFT, padx=5)

        tk.Checkbutton(
            button_frame,
            text="Show Logs",
            variable=self.show_logs,
            fg="white",
            bg=BG,
            selectcolor=FIELD_BG,
            command=self.toggle_logs,
        ).pack(side=tk.LEFT, padx=5)

        # Logs panel is fed by the logging module
        self._log_handler = CallbackLogHandler(lambda line: self._on_main(lambda: self._append_log(line)))
        logging.getLogger().addHandler(self._log_handler)

        # Observers (may fire from any thread)
        self._unsubscribe: List[Callable[[], None]] = [
            self.vm.holidays.subscribe(lambda _v: self._on_main(self.refresh_list)),
            self.vm.loading.subscribe(lambda _v: self._on_main(self.refresh_status)),
            self.vm.error.subscribe(self._on_error_changed),
        ]

        # Initial paint
        self.refresh_list()
        self.refresh_status()

    # ---------- thread marshalling ----------

    def _on_main(self, fn: Callable[[], None]) -> None:
        """Schedule fn on the Tk main thread."""
        try:
            self.root.after(0, fn)
        except (RuntimeError, tk.TclError):
            # window already destroyed
            pass

    def _run_async(self, fn: Callable[[], object]) -> None:
        threading.Thread(target=fn, daemon=True).start()

    def _on_error_changed(self, message: Optional[str]) -> None:
        def show():
            if message and self.enable_notifications.get():
                notify(f"{APP_TITLE} error", message)
            self.refresh_status()

        self._on_main(show)

    # ---------- rendering ----------

    def refresh_list(self) -> None:
        """
        Purpose: Rebuild the Tree rows from the view model's current list.
        Thread-safety: Must run on main thread.
        """
        holidays = self.vm.holidays.value
        self.tree.delete(*self.tree.get_children())
        self._rows.clear()
        for h in holidays:
            item = self.tree.insert(
                "", "end",
                values=holiday_row(h),
            )
            self._rows[item] = h

        if holidays:
            self.empty_label.place_forget()
        else:
            self.empty_label.configure(text=EMPTY_SEARCH_TEXT if self.vm.query.value else EMPTY_LIST_TEXT)
            self.empty_label.place(in_=self.tree, relx=0.5, rely=0.5, anchor="center")

    def refresh_status(self) -> None:
        error = self.vm.error.value
        if self.vm.loading.value:
            self.status_text.set("Saving...")
        elif error:
            self.status_text.set(error)
        else:
            self.status_text.set("")
        if error:
            self.dismiss_button.pack(side=tk.RIGHT)
        else:
            self.dismiss_button.pack_forget()

    def toggle_logs(self) -> None:
        """Show/hide logs in the bottom pane. Resize pane to show/hide."""
        if self.show_logs.get():
            self.paned.pane(self.bottom_frame, weight=1)
            self.logs_box.pack(fill=tk.BOTH, expand=True, padx=10, pady=(0, 6))
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, int(total * 0.75))
        else:
            self.logs_box.pack_forget()
            self.paned.pane(self.bottom_frame, weight=0)
            self.paned.update_idletasks()
            total = self.paned.winfo_height()
            if total > 0:
                self.paned.sashpos(0, total)

    def _append_log(self, text: str) -> None:
        """
        Purpose: Append one line to the Logs panel and trim to LOG_MAX_LINES.
        Thread-safety: Main thread only (called via after()).
        """
        self.logs_box.configure(state="normal")
        self.logs_box.insert("end", text)
        self.logs_box.see("end")
        total_lines = int(self.logs_box.index("end-1c").split(".")[0])
        if total_lines > LOG_MAX_LINES:
            remove = total_lines - LOG_MAX_LINES
            self.logs_box.delete("1.0", f"{remove + 1}.0")
        self.logs_box.configure(state="disabled")

    # ---------- CRUD dialogs ----------

    def _selected(self, action: str) -> Optional[Holiday]:
        selected = self.tree.selection()
        if not selected:
            messagebox.showinfo(action, "Select a holiday first.")
            return None
        return self._rows.get(selected[0])

    def _open_form(self, title: str, button: str, initial: Holiday, on_save: Callable[[Holiday], None]) -> None:
        win = tk.Toplevel(self.root)
        win.title(title)
        win.configure(bg=BG)

        entries: Dict[str, tk.Entry] = {}
        for row, (label, attr) in enumerate(FORM_FIELDS):
            tk.Label(win, text=label, fg="white", bg=BG).grid(row=row, column=0, sticky="e", padx=5, pady=5)
            entry = tk.Entry(win, width=40)
            entry.insert(0, getattr(initial, attr))
            entry.grid(row=row, column=1, padx=5, pady=5)
            entries[attr] = entry

        def save():
            values = {attr: entry.get() for attr, entry in entries.items()}
            if is_blank(values["title"]):
                messagebox.showerror(title, BLANK_TITLE_TEXT, parent=win)
                return
            updated = Holiday(
                id=initial.id,
                created_at=initial.created_at,
                **values,
            )
            win.destroy()
            on_save(updated)

        buttons = tk.Frame(win, bg=BG)
        buttons.grid(row=len(FORM_FIELDS), column=0, columnspan=2, pady=10)
        ttk.Button(buttons, text=button, command=save).pack(side=tk.LEFT, padx=5)
        ttk.Button(buttons, text="Cancel", command=win.destroy).pack(side=tk.LEFT, padx=5)

    def add_holiday(self) -> None:
        self._open_form(
            "Add Holiday", "Save", Holiday(),
            lambda h: self._run_async(lambda: self.vm.add_holiday(h)),
        )

    def edit_holiday(self) -> None:
        holiday = self._selected("Edit Holiday")
        if holiday is None:
            return
        self._open_form(
            "Edit Holiday", "Update", holiday,
            lambda h: self._run_async(lambda: self.vm.update_holiday(h)),
        )

    def delete_holiday(self) -> None:
        holiday = self._selected("Delete Holiday")
        if holiday is None:
            return
        self._run_async(lambda: self.vm.delete_holiday(holiday))

    def close(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        logging.getLogger().removeHandler(self._log_handler)
