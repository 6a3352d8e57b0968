"""
SQLite preference storage for exportflow.

Persists the user's choices between runs: the definition file, the output
folder and the last selected workflow and paper.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

WORKFLOWS_FILE = "workflows_file"
OUTPUT_FOLDER = "output_folder"
WORKFLOW_CHOICE = "wf_lastchoice"
PAPER_CHOICE = "pp_lastchoice"


def clamp_choice(last: int, count: int) -> int:
    """
    Clamp a persisted 1-based selection to the entries available now.

    Args:
        last: Previously selected index (0 = never selected)
        count: Number of entries after a reload

    Returns:
        1 if unset and entries exist, ``count`` if the previous index is
        out of range, the previous index otherwise
    """
    if last <= 0 and count > 0:
        return 1
    if last > count:
        return count
    return last


class SelectionState(BaseModel):
    """Last selected workflow and paper (1-based, 0 = none)."""

    workflow_choice: int = Field(default=0, ge=0)
    paper_choice: int = Field(default=0, ge=0)


class PreferenceStore:
    """
    SQLite-based key/value preference storage.

    Example:
        >>> prefs = PreferenceStore("~/.exportflow")
        >>> prefs.set_str("workflows_file", "/home/me/workflows.txt")
        >>> prefs.select(workflow_choice=3)
        >>> prefs.clamp_selection(workflow_count=1, paper_count=4).workflow_choice
        1
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the preference storage.

        Args:
            data_dir: Directory for the database file
        """
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = self.data_dir / "preferences.db"
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get_str(self, key: str, default: str | None = None) -> str | None:
        """Read a string preference."""
        with sqlite3.connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT value FROM preferences WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else default

    def set_str(self, key: str, value: str) -> None:
        """Write a string preference."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO preferences (key, value, updated_at)
                VALUES (?, ?, ?)
            """,
                (key, value, datetime.now().isoformat()),
            )
            conn.commit()

    def get_int(self, key: str, default: int = 0) -> int:
        """Read an integer preference; unparsable values read as ``default``."""
        value = self.get_str(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def set_int(self, key: str, value: int) -> None:
        """Write an integer preference."""
        self.set_str(key, str(int(value)))

    def delete(self, key: str) -> bool:
        """Delete a preference. Returns True if it existed."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
            conn.commit()
            return cursor.rowcount > 0

    @property
    def selection(self) -> SelectionState:
        """Get the persisted workflow and paper selection."""
        return SelectionState(
            workflow_choice=max(self.get_int(WORKFLOW_CHOICE), 0),
            paper_choice=max(self.get_int(PAPER_CHOICE), 0),
        )

    def select(self, workflow_choice: int | None = None, paper_choice: int | None = None) -> None:
        """Persist a new selection."""
        if workflow_choice is not None:
            self.set_int(WORKFLOW_CHOICE, workflow_choice)
        if paper_choice is not None:
            self.set_int(PAPER_CHOICE, paper_choice)

    def clamp_selection(self, workflow_count: int, paper_count: int) -> SelectionState:
        """
        Clamp the persisted selection after a reload and write it back.

        Args:
            workflow_count: Number of workflows now defined
            paper_count: Number of papers now defined

        Returns:
            The clamped selection
        """
        current = self.selection
        clamped = SelectionState(
            workflow_choice=clamp_choice(current.workflow_choice, workflow_count),
            paper_choice=clamp_choice(current.paper_choice, paper_count),
        )
        self.select(clamped.workflow_choice, clamped.paper_choice)
        return clamped
