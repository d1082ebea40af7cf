"""Append-only JSONL command history.

Every resolved command is written as a newline-delimited JSON record
carrying a UTC ISO-8601 timestamp, the raw command text, and the user (or
client address) that issued it.  The file is trimmed to the most recent
``max_entries`` records.

Thread-safety is achieved with a threading.Lock so the history is safe to
write from the HTTP server's request threads.

Example
-------
>>> from pathlib import Path
>>> history = History(Path("/tmp/history.jsonl"), max_entries=100)
>>> history.add("gh facebook/react", user="alice")
>>> history.last_n(1)[0]["command"]
'gh facebook/react'
"""
from __future__ import annotations

import getpass
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator


def current_user() -> str:
    """Return the login name of the current user, or ``"unknown"``."""
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


class History:
    """Append-only JSONL command history.

    Parameters
    ----------
    log_path:
        Path to the ``.jsonl`` history file.  Parent directories are
        created automatically on first write.
    max_entries:
        Number of most recent records kept on disk.
    """

    def __init__(self, log_path: Path, max_entries: int = 1000) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self._log_path = log_path
        self._max_entries = max_entries
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def add(self, command: str, user: str | None = None) -> None:
        """Append a command record, trimming old records when needed.

        Parameters
        ----------
        command:
            The raw command text as typed.
        user:
            Who issued the command.  Defaults to the current login name.
        """
        record: dict[str, object] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "command": command,
            "user": user if user is not None else current_user(),
        }
        with self._lock:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(record, default=str) + "\n")
            self._trim_locked()

    def clear(self) -> None:
        """Delete every history record."""
        with self._lock:
            if self._log_path.exists():
                self._log_path.unlink()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def read_all(self) -> list[dict[str, object]]:
        """Return all records in chronological order (empty if no file)."""
        with self._lock:
            return list(self._iter_records())

    def last_n(self, n: int) -> list[dict[str, object]]:
        """Return the ``n`` most recent records."""
        if n <= 0:
            return []
        return self.read_all()[-n:]

    def count(self) -> int:
        """Return the total number of records."""
        return len(self.read_all())

    @property
    def log_path(self) -> Path:
        """The filesystem path of the history file."""
        return self._log_path

    @property
    def max_entries(self) -> int:
        return self._max_entries

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _trim_locked(self) -> None:
        records = list(self._iter_records())
        if len(records) <= self._max_entries:
            return
        kept = records[-self._max_entries:]
        tmp_path = self._log_path.with_suffix(self._log_path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            for record in kept:
                fh.write(json.dumps(record, default=str) + "\n")
        tmp_path.replace(self._log_path)

    def _iter_records(self) -> Iterator[dict[str, object]]:
        """Yield parsed records; caller holds the lock."""
        if not self._log_path.exists():
            return
        with self._log_path.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    try:
                        yield json.loads(line)
                    except json.JSONDecodeError:
                        pass  # Skip malformed lines silently.
