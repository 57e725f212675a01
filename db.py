import logging
import sqlite3
import threading
from contextlib import closing
from typing import Optional

import settings
from errors import StorageUnavailable

logger = logging.getLogger(__name__)

_lock = threading.Lock()


class LocalStorage:
    """
    Key-value slots backed by a single sqlite table. Values are plain text;
    callers do their own (de)serialization.
    """
    def __init__(self, path: Optional[str] = None):
        self.path = path or settings.DB_PATH

    def _connect(self):
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_table(self, conn):
        conn.execute("""
        CREATE TABLE IF NOT EXISTS storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
        """)

    def get_item(self, key: str) -> Optional[str]:
        try:
            with closing(self._connect()) as conn:
                self._init_table(conn)
                cur = conn.cursor()
                cur.execute("SELECT value FROM storage WHERE key = ?", (key,))
                row = cur.fetchone()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Cannot read {key!r} from {self.path}: {e}") from e
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with _lock:
            try:
                with closing(self._connect()) as conn:
                    self._init_table(conn)
                    conn.execute("INSERT OR REPLACE INTO storage (key, value) VALUES (?, ?)", (key, value))
                    conn.commit()
            except sqlite3.Error as e:
                raise StorageUnavailable(f"Cannot write {key!r} to {self.path}: {e}") from e
        logger.debug("Stored %d chars under %s", len(value), key)
