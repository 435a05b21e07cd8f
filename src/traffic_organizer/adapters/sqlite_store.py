"""SQLite session store adapter.

Implements the core SessionStore port using a simple SQLite database, for
hosts that keep visitor state server-side instead of in a cookie.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Callable, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SQLiteSessionStore:
    """Thin SQLite wrapper that satisfies the SessionStore contract.

    One store instance is bound to one visitor id; blobs are keyed by
    (visitor_id, name).
    """

    def __init__(
        self,
        db_path: str,
        visitor_id: str,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._db_path = db_path
        self._visitor_id = visitor_id
        self._clock = clock or _utcnow

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the sessions table if it does not exist."""

        with self._connect() as conn:
            # sessions keeps one blob per visitor and cookie name.
            # Fields:
            # - visitor_id: host-assigned visitor identifier
            # - name: cookie name the blob is stored under
            # - value: encoded attribution record
            # - expires_at: ISO-8601 UTC timestamp after which the row is ignored
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    visitor_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    value TEXT NOT NULL,
                    expires_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (visitor_id, name)
                )
                """
            )

    def for_visitor(self, visitor_id: str) -> "SQLiteSessionStore":
        """Return a store for another visitor sharing the same database."""

        return SQLiteSessionStore(self._db_path, visitor_id, self._clock)

    def read(self, name: str) -> Optional[str]:
        """Return the stored blob, or None when absent or expired."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT value, expires_at FROM sessions WHERE visitor_id = ? AND name = ?",
                (self._visitor_id, name),
            ).fetchone()
        if row is None:
            return None
        if datetime.fromisoformat(row["expires_at"]) <= self._clock():
            return None
        return str(row["value"])

    def write(self, name: str, value: str, expires: datetime) -> None:
        """Upsert the blob with its absolute expiry."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO sessions (visitor_id, name, value, expires_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(visitor_id, name) DO UPDATE SET
                    value = excluded.value,
                    expires_at = excluded.expires_at
                """,
                (self._visitor_id, name, value, expires.astimezone(timezone.utc).isoformat()),
            )

    def delete(self, name: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM sessions WHERE visitor_id = ? AND name = ?",
                (self._visitor_id, name),
            )

    def cleanup_expired(self) -> int:
        """Delete expired sessions for all visitors and return the number removed."""

        cutoff = self._clock().astimezone(timezone.utc)
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM sessions WHERE expires_at <= ?",
                (cutoff.isoformat(),),
            )
            return cur.rowcount
