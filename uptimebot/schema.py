"""SQLite schema for targets and their notifiers."""

from __future__ import annotations

import sqlite3

_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS target (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        url TEXT NOT NULL,
        user_id INTEGER NOT NULL,
        status TEXT NOT NULL DEFAULT 'pending',
        enabled INTEGER NOT NULL DEFAULT 1,
        interval REAL NOT NULL,
        changed_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notifier (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        target_id INTEGER NOT NULL REFERENCES target(id) ON DELETE CASCADE,
        type TEXT NOT NULL,
        config TEXT NOT NULL
    )
    """,
)


def create_schema(db: sqlite3.Connection) -> None:
    """Create the tables if missing and turn on foreign-key enforcement."""
    db.execute("PRAGMA foreign_keys = ON")
    with db:
        for statement in _STATEMENTS:
            db.execute(statement)