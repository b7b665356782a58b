"""Storage of notifiers in SQLite."""

from __future__ import annotations

import sqlite3

from uptimebot.notifier import Notifier, NotifierType

_COLUMNS = "id, target_id, type, config"


class NotifierRepositoryError(Exception):
    """A notifier could not be stored or read."""


def _type_value(kind: NotifierType | None) -> str:
    return kind.value if kind is not None else ""


def _parse_type(value: str) -> NotifierType | None:
    try:
        return NotifierType(value)
    except ValueError:
        return None


def _from_row(row: tuple) -> Notifier:
    notifier_id, target_id, kind, config = row
    return Notifier(
        id=notifier_id, target_id=target_id, type=_parse_type(kind), config=config
    )


def _validate(notifier: Notifier) -> None:
    if notifier.type == NotifierType.SLACK:
        try:
            slack = notifier.slack_config()
        except ValueError as exc:
            raise NotifierRepositoryError(f"invalid slack config: {exc}") from exc
        if slack is None or not slack.webhook_url:
            raise NotifierRepositoryError("webhook URL is required for slack notifier")
    elif notifier.type == NotifierType.EMAIL:
        try:
            email = notifier.email_config()
        except ValueError as exc:
            raise NotifierRepositoryError(f"invalid email config: {exc}") from exc
        if email is None:
            raise NotifierRepositoryError("email configuration is required")


class NotifierRepository:
    """Creates, reads, updates and deletes notifier rows."""

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def _select_one(self, notifier_id: int) -> tuple | None:
        return self._db.execute(
            f"SELECT {_COLUMNS} FROM notifier WHERE id = ?", (notifier_id,)
        ).fetchone()

    def create(self, notifier: Notifier) -> Notifier:
        """Validate and insert a notifier, returning the stored copy."""
        _validate(notifier)
        try:
            with self._db:
                cursor = self._db.execute(
                    "INSERT INTO notifier (target_id, type, config) VALUES (?, ?, ?)",
                    (notifier.target_id, _type_value(notifier.type), notifier.config),
                )
                row = self._select_one(cursor.lastrowid)
        except sqlite3.Error as exc:
            raise NotifierRepositoryError(f"failed to create notifier: {exc}") from exc
        return _from_row(row)

    def get(self, notifier_id: int) -> Notifier | None:
        """The notifier with this id, or None when there is none."""
        try:
            row = self._select_one(notifier_id)
        except sqlite3.Error as exc:
            raise NotifierRepositoryError(f"failed to get notifier: {exc}") from exc
        return _from_row(row) if row is not None else None

    def update(self, notifier_id: int, config: str) -> Notifier:
        """Replace a notifier's configuration and return the stored copy."""
        try:
            with self._db:
                cursor = self._db.execute(
                    "UPDATE notifier SET config = ? WHERE id = ?", (config, notifier_id)
                )
                row = self._select_one(notifier_id) if cursor.rowcount else None
        except sqlite3.Error as exc:
            raise NotifierRepositoryError(f"failed to update: {exc}") from exc
        if row is None:
            raise NotifierRepositoryError(
                f"failed to update: notifier {notifier_id} not found"
            )
        return _from_row(row)

    def delete(self, notifier_id: int) -> None:
        """Remove a notifier; removing a missing one is not an error."""
        try:
            with self._db:
                self._db.execute("DELETE FROM notifier WHERE id = ?", (notifier_id,))
        except sqlite3.Error as exc:
            raise NotifierRepositoryError(f"failed to delete notifier: {exc}") from exc

    def get_by_target_id(self, target_id: int) -> list[Notifier]:
        """All notifiers attached to a target."""
        try:
            rows = self._db.execute(
                f"SELECT {_COLUMNS} FROM notifier WHERE target_id = ? ORDER BY id",
                (target_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise NotifierRepositoryError(f"failed to query notifiers: {exc}") from exc
        return [_from_row(row) for row in rows]