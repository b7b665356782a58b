"""Storage of monitored targets in SQLite."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from enum import Enum
from urllib.parse import urlsplit

from uptimebot.monitor import Target
from uptimebot.user_target import UserTarget

_COLUMNS = "id, url, status, enabled, interval, changed_at, user_id"


class TargetRepositoryError(Exception):
    """A target could not be stored or read."""


class TargetNotFoundError(TargetRepositoryError):
    """No target exists with the requested id."""

    def __init__(self, message: str = "target not found") -> None:
        super().__init__(message)


def _to_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        try:
            moment = moment.astimezone()
        except (OverflowError, ValueError, OSError):
            moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _text(value: object) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _from_row(row: tuple) -> UserTarget:
    target_id, url, status, enabled, interval, changed_at, user_id = row
    target = Target(
        id=target_id,
        url=url,
        status=status,
        enabled=bool(enabled),
        interval=timedelta(seconds=int(interval)),
        status_changed_at=_to_utc(datetime.fromisoformat(changed_at)),
    )
    return UserTarget(user_id=user_id, target=target)


class TargetRepository:
    """Creates, reads, updates and deletes target rows."""

    def __init__(self, db: sqlite3.Connection) -> None:
        self._db = db

    def create(self, user_target: UserTarget) -> UserTarget:
        """Validate and insert a target; its id is filled in on the returned object."""
        if not user_target.url:
            raise TargetRepositoryError("URL cannot be empty")
        try:
            urlsplit(user_target.url)
        except ValueError as exc:
            raise TargetRepositoryError(f"invalid URL: {exc}") from exc
        if user_target.user_id <= 0:
            raise TargetRepositoryError(f"invalid UserID: {user_target.user_id}")

        user_target.status_changed_at = _to_utc(user_target.status_changed_at)
        try:
            with self._db:
                cursor = self._db.execute(
                    "INSERT INTO target (url, user_id, status, enabled, interval, changed_at)"
                    " VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        user_target.url,
                        user_target.user_id,
                        _text(user_target.status),
                        int(bool(user_target.enabled)),
                        user_target.interval.total_seconds(),
                        user_target.status_changed_at.isoformat(),
                    ),
                )
        except sqlite3.Error as exc:
            raise TargetRepositoryError(f"failed to create target: {exc}") from exc
        user_target.id = cursor.lastrowid
        return user_target

    def get_by_id(self, target_id: int) -> UserTarget:
        """The target with this id; raises TargetNotFoundError when missing."""
        try:
            row = self._db.execute(
                f"SELECT {_COLUMNS} FROM target WHERE id = ?", (target_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise TargetRepositoryError(f"failed to get target: {exc}") from exc
        if row is None:
            raise TargetNotFoundError()
        return _from_row(row)

    def _select_many(self, where: str = "", params: tuple = ()) -> list[UserTarget]:
        try:
            rows = self._db.execute(
                f"SELECT {_COLUMNS} FROM target {where} ORDER BY id", params
            ).fetchall()
        except sqlite3.Error as exc:
            raise TargetRepositoryError(f"failed to query targets: {exc}") from exc
        try:
            return [_from_row(row) for row in rows]
        except (TypeError, ValueError) as exc:
            raise TargetRepositoryError(f"failed to scan target: {exc}") from exc

    def get_all(self) -> list[UserTarget]:
        """Every stored target."""
        return self._select_many()

    def get_all_by_user_id(self, user_id: int) -> list[UserTarget]:
        """Every target owned by a user."""
        return self._select_many("WHERE user_id = ?", (user_id,))

    def update(self, user_target: UserTarget) -> UserTarget:
        """Store a target's fields; raises TargetNotFoundError when it does not exist."""
        user_target.status_changed_at = _to_utc(user_target.status_changed_at)
        try:
            with self._db:
                cursor = self._db.execute(
                    "UPDATE target SET url = ?, status = ?, enabled = ?, interval = ?,"
                    " changed_at = ? WHERE id = ?",
                    (
                        user_target.url,
                        _text(user_target.status),
                        int(bool(user_target.enabled)),
                        user_target.interval.total_seconds(),
                        user_target.status_changed_at.isoformat(),
                        user_target.id,
                    ),
                )
        except sqlite3.Error as exc:
            raise TargetRepositoryError(f"failed to update target: {exc}") from exc
        if cursor.rowcount == 0:
            raise TargetNotFoundError()
        return user_target

    def update_status(self, target: Target, status: str) -> None:
        """Store a new status with the target's change time."""
        target.status_changed_at = _to_utc(target.status_changed_at)
        try:
            with self._db:
                cursor = self._db.execute(
                    "UPDATE target SET status = ?, changed_at = ? WHERE id = ?",
                    (_text(status), target.status_changed_at.isoformat(), target.id),
                )
        except sqlite3.Error as exc:
            raise TargetRepositoryError(
                f"failed to update target status: {exc}"
            ) from exc
        if cursor.rowcount == 0:
            raise TargetNotFoundError()

    def delete(self, target_id: int) -> None:
        """Remove a target; raises TargetNotFoundError when it does not exist."""
        try:
            with self._db:
                cursor = self._db.execute(
                    "DELETE FROM target WHERE id = ?", (target_id,)
                )
        except sqlite3.Error as exc:
            raise TargetRepositoryError(f"failed to delete target: {exc}") from exc
        if cursor.rowcount == 0:
            raise TargetNotFoundError()