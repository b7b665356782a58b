"""Management of monitored targets: ownership checks, persistence and monitoring."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from uptimebot.monitor import Manager, Target
from uptimebot.observer import State
from uptimebot.target_repository import TargetNotFoundError
from uptimebot.user_target import UserTarget

logger = logging.getLogger(__name__)

MAX_TARGETS_PER_USER = 5


class TargetServiceError(Exception):
    """A target operation failed."""


class _DetailedError(TargetServiceError):
    base_message = ""

    def __init__(self, detail: str = "") -> None:
        message = f"{self.base_message}: {detail}" if detail else self.base_message
        super().__init__(message)


class UnauthorizedError(_DetailedError):
    """A user tried to reach a target they do not own."""

    base_message = "unauthorized access to target"


class TargetMissingError(_DetailedError):
    """The requested target does not exist."""

    base_message = "target not found"


class InvalidInputError(_DetailedError):
    """The given parameters are invalid."""

    base_message = "invalid input parameters"


class TargetLimitReachedError(_DetailedError):
    """The user already has the maximum number of targets."""

    base_message = f"maximum number of targets ({MAX_TARGETS_PER_USER}) reached"


def _status_text(status: Any) -> str:
    return str(status.value) if isinstance(status, Enum) else str(status)


class TargetService:
    """Creates, reads, updates and deletes targets and keeps their monitors running."""

    def __init__(self, repository: Any, notifier_service: Any) -> None:
        self._repository = repository
        self._notifier_service = notifier_service
        self.manager = Manager()

    @staticmethod
    def _validate(user_id: int, url: str, interval: timedelta) -> None:
        if user_id <= 0:
            raise InvalidInputError("invalid userID")
        if not url:
            raise InvalidInputError("URL cannot be empty")
        if interval <= timedelta(0):
            raise InvalidInputError("interval must be positive")

    def _handle_status_update(self, target: Target | None, status: Any) -> None:
        """Persist a status change and tell the target's observers about it."""
        if target is None or not status:
            raise InvalidInputError("target or status is nil")
        status_text = _status_text(status)

        try:
            self._repository.update_status(target, status_text)
        except TargetNotFoundError as exc:
            raise TargetMissingError(f"target {target.url} not found") from exc
        except Exception as exc:
            raise TargetServiceError(f"failed to update target status: {exc}") from exc

        try:
            self._notifier_service.configure_observers(target.id)
        except Exception as exc:
            raise TargetServiceError(f"failed to configure observers: {exc}") from exc

        state = State(
            name=target.url,
            status=status_text,
            message=f"Target {target.url} is {status_text}",
            updated_at=datetime.now(),
        )
        self._notifier_service.subject.notify(state)

    def _register(self, target: Target) -> None:
        try:
            self.manager.register(target)
        except ValueError as exc:
            raise TargetServiceError(
                f"failed to register target monitor: {exc}"
            ) from exc

    def _sync_monitor(self, stored: UserTarget, register_if_missing: bool) -> None:
        existing = self.manager.targets.get(stored.id)
        if existing is not None:
            existing.update(stored.target)
        elif register_if_missing:
            self._register(stored.target)

    def create(self, user_id: int, url: str, interval: timedelta) -> UserTarget:
        """Store a new enabled target for a user and start monitoring it."""
        self._validate(user_id, url, interval)

        try:
            existing = self.get_all_by_user_id(user_id)
        except Exception as exc:
            raise TargetServiceError(f"failed to check target limit: {exc}") from exc
        if len(existing) >= MAX_TARGETS_PER_USER:
            raise TargetLimitReachedError()

        user_target = UserTarget(
            user_id=user_id,
            target=Target(
                url=url,
                interval=interval,
                enabled=True,
                status="pending",
                on_status_update=self._handle_status_update,
            ),
        )

        try:
            created = self._repository.create(user_target)
        except TargetNotFoundError as exc:
            raise TargetMissingError(str(exc)) from exc
        except Exception as exc:
            raise TargetServiceError(f"failed to create target: {exc}") from exc

        self._register(created.target)
        return created

    def get_by_id(self, target_id: int, user_id: int) -> UserTarget:
        """The target with this id, provided the user owns it."""
        if target_id <= 0 or user_id <= 0:
            raise InvalidInputError("invalid id or userID")

        try:
            user_target = self._repository.get_by_id(target_id)
        except TargetNotFoundError as exc:
            raise TargetMissingError(f"target with id {target_id} not found") from exc
        except Exception as exc:
            raise TargetServiceError(f"failed to fetch target: {exc}") from exc

        if user_target.user_id != user_id:
            raise UnauthorizedError()
        return user_target

    def get_all(self) -> list[UserTarget]:
        """Every target in the system."""
        try:
            return self._repository.get_all()
        except Exception as exc:
            raise TargetServiceError(f"failed to fetch targets: {exc}") from exc

    def get_all_by_user_id(self, user_id: int) -> list[UserTarget]:
        """Every target owned by a user."""
        if user_id <= 0:
            raise InvalidInputError("invalid userID")
        return self._repository.get_all_by_user_id(user_id)

    def update(self, user_target: UserTarget, user_id: int) -> UserTarget:
        """Store a changed target owned by the user and refresh its monitor."""
        self._validate(user_id, user_target.url, user_target.interval)

        if user_target.user_id != user_id:
            raise UnauthorizedError(
                f"user {user_id} does not own target {user_target.id}"
            )

        user_target.on_status_update = self._handle_status_update

        try:
            updated = self._repository.update(user_target)
        except TargetNotFoundError as exc:
            raise TargetMissingError(
                f"target with id {user_target.id} not found"
            ) from exc
        except Exception as exc:
            raise TargetServiceError(f"failed to update target: {exc}") from exc

        self._sync_monitor(updated, register_if_missing=True)
        return updated

    def delete(self, target_id: int, user_id: int) -> None:
        """Stop monitoring and remove a target owned by the user."""
        user_target = self.get_by_id(target_id, user_id)
        self.manager.revoke(user_target.id)
        self._repository.delete(user_target.id)

    def toggle_enabled(self, target_id: int, user_id: int) -> UserTarget:
        """Flip whether a target owned by the user is checked."""
        user_target = self.get_by_id(target_id, user_id)

        user_target.enabled = not user_target.enabled
        user_target.on_status_update = self._handle_status_update

        try:
            updated = self._repository.update(user_target)
        except Exception as exc:
            raise TargetServiceError(f"failed to update target: {exc}") from exc

        self._sync_monitor(updated, register_if_missing=bool(updated.enabled))
        return updated

    def initialize_monitoring(self) -> None:
        """Start monitoring every stored target."""
        try:
            user_targets = self._repository.get_all()
        except Exception as exc:
            raise TargetServiceError(f"failed to fetch targets: {exc}") from exc

        for user_target in user_targets:
            user_target.on_status_update = self._handle_status_update
            try:
                self.manager.register(user_target.target)
            except ValueError as exc:
                raise TargetServiceError(
                    f"failed to register target {user_target.url}: {exc}"
                ) from exc