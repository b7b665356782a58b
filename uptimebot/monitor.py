"""Periodic HTTP checks of monitored targets."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_IDLE_CONNS = 100
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


class Status(str, Enum):
    UP = "up"
    ERROR = "error"
    DOWN = "down"
    PAUSED = "paused"


class CheckError(Exception):
    """A target check failed."""


class CheckTimeout(CheckError):
    """A target check timed out; the target's status is left unchanged."""


def _default_client() -> requests.Session:
    session = requests.Session()
    adapter = HTTPAdapter(pool_maxsize=DEFAULT_MAX_IDLE_CONNS)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


DEFAULT_CLIENT = _default_client()

StatusCallback = Callable[["Target", str], None]


@dataclass(eq=False)
class Target:
    """A URL that is checked periodically."""

    id: int = 0
    url: str = ""
    status: str = ""
    enabled: bool = False
    interval: timedelta = timedelta(0)
    status_changed_at: datetime = ZERO_TIME
    client: Any = None
    timeout: float = DEFAULT_TIMEOUT
    on_status_update: Optional[StatusCallback] = None
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )
    _stop: Optional[threading.Event] = field(default=None, init=False, repr=False)

    def check(self) -> None:
        """Request the URL once and record the resulting status.

        Raises CheckTimeout on a timeout (status unchanged) and CheckError on
        connection failures or HTTP error responses.
        """
        start_status = self.status
        client = self.client if self.client is not None else DEFAULT_CLIENT
        try:
            try:
                response = client.get(self.url, timeout=self.timeout)
            except requests.Timeout as exc:
                logger.info("target check timeout: %s: %s", self.url, exc)
                raise CheckTimeout(f"timeout error: {exc}") from exc
            except requests.RequestException as exc:
                self.update_status(Status.ERROR)
                raise CheckError(f"connection error: {exc}") from exc

            with response:
                if response.status_code >= 400:
                    self.update_status(Status.DOWN)
                    raise CheckError(f"HTTP error: {response.status_code}")
            self.update_status(Status.UP)
        finally:
            logger.info(
                "target check completed: %s from %s to %s",
                self.url,
                start_status,
                self.status,
            )

    def update_status(self, status: str) -> None:
        """Record a new status, stamping the time and firing the callback on change."""
        value = status.value if isinstance(status, Status) else status
        with self._lock:
            if self.status == value:
                return
            self.status = value
            self.status_changed_at = datetime.now(timezone.utc)
            if self.on_status_update is not None:
                try:
                    self.on_status_update(self, value)
                except Exception as exc:
                    logger.error(
                        "failed to persist status update for %s: %s", self.url, exc
                    )

    def update(self, other: "Target") -> None:
        """Copy the editable settings of another target into this one."""
        with self._lock:
            self.url = other.url
            self.interval = other.interval
            self.enabled = other.enabled


class Manager:
    """Runs one background checker per registered target."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.targets: dict[int, Target] = {}

    def register(self, target: Target) -> None:
        """Start monitoring a target; raises ValueError if it is already monitored."""
        interval = target.interval.total_seconds()
        if interval <= 0:
            raise ValueError(f"target {target.url} needs a positive interval")

        with self._lock:
            if target.id in self.targets:
                raise ValueError(f"target {target.url} already being monitored")
            if target.client is None:
                target.client = DEFAULT_CLIENT
            stop = threading.Event()
            target._stop = stop
            self.targets[target.id] = target

        thread = threading.Thread(
            target=self._run,
            args=(target, stop, interval),
            name=f"monitor-{target.id}",
            daemon=True,
        )
        thread.start()
        logger.info("monitoring started: %s", target.url)

    def _run(self, target: Target, stop: threading.Event, interval: float) -> None:
        while not stop.wait(interval):
            if not target.enabled:
                continue
            try:
                target.check()
            except CheckError as exc:
                logger.error("target check failed: %s: %s", target.url, exc)

        logger.info("monitoring stopped: %s", target.url)
        with self._lock:
            if self.targets.get(target.id) is target:
                del self.targets[target.id]

    def revoke(self, target_id: int) -> None:
        """Stop monitoring a target; does nothing if it is not monitored."""
        with self._lock:
            target = self.targets.pop(target_id, None)
        if target is None:
            logger.info("target removed, but no monitoring was active: %s", target_id)
            return
        if target._stop is not None:
            target._stop.set()
        logger.info("monitoring stopped: %s", target.url)

    def stop(self) -> None:
        """Stop monitoring every target."""
        with self._lock:
            targets = list(self.targets.values())
            self.targets.clear()
        for target in targets:
            if target._stop is not None:
                target._stop.set()