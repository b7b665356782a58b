"""One-shot flash messages keyed by a per-browser flash id."""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterable, Iterator

from werkzeug.http import dump_cookie
from werkzeug.wrappers import Request

FLASH_KEY_ERRORS = "Errors"
FLASH_KEY_SUCCESSES = "Successes"
COOKIE_NAME = "flash_id"

logger = logging.getLogger(__name__)

_flash_id: ContextVar[str] = ContextVar("flash_id")


def current_flash_id() -> str:
    """The flash id of the current request, or '' outside of one."""
    flash_id = _flash_id.get(None)
    if flash_id is None:
        logger.error("flash store: no flash id in context")
        return ""
    return flash_id


@contextmanager
def flash_context(flash_id: str) -> Iterator[str]:
    """Make flash_id the current flash id for the duration of the block."""
    token = _flash_id.set(flash_id)
    try:
        yield flash_id
    finally:
        _flash_id.reset(token)


class FlashStore:
    """Thread-safe store of messages that are removed once read."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._flashes: dict[str, dict[str, list[str]]] = {}

    def set(self, flash_id: str, key: str, value: list[str]) -> None:
        with self._lock:
            self._flashes.setdefault(flash_id, {})[key] = value

    def pop(self, flash_id: str, key: str) -> list[str] | None:
        """Return and remove a stored value; None when nothing is stored."""
        with self._lock:
            session = self._flashes.get(flash_id)
            if session is None:
                return None
            value = session.pop(key, None)
            if not session:
                del self._flashes[flash_id]
            return value

    def set_errors(self, errors: list[str]) -> None:
        flash_id = current_flash_id()
        if flash_id:
            self.set(flash_id, FLASH_KEY_ERRORS, errors)

    def set_successes(self, successes: list[str]) -> None:
        flash_id = current_flash_id()
        if flash_id:
            self.set(flash_id, FLASH_KEY_SUCCESSES, successes)

    def get_errors(self) -> list[str] | None:
        flash_id = current_flash_id()
        if not flash_id:
            return None
        return self.pop(flash_id, FLASH_KEY_ERRORS)

    def get_successes(self) -> list[str] | None:
        flash_id = current_flash_id()
        if not flash_id:
            return None
        return self.pop(flash_id, FLASH_KEY_SUCCESSES)


class FlashMiddleware:
    """Ensures every request carries a flash id cookie and exposes it in context."""

    def __init__(self, app: Callable[..., Iterable[bytes]]) -> None:
        self.app = app

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        flash_id = Request(environ).cookies.get(COOKIE_NAME, "")
        respond = start_response

        if not flash_id:
            flash_id = str(uuid.uuid4())
            cookie = dump_cookie(COOKIE_NAME, flash_id, path="/")

            def respond(status, headers, exc_info=None):
                headers = list(headers)
                headers.append(("Set-Cookie", cookie))
                return start_response(status, headers, exc_info)

        with flash_context(flash_id):
            result = self.app(environ, respond)
            try:
                # Produce the body while the flash id is still in context.
                return list(result)
            finally:
                close = getattr(result, "close", None)
                if close is not None:
                    close()