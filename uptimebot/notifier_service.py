"""Management of notifiers and the observers built from them."""

from __future__ import annotations

import json
import os
import re
from contextlib import contextmanager
from typing import Any, Iterator
from urllib.parse import unquote_plus

import requests

from uptimebot.notifier import Notifier, NotifierType
from uptimebot.observer import Subject
from uptimebot.slack import SlackObserver

SLACK_TOKEN_URL = "https://slack.com/api/oauth.v2.access"
_REQUEST_TIMEOUT = 30.0

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_INTEGER = re.compile(r"[+-]?[0-9]+")


class NotifierServiceError(Exception):
    """A notifier operation failed."""


@contextmanager
def _wrap(message: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        raise NotifierServiceError(f"{message}: {exc}") from exc


def _unescape(text: str) -> str:
    match = _BAD_ESCAPE.search(text)
    if match is not None:
        bad = text[match.start() : match.start() + 3]
        raise ValueError(f"invalid URL escape {bad!r}")
    return unquote_plus(text)


def _parse_query(query: str) -> dict[str, list[str]]:
    values: dict[str, list[str]] = {}
    for part in query.split("&"):
        if ";" in part:
            raise ValueError("invalid semicolon separator in query")
        if not part:
            continue
        key, _, value = part.partition("=")
        values.setdefault(_unescape(key), []).append(_unescape(value))
    return values


class NotifierService:
    """Stores notifiers and turns them into observers of target state."""

    token_url = SLACK_TOKEN_URL

    def __init__(self, repository: Any, subject: Subject | None = None) -> None:
        self._repository = repository
        self._subject = subject if subject is not None else Subject()

    @property
    def subject(self) -> Subject:
        return self._subject

    def create(self, notifier: Notifier) -> None:
        with _wrap("failed to create notifier"):
            self._repository.create(notifier)

    def get(self, notifier_id: int) -> Notifier | None:
        with _wrap("failed to get notifier"):
            return self._repository.get(notifier_id)

    def update(self, notifier_id: int, config: str) -> Notifier:
        with _wrap("failed to update notifier"):
            return self._repository.update(notifier_id, config)

    def delete(self, notifier_id: int) -> None:
        with _wrap("failed to delete notifier"):
            self._repository.delete(notifier_id)

    def configure_observers(self, target_id: int) -> None:
        """Replace the subject with one holding an observer per notifier of the target."""
        self._subject = Subject()

        with _wrap("failed to get notifiers"):
            notifiers = self._repository.get_by_target_id(target_id)

        for notifier in notifiers:
            if notifier.type != NotifierType.SLACK:
                kind = notifier.type.value if notifier.type is not None else ""
                raise NotifierServiceError(f"unsupported notifier type: {kind}")
            with _wrap("failed to get slack config"):
                config = notifier.slack_config()
            self._subject.attach(SlackObserver(config.webhook_url))

    def handle_slack_callback(self, code: str, target_id: int) -> Notifier:
        """Exchange an OAuth code for a webhook and build a Slack notifier for it."""
        client_id = os.environ.get("SLACK_CLIENT_ID", "")
        client_secret = os.environ.get("SLACK_CLIENT_SECRET", "")
        if not code or not client_id or not client_secret:
            raise NotifierServiceError("missing code or client credentials")

        form = {"code": code, "client_id": client_id, "client_secret": client_secret}
        try:
            response = requests.post(self.token_url, data=form, timeout=_REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise NotifierServiceError(f"failed to get access token: {exc}") from exc

        with response:
            try:
                result = response.json()
            except ValueError as exc:
                raise NotifierServiceError(f"failed to decode response: {exc}") from exc
        if not isinstance(result, dict):
            raise NotifierServiceError("failed to decode response: not a JSON object")

        incoming_webhook = result.get("incoming_webhook")
        if not isinstance(incoming_webhook, dict):
            raise NotifierServiceError("failed to get incoming webhook")
        webhook_url = incoming_webhook.get("url")
        if not isinstance(webhook_url, str):
            raise NotifierServiceError("failed to get incoming webhook url")

        return Notifier(
            target_id=target_id,
            type=NotifierType.SLACK,
            config=json.dumps({"webhook_url": webhook_url}),
        )

    def parse_oauth_state(self, state: str) -> int:
        """Extract the target id from an OAuth state string like 'target_id=1'."""
        try:
            parsed = _parse_query(state)
        except ValueError as exc:
            raise NotifierServiceError(f"invalid state format: {exc}") from exc

        target_ids = parsed.get("target_id")
        if not target_ids or not target_ids[0]:
            raise NotifierServiceError("missing target id in state")

        value = target_ids[0]
        if not _INTEGER.fullmatch(value):
            raise NotifierServiceError(
                f"invalid target id format: {value!r} is not an integer"
            )
        return int(value)