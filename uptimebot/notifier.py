"""Notification channel configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class NotifierType(str, Enum):
    SLACK = "slack"
    EMAIL = "email"


@dataclass
class SlackConfig:
    webhook_url: str = ""


@dataclass
class EmailConfig:
    recipients: list[str] = field(default_factory=list)


def _load_object(raw: str) -> dict[str, Any]:
    data = json.loads(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("notifier config must be a JSON object")
    return data


@dataclass
class Notifier:
    """A notification channel attached to a target; config is raw JSON text."""

    id: int = 0
    target_id: int = 0
    type: NotifierType | None = None
    config: str = ""

    def slack_config(self) -> SlackConfig | None:
        """Parse the Slack configuration; None when this is not a Slack notifier."""
        if self.type != NotifierType.SLACK:
            return None
        data = _load_object(self.config)
        webhook_url = data.get("webhook_url") or ""
        if not isinstance(webhook_url, str):
            raise ValueError("webhook_url must be a string")
        return SlackConfig(webhook_url=webhook_url)

    def email_config(self) -> EmailConfig | None:
        """Parse the e-mail configuration; None when this is not an e-mail notifier."""
        if self.type != NotifierType.EMAIL:
            return None
        data = _load_object(self.config)
        recipients = data.get("recipients") or []
        if not isinstance(recipients, list) or not all(
            isinstance(item, str) for item in recipients
        ):
            raise ValueError("recipients must be a list of strings")
        return EmailConfig(recipients=list(recipients))