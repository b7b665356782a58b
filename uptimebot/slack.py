"""Slack incoming-webhook observer."""

from __future__ import annotations

import json
from typing import Any

import requests

from uptimebot.observer import Observer, State


class SlackNotifyError(Exception):
    """Sending a Slack notification failed."""


def _color_for(status: str) -> str:
    if status == "up":
        return "good"
    if status == "down":
        return "danger"
    return "warning"


def build_payload(state: State) -> dict[str, Any]:
    """Build the Slack message body for a state change."""
    return {
        "text": f"Status Update for {state.name}",
        "attachments": [
            {
                "color": _color_for(state.status),
                "fields": [
                    {"title": "Name", "value": state.name, "short": True},
                    {"title": "Status", "value": state.status, "short": True},
                    {"title": "Time", "value": str(state.updated_at), "short": True},
                    {"title": "Message", "value": state.message, "short": False},
                ],
            }
        ],
    }


class SlackObserver(Observer):
    """Posts state changes to a Slack webhook."""

    def __init__(self, webhook_url: str, client: Any = None) -> None:
        self.webhook_url = webhook_url
        self.client = client if client is not None else requests.Session()

    def notify(self, state: State) -> None:
        payload = json.dumps(build_payload(state)).encode("utf-8")
        try:
            response = self.client.post(
                self.webhook_url,
                data=payload,
                headers={"Content-Type": "application/json"},
            )
        except requests.RequestException as exc:
            raise SlackNotifyError(f"failed to send slack message: {exc}") from exc
        try:
            if response.status_code != 200:
                raise SlackNotifyError(
                    f"slack API returned non-200 status code: {response.status_code}"
                )
        finally:
            response.close()