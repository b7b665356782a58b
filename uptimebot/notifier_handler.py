"""HTTP handlers for connecting Slack notifications to targets."""

from __future__ import annotations

import os
from typing import Any

from werkzeug.wrappers import Request, Response

_SLACK_AUTHORIZE_URL = "https://slack.com/oauth/v2/authorize"


def _error(message: str, status: int) -> Response:
    return Response(
        message + "\n",
        status=status,
        content_type="text/plain; charset=utf-8",
        headers={"X-Content-Type-Options": "nosniff"},
    )


def _redirect(location: str) -> Response:
    return Response(status=303, headers={"Location": location})


class NotifierHandler:
    """Starts the Slack OAuth flow and stores the webhook it yields."""

    def __init__(self, service: Any) -> None:
        self.service = service

    def auth_slack(self, request: Request, target_id: str) -> Response:
        """Redirect the browser to Slack's authorisation page for a target."""
        try:
            parsed_id = int(target_id)
        except (TypeError, ValueError):
            return _error("Invalid target ID", 400)

        redirect_uri = os.environ.get("SLACK_REDIRECT_URI", "")
        client_id = os.environ.get("SLACK_CLIENT_ID", "")
        if not redirect_uri or not client_id:
            return _error("Missing environment variables", 400)

        link = (
            f"{_SLACK_AUTHORIZE_URL}?scope=incoming-webhook&user_scope="
            f"&redirect_uri={redirect_uri}&client_id={client_id}"
            f"&state=target_id={parsed_id}"
        )
        return _redirect(link)

    def auth_slack_callback(self, request: Request) -> Response:
        """Finish the OAuth flow: store a Slack notifier and go back to the target."""
        code = request.args.get("code", "")
        state = request.args.get("state", "")

        try:
            target_id = self.service.parse_oauth_state(state)
        except Exception as exc:
            return _error(str(exc), 400)

        try:
            notifier = self.service.handle_slack_callback(code, target_id)
        except Exception as exc:
            return _error(str(exc), 500)

        try:
            self.service.create(notifier)
        except Exception as exc:
            return _error(str(exc), 500)

        return _redirect(f"/targets/{target_id}")