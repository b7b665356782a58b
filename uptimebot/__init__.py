"""Uptime monitoring of HTTP targets with SQLite storage, Slack notifications and WSGI middleware."""

__version__ = "0.1.0"

__all__ = [
    "csrf",
    "flash",
    "monitor",
    "notifier",
    "notifier_handler",
    "notifier_repository",
    "notifier_service",
    "observer",
    "schema",
    "slack",
    "target_repository",
    "target_service",
    "user_target",
]