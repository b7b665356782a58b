"""A monitored target together with the user who owns it."""

from __future__ import annotations

from dataclasses import dataclass, field

from uptimebot.monitor import Target


def _delegate(name: str) -> property:
    def getter(self: "UserTarget"):
        return getattr(self.target, name)

    def setter(self: "UserTarget", value) -> None:
        setattr(self.target, name, value)

    return property(getter, setter, doc=f"The wrapped target's {name}.")


@dataclass
class UserTarget:
    """A target owned by a user; target attributes are reachable directly."""

    user_id: int = 0
    target: Target = field(default_factory=Target)

    id = _delegate("id")
    url = _delegate("url")
    status = _delegate("status")
    enabled = _delegate("enabled")
    interval = _delegate("interval")
    status_changed_at = _delegate("status_changed_at")
    client = _delegate("client")
    on_status_update = _delegate("on_status_update")