"""Observer pattern used to broadcast target state changes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class State:
    """A snapshot of what an observer is told about."""

    name: str = ""
    status: str = ""
    message: str = ""
    updated_at: datetime = field(default_factory=datetime.now)


class Observer(ABC):
    """Something that wants to hear about state changes."""

    @abstractmethod
    def notify(self, state: State) -> None:
        """Receive a state change; raise on failure."""


class Subject:
    """Keeps a list of observers and tells each of them about state changes."""

    def __init__(self) -> None:
        self._observers: list[Observer] = []

    @property
    def observers(self) -> list[Observer]:
        return list(self._observers)

    def attach(self, observer: Observer) -> None:
        self._observers.append(observer)

    def detach(self, observer: Observer) -> None:
        """Remove the first attachment of this exact observer, if any."""
        for index, existing in enumerate(self._observers):
            if existing is observer:
                del self._observers[index]
                return

    def notify(self, state: State) -> list[Exception]:
        """Send the state to every observer and return the failures."""
        failures: list[Exception] = []
        for observer in self._observers:
            try:
                observer.notify(state)
            except Exception as exc:  # one failing observer must not stop the rest
                failures.append(exc)
        return failures