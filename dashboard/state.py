"""Page states for entity pages and the transitions allowed between them."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Records = tuple[dict[str, Any], ...]


class InvalidTransition(Exception):
    def __init__(self, current: "PageState", target: "PageState") -> None:
        super().__init__(f"Cannot move from {type(current).__name__} to {type(target).__name__}")
        self.current = current
        self.target = target


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Loaded:
    records: Records = ()


@dataclass(frozen=True)
class Mutating:
    records: Records = ()
    action: str = ""


@dataclass(frozen=True)
class Failed:
    records: Records = ()
    message: str = ""
    # the write reached the backend but the list could not be reloaded
    committed: bool = False


@dataclass(frozen=True)
class Succeeded:
    records: Records = ()
    message: str = ""
    clear_after_ms: int = 0


@dataclass(frozen=True)
class ConfirmingDelete:
    records: Records = ()
    record: dict[str, Any] = field(default_factory=dict)


PageState = Loading | Loaded | Mutating | Failed | Succeeded | ConfirmingDelete

TRANSITIONS: dict[type, tuple[type, ...]] = {
    Loading: (Loaded, Failed),
    Loaded: (Mutating, ConfirmingDelete, Loading),
    ConfirmingDelete: (Mutating, Loaded),
    Mutating: (Succeeded, Failed),
    Succeeded: (Loaded,),
    Failed: (Loaded, Loading, Mutating),
}


class PageStateMachine:
    """Holds the current state of one page and refuses illegal moves."""

    def __init__(self, initial: PageState | None = None) -> None:
        self.state: PageState = initial if initial is not None else Loading()
        self.history: list[PageState] = [self.state]

    def can_move(self, target: PageState) -> bool:
        return isinstance(target, TRANSITIONS[type(self.state)])

    def move(self, target: PageState) -> PageState:
        if not self.can_move(target):
            raise InvalidTransition(self.state, target)
        logger.debug("%s -> %s", type(self.state).__name__, type(target).__name__)
        self.state = target
        self.history.append(target)
        return target

    @property
    def records(self) -> Records:
        return getattr(self.state, "records", ())


__all__ = [
    "ConfirmingDelete",
    "Failed",
    "InvalidTransition",
    "Loaded",
    "Loading",
    "Mutating",
    "PageState",
    "PageStateMachine",
    "Succeeded",
    "TRANSITIONS",
]
