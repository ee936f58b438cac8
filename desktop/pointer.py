"""Global pointer listeners attached for the lifetime of a gesture."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from desktop.geometry import Point

PointerHandler = Callable[[Point], None]


@dataclass
class PointerCapture:
    """One attached move/up listener pair; ``release`` detaches both."""

    hub: PointerHub
    on_move: PointerHandler
    on_up: PointerHandler
    attached: bool = True

    def release(self) -> None:
        if self.attached:
            self.hub._detach(self)
            self.attached = False


@dataclass
class PointerHub:
    """Document-level pointer event target.

    Gestures attach on press and detach on release, so at rest the hub holds
    no listeners.
    """

    _captures: list[PointerCapture] = field(default_factory=list)

    def attach(self, on_move: PointerHandler, on_up: PointerHandler) -> PointerCapture:
        capture = PointerCapture(self, on_move, on_up)
        self._captures.append(capture)
        return capture

    def _detach(self, capture: PointerCapture) -> None:
        if capture in self._captures:
            self._captures.remove(capture)

    @property
    def listener_count(self) -> int:
        return len(self._captures)

    def move(self, x: int, y: int) -> None:
        point = Point(x, y)
        for capture in list(self._captures):
            capture.on_move(point)

    def up(self, x: int, y: int) -> None:
        point = Point(x, y)
        # Handlers detach themselves while we iterate
        for capture in list(self._captures):
            capture.on_up(point)
