"""Screen geometry primitives."""

from __future__ import annotations

from dataclasses import dataclass

TASKBAR_HEIGHT = 40


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)


@dataclass(frozen=True)
class Size:
    width: int
    height: int


@dataclass(frozen=True)
class Viewport:
    width: int = 1280
    height: int = 800
