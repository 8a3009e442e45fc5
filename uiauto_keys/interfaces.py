"""
@file interfaces.py
@brief Abstract base classes for the host UI framework and automation driver.

The framework never renders and never owns the live tree. A host adapter
implements these interfaces so that identifiers can be attached at render
time and rendered elements can be queried and driven from tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence


class ElementType(str, Enum):
    """Kinds of rendered elements the lookup and content rules care about."""
    APPLICATION = "application"
    WINDOW = "window"
    OTHER = "other"
    STATIC_TEXT = "staticText"
    IMAGE = "image"
    BUTTON = "button"
    TOGGLE = "toggle"
    CELL = "cell"
    SCROLL_VIEW = "scrollView"
    TEXT_FIELD = "textField"
    TEXT_VIEW = "textView"
    SECURE_TEXT_FIELD = "secureTextField"
    SEARCH_FIELD = "searchField"


TEXT_ENTRY_TYPES = (
    ElementType.TEXT_FIELD,
    ElementType.TEXT_VIEW,
    ElementType.SECURE_TEXT_FIELD,
    ElementType.SEARCH_FIELD,
)


class SwipeDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


class GestureVelocity(float, Enum):
    """Swipe velocities in points per second."""
    DEFAULT = 1000.0
    SLOW = 200.0
    FAST = 2500.0


@dataclass(frozen=True)
class Frame:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Offset:
    """Point inside an element, normalized to its frame (0.0 - 1.0)."""
    dx: float
    dy: float


class IRenderable(ABC):
    """A render-side element that can carry an accessibility identifier."""

    @property
    @abstractmethod
    def accessibility_identifier(self) -> Optional[str]:
        pass

    @accessibility_identifier.setter
    @abstractmethod
    def accessibility_identifier(self, value: Optional[str]) -> None:
        pass


class INode(ABC):
    """
    One element of a live UI snapshot.

    Nodes are read during a single query; the framework never keeps them
    across polls.
    """

    @property
    @abstractmethod
    def identifier(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def element_type(self) -> ElementType:
        pass

    @property
    @abstractmethod
    def label(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def value(self) -> Optional[object]:
        pass

    @property
    @abstractmethod
    def placeholder(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_selected(self) -> bool:
        pass

    @property
    @abstractmethod
    def has_focus(self) -> bool:
        pass

    @property
    @abstractmethod
    def is_hittable(self) -> bool:
        pass

    @property
    @abstractmethod
    def frame(self) -> Frame:
        pass

    @property
    @abstractmethod
    def children(self) -> Sequence[INode]:
        pass

    def descendants(self):
        """Yield all descendants in hierarchy (pre-order) order, excluding self."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class IHost(ABC):
    """
    Automation driver for one running application.

    snapshot() must reflect the current UI on every call. Input primitives
    are single host calls; the framework never retries them.
    """

    @abstractmethod
    def snapshot(self) -> Optional[INode]:
        """
        Return the root of the current UI tree, or None if nothing is running.
        """
        pass

    @abstractmethod
    def tap(self, node: INode, count: int = 1, touches: int = 1) -> None:
        pass

    @abstractmethod
    def tap_at(self, node: INode, offset: Offset) -> None:
        pass

    @abstractmethod
    def double_tap(self, node: INode, offset: Optional[Offset] = None) -> None:
        pass

    @abstractmethod
    def press(self, node: INode, duration: float, offset: Optional[Offset] = None) -> None:
        pass

    @abstractmethod
    def swipe(self, node: INode, direction: SwipeDirection, velocity: float) -> None:
        pass

    @abstractmethod
    def drag(self, node: INode, start: Offset, finish: Offset, hold: float) -> None:
        """Press at start for hold seconds, then drag to finish."""
        pass

    @abstractmethod
    def pinch(self, node: INode, scale: float, velocity: float) -> None:
        pass

    @abstractmethod
    def rotate(self, node: INode, radians: float, velocity: float) -> None:
        pass

    @abstractmethod
    def type_text(self, node: INode, text: str) -> None:
        pass
