# uiauto_keys/capabilities.py
"""
@file capabilities.py
@brief Operations available on testing handles, one mixin per capability.

testing.handle_class_for() composes a handle class from the mixins whose
capability the descriptor type declares, so a handle only offers the
operations that make sense for its element.

Conventions shared by every mixin:
- accessors return None (or False) for a missing element and never raise
- assert_* compare through the active FailureReporter and return self
- wait_for_* poll a fresh snapshot until the value matches; with
  failing=False a timeout is silently ignored
- gestures report a failure instead of acting on a missing element
"""

from __future__ import annotations

import inspect
import logging
import math
from typing import Any, Callable, Optional, Tuple

from .artifacts import format_tree
from .config import TimeConfig
from .context import ActionContextManager
from .interfaces import (TEXT_ENTRY_TYPES, ElementType, Frame, GestureVelocity,
                         IHost, INode, Offset, SwipeDirection)
from .query import LiveElement
from .reporting import current_reporter
from .waits import repeat_until, wait_for_value

logger = logging.getLogger("uiauto_keys.capabilities")

Condition = Callable[..., bool]


# --- Content projections ---

def _first_child(node: INode, *types: ElementType) -> Optional[INode]:
    return next((c for c in node.children if c.element_type in types), None)


def _content(node: Optional[INode], *types: ElementType) -> Optional[INode]:
    """The element itself when it has one of types, else its first such child."""
    if node is None:
        return None
    if node.element_type in types:
        return node
    return _first_child(node, *types)


def static_text(node: Optional[INode]) -> Optional[str]:
    content = _content(node, ElementType.STATIC_TEXT)
    return content.label if content is not None else None


def image_label(node: Optional[INode]) -> Optional[str]:
    content = _content(node, ElementType.IMAGE)
    return content.label if content is not None else None


def entry_text(node: Optional[INode]) -> Optional[str]:
    content = _content(node, *TEXT_ENTRY_TYPES)
    if content is None or not isinstance(content.value, str):
        return None
    return content.value


def entry_placeholder(node: Optional[INode]) -> Optional[str]:
    content = _content(node, *TEXT_ENTRY_TYPES)
    if content is None:
        return None
    return content.placeholder or ""


def entry_focused(node: Optional[INode]) -> bool:
    content = _content(node, *TEXT_ENTRY_TYPES)
    return bool(content is not None and content.has_focus)


def content_enabled(node: Optional[INode]) -> Optional[bool]:
    """Enabled only if the element and all of its descendants are enabled."""
    if node is None:
        return None
    if not node.is_enabled:
        return False
    return all(d.is_enabled for d in node.descendants())


def content_selected(node: Optional[INode]) -> Optional[bool]:
    """Selected if the element is, or if it has descendants and all of them are."""
    if node is None:
        return None
    if node.is_selected:
        return True
    descendants = list(node.descendants())
    if not descendants:
        return False
    return all(d.is_selected for d in descendants)


def _clamp(value: float) -> float:
    return max(min(value, 1.0), 0.0)


# --- Handle base ---

class HandleBase:
    """Shared plumbing; subclasses provide `element` and `description`."""

    element: LiveElement

    @property
    def description(self) -> str:
        return self.element.description

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return ()

    def _node(self) -> Optional[INode]:
        return self.element.resolve()

    def _host(self) -> IHost:
        return self.element.host

    def _condition(self, until: Condition) -> Callable[[], bool]:
        """Accept both `lambda: ...` and `lambda handle: ...` conditions."""
        try:
            inspect.signature(until).bind(self)
        except (TypeError, ValueError):
            return until
        return lambda: until(self)

    def _assert_equal(self, actual: Any, expected: Any, what: str) -> Any:
        current_reporter().record_equal(
            actual, expected, f"{what} of element {self.description}"
        )
        return self

    def _wait(
        self,
        action_name: str,
        projection: Callable[[Optional[INode]], Any],
        expected: Any,
        timeout: Optional[float],
        failing: bool,
        message: str,
        settings: str = "state_wait",
    ) -> Any:
        config = getattr(TimeConfig.current(), settings)
        timeout = config.timeout if timeout is None else timeout
        with ActionContextManager.action(
            action_name, self.description, self.identifiers, timeout=timeout
        ):
            matched = wait_for_value(
                lambda: projection(self._node()),
                expected,
                timeout=timeout,
                interval=config.interval,
                description=f"{action_name} on {self.description}",
            )
            if not matched and failing:
                current_reporter().fail(
                    message.replace("{timeout}", f"{timeout:g}").replace("{element}", self.description),
                    node=self._node(),
                )
        return self

    def _act(self, action_name: str, call: Callable[[IHost, INode], None], **metadata: Any) -> Any:
        with ActionContextManager.action(
            action_name, self.description, self.identifiers, **metadata
        ):
            node = self._node()
            if node is None:
                current_reporter().fail(
                    f"Cannot {action_name}: element {self.description} does not exist"
                )
                return self
            logger.info("%s on %s %s", action_name, self.description, metadata or "")
            call(self._host(), node)
        return self

    def _repeat(
        self,
        action_name: str,
        action: Callable[[], Any],
        until: Condition,
        limit: Optional[int],
    ) -> Any:
        limit = TimeConfig.current().gesture_limit if limit is None else limit
        with ActionContextManager.action(
            f"{action_name} until", self.description, self.identifiers, limit=limit
        ):
            repeat_until(
                action,
                self._condition(until),
                limit=limit,
                description=f"{action_name} on {self.description}",
            )
        return self

    # --- Generic operations ---

    def perform(self, action: Callable[..., Any]) -> Any:
        """Run action(handle) (or action()) and return the handle."""
        with ActionContextManager.action("perform", self.description, self.identifiers):
            self._condition(action)()
        return self

    def assert_that(self, condition: Any, message: Optional[str] = None) -> Any:
        """Report a failure unless condition (a value, or a callable over the handle) holds."""
        if callable(condition):
            condition = self._condition(condition)()
        current_reporter().record_true(
            condition, message or f"assert_that failed for {self.description}"
        )
        return self


# --- View ---

class ViewHandle(HandleBase):
    """Operations every identifiable view supports."""

    @property
    def frame(self) -> Optional[Frame]:
        node = self._node()
        return node.frame if node is not None else None

    @property
    def is_exist(self) -> bool:
        return self.element.exists

    def assert_frame(self, frame: Frame) -> Any:
        return self._assert_equal(self.frame, frame, "Frame")

    def assert_exists(self, is_exist: bool = True) -> Any:
        return self._assert_equal(self.is_exist, is_exist, "Existence")

    def wait_for_frame(self, frame: Frame, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_frame",
            lambda node: node.frame if node is not None else None,
            frame,
            timeout,
            failing,
            f"Frame of element {{element}} was not equal to {frame} within {{timeout}} seconds",
            settings="element_wait",
        )

    def wait_for_existence(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_existence",
            lambda node: node is not None,
            True,
            timeout,
            failing,
            "Element {element} did not appear within {timeout} seconds",
            settings="element_wait",
        )

    def wait_for_non_existence(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_non_existence",
            lambda node: node is None,
            True,
            timeout,
            failing,
            "Element {element} did not disappear within {timeout} seconds",
            settings="disappear_wait",
        )

    def print_tree(self) -> Any:
        """Print the element's current subtree."""
        print(f"{self.description}\n{format_tree(self._node())}")
        return self


class HittableHandle(HandleBase):
    """Taps and presses. Coordinates are normalized to the element frame."""

    @property
    def is_hittable(self) -> bool:
        node = self._node()
        return bool(node is not None and node.is_hittable)

    def assert_hittable(self, is_hittable: bool = True) -> Any:
        return self._assert_equal(self.is_hittable, is_hittable, "Hittability")

    def wait_for_hittable(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_hittable",
            lambda node: bool(node is not None and node.is_hittable),
            True,
            timeout,
            failing,
            "Element {element} was not hittable within {timeout} seconds",
        )

    def wait_for_unhittable(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_unhittable",
            lambda node: bool(node is not None and node.is_hittable),
            False,
            timeout,
            failing,
            "Element {element} was still hittable after {timeout} seconds",
        )

    def tap(self, count: int = 1, touches: int = 1) -> Any:
        return self._act(
            "tap", lambda host, node: host.tap(node, count=count, touches=touches),
            count=count, touches=touches,
        )

    def tap_at(self, x: float, y: float) -> Any:
        offset = Offset(x, y)
        return self._act("tap_at", lambda host, node: host.tap_at(node, offset), x=x, y=y)

    def double_tap(self) -> Any:
        return self._act("double_tap", lambda host, node: host.double_tap(node))

    def double_tap_at(self, x: float, y: float) -> Any:
        offset = Offset(x, y)
        return self._act("double_tap_at", lambda host, node: host.double_tap(node, offset), x=x, y=y)

    def press(self, duration: float, x: Optional[float] = None, y: Optional[float] = None) -> Any:
        if (x is None) != (y is None):
            raise ValueError("pass both x and y, or neither")
        offset = Offset(x, y) if x is not None else None
        return self._act(
            "press", lambda host, node: host.press(node, duration, offset), duration=duration
        )

    def long_press(self, x: Optional[float] = None, y: Optional[float] = None) -> Any:
        return self.press(TimeConfig.current().long_press_duration, x, y)


# --- Content capabilities ---

class TextHandle(HandleBase):

    @property
    def text(self) -> Optional[str]:
        return static_text(self._node())

    def assert_text(self, text: str) -> Any:
        return self._assert_equal(self.text, text, "Text")

    def wait_for_text(self, text: str, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_text",
            static_text,
            text,
            timeout,
            failing,
            f"Text of element {{element}} was not equal to {text!r} within {{timeout}} seconds",
        )


class ImageHandle(HandleBase):

    @property
    def label(self) -> Optional[str]:
        return image_label(self._node())

    def assert_label(self, label: str) -> Any:
        return self._assert_equal(self.label, label, "Label")

    def wait_for_label(self, label: str, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_label",
            image_label,
            label,
            timeout,
            failing,
            f"Label of element {{element}} was not equal to {label!r} within {{timeout}} seconds",
        )


class EditableHandle(HandleBase):
    """Text entry: the element itself or its first text-entry child."""

    @property
    def text(self) -> Optional[str]:
        return entry_text(self._node())

    @property
    def placeholder(self) -> Optional[str]:
        return entry_placeholder(self._node())

    @property
    def is_focused(self) -> bool:
        return entry_focused(self._node())

    def assert_text(self, text: str) -> Any:
        return self._assert_equal(self.text, text, "Text")

    def assert_placeholder(self, placeholder: str) -> Any:
        return self._assert_equal(self.placeholder, placeholder, "Placeholder")

    def assert_focused(self, is_focused: bool = True) -> Any:
        return self._assert_equal(self.is_focused, is_focused, "Focus")

    def wait_for_text(self, text: str, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_text",
            entry_text,
            text,
            timeout,
            failing,
            f"Text of element {{element}} was not equal to {text!r} within {{timeout}} seconds",
        )

    def wait_for_placeholder(
        self, placeholder: str, timeout: Optional[float] = None, failing: bool = True
    ) -> Any:
        return self._wait(
            "wait_for_placeholder",
            entry_placeholder,
            placeholder,
            timeout,
            failing,
            f"Placeholder of element {{element}} was not equal to {placeholder!r} "
            f"within {{timeout}} seconds",
        )

    def wait_for_focused(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_focused",
            entry_focused,
            True,
            timeout,
            failing,
            "Element {element} was not focused within {timeout} seconds",
        )

    def wait_for_unfocused(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_unfocused",
            entry_focused,
            False,
            timeout,
            failing,
            "Element {element} was not unfocused within {timeout} seconds",
        )

    def type_text(self, text: str) -> Any:
        return self._act(
            "type_text", lambda host, node: host.type_text(node, text), length=len(text)
        )

    def submit_by_keyboard(self) -> Any:
        return self.type_text("\n")

    def clear_by_keyboard(self) -> Any:
        text = self.text
        if not text:
            return self
        return self.type_text("\b" * len(text))


class DisableableHandle(HandleBase):

    @property
    def is_enabled(self) -> Optional[bool]:
        return content_enabled(self._node())

    def assert_enabled(self, is_enabled: bool = True) -> Any:
        return self._assert_equal(self.is_enabled, is_enabled, "Enabled state")

    def wait_for_enabled(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_enabled",
            content_enabled,
            True,
            timeout,
            failing,
            "Element {element} was not enabled within {timeout} seconds",
        )

    def wait_for_disabled(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_disabled",
            content_enabled,
            False,
            timeout,
            failing,
            "Element {element} was not disabled within {timeout} seconds",
        )


class SelectableHandle(HandleBase):

    @property
    def is_selected(self) -> Optional[bool]:
        return content_selected(self._node())

    def assert_selected(self, is_selected: bool = True) -> Any:
        return self._assert_equal(self.is_selected, is_selected, "Selected state")

    def wait_for_selected(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_selected",
            content_selected,
            True,
            timeout,
            failing,
            "Element {element} was not selected within {timeout} seconds",
        )

    def wait_for_deselected(self, timeout: Optional[float] = None, failing: bool = True) -> Any:
        return self._wait(
            "wait_for_deselected",
            content_selected,
            False,
            timeout,
            failing,
            "Element {element} was not deselected within {timeout} seconds",
        )


# --- Gestures ---

class SwipeableHandle(HandleBase):
    """
    Swipes and drags. Each gesture optionally repeats until a condition
    holds, at most `limit` times (TimeConfig gesture_repeat by default).
    """

    def _swipe(
        self,
        direction: SwipeDirection,
        velocity: float,
        until: Optional[Condition],
        limit: Optional[int],
    ) -> Any:
        name = f"swipe_{direction.value}"

        def once() -> Any:
            return self._act(
                name, lambda host, node: host.swipe(node, direction, float(velocity)),
                velocity=float(velocity),
            )

        if until is None:
            return once()
        return self._repeat(name, once, until, limit)

    def swipe_left(self, velocity: float = GestureVelocity.DEFAULT, until: Optional[Condition] = None,
                   limit: Optional[int] = None) -> Any:
        return self._swipe(SwipeDirection.LEFT, velocity, until, limit)

    def swipe_right(self, velocity: float = GestureVelocity.DEFAULT, until: Optional[Condition] = None,
                    limit: Optional[int] = None) -> Any:
        return self._swipe(SwipeDirection.RIGHT, velocity, until, limit)

    def swipe_up(self, velocity: float = GestureVelocity.DEFAULT, until: Optional[Condition] = None,
                 limit: Optional[int] = None) -> Any:
        return self._swipe(SwipeDirection.UP, velocity, until, limit)

    def swipe_down(self, velocity: float = GestureVelocity.DEFAULT, until: Optional[Condition] = None,
                   limit: Optional[int] = None) -> Any:
        return self._swipe(SwipeDirection.DOWN, velocity, until, limit)

    def drag(
        self,
        start: Tuple[float, float],
        finish: Tuple[float, float],
        until: Optional[Condition] = None,
        limit: Optional[int] = None,
    ) -> Any:
        """Press at start briefly, then drag to finish (normalized offsets)."""
        start_offset, finish_offset = Offset(*start), Offset(*finish)

        def once() -> Any:
            hold = TimeConfig.current().drag_hold_duration
            return self._act(
                "drag",
                lambda host, node: host.drag(node, start_offset, finish_offset, hold),
                start=start, finish=finish,
            )

        if until is None:
            return once()
        return self._repeat("drag", once, until, limit)

    def drag_by(
        self,
        delta_x: float,
        delta_y: float,
        until: Optional[Condition] = None,
        limit: Optional[int] = None,
    ) -> Any:
        """Drag across the element center by a fraction of its size."""
        start = (_clamp(0.5 - delta_x * 0.5), _clamp(0.5 - delta_y * 0.5))
        finish = (_clamp(0.5 + delta_x * 0.5), _clamp(0.5 + delta_y * 0.5))
        return self.drag(start, finish, until=until, limit=limit)


def _velocity(amount: float, velocity: Optional[float], duration: Optional[float]) -> float:
    if (velocity is None) == (duration is None):
        raise ValueError("pass exactly one of velocity or duration")
    if velocity is not None:
        return float(velocity)
    if duration <= 0:
        raise ValueError("duration must be positive")
    return amount / duration


class PinchableHandle(HandleBase):

    def pinch(self, scale: float, velocity: Optional[float] = None, duration: Optional[float] = None) -> Any:
        """Pinch by scale (< 1 zooms out) at velocity, or over duration seconds."""
        speed = _velocity(scale, velocity, duration)
        return self._act(
            "pinch", lambda host, node: host.pinch(node, scale, speed), scale=scale, velocity=speed
        )


class RotatableHandle(HandleBase):

    def rotate(self, radians: float, velocity: Optional[float] = None, duration: Optional[float] = None) -> Any:
        """Rotate by radians at velocity (radians per second), or over duration seconds."""
        speed = _velocity(radians, velocity, duration)
        return self._act(
            "rotate", lambda host, node: host.rotate(node, radians, speed),
            radians=radians, velocity=speed,
        )

    def rotate_degrees(
        self, degrees: float, velocity: Optional[float] = None, duration: Optional[float] = None
    ) -> Any:
        """Rotate by degrees at velocity (degrees per second), or over duration seconds."""
        speed = _velocity(degrees, velocity, duration)
        return self.rotate(math.radians(degrees), velocity=math.radians(speed))


class AnyHandle(HandleBase):

    def narrow(self, descriptor_type: type) -> Any:
        """The same live element seen through a concrete descriptor type."""
        from .testing import view
        return view(descriptor_type, self.element)
