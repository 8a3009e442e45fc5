# uiauto_keys/memory.py
"""
@file memory.py
@brief In-memory host: a mutable element tree plus a simulated input driver.

MemoryHost is the reference IHost implementation. Render code builds a tree
of ViewNode objects and attaches identifiers with assignment.assign();
tests query it through the testing layer. Every snapshot() is a deep copy
taken under a lock, so a tree changed from another thread is never observed
half-updated and handles never see stale nodes.
"""

from __future__ import annotations

import itertools
import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, Iterator, List, Optional, Sequence

import yaml

from .exceptions import ConfigError
from .interfaces import (TEXT_ENTRY_TYPES, ElementType, Frame, IHost, INode,
                         IRenderable, Offset, SwipeDirection)

logger = logging.getLogger("uiauto_keys.memory")

_uids = itertools.count(1)

DELETE_KEY = "\b"
RETURN_KEY = "\n"

Handler = Callable[..., None]


class ViewNode(INode, IRenderable):
    """A rendered element of the in-memory tree."""

    def __init__(
        self,
        element_type: ElementType = ElementType.OTHER,
        *,
        identifier: Optional[str] = None,
        label: Optional[str] = None,
        value: Optional[object] = None,
        placeholder: Optional[str] = None,
        enabled: bool = True,
        selected: bool = False,
        focused: bool = False,
        hittable: bool = True,
        frame: Optional[Frame] = None,
        children: Optional[Sequence[ViewNode]] = None,
    ):
        self.uid = next(_uids)
        self._identifier = identifier
        self._element_type = ElementType(element_type)
        self._label = label
        self._value = value
        self._placeholder = placeholder
        self._enabled = enabled
        self._selected = selected
        self._focused = focused
        self._hittable = hittable
        self._frame = frame or Frame(0.0, 0.0, 0.0, 0.0)
        self._children: List[ViewNode] = list(children or [])
        self.handlers: Dict[str, Handler] = {}

    # --- INode ---

    @property
    def identifier(self) -> Optional[str]:
        return self._identifier

    @property
    def element_type(self) -> ElementType:
        return self._element_type

    @property
    def label(self) -> Optional[str]:
        return self._label

    @label.setter
    def label(self, value: Optional[str]) -> None:
        self._label = value

    @property
    def value(self) -> Optional[object]:
        return self._value

    @value.setter
    def value(self, value: Optional[object]) -> None:
        self._value = value

    @property
    def placeholder(self) -> Optional[str]:
        return self._placeholder

    @placeholder.setter
    def placeholder(self, value: Optional[str]) -> None:
        self._placeholder = value

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @is_enabled.setter
    def is_enabled(self, value: bool) -> None:
        self._enabled = bool(value)

    @property
    def is_selected(self) -> bool:
        return self._selected

    @is_selected.setter
    def is_selected(self, value: bool) -> None:
        self._selected = bool(value)

    @property
    def has_focus(self) -> bool:
        return self._focused

    @has_focus.setter
    def has_focus(self, value: bool) -> None:
        self._focused = bool(value)

    @property
    def is_hittable(self) -> bool:
        return self._hittable and self._enabled

    @is_hittable.setter
    def is_hittable(self, value: bool) -> None:
        self._hittable = bool(value)

    @property
    def frame(self) -> Frame:
        return self._frame

    @frame.setter
    def frame(self, value: Frame) -> None:
        self._frame = value

    @property
    def children(self) -> Sequence[ViewNode]:
        return tuple(self._children)

    # --- IRenderable ---

    @property
    def accessibility_identifier(self) -> Optional[str]:
        return self._identifier

    @accessibility_identifier.setter
    def accessibility_identifier(self, value: Optional[str]) -> None:
        self._identifier = value

    # --- Tree editing ---

    def add(self, *children: ViewNode) -> ViewNode:
        self._children.extend(children)
        return self

    def insert(self, index: int, child: ViewNode) -> ViewNode:
        self._children.insert(index, child)
        return self

    def remove(self, child: ViewNode) -> ViewNode:
        self._children = [c for c in self._children if c.uid != child.uid]
        return self

    def clear(self) -> ViewNode:
        self._children = []
        return self

    def on(self, event: str, handler: Handler) -> ViewNode:
        """Register an input handler: handler(node, host, **details)."""
        self.handlers[event] = handler
        return self

    def walk(self) -> Iterator[ViewNode]:
        yield self
        for node in self.descendants():
            yield node

    def find(self, identifier: str) -> Optional[ViewNode]:
        """First node (self included) carrying the identifier."""
        return next((n for n in self.walk() if n.identifier == identifier), None)

    def find_uid(self, uid: int) -> Optional[ViewNode]:
        return next((n for n in self.walk() if n.uid == uid), None)

    def parent_of(self, child: ViewNode) -> Optional[ViewNode]:
        for node in self.walk():
            if any(c.uid == child.uid for c in node._children):
                return node
        return None

    def copy(self) -> ViewNode:
        """Deep copy preserving uids, without handlers."""
        clone = ViewNode.__new__(ViewNode)
        clone.__dict__.update(self.__dict__)
        clone.handlers = {}
        clone._children = [c.copy() for c in self._children]
        return clone

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self._element_type.value}
        if self._identifier is not None:
            data["identifier"] = self._identifier
        for key, val in (("label", self._label), ("value", self._value),
                         ("placeholder", self._placeholder)):
            if val is not None:
                data[key] = val
        if not self._enabled:
            data["enabled"] = False
        if self._selected:
            data["selected"] = True
        if self._focused:
            data["focused"] = True
        if not self._hittable:
            data["hittable"] = False
        f = self._frame
        data["frame"] = [f.x, f.y, f.width, f.height]
        if self._children:
            data["children"] = [c.to_dict() for c in self._children]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str = "root") -> ViewNode:
        if not isinstance(data, dict):
            raise ConfigError(f"{where}: node must be a mapping")
        try:
            element_type = ElementType(data.get("type", ElementType.OTHER.value))
        except ValueError as e:
            raise ConfigError(f"{where}: {e}") from e
        frame = data.get("frame")
        if frame is not None:
            if not isinstance(frame, (list, tuple)) or len(frame) != 4:
                raise ConfigError(f"{where}.frame must be [x, y, width, height]")
            frame = Frame(*(float(v) for v in frame))
        children = data.get("children") or []
        if not isinstance(children, list):
            raise ConfigError(f"{where}.children must be a list")
        return cls(
            element_type,
            identifier=data.get("identifier"),
            label=data.get("label"),
            value=data.get("value"),
            placeholder=data.get("placeholder"),
            enabled=bool(data.get("enabled", True)),
            selected=bool(data.get("selected", False)),
            focused=bool(data.get("focused", False)),
            hittable=bool(data.get("hittable", True)),
            frame=frame,
            children=[cls.from_dict(c, f"{where}.children[{i}]") for i, c in enumerate(children)],
        )

    def __repr__(self) -> str:
        ident = f" '{self._identifier}'" if self._identifier else ""
        return f"<ViewNode {self._element_type.value}{ident} #{self.uid}>"


@dataclass
class InputEvent:
    """One simulated input call, as recorded by MemoryHost."""
    kind: str
    identifier: Optional[str]
    uid: int
    details: Dict[str, Any] = field(default_factory=dict)


class MemoryHost(IHost):
    """
    Host backed by a ViewNode tree.

    Default input behaviour: tapping a text-entry element focuses it,
    typed text is appended to the focused text-entry content, RETURN_KEY
    submits (drops focus) and DELETE_KEY removes one character. Any other
    behaviour is provided by per-node handlers registered with ViewNode.on().
    """

    def __init__(self, root: Optional[ViewNode] = None):
        self._lock = threading.RLock()
        self._root = root if root is not None else ViewNode(ElementType.APPLICATION)
        self.events: List[InputEvent] = []

    @property
    def root(self) -> ViewNode:
        return self._root

    @classmethod
    def from_file(cls, path: str) -> MemoryHost:
        """Load a recorded snapshot (YAML or JSON)."""
        path = os.path.abspath(path)
        if not os.path.exists(path):
            raise ConfigError(f"Snapshot file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid snapshot: {e}") from e
        return cls(ViewNode.from_dict(data))

    @contextmanager
    def mutate(self) -> Generator[ViewNode, None, None]:
        """Edit the live tree atomically with respect to snapshots."""
        with self._lock:
            yield self._root

    # --- IHost ---

    def snapshot(self) -> Optional[INode]:
        with self._lock:
            return self._root.copy()

    def _live(self, node: INode) -> Optional[ViewNode]:
        uid = getattr(node, "uid", None)
        if uid is None:
            return None
        return self._root.find_uid(uid)

    def _dispatch(self, kind: str, node: INode, **details: Any) -> Optional[ViewNode]:
        with self._lock:
            live = self._live(node)
            self.events.append(InputEvent(kind, node.identifier, getattr(node, "uid", 0), details))
            logger.debug("input %s on %r %s", kind, node, details or "")
            if live is None:
                return None
            handler = live.handlers.get(kind)
            if handler is not None:
                handler(live, self, **details)
            return live

    def _text_entry(self, node: ViewNode) -> Optional[ViewNode]:
        if node.element_type in TEXT_ENTRY_TYPES:
            return node
        return next((c for c in node.children if c.element_type in TEXT_ENTRY_TYPES), None)

    def _focus(self, target: Optional[ViewNode]) -> None:
        for n in self._root.walk():
            n.has_focus = n is target

    def tap(self, node: INode, count: int = 1, touches: int = 1) -> None:
        with self._lock:
            live = self._dispatch("tap", node, count=count, touches=touches)
            if live is not None and "tap" not in live.handlers and live.is_enabled:
                entry = self._text_entry(live)
                if entry is not None:
                    self._focus(entry)

    def tap_at(self, node: INode, offset: Offset) -> None:
        self._dispatch("tap_at", node, offset=offset)

    def double_tap(self, node: INode, offset: Optional[Offset] = None) -> None:
        self._dispatch("double_tap", node, offset=offset)

    def press(self, node: INode, duration: float, offset: Optional[Offset] = None) -> None:
        self._dispatch("press", node, duration=duration, offset=offset)

    def swipe(self, node: INode, direction: SwipeDirection, velocity: float) -> None:
        self._dispatch("swipe", node, direction=SwipeDirection(direction), velocity=float(velocity))

    def drag(self, node: INode, start: Offset, finish: Offset, hold: float) -> None:
        self._dispatch("drag", node, start=start, finish=finish, hold=hold)

    def pinch(self, node: INode, scale: float, velocity: float) -> None:
        self._dispatch("pinch", node, scale=scale, velocity=velocity)

    def rotate(self, node: INode, radians: float, velocity: float) -> None:
        self._dispatch("rotate", node, radians=radians, velocity=velocity)

    def type_text(self, node: INode, text: str) -> None:
        with self._lock:
            live = self._dispatch("type_text", node, text=text)
            if live is None or "type_text" in live.handlers:
                return
            entry = self._text_entry(live)
            if entry is None:
                return
            self._focus(entry)
            current = str(entry.value or "")
            for char in text:
                if char == RETURN_KEY:
                    entry.has_focus = False
                    break
                if char == DELETE_KEY:
                    current = current[:-1]
                else:
                    current += char
            entry.value = current
