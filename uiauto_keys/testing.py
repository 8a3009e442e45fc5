# uiauto_keys/testing.py
"""
@file testing.py
@brief Testing handles whose attributes mirror a descriptor tree.

    app = screen(UserListAccessibility, host)
    app.content.users[0].title.assert_text("Alice")
    app.content.users["42"].favorite.tap()

Attribute access on a handle follows the declared fields of its descriptor
type. Each handle carries the set of declaration paths that may have been
used to identify its element, because the same element can be keyed either
from its screen or from its own type:

- view field: the element is the first descendant (hierarchy order) whose
  identifier equals any held path extended by the field. The new handle
  keeps those extended paths only when the view type is declared inside
  another type; otherwise it restarts at the view type itself.
- group field: no lookup. A top-level group type restarts at itself; a
  nested group keeps the extended paths as well.
- list field: returns a TestingList matching identifiers that start with
  any extended path. Items are addressed by position or by the
  discriminator they were assigned with.

Lookups never raise for a missing element; handles just report it.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterator, Optional, Tuple, Union

from .capabilities import (AnyHandle, DisableableHandle, EditableHandle,
                           HandleBase, HittableHandle, ImageHandle,
                           PinchableHandle, RotatableHandle, SelectableHandle,
                           SwipeableHandle, TextHandle, ViewHandle)
from .config import TimeConfig
from .context import ActionContextManager
from .descriptors import (Capability, FieldKind, FieldSpec, capabilities_of,
                          declared_fields, is_screen_type, is_view_type)
from .exceptions import DeclarationError
from .interfaces import IHost
from .keypath import CanonicalPath, is_nested, qualified_name
from .query import LiveElement, MatchRule
from .reporting import current_reporter
from .waits import wait_for_value

logger = logging.getLogger("uiauto_keys.testing")

Paths = Tuple[CanonicalPath, ...]


def _identifiers(paths: Paths, item: Optional[str] = None) -> Tuple[str, ...]:
    """Distinct identifiers of the non-identity paths, in order."""
    return tuple(dict.fromkeys(p.identifier(item) for p in paths if not p.is_identity))


class TestingElement(HandleBase):
    """
    Handle for one descriptor node.

    Operations beyond field access come from capability mixins; use
    handle_class_for() (or screen()/view()) to get the right class.
    A declared field whose name collides with a handle operation stays
    reachable through field().
    """

    __test__ = False

    def __init__(self, descriptor_type: type, paths: Paths, element: LiveElement):
        self.descriptor_type = descriptor_type
        self.paths = tuple(paths)
        self.element = element

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return _identifiers(self.paths)

    def __getattr__(self, name: str):
        if name.startswith("_") or name in ("descriptor_type", "paths", "element"):
            raise AttributeError(name)
        if name not in declared_fields(self.descriptor_type):
            raise AttributeError(
                f"{qualified_name(self.descriptor_type)} has no declared field '{name}'"
            )
        return self.field(name)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(declared_fields(self.descriptor_type)))

    def field(self, name: str) -> Union[TestingElement, TestingList]:
        """Handle for a declared field of this node."""
        spec = declared_fields(self.descriptor_type).get(name)
        if spec is None:
            raise DeclarationError(
                f"{qualified_name(self.descriptor_type)} has no declared field '{name}'"
            )
        if spec.kind is FieldKind.LIST:
            return TestingList(spec.value_type, self._extend(spec), self.element)
        if spec.kind is FieldKind.GROUP:
            return self._group(spec)
        return self._subview(spec)

    def _extend(self, spec: FieldSpec) -> Paths:
        return tuple(p.child(spec.name) for p in self.paths if not p.is_list)

    def _subview(self, spec: FieldSpec) -> TestingElement:
        subview = spec.value_type
        extended = self._extend(spec)
        live = self.element.child(MatchRule(_identifiers(extended)))
        if is_nested(subview):
            paths = extended + (CanonicalPath.identity(subview),)
        else:
            paths = (CanonicalPath.identity(subview),)
        return handle_class_for(subview)(subview, paths, live)

    def _group(self, spec: FieldSpec) -> TestingElement:
        group = spec.value_type
        if is_nested(group):
            paths = self._extend(spec) + (CanonicalPath.identity(group),)
        else:
            paths = (CanonicalPath.identity(group),)
        return handle_class_for(group)(group, paths, self.element)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description}>"


class TestingList:
    """
    Handle for a list field.

    Items are the descendants whose identifier starts with the list
    identifier (case-insensitive), in hierarchy order.
    """

    __test__ = False

    def __init__(self, item_type: type, paths: Paths, element: LiveElement):
        self.item_type = item_type
        self.paths = tuple(paths)
        self.element = element

    @property
    def identifiers(self) -> Tuple[str, ...]:
        return _identifiers(self.paths)

    def _rule(self, index: Optional[int] = None) -> MatchRule:
        return MatchRule(self.identifiers, prefix=True, index=index)

    @property
    def description(self) -> str:
        return f"{self.element.description} > {self._rule().describe()}"

    @property
    def count(self) -> int:
        return self.element.count(self._rule())

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def assert_count(self, count: int) -> TestingList:
        current_reporter().record_equal(self.count, count, f"Count of list {self.description}")
        return self

    def assert_empty(self, is_empty: bool = True) -> TestingList:
        current_reporter().record_equal(self.is_empty, is_empty, f"Emptiness of list {self.description}")
        return self

    def wait_for_count(self, count: int, timeout: Optional[float] = None, failing: bool = True) -> TestingList:
        config = TimeConfig.current().element_wait
        timeout = config.timeout if timeout is None else timeout
        with ActionContextManager.action("wait_for_count", self.description, self.identifiers, count=count):
            matched = wait_for_value(
                lambda: self.count, count, timeout=timeout, interval=config.interval,
                description=f"count of {self.description}",
            )
            if not matched and failing:
                current_reporter().fail(
                    f"Count of list {self.description} was not equal to {count} "
                    f"within {timeout:g} seconds"
                )
        return self

    def item(self, key: str) -> TestingElement:
        """The item assigned with discriminator key."""
        live = self.element.child(MatchRule(_identifiers(self.paths, key)))
        return self._bind(live)

    def at(self, index: int) -> TestingElement:
        """The index-th item in hierarchy order; empty when out of range."""
        return self._bind(self.element.child(self._rule(index)))

    def _bind(self, live: LiveElement) -> TestingElement:
        return handle_class_for(self.item_type)(
            self.item_type, (CanonicalPath.identity(self.item_type),), live
        )

    def __getitem__(self, item: Union[int, str]) -> TestingElement:
        if isinstance(item, str):
            return self.item(item)
        if isinstance(item, int) and not isinstance(item, bool):
            return self.at(item)
        raise TypeError(f"list items are addressed by int or str, not {type(item).__name__}")

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[TestingElement]:
        for index in range(self.count):
            yield self.at(index)

    def __repr__(self) -> str:
        return f"<TestingList {self.description}>"


# Capability -> handle mixin, in MRO order.
_CAPABILITY_HANDLES = (
    (Capability.EDITABLE, EditableHandle),
    (Capability.TEXT, TextHandle),
    (Capability.IMAGE, ImageHandle),
    (Capability.DISABLEABLE, DisableableHandle),
    (Capability.SELECTABLE, SelectableHandle),
    (Capability.SWIPEABLE, SwipeableHandle),
    (Capability.PINCHABLE, PinchableHandle),
    (Capability.ROTATABLE, RotatableHandle),
    (Capability.ANY, AnyHandle),
)


@lru_cache(maxsize=None)
def handle_class_for(descriptor_type: type) -> type:
    """
    Handle class exposing exactly the operations of a descriptor type.

    Screens and groups get field access plus perform()/assert_that();
    views add existence, frame and tap operations and one mixin per
    declared capability.
    """
    declared_fields(descriptor_type)
    if not is_view_type(descriptor_type):
        return TestingElement

    capabilities = capabilities_of(descriptor_type)
    mixins = [handle for cap, handle in _CAPABILITY_HANDLES if cap in capabilities]
    mixins.extend([ViewHandle, HittableHandle])
    name = "Testing" + qualified_name(descriptor_type).replace(".", "")
    logger.debug("handle class %s for capabilities %s", name, sorted(c.value for c in capabilities))
    return type(name, tuple(mixins) + (TestingElement,), {"__module__": __name__})


def screen(screen_type: type, host: IHost) -> TestingElement:
    """Handle for a screen rendered by host."""
    if not is_screen_type(screen_type):
        raise DeclarationError(f"{screen_type!r} is not a ScreenAccessibility subclass")
    return handle_class_for(screen_type)(
        screen_type, (CanonicalPath.identity(screen_type),), LiveElement.root(host)
    )


def view(
    view_type: type,
    element: Union[LiveElement, IHost, HandleBase],
) -> TestingElement:
    """
    Handle for an already located element seen as view_type.

    @param element A LiveElement, another handle (rebinds its element),
                   or a host (the root element)
    """
    if not is_view_type(view_type):
        raise DeclarationError(f"{view_type!r} is not a ViewAccessibility subclass")
    if isinstance(element, HandleBase):
        live = element.element
    elif isinstance(element, LiveElement):
        live = element
    elif isinstance(element, IHost):
        live = LiveElement.root(element)
    else:
        raise TypeError(f"Cannot build a view handle from {element!r}")
    return handle_class_for(view_type)(view_type, (CanonicalPath.identity(view_type),), live)
