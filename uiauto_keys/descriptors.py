# uiauto_keys/descriptors.py
"""
@file descriptors.py
@brief Base classes for declaring accessibility descriptor trees.

A descriptor tree mirrors UI composition. Screens are roots, views are
identifiable elements, groups only hold fields, and lists declare repeated
elements. Children are class attributes:

    class CellAccessibility(ViewAccessibility):
        title = TextAccessibility()
        subtitle = TextAccessibility()

    class UserListAccessibility(ScreenAccessibility):
        class Content(SwipeableAccessibility, ViewAccessibility):
            search_field = TextFieldAccessibility()
            users = ListOf(CellAccessibility)

        content = Content()

Capabilities are mixin classes. The testing layer only exposes operations
for the capabilities a descriptor type declares.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional, Type

from .exceptions import DeclarationError


class Capability(str, Enum):
    """Families of test operations a descriptor may support."""
    VIEW = "view"
    TEXT = "text"
    IMAGE = "image"
    EDITABLE = "editable"
    DISABLEABLE = "disableable"
    SELECTABLE = "selectable"
    SWIPEABLE = "swipeable"
    PINCHABLE = "pinchable"
    ROTATABLE = "rotatable"
    ANY = "any"


class FieldKind(str, Enum):
    VIEW = "view"
    GROUP = "group"
    LIST = "list"


class DescriptorNode:
    """Common root of every descriptor class."""

    __capabilities__: FrozenSet[Capability] = frozenset()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        mixins = [
            base for base in cls.__mro__
            if issubclass(base, CapabilityMixin) and base is not CapabilityMixin
        ]
        if mixins and not issubclass(cls, ViewAccessibility):
            names = ", ".join(sorted(m.__name__ for m in mixins))
            raise DeclarationError(
                f"{cls.__qualname__}: capabilities ({names}) require a ViewAccessibility base"
            )

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__}>"


class CapabilityMixin:
    """Marker base for capability mixins."""

    __capabilities__: FrozenSet[Capability] = frozenset()


class ViewAccessibility(DescriptorNode):
    """An addressable UI element. Instances declare single-view fields."""

    __capabilities__ = frozenset({Capability.VIEW})


class ScreenAccessibility(DescriptorNode):
    """A root descriptor for a whole screen. Never used as a field."""


class Group(DescriptorNode):
    """
    A plain data-holding group of fields.

    Groups have no UI element of their own; accessing one never queries the
    live tree.
    """


class TextAccessibility(ViewAccessibility):
    __capabilities__ = frozenset({Capability.TEXT})


class ImageAccessibility(ViewAccessibility):
    __capabilities__ = frozenset({Capability.IMAGE})


class AnyAccessibility(ViewAccessibility):
    """A view of unknown concrete type; narrow it in tests to get its full surface."""

    __capabilities__ = frozenset({Capability.ANY})


class EditableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.EDITABLE})


class DisableableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.DISABLEABLE})


class SelectableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.SELECTABLE})


class SwipeableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.SWIPEABLE})


class PinchableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.PINCHABLE})


class RotatableAccessibility(CapabilityMixin):
    __capabilities__ = frozenset({Capability.ROTATABLE})


class TextFieldAccessibility(EditableAccessibility, ViewAccessibility):
    """A text entry element, or a container whose first text-entry child is edited."""


class ListOf:
    """Declares a field holding repeated elements of one view type."""

    def __init__(self, item_type: Type[ViewAccessibility]):
        if not isinstance(item_type, type) or not issubclass(item_type, ViewAccessibility):
            raise DeclarationError(
                f"ListOf expects a ViewAccessibility subclass, got {item_type!r}"
            )
        self.item_type = item_type

    def __repr__(self) -> str:
        return f"ListOf({self.item_type.__qualname__})"


@dataclass(frozen=True)
class FieldSpec:
    """A declared child of a descriptor type."""
    name: str
    kind: FieldKind
    value_type: type
    owner: type


def capabilities_of(descriptor_type: type) -> FrozenSet[Capability]:
    """Union of the capability tags declared along the MRO."""
    caps = set()
    for klass in descriptor_type.__mro__:
        caps.update(klass.__dict__.get("__capabilities__", ()))
    return frozenset(caps)


def is_view_type(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, ViewAccessibility)


def is_screen_type(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, ScreenAccessibility)


def _field_for(name: str, value: Any, owner: type) -> Optional[FieldSpec]:
    if isinstance(value, ListOf):
        return FieldSpec(name, FieldKind.LIST, value.item_type, owner)
    if isinstance(value, ScreenAccessibility):
        raise DeclarationError(
            f"{owner.__qualname__}.{name}: screens can only be used as roots"
        )
    if isinstance(value, ViewAccessibility):
        return FieldSpec(name, FieldKind.VIEW, type(value), owner)
    if isinstance(value, Group):
        return FieldSpec(name, FieldKind.GROUP, type(value), owner)
    return None


@lru_cache(maxsize=None)
def declared_fields(descriptor_type: type) -> Mapping[str, FieldSpec]:
    """
    Collect the declared fields of a descriptor type, base classes first.

    @param descriptor_type Any DescriptorNode subclass
    @return Read-only mapping of field name to FieldSpec, in declaration order
    """
    if not isinstance(descriptor_type, type) or not issubclass(descriptor_type, DescriptorNode):
        raise DeclarationError(f"Not a descriptor type: {descriptor_type!r}")

    fields = {}
    for klass in reversed(descriptor_type.__mro__):
        for name, value in vars(klass).items():
            if name.startswith("_"):
                continue
            spec = _field_for(name, value, klass)
            if spec is not None:
                fields[name] = spec
    return MappingProxyType(fields)
