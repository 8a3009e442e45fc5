# uiauto_keys/keypath.py
"""
@file keypath.py
@brief Canonical declaration paths and their string identifiers.

A path starts at a root descriptor type and names one declared field per
step. Its identifier is the root's qualified name followed by the field
names, joined by the separator, with an optional "[item]" suffix:

    keypath(UserListAccessibility).content.users
    -> "UserListAccessibility.content.users"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from .config import identifier_settings
from .descriptors import FieldKind, declared_fields
from .exceptions import DeclarationError

_LOCALS = "<locals>."


def qualified_name(descriptor_type: type) -> str:
    """
    Qualified type name without its module.

    Classes declared inside functions drop the enclosing "<locals>" scope,
    so only the chain of type names remains.
    """
    name = getattr(descriptor_type, "__qualname__", descriptor_type.__name__)
    if _LOCALS in name:
        name = name.rsplit(_LOCALS, 1)[-1]
    return name


def type_depth(descriptor_type: type) -> int:
    """Number of type names in the qualified name."""
    return qualified_name(descriptor_type).count(".") + 1


def is_nested(descriptor_type: type) -> bool:
    """True for types declared inside another type."""
    return type_depth(descriptor_type) > 1


@dataclass(frozen=True)
class PathSegment:
    """One step of a path: a field name and the type that declares it."""
    name: str
    owner: str
    kind: FieldKind = FieldKind.VIEW
    value_type: Optional[type] = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class CanonicalPath:
    """Ordered field steps from a root descriptor type to a target node."""
    root: type
    segments: Tuple[PathSegment, ...] = ()

    @classmethod
    def identity(cls, descriptor_type: type) -> CanonicalPath:
        """The empty path rooted at a type."""
        return cls(descriptor_type, ())

    @property
    def is_identity(self) -> bool:
        return not self.segments

    @property
    def value_type(self) -> type:
        """The descriptor type this path ends on (the item type for lists)."""
        if not self.segments:
            return self.root
        return self.segments[-1].value_type or self.root

    @property
    def is_list(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is FieldKind.LIST

    def child(self, name: str) -> CanonicalPath:
        """
        Extend the path by a declared field of its value type.

        @throws DeclarationError for unknown fields or steps through a list
        """
        if self.is_list:
            raise DeclarationError(
                f"{self.identifier()}: cannot step into '{name}' through a list; "
                f"index the list in tests instead"
            )
        owner = self.value_type
        spec = declared_fields(owner).get(name)
        if spec is None:
            raise DeclarationError(f"{qualified_name(owner)} has no declared field '{name}'")
        return append(self, PathSegment(name, qualified_name(spec.owner), spec.kind, spec.value_type))

    def identifier(self, discriminator: Optional[str] = None, separator: Optional[str] = None) -> str:
        return derive(self.root, self.segments, discriminator, separator)

    def __str__(self) -> str:
        return self.identifier()


def append(path: CanonicalPath, segment: PathSegment) -> CanonicalPath:
    """Return a new path extended by one segment."""
    return CanonicalPath(path.root, path.segments + (segment,))


def derive(
    root_type: type,
    segments: Iterable[Union[PathSegment, str]] = (),
    discriminator: Optional[str] = None,
    separator: Optional[str] = None,
) -> str:
    """
    Build the identifier string for a path.

    @param root_type Root descriptor type
    @param segments Field steps (PathSegment or plain field names)
    @param discriminator Optional item key appended as "[key]"
    @param separator Overrides the configured separator
    @return Deterministic identifier string
    """
    sep = separator or identifier_settings().separator
    parts = qualified_name(root_type).split(".")
    parts.extend(s.name if isinstance(s, PathSegment) else str(s) for s in segments)
    identifier = sep.join(parts)
    if discriminator is not None:
        return f"{identifier}[{discriminator}]"
    return identifier


class KeyPathBuilder:
    """
    Attribute-access builder for declaration paths.

    Every attribute step is checked against the declared fields, so a typo
    fails at declaration time instead of producing a dangling identifier.
    """

    __slots__ = ("_path",)

    def __init__(self, path: CanonicalPath):
        self._path = path

    def __getattr__(self, name: str) -> KeyPathBuilder:
        if name.startswith("_"):
            raise AttributeError(name)
        return KeyPathBuilder(self._path.child(name))

    def __repr__(self) -> str:
        return f"keypath({self._path.identifier()})"

    def __str__(self) -> str:
        return self._path.identifier()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, KeyPathBuilder):
            return self._path == other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)


def keypath(root_type: type) -> KeyPathBuilder:
    """Start a declaration path at a root descriptor type."""
    declared_fields(root_type)
    return KeyPathBuilder(CanonicalPath.identity(root_type))


def as_path(value: Union[CanonicalPath, KeyPathBuilder]) -> CanonicalPath:
    if isinstance(value, CanonicalPath):
        return value
    if isinstance(value, KeyPathBuilder):
        return value._path
    raise DeclarationError(f"Expected a key path, got {value!r}")
