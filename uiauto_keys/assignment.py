# uiauto_keys/assignment.py
"""
@file assignment.py
@brief Binding identifiers derived from declaration paths onto rendered elements.

The render side attaches a key to each element it draws:

    assign(node, AccessibilityKey.keypath(keypath(CellAccessibility).title))
    assign(row, AccessibilityKey.keypath(keypath(Listing).items, item="Gamma"))

Identifiers can be switched off process-wide at startup through
config.configure_identifiers(enabled=False); assignment then clears them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import freeze_identifier_settings, identifier_settings
from .exceptions import DeclarationError
from .keypath import CanonicalPath, KeyPathBuilder, as_path

logger = logging.getLogger("uiauto_keys.assignment")


@dataclass(frozen=True)
class AccessibilityKey:
    """
    Identifier source for one rendered element.

    Either a declaration path (with an optional item discriminator for list
    fields) or a raw identifier string.
    """
    path: Optional[CanonicalPath] = None
    raw: Optional[str] = None

    @classmethod
    def keypath(
        cls,
        path: Union[CanonicalPath, KeyPathBuilder],
        item: Optional[str] = None,
    ) -> AccessibilityKey:
        """
        @param path Declaration path of the element
        @param item Discriminator for an element of a list field
        @throws DeclarationError if item is given for a non-list path
        """
        canonical = as_path(path)
        if item is not None and not canonical.is_list:
            raise DeclarationError(
                f"{canonical.identifier()}: an item discriminator requires a list field"
            )
        return cls(path=canonical, raw=item)

    @classmethod
    def identifier(cls, identifier: str) -> AccessibilityKey:
        return cls(path=None, raw=identifier)

    @property
    def value(self) -> str:
        """The identifier string regardless of the enable switch."""
        if self.path is not None:
            return self.path.identifier(self.raw)
        return self.raw or ""

    @property
    def identifier_value(self) -> Optional[str]:
        """The identifier to attach, or None while identifiers are disabled."""
        if not identifier_settings().enabled:
            return None
        return self.value

    def __str__(self) -> str:
        return self.value


KeyLike = Union[AccessibilityKey, CanonicalPath, KeyPathBuilder, str]


def to_key(key: KeyLike) -> AccessibilityKey:
    if isinstance(key, AccessibilityKey):
        return key
    if isinstance(key, str):
        return AccessibilityKey.identifier(key)
    return AccessibilityKey.keypath(key)


def assign(element: Any, key: KeyLike) -> Any:
    """
    Attach an identifier to a rendered element, or clear it when disabled.

    The element must expose a writable ``accessibility_identifier``
    attribute (see interfaces.IRenderable). Re-assignment overwrites.

    @return The element, for chaining inside render code
    """
    freeze_identifier_settings()
    identifier = to_key(key).identifier_value
    element.accessibility_identifier = identifier
    if identifier is not None:
        logger.debug("assigned identifier %s", identifier)
    return element
