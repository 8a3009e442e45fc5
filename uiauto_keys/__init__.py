"""
uiauto-keys - stable accessibility identifiers derived from declared descriptor trees.

This package provides:
- Descriptors: declaring the accessibility shape of screens and components
- Key paths: deriving identifiers from declaration paths
- Assignment: attaching identifiers to rendered elements
- Testing: handles that mirror descriptor trees and look up live elements
- Waits and reporting: polling assertions routed to a failure reporter
- Memory host: an in-memory UI tree for driving and testing lookups
"""

from uiauto_keys.assignment import AccessibilityKey, assign
from uiauto_keys.catalog import find_collisions, iter_identifiers
from uiauto_keys.config import (TimeConfig, configure_identifiers,
                                identifier_settings, load_settings)
from uiauto_keys.declarations import build_declarations, load_declarations
from uiauto_keys.descriptors import (AnyAccessibility, Capability,
                                     DisableableAccessibility,
                                     EditableAccessibility, Group,
                                     ImageAccessibility, ListOf,
                                     PinchableAccessibility,
                                     RotatableAccessibility,
                                     ScreenAccessibility,
                                     SelectableAccessibility,
                                     SwipeableAccessibility,
                                     TextAccessibility, TextFieldAccessibility,
                                     ViewAccessibility)
from uiauto_keys.exceptions import (AssertionFailure, ConfigError,
                                    DeclarationError, TimeoutError,
                                    UIAutoError)
from uiauto_keys.interfaces import (ElementType, Frame, GestureVelocity,
                                    IHost, INode, IRenderable)
from uiauto_keys.keypath import CanonicalPath, derive, keypath
from uiauto_keys.memory import MemoryHost, ViewNode
from uiauto_keys.reporting import FailureReporter, current_reporter, reporting
from uiauto_keys.testing import TestingElement, TestingList, screen, view
from uiauto_keys.waits import wait_until

__all__ = [
    "AccessibilityKey",
    "assign",
    "find_collisions",
    "iter_identifiers",
    "TimeConfig",
    "configure_identifiers",
    "identifier_settings",
    "load_settings",
    "build_declarations",
    "load_declarations",
    "AnyAccessibility",
    "Capability",
    "DisableableAccessibility",
    "EditableAccessibility",
    "Group",
    "ImageAccessibility",
    "ListOf",
    "PinchableAccessibility",
    "RotatableAccessibility",
    "ScreenAccessibility",
    "SelectableAccessibility",
    "SwipeableAccessibility",
    "TextAccessibility",
    "TextFieldAccessibility",
    "ViewAccessibility",
    "AssertionFailure",
    "ConfigError",
    "DeclarationError",
    "TimeoutError",
    "UIAutoError",
    "ElementType",
    "Frame",
    "GestureVelocity",
    "IHost",
    "INode",
    "IRenderable",
    "CanonicalPath",
    "derive",
    "keypath",
    "MemoryHost",
    "ViewNode",
    "FailureReporter",
    "current_reporter",
    "reporting",
    "TestingElement",
    "TestingList",
    "screen",
    "view",
    "wait_until",
]

__version__ = "1.0.0"
