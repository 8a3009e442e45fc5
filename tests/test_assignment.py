# tests/test_assignment.py
"""
Tests for attaching identifiers to rendered elements.
"""

import pytest

from uiauto_keys.assignment import AccessibilityKey, assign
from uiauto_keys.config import (configure_identifiers, identifier_settings,
                                identifier_settings_frozen)
from uiauto_keys.descriptors import (ListOf, ScreenAccessibility,
                                     TextAccessibility, ViewAccessibility)
from uiauto_keys.exceptions import ConfigError, DeclarationError
from uiauto_keys.keypath import keypath
from uiauto_keys.memory import ViewNode


class Cell(ViewAccessibility):
    title = TextAccessibility()


class Feed(ScreenAccessibility):
    cells = ListOf(Cell)
    caption = TextAccessibility()


class TestAccessibilityKey:

    def test_keypath_value(self):
        """Should derive the identifier from a key path."""
        key = AccessibilityKey.keypath(keypath(Cell).title)
        assert key.value == "Cell.title"
        assert key.identifier_value == "Cell.title"

    def test_list_item(self):
        """Should append the item in brackets."""
        key = AccessibilityKey.keypath(keypath(Feed).cells, item="42")
        assert key.value == "Feed.cells[42]"

    def test_list_without_item(self):
        """A list field without an item uses the bare path."""
        assert AccessibilityKey.keypath(keypath(Feed).cells).value == "Feed.cells"

    def test_item_requires_list(self):
        """An item on a non-list field is rejected."""
        with pytest.raises(DeclarationError):
            AccessibilityKey.keypath(keypath(Feed).caption, item="1")

    def test_raw_identifier(self):
        """A raw string is used as is."""
        assert AccessibilityKey.identifier("custom").value == "custom"

    def test_hashable(self):
        """Equal keys should hash alike."""
        first = AccessibilityKey.keypath(keypath(Cell).title)
        second = AccessibilityKey.keypath(keypath(Cell).title)
        assert first == second
        assert len({first, second}) == 1


class TestAssign:

    def test_sets_identifier(self):
        """Should set the derived identifier on the element."""
        node = ViewNode()
        assert assign(node, keypath(Cell).title) is node
        assert node.accessibility_identifier == "Cell.title"

    def test_accepts_plain_string(self):
        """Should accept a plain identifier string."""
        node = assign(ViewNode(), "plain")
        assert node.identifier == "plain"

    def test_idempotent(self):
        """Assigning the same key twice leaves one identifier."""
        node = ViewNode()
        assign(node, keypath(Cell).title)
        assign(node, keypath(Cell).title)
        assert node.identifier == "Cell.title"

    def test_disabled_never_sets_identifier(self):
        """Disabled assignment leaves elements untouched."""
        configure_identifiers(enabled=False)
        nodes = [ViewNode(identifier="stale") for _ in range(3)]
        assign(nodes[0], keypath(Cell).title)
        assign(nodes[1], AccessibilityKey.keypath(keypath(Feed).cells, item="x"))
        assign(nodes[2], "raw")
        assert [n.identifier for n in nodes] == [None, None, None]

    def test_first_assignment_freezes_settings(self):
        """Settings cannot change after the first assignment."""
        configure_identifiers(separator="/")
        assert not identifier_settings_frozen()
        assign(ViewNode(), keypath(Cell).title)
        assert identifier_settings_frozen()

        with pytest.raises(ConfigError):
            configure_identifiers(enabled=False)
        # re-applying the same values is allowed
        configure_identifiers(separator="/")
        assert identifier_settings().separator == "/"

    def test_invalid_separator(self):
        """Separators containing brackets are rejected."""
        with pytest.raises(ConfigError):
            configure_identifiers(separator="[")
        with pytest.raises(ConfigError):
            configure_identifiers(separator="")
