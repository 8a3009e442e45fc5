# tests/test_keypath.py
"""
Tests for declaration paths and identifier derivation.
"""

import pytest

from uiauto_keys.config import configure_identifiers
from uiauto_keys.descriptors import (Group, ImageAccessibility, ListOf,
                                     ScreenAccessibility, TextAccessibility,
                                     ViewAccessibility)
from uiauto_keys.exceptions import DeclarationError
from uiauto_keys.keypath import (CanonicalPath, PathSegment, derive, is_nested,
                                 keypath, qualified_name)


class TestAccessibility(ViewAccessibility):
    __test__ = False

    foo = TextAccessibility()
    bar = ImageAccessibility()


class TestAccessibilityWithNestedAccessibility(ViewAccessibility):
    __test__ = False

    class FooBarAccessibility(ViewAccessibility):
        foo = TextAccessibility()
        bar = ImageAccessibility()

    fooBar = FooBarAccessibility()


class TestAccessibilityWithNestedGroup(ViewAccessibility):
    __test__ = False

    class FooBarGroup(Group):
        foo = TextAccessibility()
        bar = ImageAccessibility()

    fooBar = FooBarGroup()


class Row(ViewAccessibility):
    title = TextAccessibility()


class Listing(ScreenAccessibility):
    items = ListOf(Row)
    header = TextAccessibility()


class TestQualifiedName:

    def test_top_level(self):
        """A top-level type is its own name."""
        assert qualified_name(Row) == "Row"
        assert not is_nested(Row)

    def test_nested(self):
        """A nested type includes its enclosing types."""
        nested = TestAccessibilityWithNestedAccessibility.FooBarAccessibility
        assert qualified_name(nested) == "TestAccessibilityWithNestedAccessibility.FooBarAccessibility"
        assert is_nested(nested)

    def test_function_scope_is_dropped(self):
        """Types declared in a function drop the <locals> marker."""
        class Local(ViewAccessibility):
            class Inner(ViewAccessibility):
                pass

        assert qualified_name(Local) == "Local"
        assert qualified_name(Local.Inner) == "Local.Inner"
        assert not is_nested(Local)
        assert is_nested(Local.Inner)


class TestDerive:
    """Identifier format: root qualified name, field names, optional [item]."""

    def test_identifier_is_correct(self):
        """Should join the root and field names."""
        assert str(keypath(TestAccessibility).foo) == "TestAccessibility.foo"
        assert str(keypath(TestAccessibility).bar) == "TestAccessibility.bar"

    def test_nested_accessibility(self):
        """Paths rooted at a nested view type start with its qualified name."""
        root = TestAccessibilityWithNestedAccessibility.FooBarAccessibility
        assert str(keypath(root).foo) == "TestAccessibilityWithNestedAccessibility.FooBarAccessibility.foo"
        assert str(keypath(root).bar) == "TestAccessibilityWithNestedAccessibility.FooBarAccessibility.bar"

    def test_nested_accessibility_property(self):
        """Paths through a nested view field use the field name."""
        path = keypath(TestAccessibilityWithNestedAccessibility).fooBar
        assert str(path.foo) == "TestAccessibilityWithNestedAccessibility.fooBar.foo"
        assert str(path.bar) == "TestAccessibilityWithNestedAccessibility.fooBar.bar"

    def test_nested_group(self):
        """Paths rooted at a nested group start with its qualified name."""
        root = TestAccessibilityWithNestedGroup.FooBarGroup
        assert str(keypath(root).foo) == "TestAccessibilityWithNestedGroup.FooBarGroup.foo"
        assert str(keypath(root).bar) == "TestAccessibilityWithNestedGroup.FooBarGroup.bar"

    def test_nested_group_property(self):
        """Paths through a nested group field use the field name."""
        path = keypath(TestAccessibilityWithNestedGroup).fooBar
        assert str(path.foo) == "TestAccessibilityWithNestedGroup.fooBar.foo"
        assert str(path.bar) == "TestAccessibilityWithNestedGroup.fooBar.bar"

    def test_discriminator_suffix(self):
        """Should append the discriminator in brackets."""
        assert derive(Listing, ["items"], "Gamma") == "Listing.items[Gamma]"
        assert derive(Listing, ["items"]) == "Listing.items"

    def test_identity_path(self):
        """The empty path is the root's name."""
        assert CanonicalPath.identity(Row).identifier() == "Row"
        assert CanonicalPath.identity(Row).is_identity

    def test_accepts_segments(self):
        """Should accept PathSegments as well as names."""
        segment = PathSegment("title", "Row")
        assert derive(Row, [segment]) == "Row.title"

    def test_explicit_separator(self):
        """Should honor an explicit separator."""
        assert derive(Listing, ["items"], "x", separator="/") == "Listing/items[x]"

    def test_configured_separator(self):
        """Should use the configured separator by default."""
        configure_identifiers(separator="_")
        assert str(keypath(Listing).header) == "Listing_header"

    def test_deterministic(self):
        """The same path always derives the same identifier."""
        first = keypath(TestAccessibilityWithNestedAccessibility).fooBar.foo
        second = keypath(TestAccessibilityWithNestedAccessibility).fooBar.foo
        assert first == second
        assert hash(first) == hash(second)
        assert str(first) == str(second)

    def test_distinct_paths_have_distinct_identifiers(self):
        """Different paths derive different identifiers."""
        paths = [
            keypath(TestAccessibilityWithNestedAccessibility).fooBar.foo,
            keypath(TestAccessibilityWithNestedAccessibility).fooBar.bar,
            keypath(TestAccessibilityWithNestedAccessibility.FooBarAccessibility).foo,
            keypath(TestAccessibilityWithNestedAccessibility.FooBarAccessibility).bar,
            keypath(TestAccessibilityWithNestedGroup).fooBar.foo,
            keypath(TestAccessibilityWithNestedGroup.FooBarGroup).foo,
        ]
        identifiers = [str(p) for p in paths]
        assert len(set(identifiers)) == len(identifiers)


class TestKeyPathBuilder:

    def test_unknown_field(self):
        """An undeclared field raises DeclarationError."""
        with pytest.raises(DeclarationError):
            keypath(Row).subtitle

    def test_no_step_through_list(self):
        """Stepping through a list field is rejected."""
        with pytest.raises(DeclarationError):
            keypath(Listing).items.title

    def test_value_type(self):
        """Should track the type each path ends on."""
        path = CanonicalPath.identity(Listing).child("items")
        assert path.is_list
        assert path.value_type is Row
        assert CanonicalPath.identity(Listing).child("header").value_type is TextAccessibility

    def test_not_a_descriptor(self):
        """A non-descriptor root is rejected."""
        with pytest.raises(DeclarationError):
            keypath(int)
