# tests/test_catalog.py
"""
Tests for identifier enumeration and collision detection.
"""

import pytest

from uiauto_keys.catalog import (find_collisions, iter_identifiers,
                                 reachable_types, rendered_fields)
from uiauto_keys.descriptors import (Group, ListOf, ScreenAccessibility,
                                     TextAccessibility, ViewAccessibility)
from uiauto_keys.exceptions import DeclarationError


class Row(ViewAccessibility):
    title = TextAccessibility()


class Inbox(ScreenAccessibility):
    class Header(ViewAccessibility):
        caption = TextAccessibility()

    class Footer(Group):
        note = TextAccessibility()

    header = Header()
    footer = Footer()
    rows = ListOf(Row)


class Shadowed(ScreenAccessibility):
    class Panel(ViewAccessibility):
        title = TextAccessibility()

    # the field takes the nested type's name, so both spell Shadowed.Panel.title
    Panel = Panel()


class TestIterIdentifiers:

    def test_root_only(self):
        """Should list paths from the root in declaration order."""
        ids = [e.identifier for e in iter_identifiers(Inbox, all_roots=False)]
        assert ids == [
            "Inbox.header",
            "Inbox.header.caption",
            "Inbox.footer",
            "Inbox.footer.note",
            "Inbox.rows",
        ]

    def test_all_roots(self):
        """Should also walk nested and item types as roots."""
        ids = {e.identifier for e in iter_identifiers(Inbox)}
        assert {"Inbox.Header.caption", "Inbox.Footer.note", "Row.title"} <= ids

    def test_list_entries(self):
        """List fields are flagged and not walked into."""
        entries = {e.identifier: e for e in iter_identifiers(Inbox, all_roots=False)}
        assert entries["Inbox.rows"].is_list
        assert entries["Inbox.rows"].to_dict() == {
            "root": "Inbox",
            "path": ["rows"],
            "identifier": "Inbox.rows",
            "list": True,
        }
        assert not entries["Inbox.header"].is_list

    def test_reachable_types(self):
        """Should list reachable types in first-seen order."""
        assert reachable_types(Inbox) == [
            Inbox, Inbox.Header, Inbox.Footer, Row, TextAccessibility,
        ]

    def test_cycle(self):
        """A self-referencing type should raise DeclarationError."""
        class Node(ViewAccessibility):
            pass

        Node.next = Node()
        with pytest.raises(DeclarationError) as exc_info:
            list(iter_identifiers(Node))
        assert "Node -> Node" in str(exc_info.value)


class TestFindCollisions:

    def test_unique_tree(self):
        """A well-formed tree has no collisions."""
        assert find_collisions(Inbox) == {}

    def test_shadowed_nested_type(self):
        """A field named like its nested type collides with it."""
        collisions = find_collisions(Shadowed)
        assert list(collisions) == ["Shadowed.Panel.title"]
        roots = sorted(p.root.__qualname__ for p in collisions["Shadowed.Panel.title"])
        assert roots == ["Shadowed", "Shadowed.Panel"]


class TestRenderedFields:

    def spellings(self, root_type):
        return [[e.identifier for e in group] for group in rendered_fields(root_type)]

    def test_alternative_spellings_are_grouped(self):
        """Screen and type spellings of a field form one group; groups are skipped."""
        assert self.spellings(Inbox) == [
            ["Inbox.header"],
            ["Inbox.header.caption", "Inbox.Header.caption"],
            ["Inbox.footer.note", "Inbox.Footer.note"],
            ["Inbox.rows"],
            ["Row.title"],
        ]

    def test_identical_spellings_are_merged(self):
        """Paths spelling the same identifier appear once."""
        assert self.spellings(Shadowed) == [["Shadowed.Panel"], ["Shadowed.Panel.title"]]

    def test_field_key(self):
        """Every spelling of a field shares its rendering type and name."""
        entries = {e.identifier: e for e in iter_identifiers(Inbox)}
        assert entries["Inbox.footer.note"].field_key == (Inbox.Footer, "note")
        assert entries["Inbox.Footer.note"].field_key == (Inbox.Footer, "note")
        assert entries["Inbox.rows"].field_key == (Inbox, "rows")
