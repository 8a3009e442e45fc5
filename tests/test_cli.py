# tests/test_cli.py
"""
Tests for the uiauto-keys command line.
"""

import json
import textwrap

import pytest
import yaml

from uiauto_keys.cli import main

LISTING = textwrap.dedent("""\
    types:
      Row:
        kind: view
        fields:
          title: TextAccessibility
      Listing:
        kind: screen
        nested:
          Header:
            kind: view
            fields:
              caption: TextAccessibility
        fields:
          header: Header
          items: {list: Row}
""")

SHADOWED = textwrap.dedent("""\
    types:
      Shadow:
        kind: screen
        nested:
          Panel:
            kind: view
            fields:
              title: TextAccessibility
        fields:
          Panel: Panel
""")


GROUPED = textwrap.dedent("""\
    types:
      Listing:
        kind: screen
        nested:
          Header:
            kind: view
            fields:
              caption: TextAccessibility
          Footer:
            kind: group
            fields:
              note: TextAccessibility
        fields:
          header: Header
          footer: Footer
""")


@pytest.fixture
def listing_file(tmp_path):
    path = tmp_path / "listing.yaml"
    path.write_text(LISTING, encoding="utf-8")
    return str(path)


@pytest.fixture
def snapshot_file(tmp_path):
    snapshot = {
        "type": "application",
        "children": [
            {"type": "other", "identifier": "Listing.header", "children": [
                {"type": "staticText", "identifier": "Listing.Header.caption", "label": "Inbox"},
            ]},
            {"type": "cell", "identifier": "Listing.items[a]", "children": [
                {"type": "staticText", "identifier": "Row.title", "label": "A"},
            ]},
            {"type": "cell", "identifier": "Listing.items[b]"},
            {"type": "button", "identifier": "Stray.button"},
        ],
    }
    path = tmp_path / "snapshot.yaml"
    path.write_text(yaml.safe_dump(snapshot), encoding="utf-8")
    return str(path)


class TestIds:

    def test_lists_identifiers(self, listing_file, capsys):
        """Should print every identifier, lists marked with [*]."""
        assert main(["ids", listing_file]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [
            "Listing.header",
            "Listing.header.caption",
            "Listing.items[*]",
            "Listing.Header.caption",
            "Row.title",
        ]

    def test_root_only(self, listing_file, capsys):
        """Should limit output to paths from the root."""
        assert main(["ids", listing_file, "--root-only"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["Listing.header", "Listing.header.caption", "Listing.items[*]"]

    def test_explicit_root_and_separator(self, listing_file, capsys):
        """Should honor --root and --separator."""
        assert main(["ids", listing_file, "--root", "Listing.Header", "--separator", "/"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == ["Listing/Header/caption"]

    def test_json(self, listing_file, capsys):
        """Should print catalog entries as JSON."""
        assert main(["ids", listing_file, "--root-only", "--json"]) == 0
        entries = json.loads(capsys.readouterr().out)
        assert entries[2] == {
            "root": "Listing",
            "path": ["items"],
            "identifier": "Listing.items",
            "list": True,
        }

    def test_unknown_root(self, listing_file, capsys):
        """An unknown root type exits with 2."""
        assert main(["ids", listing_file, "--root", "Footer"]) == 2
        assert "no declared type 'Footer'" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """A missing declaration file exits with 2."""
        assert main(["ids", str(tmp_path / "nope.yaml")]) == 2
        assert "Error loading declarations" in capsys.readouterr().err


class TestCheck:

    def test_unique(self, listing_file, capsys):
        """Should report a tree without collisions."""
        assert main(["check", listing_file]) == 0
        assert "+ Listing: 5 identifiers, no collisions" in capsys.readouterr().out

    def test_collisions(self, tmp_path, capsys):
        """Should list colliding identifiers and exit with 1."""
        path = tmp_path / "shadow.yaml"
        path.write_text(SHADOWED, encoding="utf-8")
        assert main(["check", str(path)]) == 1
        err = capsys.readouterr().err
        assert "X Shadow: 1 colliding identifiers" in err
        assert "- Shadow.Panel.title" in err
        assert "Shadow.Panel -> title" in err

    def test_invalid_declarations(self, tmp_path, capsys):
        """Schema errors exit with 2."""
        path = tmp_path / "bad.yaml"
        path.write_text("types: {Row: {kind: button}}", encoding="utf-8")
        assert main(["check", str(path)]) == 2
        assert "schema validation failed" in capsys.readouterr().err


class TestMatch:

    def test_report(self, listing_file, snapshot_file, capsys):
        """Should report matched, list and undeclared identifiers."""
        assert main(["match", listing_file, snapshot_file]) == 0
        out = capsys.readouterr().out
        assert "Matched (5):" in out
        assert "  + Listing.Header.caption" in out
        assert "  Listing.items: 2 item(s)" in out
        assert "Not in snapshot (0):" in out
        assert "  ? Stray.button" in out

    def test_missing_field_lists_alternatives(self, listing_file, tmp_path, capsys):
        """A field absent under every spelling is reported once."""
        path = tmp_path / "bare.yaml"
        path.write_text(yaml.safe_dump({"type": "application", "identifier": "Listing.header"}), encoding="utf-8")
        assert main(["match", listing_file, str(path), "--strict"]) == 1
        out = capsys.readouterr().out
        assert "Not in snapshot (2):" in out
        assert "  - Listing.header.caption (or Listing.Header.caption)" in out
        assert "  - Row.title" in out

    def test_strict_passes_for_rendered_tree(self, tmp_path, capsys):
        """Nested and grouped fields are satisfied by whichever spelling was rendered."""
        declarations = tmp_path / "grouped.yaml"
        declarations.write_text(GROUPED, encoding="utf-8")
        snapshot = tmp_path / "grouped_snapshot.yaml"
        snapshot.write_text(yaml.safe_dump({
            "type": "application",
            "children": [
                {"type": "other", "identifier": "Listing.header", "children": [
                    {"type": "staticText", "identifier": "Listing.Header.caption"},
                ]},
                {"type": "staticText", "identifier": "Listing.Footer.note"},
            ],
        }), encoding="utf-8")
        assert main(["match", str(declarations), str(snapshot), "--strict"]) == 0
        out = capsys.readouterr().out
        assert "Matched (3):" in out
        assert "Not in snapshot (0):" in out
        assert "Listing.footer" not in out

    def test_strict(self, listing_file, snapshot_file):
        """Undeclared identifiers fail under --strict."""
        assert main(["match", listing_file, snapshot_file, "--strict"]) == 1

    def test_missing_snapshot(self, listing_file, tmp_path, capsys):
        """A missing snapshot file exits with 2."""
        assert main(["match", listing_file, str(tmp_path / "nope.yaml")]) == 2
        assert "Snapshot file not found" in capsys.readouterr().err

    def test_requires_subcommand(self):
        """Should require a subcommand."""
        with pytest.raises(SystemExit):
            main([])
