# uiauto_keys/cli.py
"""
@file cli.py
@brief Command-line interface for uiauto-keys.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from .catalog import find_collisions, iter_identifiers, rendered_fields
from .config import configure_identifiers
from .declarations import Declarations, load_declarations
from .exceptions import ConfigError
from .memory import MemoryHost
from .query import MatchRule
from .timinglogger import TIMING_LOGGER


def _configure_logging_from_env() -> None:
    """Configure stdlib logging from UIAUTO_KEYS_LOG_LEVEL."""
    level = os.getenv("UIAUTO_KEYS_LOG_LEVEL")
    if level:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _configure_timing_logger_from_env() -> None:
    """Configure timing logging from environment variables."""
    enabled = os.getenv("UIAUTO_KEYS_TIMING_LOGGING", "").lower() in {"1", "true", "yes", "on"}
    if not enabled:
        TIMING_LOGGER.disable()
        return

    log_file = os.getenv("UIAUTO_KEYS_TIMING_LOG_FILE")
    TIMING_LOGGER.configure(console=True, file_path=log_file)
    TIMING_LOGGER.enable()


def _load(path: str) -> Optional[Declarations]:
    try:
        return load_declarations(path)
    except ConfigError as e:
        print(f"Error loading declarations: {e}", file=sys.stderr)
        return None


def _cmd_ids(args: argparse.Namespace) -> int:
    decls = _load(args.declarations)
    if decls is None:
        return 2
    if args.separator:
        configure_identifiers(separator=args.separator)
    try:
        root = decls.root(args.root)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    entries = list(iter_identifiers(root, all_roots=not args.root_only))
    if args.json:
        print(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return 0
    for entry in entries:
        suffix = "[*]" if entry.is_list else ""
        print(f"{entry.identifier}{suffix}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    decls = _load(args.declarations)
    if decls is None:
        return 2

    try:
        roots = [decls.root(args.root)] if args.root else (decls.screens or list(decls.types.values()))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    failed = False
    for root in roots:
        count = sum(1 for _ in iter_identifiers(root))
        collisions = find_collisions(root)
        if not collisions:
            print(f"+ {root.__qualname__}: {count} identifiers, no collisions")
            continue
        failed = True
        print(f"X {root.__qualname__}: {len(collisions)} colliding identifiers", file=sys.stderr)
        for identifier, paths in sorted(collisions.items()):
            print(f"  - {identifier}", file=sys.stderr)
            for path in paths:
                steps = ".".join(s.name for s in path.segments)
                print(f"      {path.root.__qualname__} -> {steps}", file=sys.stderr)
    return 1 if failed else 0


def _cmd_match(args: argparse.Namespace) -> int:
    decls = _load(args.declarations)
    if decls is None:
        return 2
    try:
        root_type = decls.root(args.root)
        host = MemoryHost.from_file(args.snapshot)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    snapshot = host.snapshot()
    nodes = [snapshot, *snapshot.descendants()] if snapshot is not None else []
    present = [n.identifier for n in nodes if n.identifier]
    present_set = set(present)
    claimed = set()
    missing: List[List[str]] = []
    lists: Dict[str, int] = {}

    for spellings in rendered_fields(root_type):
        if spellings[0].is_list:
            for entry in spellings:
                rule = MatchRule((entry.identifier,), prefix=True)
                hits = [i for i in present if rule.matches(i)]
                claimed.update(hits)
                lists[entry.identifier] = len(hits)
            continue
        hits = [e.identifier for e in spellings if e.identifier in present_set]
        claimed.update(hits)
        if not hits:
            missing.append([e.identifier for e in spellings])

    found = sorted(present_set & claimed)
    print(f"Matched ({len(found)}):")
    for identifier in found:
        print(f"  + {identifier}")
    print(f"\nLists ({len(lists)}):")
    for identifier, count in lists.items():
        print(f"  {identifier}: {count} item(s)")
    print(f"\nNot in snapshot ({len(missing)}):")
    for first, *others in missing:
        alternatives = f" (or {', '.join(others)})" if others else ""
        print(f"  - {first}{alternatives}")
    unknown = sorted(present_set - claimed)
    if unknown:
        print(f"\nUndeclared identifiers ({len(unknown)}):")
        for identifier in unknown:
            print(f"  ? {identifier}")

    if args.strict and (missing or unknown):
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    _configure_logging_from_env()
    _configure_timing_logger_from_env()

    p = argparse.ArgumentParser(
        prog="uiauto-keys",
        description="uiauto-keys - accessibility identifiers derived from descriptor trees",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # -------------------------
    # ids
    # -------------------------
    idsp = sub.add_parser("ids", help="List the identifiers a declaration file produces")
    idsp.add_argument("declarations", help="Path to a descriptor declaration YAML file")
    idsp.add_argument("--root", default=None, help="Root type (default: the only screen)")
    idsp.add_argument("--root-only", action="store_true", help="Only paths starting at the root type")
    idsp.add_argument("--separator", default=None, help="Identifier separator (default: '.')")
    idsp.add_argument("--json", action="store_true", help="Print JSON instead of one identifier per line")

    # -------------------------
    # check
    # -------------------------
    chkp = sub.add_parser("check", help="Fail when two declared paths produce the same identifier")
    chkp.add_argument("declarations", help="Path to a descriptor declaration YAML file")
    chkp.add_argument("--root", default=None, help="Check only this root type (default: every screen)")

    # -------------------------
    # match
    # -------------------------
    matp = sub.add_parser("match", help="Compare declared identifiers with a recorded UI snapshot")
    matp.add_argument("declarations", help="Path to a descriptor declaration YAML file")
    matp.add_argument("snapshot", help="Path to a snapshot YAML/JSON file")
    matp.add_argument("--root", default=None, help="Root type (default: the only screen)")
    matp.add_argument("--strict", action="store_true", help="Exit 1 on missing or undeclared identifiers")

    args = p.parse_args(argv)

    if args.cmd == "ids":
        return _cmd_ids(args)
    if args.cmd == "check":
        return _cmd_check(args)
    if args.cmd == "match":
        return _cmd_match(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
