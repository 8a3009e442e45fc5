# uiauto_keys/artifacts.py
"""
Snapshot dumps written next to failure reports.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, List, Optional

import yaml

from .interfaces import INode

logger = logging.getLogger("uiauto_keys.artifacts")


def _ts() -> str:
    """Generate timestamp string for file naming."""
    return time.strftime("%Y%m%d_%H%M%S")


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    os.makedirs(path, exist_ok=True)


def describe_node(node: INode) -> str:
    """One-line description of a snapshot node."""
    parts = [node.element_type.value]
    if node.identifier:
        parts.append(f"identifier: '{node.identifier}'")
    if node.label:
        parts.append(f"label: '{node.label}'")
    if node.value not in (None, ""):
        parts.append(f"value: {node.value!r}")
    if node.placeholder:
        parts.append(f"placeholder: '{node.placeholder}'")
    f = node.frame
    parts.append(f"{{{{{f.x:g}, {f.y:g}}}, {{{f.width:g}, {f.height:g}}}}}")
    flags = [
        name for name, on in (
            ("disabled", not node.is_enabled),
            ("selected", node.is_selected),
            ("focused", node.has_focus),
        ) if on
    ]
    if flags:
        parts.append(", ".join(flags))
    return ", ".join(parts)


def format_tree(node: Optional[INode], indent: str = "  ") -> str:
    """
    Render a snapshot subtree, one element per line.

    @param node Subtree root, or None for a missing element
    @return Multi-line text; "<missing>" when node is None
    """
    if node is None:
        return "<missing>"
    lines: List[str] = []

    def visit(current: INode, depth: int) -> None:
        lines.append(f"{indent * depth}{describe_node(current)}")
        for child in current.children:
            visit(child, depth + 1)

    visit(node, 0)
    return "\n".join(lines)


def _node_dict(node: INode) -> Dict[str, object]:
    f = node.frame
    data: Dict[str, object] = {"type": node.element_type.value}
    if node.identifier is not None:
        data["identifier"] = node.identifier
    if node.label is not None:
        data["label"] = node.label
    if node.value is not None:
        data["value"] = node.value
    if node.placeholder is not None:
        data["placeholder"] = node.placeholder
    if not node.is_enabled:
        data["enabled"] = False
    if node.is_selected:
        data["selected"] = True
    if node.has_focus:
        data["focused"] = True
    data["frame"] = [f.x, f.y, f.width, f.height]
    if node.children:
        data["children"] = [_node_dict(c) for c in node.children]
    return data


def make_artifacts(
    node: Optional[INode],
    out_dir: str,
    prefix: str,
    actions: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, str]:
    """
    Write a text dump and a YAML snapshot of a subtree.

    The YAML file can be loaded back with MemoryHost.from_file().

    @param node Subtree root (nothing is written when None)
    @param out_dir Output directory
    @param prefix File prefix
    @param actions In-flight handle operations, innermost first
    @return Dict of artifact kinds to file paths
    """
    artifacts: Dict[str, str] = {}
    if node is None:
        return artifacts

    ensure_dir(out_dir)
    base = os.path.join(out_dir, f"{prefix}_{_ts()}")
    try:
        tree_path = base + "_tree.txt"
        with open(tree_path, "w", encoding="utf-8") as f:
            f.write(format_tree(node) + "\n")
        artifacts["tree"] = tree_path

        snapshot_path = base + "_snapshot.yaml"
        with open(snapshot_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(_node_dict(node), f, sort_keys=False, allow_unicode=True)
        artifacts["snapshot"] = snapshot_path

        if actions:
            actions_path = base + "_actions.yaml"
            with open(actions_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(actions, f, sort_keys=False, allow_unicode=True)
            artifacts["actions"] = actions_path
    except OSError as e:
        logger.warning("could not write artifacts to %s: %s", out_dir, e)
    return artifacts
