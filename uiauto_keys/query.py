# uiauto_keys/query.py
"""
@file query.py
@brief Lazy element queries re-resolved against a fresh snapshot on every access.

A LiveElement is a chain of match rules rooted at a host. Nothing is
cached: resolve() takes one snapshot and walks the whole chain inside it,
so every step of a lookup sees the same consistent tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .interfaces import IHost, INode

logger = logging.getLogger("uiauto_keys.query")


@dataclass(frozen=True)
class MatchRule:
    """
    Which descendants of the scope element a query selects.

    identifiers: candidate identifiers (any of them may match)
    prefix: match identifiers beginning with a candidate, case-insensitively
    index: pick the n-th match in hierarchy order; None picks the first
    """
    identifiers: Tuple[str, ...]
    prefix: bool = False
    index: Optional[int] = None

    def matches(self, identifier: Optional[str]) -> bool:
        if not identifier:
            return False
        if self.prefix:
            folded = identifier.casefold()
            return any(folded.startswith(c.casefold()) for c in self.identifiers)
        return identifier in self.identifiers

    def iter_matches(self, scope: INode) -> Iterator[INode]:
        return (n for n in scope.descendants() if self.matches(n.identifier))

    def select(self, scope: INode) -> Optional[INode]:
        if self.index is None:
            return next(self.iter_matches(scope), None)
        if self.index < 0:
            return None
        for i, node in enumerate(self.iter_matches(scope)):
            if i == self.index:
                return node
        return None

    def describe(self) -> str:
        star = "*" if self.prefix else ""
        names = " | ".join(f"'{c}{star}'" for c in self.identifiers) or "<nothing>"
        if self.index is not None:
            return f"{names}[{self.index}]"
        return names


class LiveElement:
    """A query for one element of the host's current UI."""

    def __init__(
        self,
        host: IHost,
        scope: Optional[LiveElement] = None,
        rule: Optional[MatchRule] = None,
    ):
        if (scope is None) != (rule is None):
            raise ValueError("scope and rule must be given together")
        self.host = host
        self.scope = scope
        self.rule = rule

    @classmethod
    def root(cls, host: IHost) -> LiveElement:
        """The host's root element (the application)."""
        return cls(host)

    def child(self, rule: MatchRule) -> LiveElement:
        """Query for a descendant of this element."""
        return LiveElement(self.host, self, rule)

    def resolve_in(self, root: Optional[INode]) -> Optional[INode]:
        if root is None:
            return None
        if self.scope is None:
            return root
        parent = self.scope.resolve_in(root)
        if parent is None:
            return None
        return self.rule.select(parent)

    def resolve(self) -> Optional[INode]:
        """Snapshot the host and locate the element, or None when absent."""
        node = self.resolve_in(self.host.snapshot())
        if node is None:
            logger.debug("no element for %s", self.description)
        return node

    def matches(self, rule: MatchRule) -> List[INode]:
        """All descendants of this element matching rule, in hierarchy order."""
        node = self.resolve()
        if node is None:
            return []
        return list(rule.iter_matches(node))

    def count(self, rule: MatchRule) -> int:
        return len(self.matches(rule))

    @property
    def exists(self) -> bool:
        return self.resolve() is not None

    @property
    def description(self) -> str:
        steps = []
        current: Optional[LiveElement] = self
        while current is not None and current.rule is not None:
            steps.append(current.rule.describe())
            current = current.scope
        if not steps:
            return "application"
        return " > ".join(reversed(steps))

    def __repr__(self) -> str:
        return f"<LiveElement {self.description}>"
