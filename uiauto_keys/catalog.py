# uiauto_keys/catalog.py
"""
@file catalog.py
@brief Enumerate the identifiers a descriptor tree can produce.

Render code may key an element from its screen or from any descriptor type
on the way down, so the catalog walks the fields of the root and then of
every descriptor type reachable from it, each as its own root.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterator, List, Set, Tuple

from .descriptors import FieldKind, declared_fields
from .exceptions import DeclarationError
from .keypath import CanonicalPath, qualified_name


@dataclass(frozen=True)
class CatalogEntry:
    path: CanonicalPath
    identifier: str
    is_list: bool

    @property
    def kind(self) -> FieldKind:
        return self.path.segments[-1].kind

    @property
    def field_key(self) -> Tuple[type, str]:
        """The rendering type and field name; equal for every spelling of one field."""
        parent = CanonicalPath(self.path.root, self.path.segments[:-1])
        return parent.value_type, self.path.segments[-1].name

    def to_dict(self) -> Dict[str, object]:
        return {
            "root": qualified_name(self.path.root),
            "path": [s.name for s in self.path.segments],
            "identifier": self.identifier,
            "list": self.is_list,
        }


def _walk(path: CanonicalPath, stack: Tuple[type, ...]) -> Iterator[CanonicalPath]:
    owner = path.value_type
    if owner in stack:
        cycle = " -> ".join(qualified_name(t) for t in stack + (owner,))
        raise DeclarationError(f"Descriptor cycle: {cycle}")
    for name, spec in declared_fields(owner).items():
        child = path.child(name)
        yield child
        if spec.kind is not FieldKind.LIST:
            yield from _walk(child, stack + (owner,))


def reachable_types(root_type: type) -> List[type]:
    """The root followed by every descriptor type used below it, first-seen order."""
    seen: List[type] = [root_type]
    index = 0
    while index < len(seen):
        for spec in declared_fields(seen[index]).values():
            if spec.value_type not in seen:
                seen.append(spec.value_type)
        index += 1
    return seen


def iter_identifiers(root_type: type, all_roots: bool = True) -> Iterator[CatalogEntry]:
    """
    Yield every declared path below root_type with its identifier.

    @param root_type Descriptor type to start from (usually a screen)
    @param all_roots Also walk each reachable descriptor type as a root
    """
    roots = reachable_types(root_type) if all_roots else [root_type]
    for root in roots:
        for path in _walk(CanonicalPath.identity(root), ()):
            yield CatalogEntry(path, path.identifier(), path.is_list)


def rendered_fields(root_type: type) -> List[List[CatalogEntry]]:
    """
    Identifiers that render an element, grouped by declared field.

    A field of a nested type is reachable from the screen and from the type
    itself; render code keys the element with one of those spellings, so
    each group lists the alternatives in catalog order. Groups render
    nothing and are left out.
    """
    fields: Dict[Tuple[type, str], List[CatalogEntry]] = {}
    for entry in iter_identifiers(root_type):
        if entry.kind is FieldKind.GROUP:
            continue
        spellings = fields.setdefault(entry.field_key, [])
        if all(e.identifier != entry.identifier for e in spellings):
            spellings.append(entry)
    return list(fields.values())


def find_collisions(root_type: type) -> Dict[str, List[CanonicalPath]]:
    """
    Identifiers produced by more than one distinct path.

    @return Mapping of identifier to the colliding paths (empty when unique)
    """
    by_identifier: Dict[str, List[CanonicalPath]] = defaultdict(list)
    seen: Set[CanonicalPath] = set()
    for entry in iter_identifiers(root_type):
        if entry.path in seen:
            continue
        seen.add(entry.path)
        by_identifier[entry.identifier].append(entry.path)
    return {ident: paths for ident, paths in by_identifier.items() if len(paths) > 1}
