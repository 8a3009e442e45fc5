# uiauto_keys/declarations.py
"""
@file declarations.py
@brief Descriptor trees declared in YAML instead of Python classes.

    types:
      Row:
        kind: view
        capabilities: [selectable]
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

The file is validated against schemas/descriptors.schema.json and turned
into ordinary descriptor classes, so identifiers and testing handles work
exactly as for hand-written ones. Nested types get a dotted qualified name
("Listing.Header"). Type references resolve from the innermost enclosing
type outwards, then against the built-in descriptor types.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from .descriptors import (AnyAccessibility, DisableableAccessibility,
                          EditableAccessibility, Group, ImageAccessibility,
                          ListOf, PinchableAccessibility, RotatableAccessibility,
                          ScreenAccessibility, SelectableAccessibility,
                          SwipeableAccessibility, TextAccessibility,
                          TextFieldAccessibility, ViewAccessibility)
from .exceptions import ConfigError, DeclarationError

logger = logging.getLogger("uiauto_keys.declarations")

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "descriptors.schema.json")

DEFAULT_MODULE = "uiauto_keys.declared"

KIND_BASES: Dict[str, Tuple[type, ...]] = {
    "view": (ViewAccessibility,),
    "text": (TextAccessibility,),
    "image": (ImageAccessibility,),
    "editable": (EditableAccessibility, ViewAccessibility),
    "any": (AnyAccessibility,),
    "screen": (ScreenAccessibility,),
    "group": (Group,),
}

CAPABILITY_MIXINS: Dict[str, type] = {
    "editable": EditableAccessibility,
    "disableable": DisableableAccessibility,
    "selectable": SelectableAccessibility,
    "swipeable": SwipeableAccessibility,
    "pinchable": PinchableAccessibility,
    "rotatable": RotatableAccessibility,
}

BUILTIN_TYPES: Dict[str, type] = {
    "ViewAccessibility": ViewAccessibility,
    "TextAccessibility": TextAccessibility,
    "ImageAccessibility": ImageAccessibility,
    "AnyAccessibility": AnyAccessibility,
    "TextFieldAccessibility": TextFieldAccessibility,
}


@dataclass
class _TypeDecl:
    qualname: str
    kind: str
    capabilities: List[str] = field(default_factory=list)
    fields: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    description: Optional[str] = None


def _load_schema(path: str = SCHEMA_PATH) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


_validator: Optional[Draft202012Validator] = None


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        _validator = Draft202012Validator(_load_schema())
    return _validator


def validate_declarations(data: Any) -> None:
    """@throws ConfigError listing every schema violation"""
    errors = sorted(_get_validator().iter_errors(data), key=lambda e: list(e.path))
    if errors:
        lines = ["Declaration schema validation failed:"]
        for e in errors:
            lines.append(f"- {list(e.path)}: {e.message}")
        raise ConfigError("\n".join(lines))


def _collect(types: Dict[str, Any], prefix: str, out: Dict[str, _TypeDecl]) -> None:
    for name, spec in types.items():
        qualname = f"{prefix}.{name}" if prefix else name
        fields: Dict[str, Tuple[str, str]] = {}
        for fname, fspec in (spec.get("fields") or {}).items():
            if isinstance(fspec, str):
                fields[fname] = ("type", fspec)
            elif "list" in fspec:
                fields[fname] = ("list", fspec["list"])
            else:
                fields[fname] = ("type", fspec["type"])
        out[qualname] = _TypeDecl(
            qualname=qualname,
            kind=spec["kind"],
            capabilities=list(spec.get("capabilities") or []),
            fields=fields,
            description=spec.get("description"),
        )
        _collect(spec.get("nested") or {}, qualname, out)


def _resolve(ref: str, scope: str, decls: Dict[str, _TypeDecl], where: str) -> str:
    parts = scope.split(".")
    for depth in range(len(parts), -1, -1):
        candidate = ".".join(parts[:depth] + [ref])
        if candidate in decls:
            return candidate
    if ref in BUILTIN_TYPES:
        return ref
    raise DeclarationError(f"{where}: unknown type '{ref}'")


def _build_order(decls: Dict[str, _TypeDecl], refs: Dict[str, Dict[str, str]]) -> List[str]:
    order: List[str] = []
    state: Dict[str, int] = {}

    def visit(name: str, chain: Tuple[str, ...]) -> None:
        if state.get(name) == 2:
            return
        if state.get(name) == 1:
            raise DeclarationError(f"Descriptor cycle: {' -> '.join(chain + (name,))}")
        state[name] = 1
        for target in refs[name].values():
            if target in decls:
                visit(target, chain + (name,))
        state[name] = 2
        order.append(name)

    for name in decls:
        visit(name, ())
    return order


class Declarations:
    """Descriptor classes built from one declaration file, by qualified name."""

    def __init__(self, types: Dict[str, type], source: str = "<memory>"):
        self.types = types
        self.source = source

    def __getitem__(self, qualname: str) -> type:
        try:
            return self.types[qualname]
        except KeyError:
            raise DeclarationError(f"{self.source}: no declared type '{qualname}'") from None

    def __contains__(self, qualname: object) -> bool:
        return qualname in self.types

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def get(self, qualname: str) -> Optional[type]:
        return self.types.get(qualname)

    @property
    def screens(self) -> List[type]:
        return [t for t in self.types.values() if issubclass(t, ScreenAccessibility)]

    def root(self, name: Optional[str] = None) -> type:
        """
        The root type to start from: the named type, or the only screen.

        @throws DeclarationError if name is omitted and there is not exactly one screen
        """
        if name:
            return self[name]
        screens = self.screens
        if len(screens) != 1:
            names = ", ".join(t.__qualname__ for t in screens) or "none"
            raise DeclarationError(
                f"{self.source}: pass a root type name (screens declared: {names})"
            )
        return screens[0]


def build_declarations(
    data: Any,
    source: str = "<memory>",
    module: Optional[str] = None,
) -> Declarations:
    """
    Validate parsed declaration data and build its descriptor classes.

    @param data Parsed YAML/JSON document
    @param source Name used in error messages
    @param module __module__ given to the generated classes
    @throws ConfigError on schema violations, DeclarationError on bad references
    """
    validate_declarations(data)
    module = module or data.get("module") or DEFAULT_MODULE

    decls: Dict[str, _TypeDecl] = {}
    _collect(data["types"], "", decls)

    refs: Dict[str, Dict[str, str]] = {}
    for qualname, decl in decls.items():
        refs[qualname] = {
            fname: _resolve(ref, qualname, decls, f"{source}: {qualname}.{fname}")
            for fname, (_, ref) in decl.fields.items()
        }

    built: Dict[str, type] = {}
    for qualname in _build_order(decls, refs):
        decl = decls[qualname]
        namespace: Dict[str, Any] = {
            "__module__": module,
            "__qualname__": qualname,
            "__doc__": decl.description,
        }
        for fname, (fkind, _) in decl.fields.items():
            target = refs[qualname][fname]
            target_type = built.get(target) or BUILTIN_TYPES[target]
            namespace[fname] = ListOf(target_type) if fkind == "list" else target_type()

        mixins = [CAPABILITY_MIXINS[c] for c in decl.capabilities]
        bases = tuple(m for m in mixins if m not in KIND_BASES[decl.kind]) + KIND_BASES[decl.kind]
        try:
            built[qualname] = type(qualname.rsplit(".", 1)[-1], bases, namespace)
        except DeclarationError as e:
            raise DeclarationError(f"{source}: {e}") from e

    for qualname, cls in built.items():
        if "." in qualname:
            outer, name = qualname.rsplit(".", 1)
            if name not in vars(built[outer]):
                setattr(built[outer], name, cls)

    ordered = {q: built[q] for q in decls}
    logger.debug("built %d descriptor types from %s", len(ordered), source)
    return Declarations(ordered, source)


def load_declarations(path: str, module: Optional[str] = None) -> Declarations:
    """
    Load a YAML (or JSON) declaration file.

    @throws ConfigError for a missing file, invalid YAML or schema violations
    """
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise ConfigError(f"Declaration file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e
    return build_declarations(data, source=os.path.basename(path), module=module)
