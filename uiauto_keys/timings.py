# uiauto_keys/timings.py
"""
@file timings.py
@brief Default timings and named presets for waits, gestures and pauses.

A preset only lists what it changes. resolve_timings() merges
defaults <- preset <- overrides into one flat mapping of plain values.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

# Polled operations: bound, poll interval and (for repeats) a retry count.
TIMEOUT_FIELDS: Dict[str, Dict[str, Any]] = {
    "element_wait": {"timeout": 4.0, "interval": 0.1},
    "state_wait": {"timeout": 4.0, "interval": 0.1},
    "disappear_wait": {"timeout": 4.0, "interval": 0.1},
    "gesture_repeat": {"timeout": 0.0, "interval": 0.0, "retry_count": 16},
}

# Fixed holds, in seconds.
PAUSE_FIELDS: Dict[str, float] = {
    "long_press_duration": 0.5,
    "drag_hold_duration": 0.05,
}


def _waits(timeout: float, interval: float) -> Dict[str, Dict[str, float]]:
    bound = {"timeout": timeout, "interval": interval}
    return {name: dict(bound) for name in ("element_wait", "state_wait", "disappear_wait")}


PRESET_OVERRIDES: Dict[str, Dict[str, Any]] = {
    "fast": _waits(2.0, 0.05),
    "slow": {**_waits(10.0, 0.25), "gesture_repeat": {"retry_count": 24}},
    "ci": {
        **_waits(15.0, 0.3),
        "gesture_repeat": {"retry_count": 32},
        "long_press_duration": 0.8,
    },
}


def list_presets() -> Dict[str, Dict[str, Any]]:
    return {"default": {}, **PRESET_OVERRIDES}


def _merge(values: Dict[str, Any], changes: Mapping[str, Any], source: str) -> None:
    for name, change in changes.items():
        if name in TIMEOUT_FIELDS:
            if not isinstance(change, Mapping):
                raise ValueError(f"{source}: '{name}' must be a mapping, got {change!r}")
            unknown = set(change) - {"timeout", "interval", "retry_count"}
            if unknown:
                raise ValueError(f"{source}: unknown keys for '{name}': {sorted(unknown)}")
            values[name] = {**values[name], **{k: v for k, v in change.items() if v is not None}}
        elif name in PAUSE_FIELDS:
            try:
                values[name] = float(change)
            except (TypeError, ValueError):
                raise ValueError(f"{source}: '{name}' must be a number, got {change!r}") from None
        else:
            raise ValueError(f"{source}: unknown timing field '{name}'")


def resolve_timings(
    preset: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Flat timing values for a preset with overrides applied.

    @throws ValueError on an unknown preset, field or key
    """
    key = (preset or "default").lower()
    if key not in list_presets():
        raise ValueError(f"Unknown timing preset: {preset}")
    values: Dict[str, Any] = {name: dict(v) for name, v in TIMEOUT_FIELDS.items()}
    values.update(PAUSE_FIELDS)
    _merge(values, PRESET_OVERRIDES.get(key, {}), f"preset {key}")
    return apply_overrides(values, overrides or {})


def apply_overrides(values: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """A copy of resolved values with overrides merged in."""
    merged = {name: dict(v) if isinstance(v, Mapping) else v for name, v in values.items()}
    _merge(merged, overrides, "override")
    return merged
