# uiauto_keys/config.py
"""
@file config.py
@brief Timing and identifier configuration for the framework.

Timing resolves per thread, innermost first:
    TimeConfig.override() block -> installed run config -> process default
Identifier settings are process wide and freeze on the first assignment.
"""

from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, Generator, Mapping, Optional

import yaml

from .exceptions import ConfigError
from .timings import (PAUSE_FIELDS, TIMEOUT_FIELDS, apply_overrides,
                      list_presets, resolve_timings)


@dataclass(frozen=True)
class TimeoutSettings:
    """Bound and poll interval of one kind of wait."""
    timeout: float
    interval: float
    retry_count: Optional[int] = None


class TimeConfig:
    """
    One resolved set of timings.

    Instances are snapshots: build_from() and override() produce new ones
    and never modify the config currently in effect.
    """

    _default: Optional[TimeConfig] = None
    _lock = threading.Lock()
    _local = threading.local()

    element_wait: TimeoutSettings
    state_wait: TimeoutSettings
    disappear_wait: TimeoutSettings
    gesture_repeat: TimeoutSettings
    long_press_duration: float
    drag_hold_duration: float

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        values = resolve_timings() if values is None else values
        for name in TIMEOUT_FIELDS:
            raw = values[name]
            retry = raw.get("retry_count")
            setattr(self, name, TimeoutSettings(
                timeout=float(raw["timeout"]),
                interval=float(raw["interval"]),
                retry_count=None if retry is None else int(retry),
            ))
        for name in PAUSE_FIELDS:
            setattr(self, name, float(values[name]))

    def __repr__(self) -> str:
        return f"TimeConfig({self.to_dict()!r})"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {name: asdict(getattr(self, name)) for name in TIMEOUT_FIELDS}
        data.update((name, getattr(self, name)) for name in PAUSE_FIELDS)
        return data

    def clone(self) -> TimeConfig:
        return TimeConfig(self.to_dict())

    def merged(self, overrides: Mapping[str, Any]) -> TimeConfig:
        """A copy with overrides applied. Accepts mappings or TimeoutSettings."""
        if not isinstance(overrides, Mapping):
            raise ValueError(f"overrides must be a mapping, got {overrides!r}")
        plain = {
            name: asdict(value) if isinstance(value, TimeoutSettings) else value
            for name, value in overrides.items()
        }
        return TimeConfig(apply_overrides(self.to_dict(), plain))

    @property
    def gesture_limit(self) -> int:
        """Maximum number of repeats for gesture-until helpers."""
        return int(self.gesture_repeat.retry_count or 16)

    # --- Resolution ---

    @classmethod
    def build_from(
        cls,
        *,
        preset: str = "default",
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> TimeConfig:
        """
        Build a run config: defaults, then preset, then overrides.

        @throws ValueError on an unknown preset or field
        """
        config = cls(resolve_timings(preset))
        return config.merged(overrides) if overrides else config

    @classmethod
    def default(cls) -> TimeConfig:
        with cls._lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    @classmethod
    def current(cls) -> TimeConfig:
        for slot in ("override", "run_config"):
            config = getattr(cls._local, slot, None)
            if config is not None:
                return config
        return cls.default()

    @classmethod
    def install_run_config(cls, config: TimeConfig) -> None:
        """Make config current for this thread until cleared."""
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        cls._local.run_config = None

    @classmethod
    def apply_preset(cls, preset: str) -> None:
        """Install the named preset as this thread's run config."""
        cls.install_run_config(cls.build_from(preset=preset))

    @classmethod
    @contextmanager
    def override(cls, **overrides: Any) -> Generator[TimeConfig, None, None]:
        """
        Temporarily adjust the current timings.

        Example:
            with TimeConfig.override(element_wait={"timeout": 0.5}):
                screen.status.wait_for_existence()
        """
        previous = getattr(cls._local, "override", None)
        cls._local.override = cls.current().merged(overrides)
        try:
            yield cls._local.override
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        with cls._lock:
            cls._default = None
        cls._local.override = None
        cls._local.run_config = None


def available_presets() -> Dict[str, Dict[str, Any]]:
    return list_presets()


# --- Identifier settings ---

@dataclass(frozen=True)
class IdentifierSettings:
    """Process-wide identifier switches, fixed once assignment begins."""
    enabled: bool = True
    separator: str = "."


_identifier_lock = threading.Lock()
_identifier_settings = IdentifierSettings()
_identifier_frozen = False


def identifier_settings() -> IdentifierSettings:
    return _identifier_settings


def configure_identifiers(
    *,
    enabled: Optional[bool] = None,
    separator: Optional[str] = None,
) -> IdentifierSettings:
    """
    Configure identifier assignment at startup.

    @param enabled Attach identifiers to rendered elements (default on)
    @param separator Separator between path components (default ".")
    @return The installed settings
    @throws ConfigError if settings change after assignment has begun
    """
    global _identifier_settings

    with _identifier_lock:
        current = _identifier_settings
        updated = IdentifierSettings(
            enabled=current.enabled if enabled is None else bool(enabled),
            separator=current.separator if separator is None else separator,
        )
        if not updated.separator or any(c in updated.separator for c in "[]"):
            raise ConfigError(f"Invalid identifier separator: {updated.separator!r}")
        if updated != current and _identifier_frozen:
            raise ConfigError(
                "Identifier settings are frozen: configure them before rendering begins"
            )
        _identifier_settings = updated
        return updated


def freeze_identifier_settings() -> None:
    """Mark identifier settings as final. Called on the first assignment."""
    global _identifier_frozen
    with _identifier_lock:
        _identifier_frozen = True


def identifier_settings_frozen() -> bool:
    return _identifier_frozen


def reset_identifier_settings() -> None:
    """Restore defaults and unfreeze (test isolation only)."""
    global _identifier_settings, _identifier_frozen
    with _identifier_lock:
        _identifier_settings = IdentifierSettings()
        _identifier_frozen = False


# --- Settings file ---

@dataclass(frozen=True)
class Settings:
    time_config: TimeConfig
    identifiers: IdentifierSettings


def load_settings(path: str, install: bool = True) -> Settings:
    """
    Load timing and identifier settings from a YAML file.

    Example:
        timing:
          preset: ci
          overrides:
            element_wait: {timeout: 6.0}
        identifiers:
          enabled: true

    @param path YAML file path
    @param install Install the timing config for this thread and apply identifier settings
    @throws ConfigError on a missing file or malformed content
    """
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise ConfigError(f"Settings YAML not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Settings YAML must be a mapping at root.")

    timing = data.get("timing", {}) or {}
    if not isinstance(timing, dict):
        raise ConfigError("'timing' must be a mapping")
    try:
        time_config = TimeConfig.build_from(
            preset=str(timing.get("preset", "default")),
            overrides=timing.get("overrides") or {},
        )
    except ValueError as e:
        raise ConfigError(f"timing: {e}") from e

    ids = data.get("identifiers", {}) or {}
    if not isinstance(ids, dict):
        raise ConfigError("'identifiers' must be a mapping")
    unknown = set(ids) - {"enabled", "separator"}
    if unknown:
        raise ConfigError(f"identifiers: unknown keys: {sorted(unknown)}")

    if install:
        TimeConfig.install_run_config(time_config)
        identifiers = configure_identifiers(
            enabled=ids.get("enabled"),
            separator=ids.get("separator"),
        )
    else:
        defaults = IdentifierSettings()
        identifiers = IdentifierSettings(
            enabled=bool(ids.get("enabled", defaults.enabled)),
            separator=str(ids.get("separator", defaults.separator)),
        )
    return Settings(time_config=time_config, identifiers=identifiers)
