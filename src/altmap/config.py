"""Process-wide switching policy and naming settings."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from altmap.runtime.telemetry import env, env_flag


@dataclass(frozen=True, slots=True)
class AltmapSettings:
    """Flags consulted by the registry and switch engine.

    The three ``define_*_when_switching`` flags turn a missing slot at switch
    time into an auto-repair instead of a ``NotDefinedError``.
    """

    allow_redefine_alternate: bool = True
    define_mapvar_when_switching: bool = False
    define_altvar_when_switching: bool = False
    define_bkpvar_when_switching: bool = False
    alt_name_prefix: str = "alt-"
    backup_name_prefix: str = "backup-"
    definition_extension: str = ".py"

    def __post_init__(self) -> None:
        if not self.alt_name_prefix:
            raise ValueError("alt_name_prefix cannot be empty")
        if not self.backup_name_prefix:
            raise ValueError("backup_name_prefix cannot be empty")
        if self.alt_name_prefix == self.backup_name_prefix:
            raise ValueError("alternate and backup prefixes must differ")
        if not self.definition_extension.startswith("."):
            raise ValueError("definition_extension must start with '.'")

    @classmethod
    def from_env(cls, **overrides: Any) -> "AltmapSettings":
        values: dict[str, Any] = {}
        for item in fields(cls):
            key = item.name.upper()
            if item.type in ("bool", bool):
                if env(key) is not None:
                    values[item.name] = env_flag(key, item.default)
            else:
                raw = env(key)
                if raw is not None:
                    values[item.name] = raw
        values.update(overrides)
        return cls(**values)

    def replace(self, **changes: Any) -> "AltmapSettings":
        return replace(self, **changes)


__all__ = ["AltmapSettings"]
