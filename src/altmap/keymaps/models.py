"""Keymap values and the variant bookkeeping types built around them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Union

Command = Union[str, Callable[..., object]]
KeyTokens = tuple[str, ...]


def _normalize_modifiers(modifiers: Iterable[str]) -> tuple[str, ...]:
    values = tuple(m.strip().lower() for m in modifiers if m.strip())
    return tuple(sorted(dict.fromkeys(values)))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """Single normalized key press."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", _normalize_modifiers(self.modifiers))

    @property
    def token(self) -> str:
        if self.modifiers:
            modifier = "+".join(self.modifiers)
            return f"{modifier}+{self.key}"
        return self.key

    @classmethod
    def parse(cls, text: str) -> "KeyStroke":
        """Parse ``ctrl+x`` style tokens; a lone ``+`` is a plain key."""

        cleaned = text.strip()
        if not cleaned:
            raise ValueError("key cannot be empty")
        if cleaned == "+" or "+" not in cleaned[:-1]:
            return cls(cleaned)
        *modifiers, key = cleaned.split("+")
        return cls(key, tuple(modifiers))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Immutable collection of keystrokes."""

    strokes: tuple[KeyStroke, ...]

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @property
    def tokens(self) -> KeyTokens:
        return tuple(stroke.token for stroke in self.strokes)

    @classmethod
    def from_strings(cls, *keys: str) -> "KeySequence":
        return cls(tuple(KeyStroke.parse(key) for key in keys if key))

    @classmethod
    def parse(cls, text: str) -> "KeySequence":
        return cls.from_strings(*text.split())

    @classmethod
    def coerce(cls, keys: Union["KeySequence", str]) -> "KeySequence":
        if isinstance(keys, KeySequence):
            return keys
        return cls.parse(keys)


class VariantSlot(str, Enum):
    ACTIVE = "active"
    ALTERNATE = "alternate"
    BACKUP = "backup"


class MapState(str, Enum):
    """Which slots are defined for one map name."""

    UNDEFINED = "undefined"
    ACTIVE_ONLY = "active_only"
    ACTIVE_AND_BACKUP = "active_and_backup"
    ACTIVE_AND_ALTERNATE = "active_and_alternate"
    FULL = "full"
    ALTERNATE_ONLY = "alternate_only"
    BACKUP_ONLY = "backup_only"
    ALTERNATE_AND_BACKUP = "alternate_and_backup"

    @classmethod
    def from_slots(cls, active: bool, alternate: bool, backup: bool) -> "MapState":
        return _STATE_TABLE[(active, alternate, backup)]


_STATE_TABLE: Dict[tuple[bool, bool, bool], MapState] = {
    (False, False, False): MapState.UNDEFINED,
    (True, False, False): MapState.ACTIVE_ONLY,
    (True, False, True): MapState.ACTIVE_AND_BACKUP,
    (True, True, False): MapState.ACTIVE_AND_ALTERNATE,
    (True, True, True): MapState.FULL,
    (False, True, False): MapState.ALTERNATE_ONLY,
    (False, False, True): MapState.BACKUP_ONLY,
    (False, True, True): MapState.ALTERNATE_AND_BACKUP,
}


@dataclass(frozen=True, slots=True)
class KeymapHeader:
    """Identity part of a keymap; never touched by content swaps."""

    name: Optional[str] = None
    kind: str = "sparse"

    def __post_init__(self) -> None:
        if self.kind not in ("sparse", "full"):
            raise ValueError(f"Unknown keymap kind '{self.kind}'")


@dataclass(frozen=True, slots=True)
class KeymapContents:
    """Detached copy of a keymap body."""

    bindings: Mapping[KeyTokens, Command]
    default: Optional[Command] = None


class Keymap:
    """Mutable keymap handle.

    Other components hold on to the same ``Keymap`` object, so switching a
    variant replaces the body through :meth:`replace_contents` instead of
    rebinding the name to a different object. Every body change bumps
    :attr:`revision`.
    """

    __slots__ = ("header", "_bindings", "_default", "_revision")

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        full: bool = False,
        bindings: Optional[Mapping[KeyTokens, Command]] = None,
        default: Optional[Command] = None,
    ) -> None:
        self.header = KeymapHeader(name=name, kind="full" if full else "sparse")
        self._bindings: Dict[KeyTokens, Command] = dict(bindings or {})
        self._default = default
        self._revision = 0

    def __repr__(self) -> str:
        return (
            f"Keymap(name={self.header.name!r}, kind={self.header.kind!r}, "
            f"bindings={len(self._bindings)})"
        )

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[KeyTokens]:
        return iter(self._bindings)

    @property
    def name(self) -> Optional[str]:
        return self.header.name

    @property
    def full(self) -> bool:
        return self.header.kind == "full"

    @property
    def default(self) -> Optional[Command]:
        return self._default

    @property
    def revision(self) -> int:
        return self._revision

    def bind(self, keys: Union[KeySequence, str], command: Command) -> None:
        self._bindings[KeySequence.coerce(keys).tokens] = command
        self._touch()

    def unbind(self, keys: Union[KeySequence, str]) -> Optional[Command]:
        removed = self._bindings.pop(KeySequence.coerce(keys).tokens, None)
        if removed is not None:
            self._touch()
        return removed

    def set_default(self, command: Optional[Command]) -> None:
        if not self.full:
            raise ValueError("Only full keymaps carry a default binding")
        self._default = command
        self._touch()

    def lookup(self, keys: Union[KeySequence, str, KeyTokens]) -> Optional[Command]:
        tokens = keys if isinstance(keys, tuple) else KeySequence.coerce(keys).tokens
        command = self._bindings.get(tokens)
        if command is None and self.full and len(tokens) == 1:
            return self._default
        return command

    def items(self) -> Iterator[tuple[KeyTokens, Command]]:
        return iter(tuple(self._bindings.items()))

    def contents(self) -> KeymapContents:
        return KeymapContents(bindings=dict(self._bindings), default=self._default)

    def replace_contents(self, contents: KeymapContents) -> None:
        """Swap the body in place; the header and object identity stay put."""

        self._bindings = dict(contents.bindings)
        self._default = contents.default
        self._touch()

    def copy(self, name: Optional[str] = None) -> "Keymap":
        return Keymap(
            self.header.name if name is None else name,
            full=self.full,
            bindings=self._bindings,
            default=self._default,
        )

    def _touch(self) -> None:
        self._revision += 1


@dataclass(slots=True)
class VariantRecord:
    """One stored variant of a named map."""

    name: str
    slot: VariantSlot
    value: Keymap
    doc: str = ""
    defined: bool = True


__all__ = [
    "Command",
    "KeyTokens",
    "KeyStroke",
    "KeySequence",
    "VariantSlot",
    "MapState",
    "KeymapHeader",
    "KeymapContents",
    "Keymap",
    "VariantRecord",
]
