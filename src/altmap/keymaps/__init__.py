"""Keymap values, variant storage and the switching protocol."""

from .declaration import AltmapDeclaration, Bind, DeclarationOptions, Unbind
from .errors import (
    AlreadyDefinedError,
    AltmapError,
    InvalidDeclarationError,
    NotDefinedError,
)
from .models import (
    KeySequence,
    KeyStroke,
    Keymap,
    KeymapContents,
    KeymapHeader,
    MapState,
    VariantRecord,
    VariantSlot,
)
from .registry import AlternateRegistry, KeymapBuilder
from .resolver import KeymapResolver, ResolutionResult
from .store import VariantStore
from .switch import SwitchEngine

__all__ = [
    "AltmapDeclaration",
    "Bind",
    "Unbind",
    "DeclarationOptions",
    "AltmapError",
    "AlreadyDefinedError",
    "InvalidDeclarationError",
    "NotDefinedError",
    "KeyStroke",
    "KeySequence",
    "Keymap",
    "KeymapContents",
    "KeymapHeader",
    "MapState",
    "VariantRecord",
    "VariantSlot",
    "AlternateRegistry",
    "KeymapBuilder",
    "KeymapResolver",
    "ResolutionResult",
    "VariantStore",
    "SwitchEngine",
]
