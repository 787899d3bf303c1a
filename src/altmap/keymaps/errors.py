"""Errors raised by the variant store, registry and switch engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import VariantSlot


class AltmapError(RuntimeError):
    """Base class for every altmap failure."""


class _SlotError(AltmapError):
    def __init__(
        self, message: str, *, name: str, slot: "VariantSlot", variable: str
    ) -> None:
        super().__init__(message)
        self.name = name
        self.slot = slot
        self.variable = variable


class NotDefinedError(_SlotError):
    """Raised when a required variant slot is missing."""

    def __init__(self, name: str, slot: "VariantSlot", variable: str) -> None:
        super().__init__(
            f"Keymap '{variable}' ({slot.value} of '{name}') is not defined",
            name=name,
            slot=slot,
            variable=variable,
        )


class AlreadyDefinedError(_SlotError):
    """Raised when a variant slot exists and may not be redefined."""

    def __init__(self, name: str, slot: "VariantSlot", variable: str) -> None:
        super().__init__(
            f"Keymap '{variable}' ({slot.value} of '{name}') is already defined",
            name=name,
            slot=slot,
            variable=variable,
        )


class InvalidDeclarationError(AltmapError):
    """Raised for malformed alternate declarations."""

    def __init__(self, message: str, *, item: Optional[object] = None) -> None:
        super().__init__(message)
        self.item = item


__all__ = [
    "AltmapError",
    "NotDefinedError",
    "AlreadyDefinedError",
    "InvalidDeclarationError",
]
