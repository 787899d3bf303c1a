"""Associative storage for keymap variants."""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from altmap.config import AltmapSettings

from .errors import NotDefinedError
from .models import Keymap, KeymapContents, VariantRecord, VariantSlot


class VariantStore:
    """Keeps one record per (map name, slot) pair.

    The store applies no policy: callers check redefinition and ordering
    rules before writing.
    """

    def __init__(self, settings: AltmapSettings | None = None) -> None:
        self.settings = settings or AltmapSettings()
        self._records: Dict[tuple[str, VariantSlot], VariantRecord] = {}

    def storage_id(self, name: str, slot: VariantSlot) -> str:
        if slot is VariantSlot.ALTERNATE:
            return f"{self.settings.alt_name_prefix}{name}"
        if slot is VariantSlot.BACKUP:
            return f"{self.settings.backup_name_prefix}{name}"
        return name

    def record(self, name: str, slot: VariantSlot) -> Optional[VariantRecord]:
        record = self._records.get((name, slot))
        if record is None or not record.defined:
            return None
        return record

    def get(self, name: str, slot: VariantSlot) -> Optional[Keymap]:
        record = self.record(name, slot)
        return record.value if record else None

    def require(self, name: str, slot: VariantSlot) -> Keymap:
        value = self.get(name, slot)
        if value is None:
            raise NotDefinedError(name, slot, self.storage_id(name, slot))
        return value

    def exists(self, name: str, slot: VariantSlot) -> bool:
        return self.record(name, slot) is not None

    def set(
        self, name: str, slot: VariantSlot, value: Keymap, doc: str = ""
    ) -> VariantRecord:
        record = VariantRecord(name=name, slot=slot, value=value, doc=doc)
        self._records[(name, slot)] = record
        return record

    def mutate_contents(
        self, name: str, slot: VariantSlot, new_contents: KeymapContents
    ) -> Keymap:
        value = self.require(name, slot)
        value.replace_contents(new_contents)
        return value

    def names(self) -> tuple[str, ...]:
        return tuple(sorted({name for name, _ in self._records}))

    def iter_records(self, name: Optional[str] = None) -> Iterator[VariantRecord]:
        for (record_name, _), record in self._records.items():
            if name is None or record_name == name:
                yield record


__all__ = ["VariantStore"]
