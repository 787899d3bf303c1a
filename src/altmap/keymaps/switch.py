"""Backup creation and variant switching for registered keymaps."""

from __future__ import annotations

from typing import Dict, Optional

from altmap.config import AltmapSettings
from altmap.runtime.telemetry import record_event, span

from .declaration import AltmapDeclaration
from .errors import AlreadyDefinedError, NotDefinedError
from .models import Keymap, MapState, VariantSlot
from .registry import AlternateRegistry


class SwitchEngine:
    """Moves alternate or backup contents into the active keymap.

    The active keymap object is never replaced; a switch rewrites its
    contents so every holder of the object sees the new bindings.

    Auto-repairs enabled by the ``define_*_when_switching`` settings are
    kept even when a later check in the same switch fails.
    """

    def __init__(
        self, registry: AlternateRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._store = registry.store
        self._logger_name = logger_name
        self._current: Dict[str, VariantSlot] = {}

    @property
    def registry(self) -> AlternateRegistry:
        return self._registry

    @property
    def settings(self) -> AltmapSettings:
        return self._store.settings

    def backup(self, name: str) -> Keymap:
        with span(
            "keymaps::backup",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"name": name},
        ):
            active = self._store.require(name, VariantSlot.ACTIVE)
            variable = self._store.storage_id(name, VariantSlot.BACKUP)
            if self._store.exists(name, VariantSlot.BACKUP):
                raise AlreadyDefinedError(name, VariantSlot.BACKUP, variable)
            value = Keymap(variable)
            value.replace_contents(active.contents())
            self._store.set(
                name, VariantSlot.BACKUP, value, f"Original contents of '{name}'."
            )
            return value

    def switch(self, name: str, target: VariantSlot) -> Keymap:
        """Copy the ``target`` variant's contents into the active keymap."""

        if target not in (VariantSlot.ALTERNATE, VariantSlot.BACKUP):
            raise ValueError(f"Cannot switch '{name}' to the {target.value} slot")

        with span(
            "keymaps::switch",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"name": name, "target": target.value},
        ) as handle:
            if not self._store.exists(name, VariantSlot.ACTIVE):
                if not self.settings.define_mapvar_when_switching:
                    raise self._not_defined(name, VariantSlot.ACTIVE)
                self._store.set(name, VariantSlot.ACTIVE, Keymap(name))
                self._repaired(name, VariantSlot.ACTIVE)
                handle.add_metadata("defined_active", True)

            if not self._store.exists(name, target):
                if target is VariantSlot.ALTERNATE:
                    if not self.settings.define_altvar_when_switching:
                        raise self._not_defined(name, target)
                    variable = self._store.storage_id(name, target)
                    self._registry.define_alternate(
                        name,
                        lambda prior: AltmapDeclaration().build(
                            prior, name=variable, source=name
                        ),
                    )
                else:
                    if not self.settings.define_bkpvar_when_switching:
                        raise self._not_defined(name, target)
                    self.backup(name)
                self._repaired(name, target)

            source = self._store.require(name, target)
            active = self._store.mutate_contents(
                name, VariantSlot.ACTIVE, source.contents()
            )
            self._current[name] = target
            record_event(
                "switch.commit",
                data={"name": name, "target": target.value},
                logger_name=self._logger_name,
            )
            return active

    def switch_to_alternate(self, name: str) -> Keymap:
        return self.switch(name, VariantSlot.ALTERNATE)

    def switch_to_backup(self, name: str) -> Keymap:
        return self.switch(name, VariantSlot.BACKUP)

    def toggle(self, name: str) -> VariantSlot:
        """Flip between the alternate and the original contents of ``name``."""

        if self._current.get(name) is VariantSlot.ALTERNATE:
            self.switch(name, VariantSlot.BACKUP)
            return VariantSlot.BACKUP
        # Check before backing up: a backup can be taken only once.
        if (
            not self._store.exists(name, VariantSlot.ALTERNATE)
            and not self.settings.define_altvar_when_switching
        ):
            raise self._not_defined(name, VariantSlot.ALTERNATE)
        if self._store.exists(name, VariantSlot.ACTIVE) and not self._store.exists(
            name, VariantSlot.BACKUP
        ):
            self.backup(name)
        self.switch(name, VariantSlot.ALTERNATE)
        return VariantSlot.ALTERNATE

    def switch_all(self, target: VariantSlot) -> tuple[str, ...]:
        switched: list[str] = []
        for name in self._registry.registered():
            self.switch(name, target)
            switched.append(name)
        return tuple(switched)

    def state(self, name: str) -> MapState:
        return MapState.from_slots(
            self._store.exists(name, VariantSlot.ACTIVE),
            self._store.exists(name, VariantSlot.ALTERNATE),
            self._store.exists(name, VariantSlot.BACKUP),
        )

    def current(self, name: str) -> Optional[VariantSlot]:
        return self._current.get(name)

    def forget(self, name: str) -> None:
        """Drop the live-variant marker, e.g. after a new active keymap."""

        self._current.pop(name, None)

    def _not_defined(self, name: str, slot: VariantSlot) -> NotDefinedError:
        return NotDefinedError(name, slot, self._store.storage_id(name, slot))

    def _repaired(self, name: str, slot: VariantSlot) -> None:
        record_event(
            "switch.auto_define",
            level="warning",
            data={
                "name": name,
                "slot": slot.value,
                "variable": self._store.storage_id(name, slot),
            },
            logger_name=self._logger_name,
        )


__all__ = ["SwitchEngine"]
