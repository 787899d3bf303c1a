"""Service object bundling settings, variant storage and switching."""

from __future__ import annotations

import runpy
from pathlib import Path
from typing import Any, List, Optional

from altmap.config import AltmapSettings
from altmap.keymaps import (
    AlreadyDefinedError,
    AlternateRegistry,
    AltmapDeclaration,
    Keymap,
    KeymapBuilder,
    KeymapResolver,
    MapState,
    SwitchEngine,
    VariantSlot,
    VariantStore,
)
from altmap.loader import DirectoryLoader
from altmap.runtime import telemetry

LOGGER_NAME = "altmap.keymaps"


class AltmapService:
    """Owns every keymap variant for one editor session.

    Each instance is independent, so tests and embedders can run several
    side by side.
    """

    def __init__(
        self,
        settings: AltmapSettings | None = None,
        *,
        logger_name: str = LOGGER_NAME,
    ) -> None:
        self.settings = settings or AltmapSettings.from_env()
        self.store = VariantStore(self.settings)
        self.registry = AlternateRegistry(self.store, logger_name=logger_name)
        self.engine = SwitchEngine(self.registry, logger_name=logger_name)
        self._logger_name = logger_name

    def define_keymap(
        self,
        name: str,
        keymap: Optional[Keymap] = None,
        *,
        doc: str = "",
        replace: bool = False,
    ) -> Keymap:
        """Register the active keymap that alternates will be swapped into."""

        if self.store.exists(name, VariantSlot.ACTIVE) and not replace:
            raise AlreadyDefinedError(
                name,
                VariantSlot.ACTIVE,
                self.store.storage_id(name, VariantSlot.ACTIVE),
            )
        value = keymap if keymap is not None else Keymap(name)
        self.store.set(name, VariantSlot.ACTIVE, value, doc)
        self.engine.forget(name)
        return value

    def define_altmap(self, name: str, *items: object) -> Keymap:
        """Declare the alternate of ``name`` from free-form declaration items.

        Example::

            service.define_altmap(
                "foo-map",
                ":copy-keymap", True,
                Bind("a", "cmd1"),
                "Foo bindings with 'a' rebound.",
            )
        """

        return self.define_alternate(name, AltmapDeclaration.parse(*items))

    def define_alternate(
        self,
        name: str,
        declaration: AltmapDeclaration | None = None,
        *,
        builder: KeymapBuilder | None = None,
        doc: str | None = None,
    ) -> Keymap:
        if declaration is not None and builder is not None:
            raise ValueError("Provide either `declaration` or `builder`, not both.")
        declaration = declaration or AltmapDeclaration()
        if builder is None:
            variable = self.store.storage_id(name, VariantSlot.ALTERNATE)

            def build(prior: Optional[Keymap]) -> Keymap:
                return declaration.build(prior, name=variable, source=name)

            builder = build

        return self.registry.define_alternate(
            name, builder, declaration.doc if doc is None else doc
        )

    def backup(self, name: str) -> Keymap:
        return self.engine.backup(name)

    def switch(self, name: str, target: VariantSlot | str) -> Keymap:
        return self.engine.switch(name, VariantSlot(target))

    def toggle(self, name: str) -> VariantSlot:
        return self.engine.toggle(name)

    def switch_all(self, target: VariantSlot | str) -> tuple[str, ...]:
        return self.engine.switch_all(VariantSlot(target))

    def state(self, name: str) -> MapState:
        return self.engine.state(name)

    def keymap(self, name: str, slot: VariantSlot | str = VariantSlot.ACTIVE) -> Keymap:
        return self.store.require(name, VariantSlot(slot))

    def resolver(self, name: str) -> KeymapResolver:
        return KeymapResolver(self.keymap(name), logger_name=self._logger_name)

    def describe(self) -> dict[str, dict[str, Any]]:
        """Summarize every known map: state, live variant and binding counts."""

        summary: dict[str, dict[str, Any]] = {}
        for name in self.store.names():
            current = self.engine.current(name)
            summary[name] = {
                "state": self.state(name).value,
                "current": current.value if current else None,
                "registered": self.registry.is_registered(name),
                "bindings": {
                    record.slot.value: len(record.value)
                    for record in self.store.iter_records(name)
                },
            }
        return summary

    def load_directory(self, path: Path | str, recursive: bool = False) -> List[Path]:
        """Execute every definition file under ``path`` in load order.

        Each file runs with this service bound to the global ``altmap``.
        """

        loader = DirectoryLoader(
            self._run_definition_file,
            extension=self.settings.definition_extension,
            logger_name=self._logger_name,
        )
        return loader.load_directory(path, recursive)

    def _run_definition_file(self, path: Path) -> None:
        with telemetry.span(
            "loader::run_file",
            logger_name=self._logger_name,
            metadata={"path": str(path)},
        ):
            runpy.run_path(str(path), init_globals={"altmap": self})


__all__ = ["AltmapService", "LOGGER_NAME"]
