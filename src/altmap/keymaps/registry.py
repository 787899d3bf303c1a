"""Registry of map names that carry an alternate keymap."""

from __future__ import annotations

from typing import Callable, Optional

from altmap.runtime.telemetry import record_event, span

from .errors import AlreadyDefinedError
from .models import Keymap, VariantSlot
from .store import VariantStore

KeymapBuilder = Callable[[Optional[Keymap]], Keymap]


class AlternateRegistry:
    """Defines alternates and remembers which names have one."""

    def __init__(self, store: VariantStore, *, logger_name: str | None = None) -> None:
        self._store = store
        self._registered: set[str] = set()
        self._logger_name = logger_name

    @property
    def store(self) -> VariantStore:
        return self._store

    def define_alternate(
        self, name: str, builder: KeymapBuilder, doc: str = ""
    ) -> Keymap:
        """Build and store the alternate keymap for ``name``.

        ``builder`` receives a copy of the active keymap as it was before this
        call (``None`` when there is none), so it can extend the original
        without touching it.
        """

        variable = self._store.storage_id(name, VariantSlot.ALTERNATE)
        with span(
            "keymaps::define_alternate",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"name": name, "variable": variable},
        ) as handle:
            if self._store.exists(name, VariantSlot.ALTERNATE):
                if not self._store.settings.allow_redefine_alternate:
                    raise AlreadyDefinedError(name, VariantSlot.ALTERNATE, variable)
                handle.add_metadata("redefined", True)
                record_event(
                    "alternate.redefine",
                    data={"name": name, "variable": variable},
                    logger_name=self._logger_name,
                )

            prior = self._store.get(name, VariantSlot.ACTIVE)
            snapshot = prior.copy() if prior is not None else None
            value = builder(snapshot)
            self._store.set(name, VariantSlot.ALTERNATE, value, doc)
            self._registered.add(name)
            return value

    def is_registered(self, name: str) -> bool:
        return name in self._registered

    def registered(self) -> tuple[str, ...]:
        return tuple(sorted(self._registered))


__all__ = ["AlternateRegistry", "KeymapBuilder"]
