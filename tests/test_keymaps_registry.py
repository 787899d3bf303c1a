from __future__ import annotations

from typing import Optional

import pytest

from altmap.config import AltmapSettings
from altmap.keymaps import (
    AlreadyDefinedError,
    AlternateRegistry,
    Keymap,
    VariantSlot,
    VariantStore,
)


def make_registry(**settings: object) -> AlternateRegistry:
    store = VariantStore(AltmapSettings(**settings))  # type: ignore[arg-type]
    return AlternateRegistry(store)


def make_keymap(name: str = "foo-map", **bindings: str) -> Keymap:
    keymap = Keymap(name)
    for key, command in bindings.items():
        keymap.bind(key, command)
    return keymap


def test_define_alternate_registers_name() -> None:
    registry = make_registry()

    value = registry.define_alternate(
        "foo-map", lambda prior: make_keymap("alt-foo-map", a="cmd1"), "doc"
    )

    assert registry.store.exists("foo-map", VariantSlot.ALTERNATE)
    assert registry.store.get("foo-map", VariantSlot.ALTERNATE) is value
    assert registry.store.record("foo-map", VariantSlot.ALTERNATE).doc == "doc"
    assert registry.is_registered("foo-map")
    assert registry.registered() == ("foo-map",)


def test_redefine_rejected_when_disallowed() -> None:
    registry = make_registry(allow_redefine_alternate=False)
    first = registry.define_alternate("foo-map", lambda prior: make_keymap(a="one"))

    with pytest.raises(AlreadyDefinedError) as excinfo:
        registry.define_alternate("foo-map", lambda prior: make_keymap(a="two"))

    assert excinfo.value.name == "foo-map"
    assert excinfo.value.variable == "alt-foo-map"
    assert registry.store.get("foo-map", VariantSlot.ALTERNATE) is first


def test_redefine_overwrites_when_allowed() -> None:
    registry = make_registry(allow_redefine_alternate=True)
    registry.define_alternate("foo-map", lambda prior: make_keymap(a="one"))

    second = registry.define_alternate("foo-map", lambda prior: make_keymap(a="two"))

    assert registry.store.get("foo-map", VariantSlot.ALTERNATE) is second
    assert second.lookup("a") == "two"
    assert registry.registered() == ("foo-map",)


def test_builder_receives_snapshot_of_active() -> None:
    registry = make_registry()
    active = make_keymap(b="original")
    registry.store.set("foo-map", VariantSlot.ACTIVE, active)
    seen: list[Optional[Keymap]] = []

    def builder(prior: Optional[Keymap]) -> Keymap:
        seen.append(prior)
        assert prior is not None
        prior.bind("a", "cmd1")
        return prior

    registry.define_alternate("foo-map", builder)

    assert seen[0] is not active
    assert active.lookup("a") is None
    assert active.lookup("b") == "original"


def test_builder_receives_none_without_active() -> None:
    registry = make_registry()
    seen: list[Optional[Keymap]] = []

    registry.define_alternate(
        "foo-map", lambda prior: seen.append(prior) or make_keymap()
    )

    assert seen == [None]


def test_storage_ids_follow_prefixes() -> None:
    registry = make_registry(alt_name_prefix="other-", backup_name_prefix="orig-")

    store = registry.store

    assert store.storage_id("foo-map", VariantSlot.ACTIVE) == "foo-map"
    assert store.storage_id("foo-map", VariantSlot.ALTERNATE) == "other-foo-map"
    assert store.storage_id("foo-map", VariantSlot.BACKUP) == "orig-foo-map"
