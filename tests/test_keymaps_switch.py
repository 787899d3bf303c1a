from __future__ import annotations

import pytest

from altmap.config import AltmapSettings
from altmap.keymaps import (
    AlreadyDefinedError,
    AlternateRegistry,
    Keymap,
    KeymapResolver,
    MapState,
    NotDefinedError,
    SwitchEngine,
    VariantSlot,
    VariantStore,
)

AUTO_REPAIR = {
    "define_mapvar_when_switching": True,
    "define_altvar_when_switching": True,
    "define_bkpvar_when_switching": True,
}


def make_engine(**settings: object) -> SwitchEngine:
    store = VariantStore(AltmapSettings(**settings))  # type: ignore[arg-type]
    return SwitchEngine(AlternateRegistry(store))


def define_active(engine: SwitchEngine, name: str = "foo-map", **bindings: str) -> Keymap:
    keymap = Keymap(name)
    for key, command in bindings.items():
        keymap.bind(key, command)
    engine.registry.store.set(name, VariantSlot.ACTIVE, keymap)
    return keymap


def define_alternate(engine: SwitchEngine, name: str = "foo-map", **bindings: str) -> Keymap:
    def builder(prior: object) -> Keymap:
        keymap = Keymap(f"alt-{name}")
        for key, command in bindings.items():
            keymap.bind(key, command)
        return keymap

    return engine.registry.define_alternate(name, builder)


def test_backup_requires_active() -> None:
    engine = make_engine()

    with pytest.raises(NotDefinedError) as excinfo:
        engine.backup("foo-map")

    assert excinfo.value.slot is VariantSlot.ACTIVE
    assert "foo-map" in str(excinfo.value)


def test_backup_only_once() -> None:
    engine = make_engine()
    define_active(engine, b="original")

    backup = engine.backup("foo-map")

    assert backup.name == "backup-foo-map"
    assert backup.lookup("b") == "original"
    with pytest.raises(AlreadyDefinedError) as excinfo:
        engine.backup("foo-map")
    assert excinfo.value.variable == "backup-foo-map"
    assert engine.registry.store.get("foo-map", VariantSlot.BACKUP) is backup


def test_backup_is_detached_from_active() -> None:
    engine = make_engine()
    active = define_active(engine, b="original")
    backup = engine.backup("foo-map")

    active.bind("c", "later")

    assert backup.lookup("c") is None


def test_switch_to_alternate_preserves_identity() -> None:
    engine = make_engine()
    active = define_active(engine, b="original")
    define_alternate(engine, a="cmd1")
    header = active.header

    result = engine.switch("foo-map", VariantSlot.ALTERNATE)

    assert result is active
    assert active.header is header
    assert dict(active.items()) == {("a",): "cmd1"}
    assert engine.registry.store.get("foo-map", VariantSlot.ACTIVE) is active
    assert engine.current("foo-map") is VariantSlot.ALTERNATE


def test_switch_copies_contents_instead_of_sharing() -> None:
    engine = make_engine()
    active = define_active(engine)
    alternate = define_alternate(engine, a="cmd1")

    engine.switch("foo-map", VariantSlot.ALTERNATE)
    active.bind("z", "extra")

    assert alternate.lookup("z") is None


@pytest.mark.parametrize("target", [VariantSlot.ALTERNATE, VariantSlot.BACKUP])
def test_switch_without_auto_repair_fails_without_mutation(
    target: VariantSlot,
) -> None:
    engine = make_engine()
    active = define_active(engine, b="original")
    revision = active.revision

    with pytest.raises(NotDefinedError) as excinfo:
        engine.switch("foo-map", target)

    assert excinfo.value.slot is target
    assert active.revision == revision
    assert active.lookup("b") == "original"
    assert engine.state("foo-map") is MapState.ACTIVE_ONLY
    assert engine.current("foo-map") is None


def test_switch_without_active_fails() -> None:
    engine = make_engine()
    define_alternate(engine, a="cmd1")

    with pytest.raises(NotDefinedError) as excinfo:
        engine.switch("foo-map", VariantSlot.ALTERNATE)

    assert excinfo.value.slot is VariantSlot.ACTIVE
    assert engine.state("foo-map") is MapState.ALTERNATE_ONLY


def test_switch_auto_repairs_alternate() -> None:
    engine = make_engine(**AUTO_REPAIR)

    active = engine.switch("foo-map", VariantSlot.ALTERNATE)

    assert len(active) == 0
    assert engine.state("foo-map") is MapState.ACTIVE_AND_ALTERNATE
    assert engine.registry.is_registered("foo-map")


def test_switch_auto_repairs_backup() -> None:
    engine = make_engine(**AUTO_REPAIR)

    engine.switch("foo-map", VariantSlot.BACKUP)

    assert engine.state("foo-map") is MapState.ACTIVE_AND_BACKUP


def test_auto_repair_is_kept_when_later_check_fails() -> None:
    engine = make_engine(define_mapvar_when_switching=True)

    with pytest.raises(NotDefinedError) as excinfo:
        engine.switch("foo-map", VariantSlot.ALTERNATE)

    assert excinfo.value.slot is VariantSlot.ALTERNATE
    assert engine.state("foo-map") is MapState.ACTIVE_ONLY


def test_switch_rejects_active_target() -> None:
    engine = make_engine()
    define_active(engine)

    with pytest.raises(ValueError):
        engine.switch("foo-map", VariantSlot.ACTIVE)


def test_round_trip_through_alternate_and_backup() -> None:
    engine = make_engine()
    active = define_active(engine, b="original")
    define_alternate(engine, a="cmd1")
    engine.backup("foo-map")
    resolver = KeymapResolver(active)

    engine.switch("foo-map", VariantSlot.ALTERNATE)
    assert resolver.resolve(("a",)).command == "cmd1"
    assert resolver.resolve(("b",)).status == "miss"

    engine.switch("foo-map", VariantSlot.BACKUP)
    assert resolver.resolve(("a",)).status == "miss"
    assert resolver.resolve(("b",)).command == "original"
    assert engine.state("foo-map") is MapState.FULL


def test_toggle_creates_backup_and_flips() -> None:
    engine = make_engine()
    active = define_active(engine, b="original")
    define_alternate(engine, a="cmd1")

    assert engine.toggle("foo-map") is VariantSlot.ALTERNATE
    assert active.lookup("a") == "cmd1"
    assert engine.state("foo-map") is MapState.FULL

    assert engine.toggle("foo-map") is VariantSlot.BACKUP
    assert active.lookup("b") == "original"
    assert active.lookup("a") is None


def test_switch_all_covers_registered_names() -> None:
    engine = make_engine()
    foo = define_active(engine, "foo-map")
    bar = define_active(engine, "bar-map")
    define_alternate(engine, "foo-map", a="foo-cmd")
    define_alternate(engine, "bar-map", a="bar-cmd")

    switched = engine.switch_all(VariantSlot.ALTERNATE)

    assert switched == ("bar-map", "foo-map")
    assert foo.lookup("a") == "foo-cmd"
    assert bar.lookup("a") == "bar-cmd"


def test_full_keymap_header_survives_switch() -> None:
    engine = make_engine()
    active = Keymap("foo-map", full=True, default="self-insert")
    engine.registry.store.set("foo-map", VariantSlot.ACTIVE, active)
    engine.backup("foo-map")
    define_alternate(engine, a="cmd1")

    engine.switch("foo-map", VariantSlot.ALTERNATE)
    assert active.full
    assert active.lookup("q") is None

    engine.switch("foo-map", VariantSlot.BACKUP)
    assert active.lookup("q") == "self-insert"


def test_failed_toggle_does_not_take_backup() -> None:
    engine = make_engine()
    active = define_active(engine, b="v1")

    with pytest.raises(NotDefinedError) as excinfo:
        engine.toggle("foo-map")

    assert excinfo.value.slot is VariantSlot.ALTERNATE
    assert engine.state("foo-map") is MapState.ACTIVE_ONLY

    active.bind("b", "v2")
    define_alternate(engine, a="cmd1")
    engine.toggle("foo-map")
    engine.toggle("foo-map")

    assert active.lookup("b") == "v2"


def test_toggle_auto_defines_alternate_after_backup() -> None:
    engine = make_engine(define_altvar_when_switching=True)
    active = define_active(engine, b="original")

    assert engine.toggle("foo-map") is VariantSlot.ALTERNATE
    assert engine.state("foo-map") is MapState.FULL
    assert len(active) == 0

    engine.toggle("foo-map")
    assert active.lookup("b") == "original"
