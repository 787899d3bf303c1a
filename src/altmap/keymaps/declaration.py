"""Typed form of an alternate keymap declaration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Mapping, Optional, Union

from .errors import InvalidDeclarationError, NotDefinedError
from .models import Command, Keymap, KeySequence, VariantSlot

_KEYWORD = re.compile(r":[\w-]+")


def _statement_keys(keys: Union[KeySequence, str]) -> KeySequence:
    try:
        return KeySequence.coerce(keys)
    except ValueError as exc:
        raise InvalidDeclarationError(
            f"Invalid key specification {keys!r}: {exc}", item=keys
        ) from exc


@dataclass(frozen=True, slots=True)
class Bind:
    """Body statement binding ``keys`` to ``command``."""

    keys: Union[KeySequence, str]
    command: Command

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", _statement_keys(self.keys))

    def apply(self, keymap: Keymap) -> None:
        keymap.bind(self.keys, self.command)


@dataclass(frozen=True, slots=True)
class Unbind:
    """Body statement removing whatever ``keys`` is bound to."""

    keys: Union[KeySequence, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", _statement_keys(self.keys))

    def apply(self, keymap: Keymap) -> None:
        keymap.unbind(self.keys)


Statement = Union[Bind, Unbind]


@dataclass(frozen=True, slots=True)
class DeclarationOptions:
    full_keymap: bool = False
    copy_keymap: bool = False

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not isinstance(value, bool):
                raise InvalidDeclarationError(
                    f"Option '{item.name}' expects a boolean, got {value!r}",
                    item=value,
                )

    @classmethod
    def from_mapping(cls, options: Mapping[str, object]) -> "DeclarationOptions":
        known = {item.name for item in fields(cls)}
        values: dict[str, object] = {}
        for key, value in options.items():
            normalized = key.lstrip(":").replace("-", "_")
            if normalized not in known:
                raise InvalidDeclarationError(
                    f"Unknown declaration option '{key}'", item=key
                )
            values[normalized] = value
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class AltmapDeclaration:
    """Body, documentation and options used to build an alternate keymap."""

    body: tuple[Statement, ...] = ()
    doc: str = ""
    options: DeclarationOptions = field(default_factory=DeclarationOptions)

    def __post_init__(self) -> None:
        body = tuple(self.body)
        for statement in body:
            if not isinstance(statement, (Bind, Unbind)):
                raise InvalidDeclarationError(
                    f"Declaration body item {statement!r} is not a statement",
                    item=statement,
                )
        object.__setattr__(self, "body", body)

    @classmethod
    def parse(cls, *items: object) -> "AltmapDeclaration":
        """Build a declaration from a free-form item list.

        Items are ``Bind``/``Unbind`` statements, ``":keyword", value`` option
        pairs, and at most one trailing documentation string.
        """

        remaining = list(items)
        doc = ""
        if remaining and isinstance(remaining[-1], str) and not _is_keyword(
            remaining[-1]
        ):
            if len(remaining) < 2 or not _is_keyword(remaining[-2]):
                doc = remaining.pop()

        options: dict[str, object] = {}
        body: list[Statement] = []
        index = 0
        while index < len(remaining):
            item = remaining[index]
            if _is_keyword(item):
                if index + 1 >= len(remaining):
                    raise InvalidDeclarationError(
                        f"Option '{item}' is missing its argument", item=item
                    )
                options[str(item)] = remaining[index + 1]
                index += 2
                continue
            if not isinstance(item, (Bind, Unbind)):
                raise InvalidDeclarationError(
                    f"Declaration body item {item!r} is not a statement", item=item
                )
            body.append(item)
            index += 1

        return cls(
            body=tuple(body),
            doc=doc,
            options=DeclarationOptions.from_mapping(options),
        )

    def build(
        self,
        prior: Optional[Keymap],
        *,
        name: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Keymap:
        """Produce the alternate keymap from a snapshot of the prior active map.

        ``name`` labels the new keymap; ``source`` is the map name reported
        when ``copy_keymap`` is set but there is no prior map to copy.
        """

        if self.options.copy_keymap:
            if prior is None:
                missing = source or "<unnamed>"
                raise NotDefinedError(missing, VariantSlot.ACTIVE, missing)
            keymap = prior.copy(name)
        else:
            keymap = Keymap(name, full=self.options.full_keymap)
        for statement in self.body:
            statement.apply(keymap)
        return keymap


def _is_keyword(item: object) -> bool:
    return isinstance(item, str) and _KEYWORD.fullmatch(item) is not None


__all__ = [
    "Bind",
    "Unbind",
    "Statement",
    "DeclarationOptions",
    "AltmapDeclaration",
]
