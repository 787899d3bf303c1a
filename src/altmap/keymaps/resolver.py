"""Trie-based key dispatch against a live keymap."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Sequence

from altmap.runtime.telemetry import span

from .models import Command, Keymap, KeyTokens


@dataclass(slots=True)
class TrieNode:
    """Single trie node tracking a command and child transitions."""

    command: Optional[Command] = None
    children: Dict[str, "TrieNode"] = field(default_factory=dict)

    def child(self, token: str) -> "TrieNode":
        return self.children.setdefault(token, TrieNode())

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children.keys()))


def build_trie(keymap: Keymap) -> TrieNode:
    root = TrieNode()
    for tokens, command in keymap.items():
        node = root
        for token in tokens:
            node = node.child(token)
        node.command = command
    return root


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    """Outcome returned from the resolver."""

    status: Literal["match", "pending", "miss"]
    command: Optional[Command] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()

    @property
    def matched(self) -> bool:
        return self.status == "match"


class KeymapResolver:
    """Resolves token sequences against ``keymap``.

    The trie is rebuilt whenever the keymap's revision moves, so a switch
    committed into the keymap is picked up on the next lookup.
    """

    def __init__(self, keymap: Keymap, *, logger_name: str | None = None) -> None:
        self._keymap = keymap
        self._logger_name = logger_name
        self._cache: Optional[tuple[int, TrieNode]] = None

    @property
    def keymap(self) -> Keymap:
        return self._keymap

    def resolve(self, tokens: Sequence[str]) -> ResolutionResult:
        normalized: KeyTokens = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            metadata={"keymap": self._keymap.name, "length": len(normalized)},
        ) as handle:
            node = self._ensure_trie()
            consumed = 0
            for token in normalized:
                child = node.children.get(token)
                if child is None:
                    fallback = self._default_for(normalized)
                    if fallback is not None:
                        handle.add_metadata("status", "match")
                        return ResolutionResult(
                            status="match", command=fallback, consumed=1
                        )
                    handle.add_metadata("status", "miss")
                    return ResolutionResult(status="miss", consumed=consumed)
                node = child
                consumed += 1

            if node.command is not None:
                handle.add_metadata("status", "match")
                return ResolutionResult(
                    status="match", command=node.command, consumed=consumed
                )

            next_expected = node.next_tokens()
            if next_expected:
                handle.add_metadata("status", "pending")
                return ResolutionResult(
                    status="pending", consumed=consumed, next_expected=next_expected
                )

            handle.add_metadata("status", "miss")
            return ResolutionResult(status="miss", consumed=consumed)

    def reset(self) -> None:
        self._cache = None

    def _ensure_trie(self) -> TrieNode:
        revision = self._keymap.revision
        if self._cache and self._cache[0] == revision:
            return self._cache[1]
        trie = build_trie(self._keymap)
        self._cache = (revision, trie)
        return trie

    def _default_for(self, tokens: KeyTokens) -> Optional[Command]:
        if len(tokens) != 1:
            return None
        return self._keymap.lookup(tokens)


__all__ = [
    "KeymapResolver",
    "ResolutionResult",
    "TrieNode",
    "build_trie",
]
