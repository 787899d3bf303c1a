"""Ordered discovery of keymap definition files."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

from altmap.runtime.telemetry import record_event, span

ORDER_FILE = ".altmap"
_STRIP_CHARS = "\"'"

LoadFile = Callable[[Path], object]


def parse_order_file(text: str) -> list[str]:
    """Return the names listed in an order file, in order.

    The file is a flat list of whitespace-separated names. Surrounding
    parentheses and quotes are ignored; nothing else is interpreted.
    """

    flattened = text.replace("(", " ").replace(")", " ")
    names: list[str] = []
    for raw in flattened.split():
        cleaned = raw.strip(_STRIP_CHARS)
        if cleaned:
            names.append(cleaned)
    return names


class DirectoryLoader:
    """Feeds definition files from a directory tree to ``load_file``."""

    def __init__(
        self,
        load_file: LoadFile,
        *,
        extension: str = ".py",
        order_file: str = ORDER_FILE,
        logger_name: str | None = None,
    ) -> None:
        if not extension.startswith("."):
            raise ValueError("extension must start with '.'")
        self._load_file = load_file
        self.extension = extension
        self.order_file = order_file
        self._logger_name = logger_name

    def load_directory(self, path: Path | str, recursive: bool = False) -> List[Path]:
        """Load every definition under ``path`` and return the files loaded."""

        root = Path(path)
        if not root.is_dir():
            raise FileNotFoundError(f"Definition directory '{root}' does not exist")

        with span(
            "loader::load_directory",
            logger_name=self._logger_name,
            component="loader",
            metadata={"path": str(root), "recursive": recursive},
        ) as handle:
            loaded: List[Path] = []
            self._load_level(root, recursive, loaded)
            handle.add_metadata("loaded", len(loaded))
            return loaded

    def resolve_entries(self, directory: Path) -> tuple[List[Path], bool]:
        """Return the entries of ``directory`` in load order.

        The second item tells whether an order file dictated that order.
        """

        order_path = directory / self.order_file
        if order_path.is_file():
            entries: List[Path] = []
            for name in parse_order_file(order_path.read_text(encoding="utf-8")):
                entry = self._resolve_listed(directory, name)
                if entry is None:
                    record_event(
                        "loader.missing_entry",
                        level="warning",
                        data={"directory": str(directory), "entry": name},
                        logger_name=self._logger_name,
                    )
                    continue
                entries.append(entry)
            return entries, True

        entries = sorted(
            (entry for entry in directory.iterdir() if not _hidden(entry.name)),
            key=lambda entry: entry.name,
        )
        return entries, False

    def _load_level(self, directory: Path, recursive: bool, loaded: List[Path]) -> None:
        entries, ordered = self.resolve_entries(directory)
        for entry in entries:
            if entry.is_dir():
                if recursive or ordered:
                    self._load_level(entry, recursive, loaded)
                continue
            if entry.is_file() and entry.name.endswith(self.extension):
                self._load_file(entry)
                loaded.append(entry)

    def _resolve_listed(self, directory: Path, name: str) -> Optional[Path]:
        candidate = directory / name
        if candidate.is_dir():
            return candidate
        if not name.endswith(self.extension):
            candidate = directory / f"{name}{self.extension}"
        if candidate.exists():
            return candidate
        return None


def _hidden(name: str) -> bool:
    return name.startswith(".") or name.startswith("_")


__all__ = ["DirectoryLoader", "ORDER_FILE", "parse_order_file"]
