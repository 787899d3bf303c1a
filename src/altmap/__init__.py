"""Swappable alternate and backup keymaps for editors."""

__all__ = [
    "config",
    "keymaps",
    "loader",
    "runtime",
    "service",
]

__version__ = "0.1.0"
