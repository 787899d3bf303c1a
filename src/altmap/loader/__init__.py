"""Directory-driven loading of keymap definition files."""

from .directory import ORDER_FILE, DirectoryLoader, parse_order_file

__all__ = ["DirectoryLoader", "ORDER_FILE", "parse_order_file"]
