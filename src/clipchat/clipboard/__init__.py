"""Two-field clipboard shared between devices through the realtime store."""

from clipchat.clipboard.debounce import DebouncedWriter
from clipchat.clipboard.sync import ClipboardStore, ClipboardSync, clipboard_path

__all__ = ["ClipboardStore", "ClipboardSync", "DebouncedWriter", "clipboard_path"]
