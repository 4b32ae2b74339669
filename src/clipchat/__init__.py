"""ClipChat: shared clipboard and chat relay for a laptop and a phone."""

__version__ = "0.1.0"
