"""Clipboard record on the realtime store, plus the client-side sync state."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from clipchat.clipboard.debounce import DEFAULT_DELAY, DebouncedWriter
from clipchat.core.models import ClipboardRecord
from clipchat.store import RealtimeStore

log = logging.getLogger(__name__)


def clipboard_path(uid: str | None = None, per_user: bool = True) -> str:
    """Store path of the clipboard record: per user, or one global record."""
    if per_user and uid:
        return f"users/{uid}/clipboard"
    return "clipboard"


def _check_field(name: str) -> None:
    if name not in ClipboardRecord.FIELDS:
        raise ValueError(f"Unknown clipboard field {name!r}; expected one of {ClipboardRecord.FIELDS}")


class ClipboardStore:
    """Read and write the shared two-field record. Last write wins."""

    def __init__(self, store: RealtimeStore, path: str = "clipboard") -> None:
        self.store = store
        self.path = path

    def read(self) -> ClipboardRecord:
        return ClipboardRecord.from_dict(self.store.get(self.path))

    def write(self, record: ClipboardRecord) -> None:
        self.store.set(self.path, record.to_dict())

    def set_field(self, name: str, value: str) -> None:
        """Overwrite one field; the other is left untouched."""
        _check_field(name)
        self.store.update(self.path, {name: value})

    def clear(self, name: str) -> None:
        """Immediately empty one field."""
        self.set_field(name, "")
        log.info("Cleared clipboard field %s", name)

    def subscribe(
        self,
        callback: Callable[[ClipboardRecord], None],
        stop: threading.Event | None = None,
    ) -> None:
        """Deliver the full record on every remote change (blocking)."""
        self.store.listen(
            self.path,
            lambda value: callback(ClipboardRecord.from_dict(value)),
            stop=stop,
        )


class ClipboardSync:
    """Local view of the clipboard for one connected client.

    Edits are debounced; save and clear write immediately. Every write sends
    the whole record as it stands at that moment, so a debounced write never
    carries a stale copy of the other field.
    """

    def __init__(self, clipboard: ClipboardStore, delay: float = DEFAULT_DELAY) -> None:
        self.clipboard = clipboard
        self.record = ClipboardRecord()
        self._lock = threading.Lock()
        self._writer = DebouncedWriter(self.clipboard.write, delay=delay)

    @property
    def pending(self) -> bool:
        return self._writer.pending

    def load(self) -> ClipboardRecord:
        with self._lock:
            self.record = self.clipboard.read()
            return ClipboardRecord(**self.record.to_dict())

    def edit(self, name: str, value: str) -> None:
        """Change one field locally and schedule a debounced write."""
        _check_field(name)
        with self._lock:
            setattr(self.record, name, value)
            snapshot = self._snapshot()
        self._writer.schedule(snapshot)

    def save(self) -> None:
        """Write the current record now."""
        with self._lock:
            snapshot = self._snapshot()
        self._writer.flush_now(snapshot)

    def clear(self, name: str) -> None:
        """Empty one field locally and remotely, without debounce."""
        _check_field(name)
        with self._lock:
            setattr(self.record, name, "")
            snapshot = self._snapshot()
        if self._writer.pending:
            self._writer.flush_now(snapshot)
        else:
            self.clipboard.clear(name)

    def apply_remote(self, record: ClipboardRecord) -> None:
        """Adopt a record delivered by the subscription."""
        with self._lock:
            self.record = ClipboardRecord(**record.to_dict())

    def close(self) -> None:
        """Write anything still pending."""
        if self._writer.pending:
            self._writer.flush_now()

    def _snapshot(self) -> ClipboardRecord:
        return ClipboardRecord(**self.record.to_dict())
