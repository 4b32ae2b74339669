"""Core data models for ClipChat."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# --- Enums ---


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Role(str, Enum):
    """Turn roles on the relay wire."""

    USER = "user"
    MODEL = "model"


class ErrorKind(str, Enum):
    """Structured error kinds returned by the relay."""

    INVALID_REQUEST = "invalid_request"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    MISSING_CREDENTIALS = "missing_credentials"
    UNAUTHORIZED = "unauthorized"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UNEXPECTED_UPSTREAM_SHAPE = "unexpected_upstream_shape"
    INTERNAL_ERROR = "internal_error"


# Client-side placeholder shown while waiting for the relay.
TYPING_MESSAGE_ID = "typing"


# --- Helpers ---


def _now_ms() -> int:
    return int(time.time() * 1000)


# --- Realtime store records ---


@dataclass
class ClipboardRecord:
    """The shared two-field clipboard. Last write wins."""

    laptop: str = ""
    phone: str = ""

    FIELDS = ("laptop", "phone")

    def to_dict(self) -> dict[str, str]:
        return {"laptop": self.laptop, "phone": self.phone}

    @classmethod
    def from_dict(cls, data: dict | None) -> ClipboardRecord:
        data = data if isinstance(data, dict) else {}
        return cls(laptop=data.get("laptop") or "", phone=data.get("phone") or "")


@dataclass
class Conversation:
    """A chat thread owned by one user."""

    id: str = ""
    title: str = ""
    created_at: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "createdAt": self.created_at}

    @classmethod
    def from_dict(cls, conv_id: str, data: dict) -> Conversation:
        return cls(
            id=conv_id,
            title=data.get("title", ""),
            created_at=int(data.get("createdAt") or 0),
        )


@dataclass
class Message:
    """A single appended message in a conversation."""

    text: str
    sender: str = Sender.USER
    timestamp: int = field(default_factory=_now_ms)
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "sender": Sender(self.sender).value, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, msg_id: str, data: dict) -> Message:
        return cls(
            id=msg_id,
            text=data.get("text", ""),
            sender=data.get("sender", Sender.USER),
            timestamp=int(data.get("timestamp") or 0),
        )


# --- Relay models ---


@dataclass
class Turn:
    """One entry of a conversation history on the relay wire."""

    role: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": Role(self.role).value, "parts": [{"text": self.text}]}


@dataclass
class RelayRequest:
    """A validated prompt: a single string or a turn sequence ending in a user turn."""

    prompt: str | None = None
    contents: list[Turn] = field(default_factory=list)

    @property
    def turns(self) -> list[Turn]:
        """The request as a turn sequence, whichever form it arrived in."""
        if self.contents:
            return list(self.contents)
        return [Turn(role=Role.USER, text=self.prompt or "")]

    @property
    def last_prompt(self) -> str:
        return self.turns[-1].text


@dataclass
class RelayResponse:
    """Normalized relay outcome: either text or an error, never both."""

    text: str | None = None
    error: str | None = None
    detail: Any = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.error is None):
            raise ValueError("RelayResponse needs exactly one of text or error")
        if self.error is not None:
            self.error = ErrorKind(self.error).value

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, kind: ErrorKind | str, detail: Any = None) -> RelayResponse:
        return cls(error=kind, detail=detail)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"text": self.text}
        body: dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            body["detail"] = self.detail
        return body

    @classmethod
    def from_dict(cls, data: Any) -> RelayResponse:
        """Parse a relay body received over HTTP."""
        if isinstance(data, dict):
            if isinstance(data.get("text"), str) and "error" not in data:
                return cls(text=data["text"])
            kind = data.get("error")
            if kind in {k.value for k in ErrorKind}:
                return cls(error=kind, detail=data.get("detail"))
        return cls(error=ErrorKind.UNEXPECTED_UPSTREAM_SHAPE, detail=data)
