"""Conversation history persisted on the realtime store."""

from __future__ import annotations

import logging

from clipchat.core.models import TYPING_MESSAGE_ID, Conversation, Message, Sender
from clipchat.store import RealtimeStore

log = logging.getLogger(__name__)


def conversations_path(uid: str | None = None) -> str:
    """Store path of a user's conversations (global when uid is None)."""
    return f"users/{uid}/conversations" if uid else "conversations"


class ConversationStore:
    """Create, list and delete conversations; append and read messages."""

    def __init__(self, store: RealtimeStore, root: str = "conversations") -> None:
        self.store = store
        self.root = root.strip("/")

    def _conv_path(self, conv_id: str) -> str:
        return f"{self.root}/{conv_id}"

    def create(self, title: str = "New chat") -> Conversation:
        conv = Conversation(title=title)
        conv.id = self.store.push(self.root, conv.to_dict())
        log.info("Created conversation %s (%s)", conv.id, title)
        return conv

    def list_conversations(self) -> list[Conversation]:
        """All conversations, newest first."""
        raw = self.store.get(self.root) or {}
        convs = [
            Conversation.from_dict(conv_id, data)
            for conv_id, data in raw.items()
            if isinstance(data, dict)
        ]
        return sorted(convs, key=lambda c: c.created_at, reverse=True)

    def get(self, conv_id: str) -> Conversation | None:
        data = self.store.get(self._conv_path(conv_id))
        if not isinstance(data, dict):
            return None
        return Conversation.from_dict(conv_id, data)

    def delete(self, conv_id: str) -> None:
        """Remove a conversation and its messages."""
        self.store.delete(self._conv_path(conv_id))
        log.info("Deleted conversation %s", conv_id)

    def append_message(self, conv_id: str, text: str, sender: Sender | str) -> Message:
        msg = Message(text=text, sender=Sender(sender))
        msg.id = self.store.push(f"{self._conv_path(conv_id)}/messages", msg.to_dict())
        return msg

    def messages(self, conv_id: str) -> list[Message]:
        """Messages in timestamp order, without the client-side typing placeholder."""
        raw = self.store.get(f"{self._conv_path(conv_id)}/messages") or {}
        msgs = [
            Message.from_dict(msg_id, data)
            for msg_id, data in raw.items()
            if msg_id != TYPING_MESSAGE_ID and isinstance(data, dict) and not data.get("typing")
        ]
        return sorted(msgs, key=lambda m: m.timestamp)
