"""Stored conversations and the client-side chat session."""

from clipchat.conversations.session import (
    ChatSession,
    LocalRelayClient,
    RelayClient,
    build_contents,
)
from clipchat.conversations.store import ConversationStore, conversations_path

__all__ = [
    "ChatSession",
    "ConversationStore",
    "LocalRelayClient",
    "RelayClient",
    "build_contents",
    "conversations_path",
]
