"""Hosted realtime store client (Firebase Realtime Database)."""

from clipchat.store.realtime import RealtimeStore, StoreAuthError, StoreConfig, StoreError

__all__ = ["RealtimeStore", "StoreAuthError", "StoreConfig", "StoreError"]
