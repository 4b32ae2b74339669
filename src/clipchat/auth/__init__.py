"""Login gate backed by Firebase Authentication."""

from clipchat.auth.firebase import AuthError, FirebaseAuth, Session

__all__ = ["AuthError", "FirebaseAuth", "Session"]
