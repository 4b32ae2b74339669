"""Chat relay: one-shot proxy from the client to an upstream model API."""

from clipchat.relay.core import Relay, RelayResult
from clipchat.relay.validation import InvalidRequestError, RelayError, parse_relay_request

__all__ = [
    "InvalidRequestError",
    "Relay",
    "RelayError",
    "RelayResult",
    "parse_relay_request",
]
