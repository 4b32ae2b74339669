"""Client side of a chat: history assembly, relay call, persistence."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from clipchat.core.models import ErrorKind, RelayResponse, Role, Sender, Turn
from clipchat.relay import Relay

log = logging.getLogger(__name__)


class RelaySender(Protocol):
    """Anything that can deliver a relay body and return the normalized answer."""

    def send(self, body: dict) -> RelayResponse:
        ...


class RelayClient:
    """Call a relay endpoint over HTTP."""

    def __init__(self, url: str, api_key: str | None = None, timeout: float = 60.0) -> None:
        self.url = url
        self._api_key = api_key
        self._timeout = timeout

    def send(self, body: dict) -> RelayResponse:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        try:
            resp = httpx.post(self.url, headers=headers, json=body, timeout=self._timeout)
        except httpx.TimeoutException as e:
            return RelayResponse.failure(ErrorKind.UPSTREAM_TIMEOUT, detail=f"Relay timed out: {e}")
        except (httpx.RequestError, OSError) as e:
            return RelayResponse.failure(
                ErrorKind.UPSTREAM_UNREACHABLE, detail=f"Relay unreachable at {self.url}: {e}"
            )
        try:
            data: Any = resp.json()
        except ValueError:
            data = resp.text
        return RelayResponse.from_dict(data)


class LocalRelayClient:
    """Call a Relay in process, without HTTP."""

    def __init__(self, relay: Relay) -> None:
        self.relay = relay

    def send(self, body: dict) -> RelayResponse:
        return self.relay.handle("POST", body).response


def build_contents(history: list, prompt: str, window: int | None = None) -> list[dict]:
    """Turn stored messages plus a new prompt into a relay ``contents`` list.

    Args:
        history: Messages in conversation order.
        prompt: The new user prompt (always last).
        window: Keep at most this many turns, counting the new prompt.
    """
    turns = [
        Turn(role=Role.USER if msg.sender == Sender.USER else Role.MODEL, text=msg.text)
        for msg in history
        if msg.text
    ]
    turns.append(Turn(role=Role.USER, text=prompt))

    if window is not None and window > 0:
        turns = turns[-window:]
        # Never open the window on a model turn.
        while turns and turns[0].role != Role.USER:
            turns.pop(0)

    return [t.to_dict() for t in turns]


class ChatSession:
    """Ask the relay in the context of a stored conversation."""

    def __init__(self, conversations, relay: RelaySender, history_window: int | None = None) -> None:
        self.conversations = conversations
        self.relay = relay
        self.history_window = history_window

    def ask(self, conv_id: str, prompt: str) -> RelayResponse:
        """Send prompt with the conversation history and record the exchange.

        The user's message is always stored. The assistant message is stored
        only when the relay returned text, so an error body is never saved as
        an answer.
        """
        history = self.conversations.messages(conv_id)
        contents = build_contents(history, prompt, window=self.history_window)
        log.debug("Sending %d turn(s) for conversation %s", len(contents), conv_id)

        response = self.relay.send({"contents": contents})

        self.conversations.append_message(conv_id, prompt, Sender.USER)
        if response.ok:
            self.conversations.append_message(conv_id, response.text, Sender.ASSISTANT)
        else:
            log.warning("Relay failed for conversation %s: %s", conv_id, response.error)
        return response
