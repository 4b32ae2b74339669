"""Validation of inbound relay bodies."""

from __future__ import annotations

from typing import Any

from clipchat.core.models import ErrorKind, RelayRequest, Role, Turn


class RelayError(Exception):
    """Base error for relay operations."""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR


class InvalidRequestError(RelayError):
    """The client sent a malformed relay payload."""

    kind = ErrorKind.INVALID_REQUEST


_ROLES = {r.value for r in Role}


def parse_relay_request(body: Any) -> RelayRequest:
    """Validate a decoded JSON body and build a RelayRequest.

    Accepts exactly one of ``{"prompt": str}`` or
    ``{"contents": [{"role": "user"|"model", "parts": [{"text": str}]}, ...]}``.

    Raises:
        InvalidRequestError: The body does not describe a usable prompt.
    """
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")

    has_prompt = "prompt" in body
    has_contents = "contents" in body

    if not has_prompt and not has_contents:
        raise InvalidRequestError("Either 'prompt' or 'contents' is required")
    if has_prompt and has_contents:
        raise InvalidRequestError("Send either 'prompt' or 'contents', not both")

    if has_prompt:
        prompt = body["prompt"]
        if not isinstance(prompt, str) or not prompt.strip():
            raise InvalidRequestError("'prompt' must be a non-empty string")
        return RelayRequest(prompt=prompt)

    return RelayRequest(contents=_parse_contents(body["contents"]))


def _parse_contents(contents: Any) -> list[Turn]:
    if not isinstance(contents, list) or not contents:
        raise InvalidRequestError("'contents' must be a non-empty list of turns")

    turns = [_parse_turn(i, raw) for i, raw in enumerate(contents)]

    if turns[-1].role != Role.USER:
        raise InvalidRequestError("'contents' must end with a user turn")
    if not turns[-1].text.strip():
        raise InvalidRequestError("The final user turn has no text")
    return turns


def _parse_turn(index: int, raw: Any) -> Turn:
    if not isinstance(raw, dict):
        raise InvalidRequestError(f"Turn {index} must be an object")

    role = raw.get("role")
    if role not in _ROLES:
        raise InvalidRequestError(f"Turn {index} has invalid role {role!r}")

    parts = raw.get("parts")
    if not isinstance(parts, list) or not parts:
        raise InvalidRequestError(f"Turn {index} must have a non-empty 'parts' list")

    texts = []
    for part in parts:
        if not isinstance(part, dict) or not isinstance(part.get("text"), str):
            raise InvalidRequestError(f"Turn {index} has a part without 'text'")
        texts.append(part["text"])

    return Turn(role=Role(role), text="\n".join(texts))
