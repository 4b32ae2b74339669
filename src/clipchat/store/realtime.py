"""Firebase Realtime Database REST client.

Only the small slice of the REST contract ClipChat needs: read, overwrite,
merge, push, delete, and a streaming listener over ``text/event-stream``.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

import httpx

log = logging.getLogger(__name__)


class StoreError(Exception):
    """Realtime store request failed."""


class StoreAuthError(StoreError):
    """Store rejected the credentials (expired or revoked token)."""


@dataclass
class StoreConfig:
    """Explicit connection settings, passed in instead of a global app."""

    database_url: str
    auth_token: str | None = None
    timeout: float = 10.0

    @classmethod
    def from_config(cls, config: dict, auth_token: str | None = None) -> StoreConfig:
        fb = config.get("firebase", {})
        url = fb.get("database_url")
        if not url:
            raise StoreError("firebase.database_url is not configured")
        return cls(database_url=url, auth_token=auth_token)


class RealtimeStore:
    """JSON tree store addressed by slash-separated paths."""

    def __init__(self, config: StoreConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self._base_url = config.database_url.rstrip("/")
        self._client = client or httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RealtimeStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def url(self, path: str) -> str:
        path = path.strip("/")
        return f"{self._base_url}/{path}.json" if path else f"{self._base_url}/.json"

    def _params(self) -> dict[str, str]:
        return {"auth": self.config.auth_token} if self.config.auth_token else {}

    def _request(self, method: str, path: str, value: Any = None) -> Any:
        kwargs: dict[str, Any] = {"params": self._params()}
        if value is not None:
            kwargs["json"] = value
        try:
            resp = self._client.request(method, self.url(path), **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code in (401, 403):
                raise StoreAuthError(f"Store denied {method} {path} ({code})") from e
            raise StoreError(f"Store error on {method} {path} ({code}): {e}") from e
        except (httpx.RequestError, OSError) as e:
            raise StoreError(f"Store unreachable: {e}") from e
        return resp.json()

    def get(self, path: str) -> Any:
        """Read the value at path (None when absent)."""
        return self._request("GET", path)

    def set(self, path: str, value: Any) -> Any:
        """Overwrite the value at path."""
        log.debug("PUT %s", path)
        return self._request("PUT", path, value)

    def update(self, path: str, value: dict) -> Any:
        """Merge children into the value at path."""
        log.debug("PATCH %s", path)
        return self._request("PATCH", path, value)

    def push(self, path: str, value: Any) -> str:
        """Append a child with a generated key and return the key."""
        result = self._request("POST", path, value)
        return result["name"]

    def delete(self, path: str) -> None:
        log.debug("DELETE %s", path)
        self._request("DELETE", path)

    def listen(
        self,
        path: str,
        callback: Callable[[Any], None],
        stop: threading.Event | None = None,
    ) -> None:
        """Stream changes at path, calling back with the full value after each one.

        Blocks until the stream ends, ``stop`` is set, or the server cancels.

        Raises:
            StoreAuthError: The server revoked the token mid-stream.
            StoreError: The stream could not be opened.
        """
        snapshot: Any = None
        try:
            with self._client.stream(
                "GET",
                self.url(path),
                params=self._params(),
                headers={"Accept": "text/event-stream"},
                timeout=None,
            ) as resp:
                resp.raise_for_status()
                for event, data in iter_sse(resp.iter_lines()):
                    if stop is not None and stop.is_set():
                        break
                    if event in ("put", "patch"):
                        snapshot = apply_event(snapshot, event, data)
                        callback(snapshot)
                    elif event == "auth_revoked":
                        raise StoreAuthError("Store revoked the auth token")
                    elif event == "cancel":
                        log.warning("Store cancelled listener on %s: %s", path, data)
                        break
        except httpx.HTTPStatusError as e:
            raise StoreError(f"Could not listen on {path} ({e.response.status_code})") from e
        except (httpx.RequestError, OSError) as e:
            raise StoreError(f"Store unreachable: {e}") from e


def iter_sse(lines: Iterator[str]) -> Iterator[tuple[str, Any]]:
    """Group server-sent event lines into (event, decoded data) pairs."""
    event = ""
    data_lines: list[str] = []
    for line in lines:
        if not line:
            if event:
                raw = "\n".join(data_lines)
                try:
                    data = json.loads(raw) if raw else None
                except json.JSONDecodeError:
                    data = raw
                yield event, data
            event, data_lines = "", []
        elif line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].strip())


def apply_event(snapshot: Any, event: str, payload: Any) -> Any:
    """Apply a put/patch event ({"path", "data"}) to a local copy of the tree."""
    if not isinstance(payload, dict):
        return snapshot
    keys = [k for k in str(payload.get("path", "/")).split("/") if k]
    data = payload.get("data")

    if not keys:
        if event == "patch" and isinstance(snapshot, dict) and isinstance(data, dict):
            return _merge(snapshot, data)
        return data

    root = dict(snapshot) if isinstance(snapshot, dict) else {}
    node = root
    for key in keys[:-1]:
        child = node.get(key)
        node[key] = dict(child) if isinstance(child, dict) else {}
        node = node[key]

    last = keys[-1]
    if event == "patch" and isinstance(node.get(last), dict) and isinstance(data, dict):
        node[last] = _merge(node[last], data)
    elif data is None:
        node.pop(last, None)
    else:
        node[last] = data
    return root


def _merge(base: dict, children: dict) -> dict:
    result = dict(base)
    for key, value in children.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = value
    return result
