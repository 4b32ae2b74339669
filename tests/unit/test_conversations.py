"""Tests for clipchat.conversations: store, history assembly, chat session."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx

from clipchat.conversations import (
    ChatSession,
    ConversationStore,
    LocalRelayClient,
    RelayClient,
    build_contents,
    conversations_path,
)
from clipchat.core.models import ErrorKind, Message, RelayResponse, Sender
from clipchat.providers import GeminiAdapter
from clipchat.relay import Relay


class FakeStore:
    """In-memory stand-in for RealtimeStore keyed by path."""

    def __init__(self) -> None:
        self.tree: dict = {}
        self._counter = 0

    def _node(self, path: str, create: bool = False):
        node = self.tree
        for key in [k for k in path.split("/") if k]:
            if key not in node:
                if not create:
                    return None
                node[key] = {}
            node = node[key]
        return node

    def get(self, path):
        return self._node(path)

    def push(self, path, value):
        self._counter += 1
        key = f"-k{self._counter:03d}"
        self._node(path, create=True)[key] = value
        return key

    def delete(self, path):
        *parents, last = [k for k in path.split("/") if k]
        parent = self._node("/".join(parents))
        if parent is not None:
            parent.pop(last, None)


class TestConversationStore:
    def test_paths(self):
        assert conversations_path("u1") == "users/u1/conversations"
        assert conversations_path() == "conversations"

    def test_create_and_get(self):
        convs = ConversationStore(FakeStore(), "users/u1/conversations")
        conv = convs.create("Trip")
        assert conv.id
        fetched = convs.get(conv.id)
        assert fetched.title == "Trip"
        assert fetched.created_at == conv.created_at

    def test_get_missing(self):
        assert ConversationStore(FakeStore()).get("nope") is None

    def test_list_newest_first(self):
        store = FakeStore()
        store.tree = {"conversations": {
            "a": {"title": "old", "createdAt": 1},
            "b": {"title": "new", "createdAt": 3},
            "c": {"title": "mid", "createdAt": 2},
        }}
        titles = [c.title for c in ConversationStore(store).list_conversations()]
        assert titles == ["new", "mid", "old"]

    def test_list_empty(self):
        assert ConversationStore(FakeStore()).list_conversations() == []

    def test_delete(self):
        convs = ConversationStore(FakeStore())
        conv = convs.create()
        convs.append_message(conv.id, "hi", Sender.USER)
        convs.delete(conv.id)
        assert convs.get(conv.id) is None
        assert convs.messages(conv.id) == []

    def test_messages_sorted_and_typing_filtered(self):
        store = FakeStore()
        store.tree = {"conversations": {"c1": {"title": "T", "createdAt": 1, "messages": {
            "m2": {"text": "second", "sender": "assistant", "timestamp": 20},
            "m1": {"text": "first", "sender": "user", "timestamp": 10},
            "typing": {"text": "...", "sender": "assistant", "timestamp": 30},
            "m3": {"text": "...", "sender": "assistant", "timestamp": 40, "typing": True},
        }}}}
        msgs = ConversationStore(store).messages("c1")
        assert [m.text for m in msgs] == ["first", "second"]
        assert msgs[0].id == "m1"

    def test_append_message(self):
        store = FakeStore()
        convs = ConversationStore(store)
        msg = convs.append_message("c1", "hello", "user")
        stored = store.tree["conversations"]["c1"]["messages"][msg.id]
        assert stored["text"] == "hello"
        assert stored["sender"] == "user"


def _msg(text: str, sender: Sender) -> Message:
    return Message(text=text, sender=sender)


class TestBuildContents:
    def test_no_history(self):
        assert build_contents([], "hello") == [{"role": "user", "parts": [{"text": "hello"}]}]

    def test_history_roles(self):
        history = [_msg("hi", Sender.USER), _msg("hello!", Sender.ASSISTANT)]
        contents = build_contents(history, "how are you?")
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[-1]["parts"][0]["text"] == "how are you?"

    def test_window(self):
        history = [
            _msg("q1", Sender.USER), _msg("a1", Sender.ASSISTANT),
            _msg("q2", Sender.USER), _msg("a2", Sender.ASSISTANT),
        ]
        contents = build_contents(history, "q3", window=3)
        assert [c["parts"][0]["text"] for c in contents] == ["q2", "a2", "q3"]

    def test_window_never_starts_on_model(self):
        history = [_msg("q1", Sender.USER), _msg("a1", Sender.ASSISTANT)]
        contents = build_contents(history, "q2", window=2)
        assert [c["parts"][0]["text"] for c in contents] == ["q2"]

    def test_empty_messages_skipped(self):
        history = [_msg("", Sender.ASSISTANT), _msg("q1", Sender.USER)]
        assert len(build_contents(history, "q2")) == 2


class TestChatSession:
    def _session(self, response: RelayResponse, window=None):
        convs = ConversationStore(FakeStore())
        conv = convs.create("Chat")
        relay = MagicMock()
        relay.send.return_value = response
        return convs, conv, relay, ChatSession(convs, relay, history_window=window)

    def test_success_stores_both(self):
        convs, conv, relay, session = self._session(RelayResponse(text="hi there"))
        resp = session.ask(conv.id, "hello")
        assert resp.text == "hi there"
        msgs = convs.messages(conv.id)
        assert [(m.sender, m.text) for m in msgs] == [("user", "hello"), ("assistant", "hi there")]

    def test_failure_stores_only_user(self):
        failure = RelayResponse.failure(ErrorKind.UPSTREAM_ERROR, detail={"error": "boom"})
        convs, conv, relay, session = self._session(failure)
        resp = session.ask(conv.id, "hello")
        assert not resp.ok
        msgs = convs.messages(conv.id)
        assert [m.text for m in msgs] == ["hello"]

    def test_history_sent(self):
        convs, conv, relay, session = self._session(RelayResponse(text="second answer"))
        convs.append_message(conv.id, "first", Sender.USER)
        convs.append_message(conv.id, "first answer", Sender.ASSISTANT)
        session.ask(conv.id, "second")
        body = relay.send.call_args.args[0]
        assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]

    def test_history_window_applied(self):
        convs, conv, relay, session = self._session(RelayResponse(text="ok"), window=1)
        convs.append_message(conv.id, "old", Sender.USER)
        session.ask(conv.id, "new")
        body = relay.send.call_args.args[0]
        assert body["contents"] == [{"role": "user", "parts": [{"text": "new"}]}]


class TestRelayClient:
    def test_success(self):
        resp = MagicMock()
        resp.json.return_value = {"text": "hi"}
        with patch("httpx.post", return_value=resp) as mock_post:
            result = RelayClient("http://relay/relay", api_key="k").send({"prompt": "hello"})
        assert result.text == "hi"
        kwargs = mock_post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer k"
        assert kwargs["json"] == {"prompt": "hello"}

    def test_error_body(self):
        resp = MagicMock()
        resp.json.return_value = {"error": "upstream_error", "detail": "x"}
        with patch("httpx.post", return_value=resp):
            result = RelayClient("http://relay/relay").send({"prompt": "hello"})
        assert result.error == "upstream_error"

    def test_non_json_body(self):
        resp = MagicMock()
        resp.json.side_effect = ValueError("nope")
        resp.text = "<html>"
        with patch("httpx.post", return_value=resp):
            result = RelayClient("http://relay/relay").send({"prompt": "hello"})
        assert result.error == "unexpected_upstream_shape"

    def test_unreachable(self):
        with patch("httpx.post", side_effect=httpx.ConnectError("refused")):
            result = RelayClient("http://relay/relay").send({"prompt": "hello"})
        assert result.error == "upstream_unreachable"

    def test_timeout(self):
        with patch("httpx.post", side_effect=httpx.ReadTimeout("slow")):
            result = RelayClient("http://relay/relay").send({"prompt": "hello"})
        assert result.error == "upstream_timeout"


class TestLocalRelayClient:
    def test_in_process(self):
        relay = Relay(GeminiAdapter({"api_key": "k"}))
        upstream = MagicMock()
        upstream.json.return_value = {"candidates": [{"content": {"parts": [{"text": "yo"}]}}]}
        with patch("httpx.post", return_value=upstream):
            result = LocalRelayClient(relay).send({"prompt": "hello"})
        assert result == RelayResponse(text="yo")
