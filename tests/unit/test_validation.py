"""Tests for clipchat.relay.validation."""

import pytest

from clipchat.core.models import Role
from clipchat.relay import InvalidRequestError, parse_relay_request


def _turn(role: str, text: str) -> dict:
    return {"role": role, "parts": [{"text": text}]}


class TestPrompt:
    def test_valid_prompt(self):
        req = parse_relay_request({"prompt": "hello"})
        assert req.prompt == "hello"
        assert req.contents == []
        assert [t.role for t in req.turns] == [Role.USER]
        assert req.last_prompt == "hello"

    def test_empty_prompt(self):
        with pytest.raises(InvalidRequestError, match="non-empty string"):
            parse_relay_request({"prompt": "   "})

    def test_non_string_prompt(self):
        with pytest.raises(InvalidRequestError):
            parse_relay_request({"prompt": 42})

    def test_null_prompt(self):
        with pytest.raises(InvalidRequestError):
            parse_relay_request({"prompt": None})


class TestContents:
    def test_valid_history(self):
        req = parse_relay_request({"contents": [
            _turn("user", "hi"),
            _turn("model", "hello!"),
            _turn("user", "tell me a joke"),
        ]})
        assert req.prompt is None
        assert len(req.contents) == 3
        assert req.contents[1].role == Role.MODEL
        assert req.last_prompt == "tell me a joke"

    def test_empty_contents(self):
        with pytest.raises(InvalidRequestError, match="non-empty list"):
            parse_relay_request({"contents": []})

    def test_contents_not_a_list(self):
        with pytest.raises(InvalidRequestError):
            parse_relay_request({"contents": "hi"})

    def test_must_end_with_user(self):
        with pytest.raises(InvalidRequestError, match="end with a user turn"):
            parse_relay_request({"contents": [_turn("user", "hi"), _turn("model", "yo")]})

    def test_unknown_role(self):
        with pytest.raises(InvalidRequestError, match="invalid role"):
            parse_relay_request({"contents": [_turn("system", "be nice"), _turn("user", "hi")]})

    def test_missing_parts(self):
        with pytest.raises(InvalidRequestError, match="parts"):
            parse_relay_request({"contents": [{"role": "user"}]})

    def test_part_without_text(self):
        with pytest.raises(InvalidRequestError, match="without 'text'"):
            parse_relay_request({"contents": [{"role": "user", "parts": [{"image": "x"}]}]})

    def test_blank_final_turn(self):
        with pytest.raises(InvalidRequestError, match="no text"):
            parse_relay_request({"contents": [_turn("user", "  ")]})

    def test_multiple_parts_joined(self):
        req = parse_relay_request({"contents": [
            {"role": "user", "parts": [{"text": "line one"}, {"text": "line two"}]},
        ]})
        assert req.contents[0].text == "line one\nline two"


class TestShape:
    def test_neither_field(self):
        with pytest.raises(InvalidRequestError, match="required"):
            parse_relay_request({})

    def test_both_fields(self):
        with pytest.raises(InvalidRequestError, match="not both"):
            parse_relay_request({"prompt": "hi", "contents": [_turn("user", "hi")]})

    def test_not_an_object(self):
        with pytest.raises(InvalidRequestError, match="JSON object"):
            parse_relay_request(["prompt", "hi"])

    def test_kind(self):
        with pytest.raises(InvalidRequestError) as exc_info:
            parse_relay_request({})
        assert exc_info.value.kind.value == "invalid_request"
