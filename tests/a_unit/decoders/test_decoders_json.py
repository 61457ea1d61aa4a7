"""Tests for the JSON decoder."""

from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from bodydecode import (
    BindingError,
    BodySizeLimitError,
    DecodeError,
    InvalidJSONError,
    JSONDecoder,
    Request,
    field,
)
from tests.utils import User, make_request


@dataclass
class Address:
    city: str = ""
    zip_code: str = field("", json="zip")


@dataclass
class Profile:
    name: str = field("", json="full_name")
    age: int = 0
    score: float = 0.0
    active: bool = False
    tags: list[str] = field(default_factory=list)
    address: Address | None = None
    nickname: str | None = None
    secret: str = field("hidden", json="-")


def decode(body: bytes | str, target, **kwargs):
    if isinstance(body, str):
        body = body.encode("utf-8")
    request = make_request("application/json", body)
    JSONDecoder(**kwargs)(request, target)
    return request


def test_json_decoder_basic():
    user = User()
    decode(json.dumps({"username": "foo", "password": "bar"}), user)
    assert user == User(username="foo", password="bar")


def test_json_decoder_uses_json_tags():
    profile = Profile()
    decode('{"full_name": "Ada", "name": "ignored"}', profile)
    assert profile.name == "Ada"


def test_json_decoder_typed_fields():
    profile = Profile()
    decode(
        json.dumps(
            {
                "age": 36,
                "score": 9,
                "active": True,
                "tags": ["math", "engines"],
                "address": {"city": "London", "zip": "N1"},
            }
        ),
        profile,
    )

    assert profile.age == 36
    assert profile.score == 9.0
    assert isinstance(profile.score, float)
    assert profile.active is True
    assert profile.tags == ["math", "engines"]
    assert profile.address == Address(city="London", zip_code="N1")


def test_json_decoder_null_leaves_field_unchanged():
    profile = Profile(nickname="ada")
    decode('{"nickname": null}', profile)
    assert profile.nickname == "ada"


def test_json_decoder_ignores_unknown_keys():
    user = User()
    decode('{"username": "foo", "email": "foo@example.com"}', user)
    assert user == User(username="foo")


def test_json_decoder_rejects_unknown_keys_when_configured():
    with pytest.raises(BindingError, match="unknown field 'email'"):
        decode('{"email": "foo@example.com"}', User(), ignore_unknown_keys=False)


def test_json_decoder_hidden_field():
    profile = Profile()
    decode('{"secret": "exposed"}', profile)
    assert profile.secret == "hidden"


def test_json_decoder_invalid_json():
    with pytest.raises(InvalidJSONError, match="Invalid JSON"):
        decode('{"invalid json"}', User())


def test_json_decoder_invalid_json_is_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode("{", User())
    assert exc_info.value.code == "BODY-3001"
    assert exc_info.value.context["body_snippet"] == "{"


def test_json_decoder_empty_body():
    with pytest.raises(InvalidJSONError):
        decode(b"", User())


def test_json_decoder_invalid_utf8():
    with pytest.raises(InvalidJSONError, match="Invalid UTF-8"):
        decode(b"\xff\xfe{}", User())


@pytest.mark.parametrize(
    ("body", "field_name"),
    [
        ('{"username": 42}', "username"),
        ('{"age": "36"}', "age"),
        ('{"age": true}', "age"),
        ('{"age": 1.5}', "age"),
        ('{"active": 1}', "active"),
        ('{"tags": "math"}', "tags"),
        ('{"tags": ["math", 1]}', "tags[1]"),
        ('{"address": "London"}', "address"),
        ('{"address": {"city": 1}}', "address.city"),
    ],
)
def test_json_decoder_type_mismatch(body, field_name):
    target = User() if "username" in body else Profile()
    with pytest.raises(BindingError) as exc_info:
        decode(body, target)
    assert exc_info.value.field == field_name


def test_json_decoder_root_must_be_object():
    with pytest.raises(BindingError):
        decode('["foo", "bar"]', User())


def test_json_decoder_into_dict():
    target: dict = {}
    decode('{"a": 1, "b": [1, 2]}', target)
    assert target == {"a": 1, "b": [1, 2]}


def test_json_decoder_replays_body():
    body = b'{"username": "foo"}'
    request = decode(body, User())
    assert request.body.read() == body


def test_json_decoder_replays_body_even_on_error():
    request = make_request("application/json", b"{")
    with pytest.raises(InvalidJSONError):
        JSONDecoder()(request, User())
    assert request.body.read() == b"{"


def test_json_decoder_consumes_body_without_replay():
    request = decode(b'{"username": "foo"}', User(), replay_body=False)
    assert request.body.read() == b""


def test_json_decoder_body_limit():
    with pytest.raises(BodySizeLimitError) as exc_info:
        decode('{"username": "' + "x" * 100 + '"}', User(), body_limit=50)
    assert exc_info.value.context["limit"] == 50


def test_json_decoder_body_limit_from_content_length():
    request = Request(
        {"Content-Type": "application/json", "Content-Length": "5000"}, b"{}"
    )
    with pytest.raises(BodySizeLimitError) as exc_info:
        JSONDecoder(body_limit=1000)(request, User())
    assert exc_info.value.context["actual_size"] == 5000


def test_json_loads():
    assert JSONDecoder.loads(b'{"a": [1, 2]}') == {"a": [1, 2]}
