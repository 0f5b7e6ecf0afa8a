import json

import pytest
import responses

from aifmt.api import (
    API_URL,
    ApiError,
    build_request_body,
    get_answer,
    get_json_answer,
    strip_code_fence,
)
from aifmt.entity import Message


def _reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_build_request_body_roles_and_temperature():
    dialog = [Message(text="q", is_user=True), Message(text="a", is_user=False)]
    body = build_request_body("m", dialog)
    assert body["model"] == "m"
    assert body["temperature"] == 0.3
    assert body["messages"] == [
        {"role": "user", "content": "q"},
        {"role": "assistant", "content": "a"},
    ]


def test_strip_code_fence_removes_json_fence():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_strip_code_fence_leaves_plain_text():
    assert strip_code_fence('{"a": 1}') == '{"a": 1}'


def test_get_answer_sends_headers_and_returns_last_choice():
    payload = {
        "choices": [
            {"message": {"role": "assistant", "content": "first"}},
            {"message": {"role": "assistant", "content": "last"}},
        ]
    }
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API_URL, json=payload, status=200)
        answer = get_answer("token", "m", [Message(text="hi", is_user=True)])
        request = rsps.calls[0].request
    assert answer == "last"
    assert request.headers["Authorization"] == "Bearer token"
    assert request.headers["Content-Type"] == "application/json;charset=utf-8"
    sent = json.loads(request.body)
    assert sent["messages"] == [{"role": "user", "content": "hi"}]


def test_get_answer_raises_on_bad_status():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API_URL, body="denied", status=401)
        with pytest.raises(ApiError, match="401"):
            get_answer("token", "m", [])


def test_get_answer_raises_on_undecodable_response():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API_URL, body="not json", status=200)
        with pytest.raises(ApiError):
            get_answer("token", "m", [])


def test_get_answer_raises_on_empty_choices():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API_URL, json={"choices": []}, status=200)
        with pytest.raises(ApiError):
            get_answer("token", "m", [])


def test_get_json_answer_decodes_fenced_json():
    with responses.RequestsMock() as rsps:
        rsps.add(
            responses.POST,
            API_URL,
            json=_reply('```json\n{"code": "x", "updates": []}\n```'),
            status=200,
        )
        data = get_json_answer("token", "m", [])
    assert data == {"code": "x", "updates": []}


def test_get_json_answer_raises_on_invalid_json():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, API_URL, json=_reply("plain text answer"), status=200)
        with pytest.raises(ApiError, match="plain text answer"):
            get_json_answer("token", "m", [])