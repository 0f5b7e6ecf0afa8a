"""Client for the OpenRouter chat completion endpoint."""

from __future__ import annotations

import json
from typing import Any, Iterable

import requests

from aifmt.entity import Message

API_URL = "https://openrouter.ai/api/v1/chat/completions"
TEMPERATURE = 0.3


class ApiError(Exception):
    """Raised when the model could not be asked or its answer not read."""


def build_request_body(model: str, dialog: Iterable[Message]) -> dict[str, Any]:
    """Return the request body for a dialog."""
    return {
        "model": model,
        "messages": [
            {"role": "user" if item.is_user else "assistant", "content": item.text}
            for item in dialog
        ],
        "temperature": TEMPERATURE,
    }


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json fence from a model answer."""
    return text.removeprefix("```json\n").removesuffix("\n```")


def get_answer(token: str, model: str, dialog: Iterable[Message]) -> str:
    """Send the dialog and return the text of the last choice."""
    body = json.dumps(build_request_body(model, dialog)).encode("utf-8")
    headers = {
        "Content-Type": "application/json;charset=utf-8",
        "Authorization": f"Bearer {token}",
    }
    try:
        resp = requests.post(API_URL, data=body, headers=headers)
    except requests.RequestException as exc:
        raise ApiError(f"request failed: {exc}") from exc

    if resp.status_code != 200:
        raise ApiError(f"error in response: {resp.status_code} {resp.text}")

    try:
        payload = resp.json()
    except ValueError as exc:
        raise ApiError(f"could not decode response: {exc}") from exc

    try:
        return payload["choices"][-1]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ApiError("response holds no answer") from exc


def get_json_answer(token: str, model: str, dialog: Iterable[Message]) -> Any:
    """Send the dialog and decode the answer as JSON."""
    msg = strip_code_fence(get_answer(token, model, dialog))
    try:
        return json.loads(msg)
    except ValueError as exc:
        raise ApiError(f"could not decode answer: {exc}: {msg[:20]}...") from exc