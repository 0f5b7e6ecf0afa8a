"""Plain data records shared by the formatter and the API client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass
class File:
    """A source file given to the model as context."""

    path: str
    content: str


@dataclass
class Message:
    """One message of a dialog with the model."""

    text: str
    is_user: bool


@dataclass
class Update:
    """A change suggested by the model: the code it touched and why."""

    code: str
    description: str
    path: str = ""

    def to_dict(self) -> dict[str, str]:
        """Return the JSON form; the path is left out when empty."""
        data = {"code": self.code, "description": self.description}
        if self.path:
            data["path"] = self.path
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Update":
        """Build an update from its JSON form, taking missing fields as empty."""
        return cls(
            code=str(data.get("code") or ""),
            description=str(data.get("description") or ""),
            path=str(data.get("path") or ""),
        )