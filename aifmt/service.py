"""Asking the model to fix and reformat a piece of code."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from aifmt.api import ApiError, get_json_answer
from aifmt.entity import File, Message, Update

_PROMPT = (
    "Исправь этот код: ```{language}\n{content}\n```. Устрани ошибки, проведи "
    "оптимизацию. В твоем ответе обязательно должен быть только json объект, "
    "без текста до или после в следующем формате: {{code:(новый код), "
    "updates:(массив изменений)[{{code:(часть кода, которую ты решил изменить), "
    "description:(причина изменения)}}]}}!."
)
_WITH_COMMENTS = "Так же закоментируй код. Язык должен быть: {comments_language}"
_WITHOUT_COMMENTS = "Не добавляй в код новых комментариев, оставь уже имеющиеся"
_CONTEXT_INTRO = (
    "Так же учти и другие файлы этого же проекта. "
    "Я пришлю тебе список в виде отдельных сообщений: "
)


@dataclass
class FormatResult:
    """The reformatted code and the changes the model reports."""

    code: str
    updates: list[Update] = field(default_factory=list)


def build_prompt(
    content: str, language: str, comments: bool, comments_language: str
) -> str:
    """Return the main request text for one file."""
    prompt = _PROMPT.format(language=language, content=content)
    if comments:
        return prompt + _WITH_COMMENTS.format(comments_language=comments_language)
    return prompt + _WITHOUT_COMMENTS


def build_dialog(
    content: str,
    language: str,
    comments: bool,
    comments_language: str,
    context: Sequence[File] | None = None,
) -> list[Message]:
    """Return the dialog to send; other files are added when there are several."""
    dialog = [
        Message(
            text=build_prompt(content, language, comments, comments_language),
            is_user=True,
        )
    ]
    if context and len(context) > 1:
        dialog.append(Message(text=_CONTEXT_INTRO, is_user=True))
        dialog.extend(
            Message(text=f"{f.path}:\n```{language}\n{f.content}\n```", is_user=True)
            for f in context
        )
    return dialog


def format_code(
    content: str,
    language: str,
    model: str,
    token: str,
    comments: bool = False,
    comments_language: str = "",
    context: Sequence[File] | None = None,
) -> FormatResult:
    """Ask the model to fix the code and return its answer."""
    dialog = build_dialog(content, language, comments, comments_language, context)
    data = get_json_answer(token, model, dialog)
    if not isinstance(data, dict):
        raise ApiError("answer is not a JSON object")
    updates = [Update.from_dict(item) for item in data.get("updates") or [] if isinstance(item, dict)]
    return FormatResult(code=str(data.get("code") or ""), updates=updates)