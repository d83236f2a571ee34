"""
Conversation export rendering.

Each renderer is a pure function of a conversation and its ordered messages.
"""

import json
from typing import Callable

from character_nexus.core.exceptions import BadRequestError
from character_nexus.models.conversation import (
    Conversation,
    ConversationWithMessages,
    ExportedChat,
    Message,
)
from character_nexus.models.enums import ExportFormat, MessageRole
from character_nexus.utils.datetime_utils import to_epoch_millis

SUPPORTED_FORMATS = "json, txt, markdown, jsonl"
TEXT_SEPARATOR = "=" * 80


def speaker_label(conversation: Conversation, message: Message) -> str:
    if message.role == MessageRole.USER:
        return conversation.persona_name or "User"
    return "Assistant"


def render_json(conversation: Conversation, messages: list[Message]) -> str:
    document = ConversationWithMessages(**conversation.model_dump(), messages=messages)
    return document.model_dump_json(by_alias=True, indent=2)


def render_text(conversation: Conversation, messages: list[Message]) -> str:
    lines = [f"Chat: {conversation.title}"]
    if conversation.persona_name:
        lines.append(f"User: {conversation.persona_name}")
    lines.append(f"Date: {conversation.created.isoformat()}")
    lines.append(f"Messages: {conversation.message_count}")
    lines.extend(["", TEXT_SEPARATOR, ""])

    for message in messages:
        lines.append(f"{speaker_label(conversation, message)}:")
        lines.append(message.content)
        lines.append("")

    return "\n".join(lines)


def render_markdown(conversation: Conversation, messages: list[Message]) -> str:
    lines = [f"# {conversation.title}", ""]
    if conversation.persona_name:
        lines.append(f"**User:** {conversation.persona_name}")
    lines.append(f"**Date:** {conversation.created.isoformat()}")
    lines.append(f"**Messages:** {conversation.message_count}")
    lines.extend(["", "---", ""])

    for message in messages:
        lines.append(f"### {speaker_label(conversation, message)}")
        lines.append("")
        lines.append(message.content)
        lines.append("")

    return "\n".join(lines)


def render_jsonl(conversation: Conversation, messages: list[Message]) -> str:
    """SillyTavern chat format: one compact JSON object per message."""
    entries = []
    for message in messages:
        entry = {
            "name": speaker_label(conversation, message),
            "is_user": message.role == MessageRole.USER,
            "send_date": to_epoch_millis(message.timestamp),
            "mes": message.content,
        }
        entries.append(json.dumps(entry, ensure_ascii=False, separators=(",", ":")))
    return "\n".join(entries)


_RENDERERS: dict[ExportFormat, tuple[Callable[[Conversation, list[Message]], str], str, str]] = {
    ExportFormat.JSON: (render_json, "application/json", "json"),
    ExportFormat.TXT: (render_text, "text/plain", "txt"),
    ExportFormat.MARKDOWN: (render_markdown, "text/markdown", "md"),
    ExportFormat.JSONL: (render_jsonl, "application/x-ndjson", "jsonl"),
}


def export_chat(conversation: Conversation, messages: list[Message], format: str) -> ExportedChat:
    """
    Render a conversation in ``format``.

    Raises:
        BadRequestError: If the format is not supported
    """
    try:
        export_format = ExportFormat.parse(format)
    except ValueError:
        raise BadRequestError(
            f"Unsupported export format: {format}. Supported formats: {SUPPORTED_FORMATS}"
        )

    renderer, media_type, extension = _RENDERERS[export_format]
    return ExportedChat(
        content=renderer(conversation, messages),
        media_type=media_type,
        filename=f"chat-{conversation.id}.{extension}",
    )
