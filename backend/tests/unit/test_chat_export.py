"""
Tests for conversation export rendering.
"""

from datetime import datetime, timezone

import pytest

from character_nexus.core.exceptions import BadRequestError
from character_nexus.models.conversation import Conversation, Message
from character_nexus.services.chat_export import export_chat

CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _conversation(persona_name=None):
    return Conversation(
        id="conv-1",
        title="Night Shift",
        persona_name=persona_name,
        message_count=2,
        created=CREATED,
        modified=CREATED,
    )


def _messages():
    return [
        Message(
            id="m1",
            conversation_id="conv-1",
            role="user",
            content="Anyone here?",
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            order_index=0,
        ),
        Message(
            id="m2",
            conversation_id="conv-1",
            role="assistant",
            content="Always.",
            timestamp=datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc),
            order_index=1,
        ),
    ]


def test_text_export_with_persona():
    exported = export_chat(_conversation("Sam"), _messages(), "txt")

    assert exported.media_type == "text/plain"
    assert exported.filename == "chat-conv-1.txt"
    assert exported.content == "\n".join(
        [
            "Chat: Night Shift",
            "User: Sam",
            "Date: 2024-05-01T12:00:00+00:00",
            "Messages: 2",
            "",
            "=" * 80,
            "",
            "Sam:",
            "Anyone here?",
            "",
            "Assistant:",
            "Always.",
            "",
        ]
    )


def test_markdown_export_without_persona():
    exported = export_chat(_conversation(), _messages(), "md")

    assert exported.media_type == "text/markdown"
    assert exported.filename == "chat-conv-1.md"
    lines = exported.content.split("\n")
    assert lines[:7] == [
        "# Night Shift",
        "",
        "**Date:** 2024-05-01T12:00:00+00:00",
        "**Messages:** 2",
        "",
        "---",
        "",
    ]
    assert lines[7:11] == ["### User", "", "Anyone here?", ""]
    assert "### Assistant" in lines


def test_sillytavern_alias_uses_persona_name():
    exported = export_chat(_conversation("Sam"), _messages(), "SillyTavern")

    lines = exported.content.split("\n")
    assert lines[0] == '{"name":"Sam","is_user":true,"send_date":1704067200000,"mes":"Anyone here?"}'
    assert lines[1] == '{"name":"Assistant","is_user":false,"send_date":1704067201000,"mes":"Always."}'


def test_empty_conversation_exports():
    assert export_chat(_conversation(), [], "jsonl").content == ""
    assert "Chat: Night Shift" in export_chat(_conversation(), [], "txt").content


@pytest.mark.parametrize("fmt", ["xml", "", "html"])
def test_unsupported_formats(fmt):
    with pytest.raises(BadRequestError) as exc_info:
        export_chat(_conversation(), [], fmt)

    assert "Supported formats: json, txt, markdown, jsonl" in exc_info.value.message
