"""
Chat API endpoints.

Conversations, their messages, chat-log import and export.
"""

from typing import Optional

from fastapi import APIRouter, Query, Response, status

from character_nexus.api.deps import ConversationRepo
from character_nexus.models.base import DataResponse, MessageResponse, MutationResponse
from character_nexus.models.conversation import (
    ChatImportRequest,
    Conversation,
    ConversationPage,
    ConversationWithMessages,
    Message,
)
from character_nexus.utils.pagination import clamp_pagination

router = APIRouter()


@router.get("", response_model=ConversationPage)
async def list_conversations(
    repo: ConversationRepo,
    character_id: Optional[str] = Query(None, alias="characterId"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
) -> ConversationPage:
    """List conversations, most recently modified first."""
    page_limit, page_offset = clamp_pagination(limit, offset)
    conversations = await repo.list(
        character_id=character_id,
        limit=page_limit,
        offset=page_offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ConversationPage(data=conversations, limit=page_limit, offset=page_offset)


@router.post(
    "/import",
    response_model=MutationResponse[ConversationWithMessages],
    status_code=status.HTTP_201_CREATED,
)
async def import_chat(
    request: ChatImportRequest, repo: ConversationRepo
) -> MutationResponse[ConversationWithMessages]:
    """Import an external chat log as a new conversation."""
    conversation = await repo.import_chat(request.chat_data, request.character_id)
    return MutationResponse[ConversationWithMessages](
        data=conversation, message="Chat imported successfully"
    )


@router.get("/{conversation_id}", response_model=DataResponse[Conversation])
async def get_conversation(
    conversation_id: str, repo: ConversationRepo
) -> DataResponse[Conversation]:
    return DataResponse[Conversation](data=await repo.get(conversation_id))


@router.get("/{conversation_id}/messages", response_model=DataResponse[list[Message]])
async def list_messages(
    conversation_id: str, repo: ConversationRepo
) -> DataResponse[list[Message]]:
    return DataResponse[list[Message]](data=await repo.list_messages(conversation_id))


@router.delete("/{conversation_id}", response_model=MessageResponse)
async def delete_conversation(conversation_id: str, repo: ConversationRepo) -> MessageResponse:
    """Delete a conversation and all of its messages."""
    await repo.delete(conversation_id)
    return MessageResponse(message="Conversation deleted successfully")


@router.get("/{conversation_id}/export/{format}")
async def export_conversation(
    conversation_id: str, format: str, repo: ConversationRepo
) -> Response:
    """Download a conversation as json, txt, markdown or jsonl."""
    exported = await repo.export_conversation(conversation_id, format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )
