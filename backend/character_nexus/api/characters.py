"""
Character API endpoints.

Provides CRUD operations for characters.
"""

from typing import Optional

from fastapi import APIRouter, Query, status

from character_nexus.api.deps import CharacterRepo, ImageStore
from character_nexus.models.base import DataResponse, MessageResponse, MutationResponse
from character_nexus.models.character import (
    Character,
    CharacterCreate,
    CharacterPage,
    CharacterUpdate,
)
from character_nexus.models.enums import ContentRating
from character_nexus.utils.pagination import clamp_pagination

router = APIRouter()


@router.get("", response_model=CharacterPage)
async def list_characters(
    repo: CharacterRepo,
    universe: Optional[str] = Query(None, description="Filter by universe"),
    content_rating: Optional[ContentRating] = Query(None, alias="contentRating"),
    search: Optional[str] = Query(None, description="Substring match on name or bio"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
) -> CharacterPage:
    """List characters with filters, sorting and pagination."""
    page_limit, page_offset = clamp_pagination(limit, offset)
    characters = await repo.list(
        universe=universe,
        content_rating=content_rating,
        search=search,
        limit=page_limit,
        offset=page_offset,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    total = await repo.count(universe=universe, content_rating=content_rating)
    return CharacterPage(data=characters, total=total, limit=page_limit, offset=page_offset)


@router.get("/{character_id}", response_model=DataResponse[Character])
async def get_character(character_id: str, repo: CharacterRepo) -> DataResponse[Character]:
    """Get a character by ID."""
    return DataResponse[Character](data=await repo.get(character_id))


@router.post("", response_model=MutationResponse[Character], status_code=status.HTTP_201_CREATED)
async def create_character(
    character: CharacterCreate, repo: CharacterRepo
) -> MutationResponse[Character]:
    """Create a new character."""
    created = await repo.create(character)
    return MutationResponse[Character](data=created, message="Character created successfully")


@router.put("/{character_id}", response_model=MutationResponse[Character])
async def update_character(
    character_id: str, update: CharacterUpdate, repo: CharacterRepo
) -> MutationResponse[Character]:
    """Update the fields present in the request body."""
    updated = await repo.update(character_id, update)
    return MutationResponse[Character](data=updated, message="Character updated successfully")


@router.delete("/{character_id}", response_model=MessageResponse)
async def delete_character(
    character_id: str, repo: CharacterRepo, images: ImageStore
) -> MessageResponse:
    """Delete a character and its stored image."""
    deleted = await repo.delete(character_id)
    if deleted.image:
        await images.delete(deleted.image)
    return MessageResponse(message="Character deleted successfully")
