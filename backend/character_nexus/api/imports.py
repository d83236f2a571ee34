"""
Character import API endpoints.
"""

from fastapi import APIRouter, status

from character_nexus.api.deps import Importer
from character_nexus.models.base import MutationResponse
from character_nexus.models.character import Character
from character_nexus.models.imports import BulkImportResult, ImportUrlRequest, JsonImportRequest

router = APIRouter()


@router.post(
    "/janitorai",
    response_model=MutationResponse[Character],
    status_code=status.HTTP_201_CREATED,
)
async def import_from_janitorai(
    request: ImportUrlRequest, importer: Importer
) -> MutationResponse[Character]:
    """Import a character from a JanitorAI character page."""
    character = await importer.import_from_url(request.url)
    return MutationResponse[Character](
        data=character,
        message=f'Character "{character.name}" imported successfully from JanitorAI',
    )


@router.post("/json", response_model=MutationResponse[BulkImportResult])
async def import_from_json(
    request: JsonImportRequest, importer: Importer
) -> MutationResponse[BulkImportResult]:
    """Import many characters from JSON documents. Each succeeds or fails on its own."""
    result = await importer.import_from_json(request.characters)
    total = len(result.success) + len(result.failed)
    return MutationResponse[BulkImportResult](
        data=result,
        message=f"Imported {len(result.success)} of {total} characters",
    )
