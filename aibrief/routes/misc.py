"""
Miscellaneous routes: health check and the brief archive.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from ..config import config, get_archive
from ..schemas import ArchivedBriefResponse
from ..store import BriefArchive

router = APIRouter(tags=["misc"])


# ─────────────────────────────────────────────────────────────
# Health Check
# ─────────────────────────────────────────────────────────────

@router.get("/health")
async def health_check() -> dict:
    """API health check."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "api_key_configured": config.has_llm_key(),
        "model": config.LLM_MODEL,
    }


# ─────────────────────────────────────────────────────────────
# Archive
# ─────────────────────────────────────────────────────────────

@router.get("/archive")
async def list_archive(
    archive: Annotated[BriefArchive, Depends(get_archive)],
    limit: int = Query(default=30, ge=1, le=30),
) -> list[ArchivedBriefResponse]:
    """Archived briefs, newest first."""
    return [ArchivedBriefResponse.from_archived(e) for e in archive.load()[:limit]]


@router.get("/archive/{entry_id}")
async def get_archived_brief(
    entry_id: str,
    archive: Annotated[BriefArchive, Depends(get_archive)],
) -> ArchivedBriefResponse:
    """Get a single archived brief."""
    entry = archive.get(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Archived brief not found")
    return ArchivedBriefResponse.from_archived(entry)


@router.delete("/archive/{entry_id}")
async def delete_archived_brief(
    entry_id: str,
    archive: Annotated[BriefArchive, Depends(get_archive)],
) -> dict:
    """Delete an archived brief."""
    if not archive.delete(entry_id):
        raise HTTPException(status_code=404, detail="Archived brief not found")
    return {"success": True}
