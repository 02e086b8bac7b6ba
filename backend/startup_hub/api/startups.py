from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from ..auth.security import AuthContext, get_auth_context
from ..database.base import get_db
from ..schemas.startup import (
    ClaimResponse,
    FilterOptions,
    StartupDetail,
    StartupListResponse,
    StartupStats,
    StartupSummary,
)
from ..services import listing, ownership, startups as startup_service
from ..services.listing import StartupFilters
from ..services.visibility import apply_visibility
from ..utils.s3_storage import StorageFactory, pitch_deck_storage_factory
import config

router = APIRouter()

# Get logger for this module
logger = logging.getLogger(__name__)


@router.get("", response_model=StartupListResponse)
def list_startups(
    query: Optional[str] = Query(None, description="Text search over name and descriptions"),
    location: Optional[str] = Query(None),
    tags: Optional[str] = Query(None, description="Comma separated sectors; any match"),
    year_from: Optional[int] = Query(None, alias="yearFrom"),
    year_to: Optional[int] = Query(None, alias="yearTo"),
    employees: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    filters = StartupFilters.from_params(query, location, tags, year_from, year_to, employees)
    results, total, total_pages = listing.list_startups(db, filters, page)
    return {
        "startups": results,
        "total": total,
        "page": page,
        "page_size": config.PAGE_SIZE,
        "total_pages": total_pages,
    }


@router.get("/featured", response_model=List[StartupSummary])
def featured_startups(db: Session = Depends(get_db)):
    return listing.featured_startups(db)


@router.get("/stats", response_model=StartupStats)
def directory_stats(db: Session = Depends(get_db)):
    return listing.directory_stats(db)


@router.get("/filter-options", response_model=FilterOptions)
def filter_options(db: Session = Depends(get_db)):
    return listing.filter_options(db)


@router.get("/{slug}")
def get_startup(
    slug: str,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> Dict[str, Any]:
    """Startup detail. Contact email, phone and pitch deck are for investors only."""
    startup = startup_service.get_published_by_slug(db, slug)
    record = StartupDetail.model_validate(startup).model_dump(mode="json")
    return apply_visibility(record, auth.role)


@router.get("/{startup_id}/pitch-deck")
def download_pitch_deck(
    startup_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
    storage: StorageFactory = Depends(pitch_deck_storage_factory),
):
    url = startup_service.pitch_deck_url(db, auth, startup_id, storage)
    return RedirectResponse(url=url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.patch("/{startup_id}", response_model=StartupDetail)
def update_startup(
    startup_id: UUID,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    """Edit by the startup's approved owner"""
    return startup_service.update_owned_startup(db, auth, startup_id, changes)


@router.post("/{startup_id}/claim", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def claim_startup(
    startup_id: UUID,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
):
    return ownership.create_claim(db, auth, startup_id)
