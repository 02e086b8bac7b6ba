"""
Public listing of approved startups: filters, pagination, featured entries,
directory stats and the values the filter controls offer.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import String, and_, cast, func, or_
from sqlalchemy.orm import Query, Session

import config
from ..models.startup import Startup

logger = logging.getLogger(__name__)


@dataclass
class StartupFilters:
    query: Optional[str] = None
    location: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    employees: Optional[str] = None

    @classmethod
    def from_params(cls, query: Optional[str] = None, location: Optional[str] = None,
                    tags: Optional[str] = None, year_from: Optional[int] = None,
                    year_to: Optional[int] = None, employees: Optional[str] = None) -> "StartupFilters":
        """Build filters from query-string values; tags arrive comma separated"""
        tag_list = [tag.strip() for tag in (tags or "").split(",") if tag.strip()]
        return cls(
            query=(query or "").strip() or None,
            location=(location or "").strip() or None,
            tags=tag_list,
            year_from=year_from,
            year_to=year_to,
            employees=(employees or "").strip() or None,
        )


def _contains(value: str) -> str:
    return f"%{value}%"


def _tags_overlap(db: Session, tags: List[str]):
    if db.get_bind().dialect.name == "postgresql":
        return Startup.tags.overlap(tags)
    # JSON-encoded lists elsewhere: match the quoted element
    return or_(*[cast(Startup.tags, String).like(f'%"{tag}"%') for tag in tags])


def build_listing_query(db: Session, filters: StartupFilters) -> Query:
    """Approved startups matching every given filter, newest first"""
    conditions = [Startup.is_approved.is_(True)]

    if filters.query:
        pattern = _contains(filters.query)
        conditions.append(or_(
            Startup.name.ilike(pattern),
            Startup.short_description.ilike(pattern),
            Startup.long_description.ilike(pattern),
        ))
    if filters.location:
        conditions.append(Startup.location.ilike(_contains(filters.location)))
    if filters.tags:
        conditions.append(_tags_overlap(db, filters.tags))
    if filters.year_from is not None:
        conditions.append(Startup.founded_year >= filters.year_from)
    if filters.year_to is not None:
        conditions.append(Startup.founded_year <= filters.year_to)
    if filters.employees:
        conditions.append(Startup.employee_range == filters.employees)

    return db.query(Startup).filter(and_(*conditions)).order_by(Startup.created_at.desc(), Startup.name)


def list_startups(db: Session, filters: StartupFilters, page: int = 1,
                  page_size: int = None) -> Tuple[List[Startup], int, int]:
    """
    One page of the filtered listing.

    Returns:
        (startups on the page, total matches, total pages)
    """
    page_size = page_size or config.PAGE_SIZE
    page = max(page, 1)
    query = build_listing_query(db, filters)
    total = query.count()
    startups = query.offset((page - 1) * page_size).limit(page_size).all()
    total_pages = math.ceil(total / page_size)
    logger.debug(f"Listing page {page}: {len(startups)} of {total} startups for {filters}")
    return startups, total, total_pages


def featured_startups(db: Session, limit: int = None) -> List[Startup]:
    return build_listing_query(db, StartupFilters()).limit(limit or config.FEATURED_LIMIT).all()


def _approved_tags(db: Session) -> List[str]:
    tags = set()
    for (startup_tags,) in db.query(Startup.tags).filter(Startup.is_approved.is_(True)).all():
        tags.update(startup_tags or [])
    return sorted(tags)


def directory_stats(db: Session) -> Dict[str, int]:
    approved = Startup.is_approved.is_(True)
    total = db.query(func.count(Startup.id)).filter(approved).scalar()
    cities = db.query(func.count(func.distinct(Startup.location))).filter(approved).scalar()
    return {
        "total_startups": total or 0,
        "total_cities": cities or 0,
        "total_industries": len(_approved_tags(db)),
    }


def filter_options(db: Session) -> Dict[str, object]:
    approved = Startup.is_approved.is_(True)
    locations = [
        location for (location,) in
        db.query(Startup.location).filter(approved).distinct().order_by(Startup.location).all()
    ]
    year_min, year_max = db.query(func.min(Startup.founded_year), func.max(Startup.founded_year)).filter(approved).one()
    current_year = datetime.now().year
    return {
        "locations": locations,
        "tags": _approved_tags(db),
        "year_min": year_min or current_year,
        "year_max": year_max or current_year,
    }
