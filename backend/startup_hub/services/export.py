"""
CSV export of the startups table for admins
"""
import csv
import io
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from ..auth.security import AuthContext, UserRole
from ..models.startup import Startup

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "ID",
    "Name",
    "Slug",
    "Short Description",
    "Long Description",
    "Logo URL",
    "Founded Year",
    "Status",
    "Location",
    "Tags",
    "Employees",
    "Website",
    "Email",
    "Phone",
    "Funding Received",
    "Pitch Deck",
    "Approved",
    "Created By",
    "Created At",
    "Updated At",
]


def export_filename(today: Optional[date] = None) -> str:
    return f"startups_{(today or date.today()).isoformat()}.csv"


def _text(value) -> str:
    return "" if value is None else str(value)


def startup_row(startup: Startup) -> list:
    return [
        _text(startup.id),
        _text(startup.name),
        _text(startup.slug),
        _text(startup.short_description),
        _text(startup.long_description),
        _text(startup.logo_url),
        startup.founded_year if startup.founded_year is not None else "",
        _text(startup.operating_status),
        _text(startup.location),
        "; ".join(startup.tags or []),
        _text(startup.employee_range),
        _text(startup.website),
        _text(startup.email),
        _text(startup.phone),
        _text(startup.funding_received),
        _text(startup.pitch_deck_url),
        "Yes" if startup.is_approved else "No",
        _text(startup.created_by),
        startup.created_at.isoformat() if startup.created_at else "",
        startup.updated_at.isoformat() if startup.updated_at else "",
    ]


def render_csv(startups: List[Startup]) -> str:
    """Text fields are quoted, embedded quotes doubled"""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for startup in startups:
        writer.writerow(startup_row(startup))
    return output.getvalue()


def export_startups_csv(db: Session, auth: AuthContext) -> str:
    auth.require_role(UserRole.ADMIN)
    startups = db.query(Startup).order_by(Startup.created_at.desc(), Startup.name).all()
    logger.info(f"Admin {auth.user_id} exported {len(startups)} startups")
    return render_csv(startups)
