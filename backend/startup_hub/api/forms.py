"""
Multipart form dependencies shared by the submission and admin creation routes
"""
from typing import Any, Dict, Optional

from fastapi import File, Form, UploadFile

from ..services.submission_intake import Attachment


async def profile_form(
    name: Optional[str] = Form(None),
    short_description: Optional[str] = Form(None),
    long_description: Optional[str] = Form(None),
    founded_year: Optional[str] = Form(None),
    operating_status: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    tags: Optional[str] = Form(None, description="JSON array of sectors"),
    employee_range: Optional[str] = Form(None),
    website: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    social_links: Optional[str] = Form(None, description="JSON object of social network URLs"),
    funding_received: Optional[str] = Form(None),
    submitter_email: Optional[str] = Form(None),
) -> Dict[str, Any]:
    """Raw form values; parsing and validation happen in the service layer"""
    return {
        "name": name,
        "short_description": short_description,
        "long_description": long_description,
        "founded_year": founded_year,
        "operating_status": operating_status,
        "location": location,
        "tags": tags,
        "employee_range": employee_range,
        "website": website,
        "email": email,
        "phone": phone,
        "social_links": social_links,
        "funding_received": funding_received,
        "submitter_email": submitter_email,
    }


async def read_attachment(upload: Optional[UploadFile]) -> Optional[Attachment]:
    # Browsers send an empty part for an untouched file input
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return Attachment(filename=upload.filename, data=data, content_type=upload.content_type)


async def logo_file(logo: Optional[UploadFile] = File(None)) -> Optional[Attachment]:
    return await read_attachment(logo)


async def pitch_deck_file(pitch_deck: Optional[UploadFile] = File(None)) -> Optional[Attachment]:
    return await read_attachment(pitch_deck)
