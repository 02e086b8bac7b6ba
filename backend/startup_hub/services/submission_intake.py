"""
Public submission intake: parse the multipart form, check attachments, upload
them and store a pending submission.
"""
import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from ..models.submission import Submission, SubmissionStatus
from ..schemas.submission import SubmissionCreate
from ..schemas.validation import validate
from ..utils.constants import SUBMISSION_PREFIX, SUPPORTED_MIME_TYPES
from ..utils.s3_storage import StorageFactory, open_storage
from ..utils.slug import slugify
from .exceptions import UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)

# Form fields carrying JSON-encoded values
JSON_FORM_FIELDS = {"tags": list, "social_links": dict}


@dataclass
class Attachment:
    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lower()

    @property
    def size(self) -> int:
        return len(self.data)


def parse_profile_form(form: Dict[str, Any], schema: Type[BaseModel] = SubmissionCreate) -> BaseModel:
    """
    Decode JSON-encoded form fields and validate the result against schema.

    Raises:
        ValidationFailed: malformed JSON or schema violations, with field errors
    """
    data = {key: value for key, value in form.items() if value is not None}
    for field, expected_type in JSON_FORM_FIELDS.items():
        raw = data.get(field)
        if not isinstance(raw, str):
            continue
        try:
            decoded = json.loads(raw) if raw.strip() else expected_type()
        except json.JSONDecodeError:
            raise ValidationFailed("Invalid data format", {field: ["Malformed JSON"]})
        if not isinstance(decoded, expected_type):
            raise ValidationFailed("Invalid data format", {field: [f"Expected a JSON {expected_type.__name__}"]})
        data[field] = decoded

    result = validate(schema, data)
    if not result.ok:
        logger.info(f"Rejected form with errors in {sorted(result.errors)}")
        raise ValidationFailed("Validation failed", result.errors)
    return result.value


def profile_values(profile: BaseModel, **dump_options) -> Dict[str, Any]:
    """Column values from a validated profile; empty social links are dropped"""
    values = profile.model_dump(mode="json", **dump_options)
    if values.get("social_links") is not None:
        values["social_links"] = {network: url for network, url in values["social_links"].items() if url}
    return values


def check_attachment(attachment: Optional[Attachment], field: str,
                     allowed_extensions: List[str], max_size: int) -> None:
    if attachment is None:
        return
    if attachment.extension not in allowed_extensions:
        raise ValidationFailed(
            f"Unsupported file type for {field}",
            {field: [f"Allowed types: {', '.join(allowed_extensions)}"]},
        )
    if attachment.size > max_size:
        raise ValidationFailed(
            f"File too large for {field}",
            {field: [f"Maximum size is {max_size // (1024 * 1024)}MB"]},
        )


def check_attachments(logo: Optional[Attachment], pitch_deck: Optional[Attachment]) -> None:
    check_attachment(logo, "logo", config.LOGO_EXTENSIONS, config.MAX_LOGO_SIZE)
    check_attachment(pitch_deck, "pitch_deck", config.PITCH_DECK_EXTENSIONS, config.MAX_PITCH_DECK_SIZE)


def attachment_keys(prefix: str, slug: str, logo: Optional[Attachment],
                    timestamp_ms: Optional[int] = None) -> Tuple[Optional[str], str]:
    """Storage keys for a logo and a pitch deck uploaded together"""
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    logo_key = f"{prefix}/{timestamp_ms}-{slug}{logo.extension}" if logo else None
    pitch_deck_key = f"{prefix}/{timestamp_ms}-{slug}-pitch.pdf"
    return logo_key, pitch_deck_key


def upload_attachments(slug: str, prefix: str,
                       logo: Optional[Attachment], pitch_deck: Optional[Attachment],
                       logo_storage: Optional[StorageFactory],
                       pitch_deck_storage: Optional[StorageFactory]) -> Tuple[Optional[str], Optional[str]]:
    """
    Upload the attachments that are present. A storage is only opened when
    there is something to put in it.

    Returns:
        (public logo URL, private pitch deck storage key)

    Raises:
        UpstreamError: a storage was unreachable or an upload failed; nothing is rolled back
    """
    logo_key, pitch_deck_key = attachment_keys(prefix, slug, logo)
    logo_url = None
    stored_pitch_deck = None

    if logo:
        result = open_storage(logo_storage, "Error uploading logo").upload_bytes(
            logo.data, logo_key,
            logo.content_type or SUPPORTED_MIME_TYPES.get(logo.extension, "application/octet-stream"),
            metadata={"original_filename": logo.filename},
        )
        if not result.get("success"):
            logger.error(f"Logo upload failed for {slug}: {result.get('error')}")
            raise UpstreamError("Error uploading logo")
        logo_url = result["s3_url"]

    if pitch_deck:
        result = open_storage(pitch_deck_storage, "Error uploading pitch deck").upload_bytes(
            pitch_deck.data, pitch_deck_key, "application/pdf",
            metadata={"original_filename": pitch_deck.filename},
        )
        if not result.get("success"):
            logger.error(f"Pitch deck upload failed for {slug}: {result.get('error')}")
            raise UpstreamError("Error uploading pitch deck")
        stored_pitch_deck = result["s3_key"]

    return logo_url, stored_pitch_deck


def create_submission(db: Session, form: Dict[str, Any],
                      logo: Optional[Attachment] = None,
                      pitch_deck: Optional[Attachment] = None,
                      logo_storage: Optional[StorageFactory] = None,
                      pitch_deck_storage: Optional[StorageFactory] = None) -> Submission:
    """Validate, upload and store a new pending submission"""
    submission_data = parse_profile_form(form, SubmissionCreate)
    check_attachments(logo, pitch_deck)

    slug = slugify(submission_data.name)
    logo_url, pitch_deck_key = upload_attachments(
        slug, SUBMISSION_PREFIX, logo, pitch_deck, logo_storage, pitch_deck_storage
    )

    submission = Submission(
        **profile_values(submission_data),
        slug=slug,
        logo_url=logo_url,
        pitch_deck_url=pitch_deck_key,
        status=SubmissionStatus.PENDING.value,
    )
    try:
        db.add(submission)
        db.commit()
        db.refresh(submission)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving submission for {slug}: {e}")
        raise UpstreamError("Error saving submission")

    logger.info(f"New submission {submission.id} for '{submission.name}' from {submission.submitter_email}")
    return submission
