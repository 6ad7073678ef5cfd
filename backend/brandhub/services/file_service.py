# Overview: Media library entries (images, PDFs, videos) owned by a user and a brand.

from __future__ import annotations

from flask import current_app

from ..attachments import parse_attachments
from ..errors import NotFoundError, ReferentialError, ValidationError
from ..extensions import db
from ..models import Brand, File, User
from ..models.content import FILE_TYPES
from ..validation import ModelValidationPolicy, validate_payload
from .concurrency import store_transaction
from brandhub.time_utils import utcnow

FILE_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "type", "size_bytes", "mime_type", "url", "thumbnail_url",
        "file_metadata", "folder", "tags", "description",
    },
    required_on_create={"name", "type", "size_bytes", "mime_type", "url"},
)

FILE_UPDATE_FIELDS = {"name", "thumbnail_url", "file_metadata", "folder", "tags", "description"}

_SIZE_LIMIT_KEYS = {
    "image": "MAX_IMAGE_BYTES",
    "pdf": "MAX_PDF_BYTES",
    "video": "MAX_VIDEO_BYTES",
}


def _payload_keys(payload: dict) -> dict:
    # Clients send "metadata"; the mapped attribute is file_metadata
    if isinstance(payload, dict) and "metadata" in payload:
        payload = dict(payload)
        payload["file_metadata"] = payload.pop("metadata")
    return payload


def mime_matches_type(file_type: str, mime_type: str) -> bool:
    mime_type = (mime_type or "").lower()
    if file_type == "image":
        return mime_type.startswith("image/")
    if file_type == "video":
        return mime_type.startswith("video/")
    if file_type == "pdf":
        return mime_type == "application/pdf"
    return False


def enforce_rules_file(patch: dict) -> None:
    file_type = patch.get("type")
    if file_type is not None:
        file_type = file_type.lower()
        patch["type"] = file_type
        if file_type not in FILE_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(FILE_TYPES)}")

    if "mime_type" in patch and file_type is not None:
        patch["mime_type"] = patch["mime_type"].lower()
        if not mime_matches_type(file_type, patch["mime_type"]):
            raise ValidationError(f"mime_type {patch['mime_type']} does not match file type {file_type}")

    size = patch.get("size_bytes")
    if size is not None:
        if size <= 0:
            raise ValidationError("size_bytes must be > 0")
        limit = current_app.config.get(_SIZE_LIMIT_KEYS.get(file_type, ""), None)
        if limit is not None and size > limit:
            raise ValidationError(f"{file_type} files may not exceed {limit} bytes")


def register_file(user_id: int, brand_id: int, patch: dict) -> File:
    """
    Record an uploaded object. The binary is already in object storage;
    only its URL and descriptive fields are kept.
    """
    clean = validate_payload(model=File, payload=_payload_keys(patch), policy=FILE_POLICY, partial=False)
    enforce_rules_file(clean)
    parse_attachments(clean)

    if db.session.get(User, user_id) is None:
        raise ReferentialError("Owning user does not exist")
    if db.session.get(Brand, brand_id) is None:
        raise ReferentialError("Owning brand does not exist")

    record = File(user_id=user_id, brand_id=brand_id, usage_count=0, **clean)
    with store_transaction() as session:
        session.add(record)
    return record


def get_file(file_id: int) -> File:
    record = db.session.get(File, file_id)
    if record is None:
        raise NotFoundError("File not found")
    return record


def list_files(brand_id: int, file_type: str | None = None, folder: str | None = None) -> list[File]:
    query = db.session.query(File).filter(File.brand_id == brand_id)
    if file_type is not None:
        if file_type not in FILE_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(FILE_TYPES)}")
        query = query.filter(File.type == file_type)
    if folder is not None:
        query = query.filter(File.folder == folder)
    return query.order_by(File.created_at.desc(), File.id.desc()).all()


def record_file_use(file_id: int) -> File:
    """
    Count one use of a file (e.g. picked from the media library).

    The counter is incremented by the store in a single UPDATE so concurrent
    uses are never lost.
    """
    with store_transaction():
        updated = (
            db.session.query(File)
            .filter(File.id == file_id)
            .update(
                {File.usage_count: File.usage_count + 1, File.last_used_at: utcnow()},
                synchronize_session=False,
            )
        )
        if updated == 0:
            raise NotFoundError("File not found")

    record = get_file(file_id)
    db.session.refresh(record)
    return record


def update_file(file_id: int, patch: dict) -> File:
    record = get_file(file_id)
    payload = _payload_keys(patch)
    if isinstance(payload, dict):
        for k in payload:
            if k not in FILE_UPDATE_FIELDS:
                raise ValidationError(f"Field not allowed: {k}")
    clean = validate_payload(model=File, payload=payload, policy=FILE_POLICY, partial=True)
    parse_attachments(clean)
    with store_transaction():
        for k, v in clean.items():
            setattr(record, k, v)
    return record


def delete_file(file_id: int) -> None:
    record = get_file(file_id)
    with store_transaction() as session:
        session.delete(record)
