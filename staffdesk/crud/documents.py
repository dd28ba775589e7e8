"""CRUD helpers for employee documents and their files on disk."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO
from uuid import uuid4

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..core.config import settings
from ..models.document import VERIFICATION_STATUSES, Document
from ..models.user import User

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class FileTooLarge(ValueError):
    """Raised when an upload exceeds ``UPLOAD_MAX_BYTES``."""


def _utcnow() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def _employee_dir(employee_id: int, *, ensure: bool = False) -> Path:
    path = settings.documents_dir / str(employee_id)
    if ensure:
        path.mkdir(parents=True, exist_ok=True)
    return path


def document_path(document: Document) -> Path:
    return _employee_dir(document.employee_id) / document.storage_filename


def list_documents(db: Session, employee_id: int | None = None):
    stmt = select(Document).options(selectinload(Document.employee)).order_by(desc(Document.created_at), desc(Document.id))
    if employee_id is not None:
        stmt = stmt.where(Document.employee_id == employee_id)
    return db.execute(stmt).scalars().all()


def get_document(db: Session, document_id: int) -> Document | None:
    stmt = select(Document).options(selectinload(Document.employee)).where(Document.id == document_id)
    return db.execute(stmt).scalars().first()


def _write_limited(file_data: IO[bytes], dest: Path, limit: int) -> int:
    written = 0
    file_data.seek(0)
    with dest.open("wb") as buffer:
        while True:
            chunk = file_data.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if limit and written > limit:
                buffer.close()
                dest.unlink(missing_ok=True)
                raise FileTooLarge(f"File exceeds the {limit} byte upload limit")
            buffer.write(chunk)
    return written


def create_document(
    db: Session,
    employee: User,
    *,
    doc_type: str,
    filename: str,
    content_type: str | None,
    file_data: IO[bytes],
    name: str | None = None,
) -> Document:
    doc_type = (doc_type or "").strip()
    if not doc_type:
        raise ValueError("Document type is required")
    safe_name = Path(filename or "").name
    if not safe_name:
        raise ValueError("A file upload is required")
    ext = Path(safe_name).suffix
    storage_name = f"{uuid4().hex}{ext}"
    dest = _employee_dir(employee.id, ensure=True) / storage_name
    size = _write_limited(file_data, dest, settings.UPLOAD_MAX_BYTES)
    document = Document(
        employee_id=employee.id,
        name=(name or "").strip() or safe_name,
        type=doc_type,
        filename=safe_name,
        content_type=content_type or "application/octet-stream",
        size=size,
        storage_filename=storage_name,
        verification_status="pending",
        created_at=_utcnow(),
    )
    db.add(document)
    db.commit()
    db.refresh(document)
    logger.info("Stored document %s for employee %s (%d bytes)", document.id, employee.id, size)
    return document


def set_verification_status(db: Session, document: Document, status: str) -> Document:
    if status not in VERIFICATION_STATUSES:
        raise ValueError(f"Unknown verification status: {status}")
    document.verification_status = status
    document.verified_at = _utcnow() if status != "pending" else None
    db.commit()
    db.refresh(document)
    return document


def delete_document(db: Session, document: Document) -> None:
    path = document_path(document)
    db.delete(document)
    db.commit()
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove stored file %s", path)
