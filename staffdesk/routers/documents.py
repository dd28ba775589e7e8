from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..crud.documents import (
    FileTooLarge,
    create_document,
    delete_document,
    document_path,
    get_document,
    list_documents,
    set_verification_status,
)
from ..db.session import get_db
from ..deps.auth import ensure_owner_or_admin, get_current_user, require_admin
from ..models.document import Document
from ..models.user import User
from ..schemas.common import envelope, listing
from ..schemas.document import DocumentOut, VerifyRequest

router = APIRouter(prefix="/documents", tags=["documents"])


def _document_to_schema(document: Document) -> DocumentOut:
    payload = DocumentOut.model_validate(document, from_attributes=True)
    return payload.model_copy(update={"upload_date": (document.created_at or "")[:10] or None})


def _load(db: Session, document_id: int, user: User) -> Document:
    document = get_document(db, document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    ensure_owner_or_admin(user, document.employee_id)
    return document


@router.get("")
def api_list_documents(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    documents = list_documents(db, employee_id=None if user.is_admin else user.id)
    return listing(_document_to_schema(d) for d in documents)


@router.get("/{document_id}")
def api_get_document(document_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return envelope(_document_to_schema(_load(db, document_id, user)))


@router.get("/{document_id}/file", response_class=FileResponse)
def api_download_document(document_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    document = _load(db, document_id, user)
    path = document_path(document)
    if not path.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stored file is missing")
    return FileResponse(path, media_type=document.content_type or "application/octet-stream", filename=document.filename)


@router.post("", status_code=201)
def api_upload_document(
    file: UploadFile = File(...),
    doc_type: str = Form(..., alias="type"),
    name: str | None = Form(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    filename = (file.filename or "").strip()
    if not filename:
        file.file.close()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Please upload a file")
    try:
        document = create_document(
            db,
            user,
            doc_type=doc_type,
            filename=filename,
            content_type=file.content_type,
            file_data=file.file,
            name=name,
        )
    except FileTooLarge as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    finally:
        file.file.close()
    return envelope(_document_to_schema(get_document(db, document.id) or document))


@router.put("/{document_id}/verify")
def api_verify_document(
    document_id: int,
    payload: VerifyRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    document = _load(db, document_id, admin)
    updated = set_verification_status(db, document, payload.status)
    return envelope(_document_to_schema(updated))


@router.delete("/{document_id}")
def api_delete_document(document_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    delete_document(db, _load(db, document_id, user))
    return envelope({})
