from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status

from motoshop.api.deps import get_workspace
from motoshop.schemas.document import DocumentForm, DocumentsView, ServiceDocumentResponse
from motoshop.services.documents import ServiceDocumentsController
from motoshop.services.router import Screen
from motoshop.services.workspace import Workspace

router = APIRouter()


def content_disposition(file_name: str) -> str:
    """
    Attachment header for ``file_name``. Names that are not plain ASCII go
    in the RFC 5987 ``filename*`` parameter with an ASCII fallback.
    """
    quoted = quote(file_name)
    if quoted == file_name:
        return f'attachment; filename="{file_name}"'
    fallback = "".join(c for c in file_name if c.isascii() and c.isprintable() and c not in '"\\')
    return f"attachment; filename=\"{fallback or 'download'}\"; filename*=utf-8''{quoted}"


def get_documents(workspace: Workspace = Depends(get_workspace)) -> ServiceDocumentsController:
    return workspace.require(Screen.SERVICE_DOCUMENTS)


@router.get("/", response_model=DocumentsView)
def list_documents(
    documents: ServiceDocumentsController = Depends(get_documents),
) -> DocumentsView:
    """Documents of the selected motorcycle, latest service first."""
    return documents.render()


@router.post("/file", response_model=DocumentsView)
def select_file(
    file: UploadFile = File(...),
    documents: ServiceDocumentsController = Depends(get_documents),
) -> DocumentsView:
    """Stage a file for the next upload. Files over the size limit are refused."""
    content = file.file.read()
    if not documents.select_file(file.filename or "upload", content, file.content_type):
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=documents.error
        )
    return documents.render()


@router.delete("/file", response_model=DocumentsView)
def clear_file(documents: ServiceDocumentsController = Depends(get_documents)) -> DocumentsView:
    documents.clear_file()
    return documents.render()


@router.post("/", response_model=ServiceDocumentResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    form: Optional[DocumentForm] = None,
    documents: ServiceDocumentsController = Depends(get_documents),
) -> ServiceDocumentResponse:
    """
    Upload the staged file and record its metadata.

    The file is stored first and the row inserted second; when the insert
    fails the stored file is removed again.
    """
    if form is not None:
        documents.form.update(form.model_dump(exclude_unset=True))
    return documents.upload()


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    documents: ServiceDocumentsController = Depends(get_documents),
) -> Response:
    document, content = documents.download(document_id)
    return Response(
        content=content,
        media_type=document.file_type or "application/octet-stream",
        headers={"Content-Disposition": content_disposition(document.file_name)},
    )


@router.delete("/{document_id}", response_model=DocumentsView)
def delete_document(
    document_id: str,
    confirm: bool = False,
    documents: ServiceDocumentsController = Depends(get_documents),
) -> DocumentsView:
    """Remove the stored file, then its row. Needs ``confirm=true``."""
    documents.delete(document_id, confirmed=confirm)
    return documents.render()
