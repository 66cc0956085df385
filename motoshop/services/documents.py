"""
Service documents for one motorcycle: upload, list, download, delete.

An upload is two platform calls. The file goes to object storage first,
then its metadata row is inserted. The row is built before the upload,
and when the insert fails for any reason the stored file is removed
again. That removal is best effort: if it fails too, the object is left
behind and only the log records it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging
import os
import time
import uuid

from motoshop.core.errors import ConfirmationRequired, FormValidationError, GatewayError
from motoshop.gateway.auth import AuthClient
from motoshop.gateway.storage import StorageClient
from motoshop.gateway.tables import OrderBy, TableStore
from motoshop.models.document import ServiceDocument
from motoshop.schemas.document import (
    DOCUMENT_FORM_DEFAULTS,
    DocumentsView,
    PendingFileView,
    ServiceDocumentRecord,
    ServiceDocumentResponse,
    StoredFile,
    format_file_size,
)
from motoshop.services.forms import FormState
from motoshop.services.garage import current_user_id
from motoshop.services.validation import DOCUMENT_RULES

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
FILE_TOO_LARGE = "File size must be less than 10MB"
NO_FILE_SELECTED = "Please select a file to upload"

DOCUMENT_ORDER = (
    OrderBy("service_date", descending=True, nulls_last=True),
    OrderBy("created_at", descending=True),
)


@dataclass
class PendingFile:
    name: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def storage_path(user_id: str, motorcycle_id: str, file_name: str) -> str:
    """``{user}/{motorcycle}/{millis}_{random}.{ext}``; the original extension is kept."""
    ext = os.path.splitext(file_name)[1].lower()
    return f"{user_id}/{motorcycle_id}/{int(time.time() * 1000)}_{uuid.uuid4().hex}{ext}"


class ServiceDocumentsController:
    def __init__(
        self,
        auth: AuthClient,
        tables: TableStore,
        storage: StorageClient,
        motorcycle_id: str,
        max_file_size: int = MAX_FILE_SIZE,
    ):
        self.auth = auth
        self.tables = tables
        self.storage = storage
        self.motorcycle_id = motorcycle_id
        self.max_file_size = max_file_size

        self.documents: List[ServiceDocumentResponse] = []
        self.pending_file: Optional[PendingFile] = None
        self.loading = True
        self.error: Optional[str] = None
        self.form = FormState(
            "document",
            DOCUMENT_FORM_DEFAULTS,
            DOCUMENT_RULES,
            submit_label="Upload Document",
            busy_label="Uploading...",
        )

    def mount(self) -> None:
        self.load_documents()

    def load_documents(self) -> None:
        self.loading = True
        try:
            rows = self.tables.select(
                ServiceDocument,
                eq={"motorcycle_id": self.motorcycle_id, "user_id": current_user_id(self.auth)},
                order_by=DOCUMENT_ORDER,
            )
            self.documents = [ServiceDocumentResponse.model_validate(row) for row in rows]
            self.error = None
        except GatewayError as e:
            logger.error(f"Error loading documents: {e.message}")
            self.error = e.message
        finally:
            self.loading = False

    @property
    def total_cost(self) -> float:
        return sum(doc.cost or 0 for doc in self.documents)

    def select_file(self, name: str, content: bytes, content_type: Optional[str] = None) -> bool:
        """Stage a file for upload. Oversized files are refused and leave the slot as it was."""
        if len(content) > self.max_file_size:
            self.error = FILE_TOO_LARGE
            return False
        self.pending_file = PendingFile(name=name, content=content, content_type=content_type)
        self.error = None
        return True

    def clear_file(self) -> None:
        self.pending_file = None

    def _store_and_record(self, values: Dict[str, Any]) -> Dict[str, Any]:
        pending = self.pending_file
        user_id = current_user_id(self.auth)
        path = storage_path(user_id, self.motorcycle_id, pending.name)
        stored = StoredFile(
            file_path=path,
            file_name=pending.name,
            file_size=pending.size,
            file_type=pending.content_type,
        )
        record = ServiceDocumentRecord.from_form(user_id, self.motorcycle_id, values, stored)

        self.storage.upload(path, pending.content, pending.content_type, upsert=False)
        try:
            return self.tables.insert(ServiceDocument, record.insert_values())
        except Exception:
            try:
                self.storage.remove([path])
            except GatewayError as cleanup_error:
                logger.error(f"Could not remove orphaned upload {path}: {cleanup_error.message}")
            raise

    def upload(self, now: Optional[datetime] = None) -> ServiceDocumentResponse:
        self.error = None
        if self.pending_file is None:
            self.error = NO_FILE_SELECTED
            raise FormValidationError({"file": NO_FILE_SELECTED})
        try:
            row = self.form.submit(self._store_and_record, on_success=self.load_documents, now=now)
        except FormValidationError as e:
            self.error = e.message
            raise
        except GatewayError as e:
            logger.error(f"Error uploading document: {e.message}")
            self.error = e.message
            raise
        self.pending_file = None
        return ServiceDocumentResponse.model_validate(row)

    def find(self, document_id: str) -> ServiceDocumentResponse:
        row = self.tables.get(
            ServiceDocument, document_id,
            eq={"motorcycle_id": self.motorcycle_id, "user_id": current_user_id(self.auth)},
        )
        return ServiceDocumentResponse.model_validate(row)

    def download(self, document_id: str) -> Tuple[ServiceDocumentResponse, bytes]:
        document = self.find(document_id)
        try:
            content = self.storage.download(document.file_path)
        except GatewayError as e:
            logger.error(f"Error downloading document: {e.message}")
            self.error = e.message
            raise
        return document, content

    def delete(self, document_id: str, confirmed: bool = False) -> None:
        """Remove the stored file, then its metadata row."""
        document = self.find(document_id)
        if not confirmed:
            raise ConfirmationRequired(f'Are you sure you want to delete "{document.title}"?')
        try:
            self.storage.remove([document.file_path])
            self.tables.delete(ServiceDocument, document.id, eq={"user_id": current_user_id(self.auth)})
        except GatewayError as e:
            logger.error(f"Error deleting document: {e.message}")
            self.error = e.message
            raise
        self.load_documents()

    def render(self) -> DocumentsView:
        pending = None
        if self.pending_file is not None:
            pending = PendingFileView(
                name=self.pending_file.name,
                size=self.pending_file.size,
                size_label=format_file_size(self.pending_file.size),
                content_type=self.pending_file.content_type,
            )
        return DocumentsView(
            motorcycle_id=self.motorcycle_id,
            documents=self.documents,
            pending_file=pending,
            total_cost=self.total_cost,
            form=self.form.render(),
            loading=self.loading,
            error=self.error,
        )
