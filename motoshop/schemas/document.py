from datetime import date, datetime
from typing import Any, Dict, List, Literal, Mapping, Optional
from pydantic import BaseModel, Field

from motoshop.services.validation import is_blank, parse_date, parse_int, parse_number

DocumentType = Literal["photo", "invoice", "receipt", "report", "warranty", "other"]

DOCUMENT_TYPE_LABELS: Dict[str, str] = {
    "photo": "Photo",
    "invoice": "Invoice",
    "receipt": "Receipt",
    "report": "Service Report",
    "warranty": "Warranty",
    "other": "Other",
}

SERVICE_TYPE_LABELS: Dict[str, str] = {
    "oil_change": "Oil Change",
    "tire_replacement": "Tire Replacement",
    "brake_service": "Brake Service",
    "chain_maintenance": "Chain Maintenance",
    "engine_repair": "Engine Repair",
    "electrical": "Electrical",
    "bodywork": "Bodywork",
    "general_maintenance": "General Maintenance",
    "inspection": "Inspection",
    "custom_modification": "Custom Modification",
    "other": "Other",
}

DOCUMENT_FORM_DEFAULTS: Dict[str, Any] = {
    "title": "",
    "description": "",
    "document_type": "",
    "service_type": "",
    "service_date": "",
    "service_mileage": "",
    "service_provider": "",
    "cost": "",
    "currency": "EUR",
    "tags": "",
}


class DocumentForm(BaseModel):
    """Raw upload form input. ``tags`` is a comma separated list."""
    title: str = ""
    description: str = ""
    document_type: Literal["photo", "invoice", "receipt", "report", "warranty", "other", ""] = ""
    service_type: str = ""
    service_date: str = ""
    service_mileage: str = ""
    service_provider: str = ""
    cost: str = ""
    currency: str = "EUR"
    tags: str = ""


def parse_tags(raw: str) -> List[str]:
    return [tag.strip() for tag in (raw or "").split(",") if tag.strip()]


class StoredFile(BaseModel):
    """Reference to the uploaded object."""
    file_path: str
    file_name: str
    file_size: int
    file_type: Optional[str] = None


class ServiceDocumentRecord(BaseModel):
    """Typed row for service_documents; optional metadata only when given."""
    user_id: str
    motorcycle_id: str
    document_type: DocumentType
    title: str
    currency: str
    file_path: str
    file_name: str
    file_size: int
    is_favorite: bool = False
    file_type: Optional[str] = None
    description: Optional[str] = None
    service_type: Optional[str] = None
    service_date: Optional[date] = None
    service_mileage: Optional[int] = None
    service_provider: Optional[str] = None
    cost: Optional[float] = None
    tags: Optional[List[str]] = None

    @classmethod
    def from_form(cls, user_id: str, motorcycle_id: str, values: Mapping[str, Any],
                  stored: StoredFile) -> "ServiceDocumentRecord":
        fields: Dict[str, Any] = {
            "user_id": user_id,
            "motorcycle_id": motorcycle_id,
            "document_type": values["document_type"],
            "title": values["title"].strip(),
            "currency": values.get("currency") or "EUR",
            "file_path": stored.file_path,
            "file_name": stored.file_name,
            "file_size": stored.file_size,
            "is_favorite": False,
        }
        if stored.file_type:
            fields["file_type"] = stored.file_type
        for name in ("description", "service_provider"):
            if not is_blank(values.get(name)):
                fields[name] = values[name].strip()
        if values.get("service_type"):
            fields["service_type"] = values["service_type"]
        if not is_blank(values.get("service_date")):
            fields["service_date"] = parse_date(values["service_date"])
        if not is_blank(values.get("service_mileage")):
            fields["service_mileage"] = parse_int(values["service_mileage"])
        if not is_blank(values.get("cost")):
            fields["cost"] = parse_number(values["cost"])
        tags = parse_tags(values.get("tags", ""))
        if tags:
            fields["tags"] = tags
        return cls(**fields)

    def insert_values(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return "Unknown size"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class ServiceDocumentResponse(BaseModel):
    """Schema for a stored service document."""
    id: str = Field(..., description="Document ID")
    user_id: str
    motorcycle_id: str
    document_type: str
    title: str
    description: Optional[str] = None
    service_type: Optional[str] = None
    service_date: Optional[date] = None
    service_mileage: Optional[int] = None
    service_provider: Optional[str] = None
    cost: Optional[float] = None
    currency: str = "EUR"
    file_path: str = Field(..., description="Object key in the storage bucket")
    file_name: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    tags: Optional[List[str]] = None
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @property
    def size_label(self) -> str:
        return format_file_size(self.file_size)


class PendingFileView(BaseModel):
    name: str
    size: int
    size_label: str
    content_type: Optional[str] = None


class DocumentsView(BaseModel):
    """Everything the service documents screen renders."""
    motorcycle_id: str
    documents: List[ServiceDocumentResponse]
    pending_file: Optional[PendingFileView] = None
    total_cost: float
    form: Dict[str, Any]
    document_types: Dict[str, str] = DOCUMENT_TYPE_LABELS
    service_types: Dict[str, str] = SERVICE_TYPE_LABELS
    loading: bool
    error: Optional[str] = None
