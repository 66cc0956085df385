from datetime import datetime

import pytest

from conftest import motorcycle_values

from motoshop.core.errors import ConfirmationRequired, FormValidationError, GatewayError
from motoshop.models.document import ServiceDocument
from motoshop.models.motorcycle import BikerMotorcycle
from motoshop.schemas.motorcycle import MotorcycleRecord
from motoshop.services.documents import (
    FILE_TOO_LARGE,
    NO_FILE_SELECTED,
    ServiceDocumentsController,
    storage_path,
)

NOW = datetime(2026, 5, 1, 12, 0)


@pytest.fixture
def motorcycle(signed_in, tables, rider):
    record = MotorcycleRecord.from_form(motorcycle_values())
    return tables.insert(BikerMotorcycle, {**record.insert_values(), "user_id": rider["id"]})


@pytest.fixture
def documents(signed_in, tables, motorcycle):
    controller = ServiceDocumentsController(
        signed_in.auth, tables, signed_in.storage, motorcycle["id"], max_file_size=1024
    )
    controller.mount()
    return controller


def fill(controller, title="Annual service", **extra):
    controller.form.edit("title", title)
    controller.form.edit("document_type", "invoice")
    for field, value in extra.items():
        controller.form.edit(field, value)


def test_oversized_file_is_refused_and_keeps_previous_selection(documents):
    assert documents.select_file("invoice.pdf", b"x" * 10) is True
    assert documents.select_file("scan.tiff", b"x" * 1025) is False
    assert documents.error == FILE_TOO_LARGE
    assert documents.pending_file.name == "invoice.pdf"


def test_upload_without_a_file_is_a_validation_error(documents, platform):
    fill(documents)
    with pytest.raises(FormValidationError):
        documents.upload(NOW)
    assert documents.error == NO_FILE_SELECTED
    assert platform.objects == {}


def test_upload_stores_file_then_records_metadata(documents, platform, rider, motorcycle):
    fill(documents, cost="120.50", service_date="2026-04-20", tags="oil, filter, ")
    documents.select_file("Invoice.PDF", b"%PDF-1.7 data", "application/pdf")

    document = documents.upload(NOW)

    assert document.file_path.startswith(f"{rider['id']}/{motorcycle['id']}/")
    assert document.file_path.endswith(".pdf")
    assert platform.objects[document.file_path] == b"%PDF-1.7 data"
    assert document.file_name == "Invoice.PDF"
    assert document.file_size == len(b"%PDF-1.7 data")
    assert document.tags == ["oil", "filter"]
    assert [d.id for d in documents.documents] == [document.id]
    assert documents.total_cost == 120.5
    assert documents.pending_file is None
    assert documents.form.values["title"] == ""


def test_failed_insert_removes_the_stored_file(documents, platform, tables, monkeypatch):
    fill(documents)
    documents.select_file("photo.jpg", b"jpeg", "image/jpeg")

    def failing_insert(model, values):
        raise GatewayError("new row violates row-level security policy")

    monkeypatch.setattr(tables, "insert", failing_insert)
    with pytest.raises(GatewayError):
        documents.upload(NOW)

    assert platform.objects == {}
    assert documents.error == "new row violates row-level security policy"
    assert documents.form.values["title"] == "Annual service"
    assert documents.pending_file is not None


def test_failed_cleanup_is_logged_and_the_insert_error_surfaces(documents, platform, tables, monkeypatch, caplog):
    fill(documents)
    documents.select_file("photo.jpg", b"jpeg", "image/jpeg")
    platform.fail_removals = True

    def failing_insert(model, values):
        raise GatewayError("insert failed")

    monkeypatch.setattr(tables, "insert", failing_insert)

    with pytest.raises(GatewayError) as exc_info:
        documents.upload(NOW)

    assert exc_info.value.message == "insert failed"
    assert len(platform.objects) == 1
    assert "Could not remove orphaned upload" in caplog.text


def test_failed_storage_upload_inserts_nothing(documents, platform, tables, motorcycle):
    fill(documents)
    documents.select_file("photo.jpg", b"jpeg", "image/jpeg")
    platform.fail_uploads = True

    with pytest.raises(GatewayError):
        documents.upload(NOW)
    assert tables.select(ServiceDocument, eq={"motorcycle_id": motorcycle["id"]}) == []


def test_download_returns_the_stored_bytes(documents):
    fill(documents)
    documents.select_file("report.txt", b"all good", "text/plain")
    uploaded = documents.upload(NOW)

    document, content = documents.download(uploaded.id)
    assert document.file_name == "report.txt"
    assert content == b"all good"


def test_delete_needs_confirmation_then_removes_file_and_row(documents, platform):
    fill(documents)
    documents.select_file("report.txt", b"all good", "text/plain")
    uploaded = documents.upload(NOW)

    with pytest.raises(ConfirmationRequired) as exc_info:
        documents.delete(uploaded.id)
    assert exc_info.value.prompt == 'Are you sure you want to delete "Annual service"?'
    assert platform.objects

    documents.delete(uploaded.id, confirmed=True)
    assert platform.objects == {}
    assert documents.documents == []


def test_documents_are_listed_latest_service_first(documents):
    for title, service_date in (("Old", "2025-01-10"), ("Undated", ""), ("Recent", "2026-03-01")):
        fill(documents, title=title, service_date=service_date)
        documents.select_file(f"{title}.txt", b"x")
        documents.upload(NOW)
    assert [d.title for d in documents.documents] == ["Recent", "Old", "Undated"]


def test_storage_path_keeps_the_extension_only_when_there_is_one():
    assert storage_path("u", "m", "scan.JPG").endswith(".jpg")
    path = storage_path("u", "m", "README")
    assert path.startswith("u/m/")
    assert "." not in path.rsplit("/", 1)[1]


def test_unknown_document_type_is_refused_before_anything_is_stored(
    documents, platform, tables, motorcycle
):
    fill(documents)
    documents.form.edit("document_type", "brochure")
    documents.select_file("photo.jpg", b"jpeg", "image/jpeg")

    with pytest.raises(FormValidationError) as exc_info:
        documents.upload(NOW)

    assert exc_info.value.field_errors == {"document_type": "Please select a valid document type"}
    assert platform.objects == {}
    assert tables.select(ServiceDocument, eq={"motorcycle_id": motorcycle["id"]}) == []


def test_unexpected_insert_failure_still_removes_the_stored_file(documents, platform, tables, monkeypatch):
    fill(documents)
    documents.select_file("photo.jpg", b"jpeg", "image/jpeg")

    def broken_insert(model, values):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(tables, "insert", broken_insert)
    with pytest.raises(RuntimeError):
        documents.upload(NOW)

    assert platform.objects == {}
    assert documents.form.status.value == "editing"
