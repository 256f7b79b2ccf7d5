import pytest
from unittest.mock import patch

from doclens import documents
from doclens.errors import DocumentNotFound, InvalidDocument
from doclens.files import save_file
from doclens.models import DocumentCreate, DocumentUpdate, SaveFileRequest

class TestCreate:
    def test_derives_category_and_tags(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        doc = documents.get_document(store, doc_id)
        assert doc.category == "campaign"
        assert doc.tags == ["q1", "2025", "email", "seo", "Project Phoenix"]
        assert doc.team == "Growth"
        assert doc.project == "Phoenix"

    def test_timestamps_set_together(self, store, sample_create):
        with patch("doclens.documents.now_ms", return_value=1_700_000_000_000):
            doc_id = documents.create_document(store, sample_create)
        doc = documents.get_document(store, doc_id)
        assert doc.uploaded_at == doc.last_modified == doc.indexed_at == 1_700_000_000_000

    def test_ids_are_unique(self, store, sample_create):
        ids = {documents.create_document(store, sample_create) for _ in range(5)}
        assert len(ids) == 5
        assert len(documents.list_documents(store)) == 5

    def test_general_when_nothing_matches(self, store):
        fields = DocumentCreate(
            title="Notes", content="Lunch at noon", file_type="txt",
            file_name="notes.txt", file_size=13, uploaded_by="user-1",
        )
        doc = documents.get_document(store, documents.create_document(store, fields))
        assert doc.category == "general"
        assert doc.tags == []

class TestGet:
    def test_missing_returns_none(self, store):
        assert documents.get_document(store, "nope") is None

class TestUpdate:
    def test_missing_raises_not_found(self, store):
        with pytest.raises(DocumentNotFound):
            documents.update_document(store, "nope", DocumentUpdate(team="Sales"))

    def test_metadata_only_keeps_category_and_tags(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        updated = documents.update_document(store, doc_id, DocumentUpdate(team="Sales"))
        assert updated.team == "Sales"
        assert updated.category == "campaign"
        assert updated.tags == ["q1", "2025", "email", "seo", "Project Phoenix"]

    def test_explicit_category_and_tags_applied(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        documents.update_document(store, doc_id, DocumentUpdate(category="research", tags=["custom"]))
        doc = documents.get_document(store, doc_id)
        assert doc.category == "research"
        assert doc.tags == ["custom"]

    def test_content_change_recomputes_and_discards_supplied(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        updated = documents.update_document(
            store, doc_id,
            DocumentUpdate(content="Customer survey results", category="template", tags=["mine"]),
        )
        # title still says "Campaign"
        assert updated.category == "campaign"
        assert updated.tags == ["2025"]
        assert updated.content == "Customer survey results"

    def test_title_change_uses_existing_content(self, store):
        fields = DocumentCreate(
            title="Notes", content="webinar on Q2", file_type="txt",
            file_name="n.txt", file_size=1, uploaded_by="user-1",
        )
        doc_id = documents.create_document(store, fields)
        updated = documents.update_document(store, doc_id, DocumentUpdate(title="Survey"))
        assert updated.category == "research"
        assert updated.tags == ["q2", "webinar"]

    def test_last_modified_advances(self, store, sample_create):
        with patch("doclens.documents.now_ms", return_value=1000):
            doc_id = documents.create_document(store, sample_create)
        with patch("doclens.documents.now_ms", return_value=5000):
            updated = documents.update_document(store, doc_id, DocumentUpdate(project="Atlas"))
        assert updated.uploaded_at == 1000
        assert updated.last_modified == 5000

    def test_last_modified_never_before_upload(self, store, sample_create):
        with patch("doclens.documents.now_ms", return_value=5000):
            doc_id = documents.create_document(store, sample_create)
        # clock stepped backwards
        with patch("doclens.documents.now_ms", return_value=4000):
            updated = documents.update_document(store, doc_id, DocumentUpdate(project="Atlas"))
        assert updated.last_modified == 5000

    def test_too_many_tags_rejected(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        with pytest.raises(InvalidDocument):
            documents.update_document(store, doc_id, DocumentUpdate(tags=[f"t{i}" for i in range(11)]))

    def test_empty_category_keeps_existing(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        updated = documents.update_document(store, doc_id, DocumentUpdate(category=""))
        assert updated.category == "campaign"
        assert documents.get_document(store, doc_id).category == "campaign"

    def test_oversize_tags_ignored_when_content_changes(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        updated = documents.update_document(
            store, doc_id,
            DocumentUpdate(content="Customer survey results", tags=[f"t{i}" for i in range(11)]),
        )
        assert updated.tags == ["2025"]

    def test_update_is_persisted(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        documents.update_document(store, doc_id, DocumentUpdate(team="Sales"))
        assert documents.get_document(store, doc_id).team == "Sales"

class TestDelete:
    def test_delete_removes(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        documents.delete_document(store, doc_id)
        assert documents.get_document(store, doc_id) is None

    def test_delete_is_idempotent(self, store, sample_create):
        doc_id = documents.create_document(store, sample_create)
        documents.delete_document(store, doc_id)
        documents.delete_document(store, doc_id)
        documents.delete_document(store, "never-existed")

class TestFileGateway:
    def test_upload_handle_and_resolution(self, gateway):
        handle = gateway.generate_upload_handle()
        assert handle.upload_url == f"http://testserver/files/{handle.storage_id}"
        assert gateway.resolve_download_url(handle.storage_id) is None

        assert gateway.save_blob(handle.storage_id, b"%PDF-1.4") == 8
        assert gateway.resolve_download_url(handle.storage_id) == handle.upload_url
        assert gateway.open_blob(handle.storage_id).read_bytes() == b"%PDF-1.4"

    def test_rejects_path_like_ids(self, gateway):
        with pytest.raises(InvalidDocument):
            gateway.save_blob("../etc/passwd", b"x")

    def test_rejects_trailing_newline(self, gateway):
        with pytest.raises(InvalidDocument):
            gateway.save_blob("0" * 32 + "\n", b"x")

    def test_save_file_records_reference(self, store, gateway):
        handle = gateway.generate_upload_handle()
        gateway.save_blob(handle.storage_id, b"bytes")
        request = SaveFileRequest(
            storage_id=handle.storage_id, file_name="brief.pdf", file_type="pdf",
            title="Brand guidelines", content="Logo usage", file_size=5, uploaded_by="user-7",
        )
        response = save_file(store, gateway, request)
        doc = documents.get_document(store, response.document_id)
        assert response.storage_id == handle.storage_id
        assert doc.storage_id == handle.storage_id
        assert doc.file_url == handle.upload_url
        assert doc.category == "branding"
