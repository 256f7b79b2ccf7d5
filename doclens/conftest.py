import pytest
from fastapi.testclient import TestClient

from doclens.files import FileGateway
from doclens.main import app, get_gateway, get_store
from doclens.models import Document, DocumentCreate
from doclens.store import InMemoryDocumentStore

@pytest.fixture
def store():
    return InMemoryDocumentStore()

@pytest.fixture
def gateway(tmp_path):
    return FileGateway(root=tmp_path / "blobs", base_url="http://testserver")

@pytest.fixture
def client(store, gateway):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_document():
    """Build a stored-shape Document without going through the analyzer"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "id": f"doc-{counter['n']}",
            "title": "Untitled",
            "content": "",
            "file_type": "txt",
            "file_name": "untitled.txt",
            "file_size": 0,
            "category": "general",
            "tags": [],
            "uploaded_by": "user-1",
            "uploaded_at": 1000 * counter["n"],
            "last_modified": 1000 * counter["n"],
            "indexed_at": 1000 * counter["n"],
        }
        fields.update(overrides)
        return Document(**fields)

    return _make

@pytest.fixture
def sample_upload():
    """Sample upload payload as a client would send it"""
    return {
        "title": "2025 Marketing Strategy for New Campaign Launch",
        "content": "Goals for Q1 2025: grow our \"Project Phoenix\" audience via email and SEO.",
        "fileType": "md",
        "fileName": "strategy.md",
        "fileSize": 2048,
        "project": "Phoenix",
        "team": "Growth",
        "uploadedBy": "user-42",
    }

@pytest.fixture
def sample_create(sample_upload):
    return DocumentCreate(**sample_upload)
