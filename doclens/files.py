"""
Blob storage for uploaded files.

Clients ask for an upload handle, PUT the raw bytes to it, then register the
document with ``save_file``. Blobs are opaque: nothing here reads or checks
their contents.
"""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional

from doclens.config import config
from doclens.documents import create_document
from doclens.errors import InvalidDocument, StorageUnavailable
from doclens.metrics import record_file_upload
from doclens.models import DocumentCreate, SaveFileRequest, SaveFileResponse, UploadHandle
from doclens.store import DocumentStore

logger = logging.getLogger(__name__)

STORAGE_ID_PATTERN = re.compile(r"[0-9a-f]{32}")


class FileGateway:
    def __init__(self, root: Path = Path(config.blob_storage_path), base_url: str = config.public_base_url):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, storage_id: str) -> Path:
        if not STORAGE_ID_PATTERN.fullmatch(storage_id or ""):
            raise InvalidDocument(f"Invalid storage id: '{storage_id}'")
        return self.root / storage_id

    def _file_url(self, storage_id: str) -> str:
        return f"{self.base_url}/files/{storage_id}"

    def generate_upload_handle(self) -> UploadHandle:
        storage_id = uuid.uuid4().hex
        return UploadHandle(storage_id=storage_id, upload_url=self._file_url(storage_id))

    def save_blob(self, storage_id: str, data: bytes) -> int:
        path = self._path(storage_id)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            record_file_upload(len(data), "error")
            logger.error(f"Failed to store blob {storage_id}: {e}")
            raise StorageUnavailable(f"Blob store unavailable for {storage_id}") from e
        record_file_upload(len(data), "success")
        logger.info(f"Stored blob {storage_id} ({len(data)} bytes)")
        return len(data)

    def open_blob(self, storage_id: str) -> Optional[Path]:
        path = self._path(storage_id)
        return path if path.is_file() else None

    def resolve_download_url(self, storage_id: str) -> Optional[str]:
        if self.open_blob(storage_id) is None:
            return None
        return self._file_url(storage_id)


def save_file(store: DocumentStore, gateway: FileGateway, request: SaveFileRequest) -> SaveFileResponse:
    """Register a document for a blob the client has already uploaded."""
    fields = DocumentCreate(
        **request.model_dump(),
        file_url=gateway.resolve_download_url(request.storage_id),
    )
    document_id = create_document(store, fields)
    return SaveFileResponse(document_id=document_id, storage_id=request.storage_id)
