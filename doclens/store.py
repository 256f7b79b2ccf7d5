"""
Document persistence.

``RedisDocumentStore`` keeps each record as JSON in a Redis hash under
``{prefix}:{id}``. ``InMemoryDocumentStore`` has the same contract and is used
for local runs and tests. Callers receive a store handle explicitly; nothing
here is a module-level singleton.
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

import redis
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from doclens.config import config
from doclens.errors import StorageUnavailable
from doclens.metrics import record_store_operation, update_store_connection_status
from doclens.models import Document

logger = logging.getLogger(__name__)

DOCUMENT_FIELD = "document"


def new_document_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """Contract shared by every backend."""

    def insert(self, document: Document) -> None:
        raise NotImplementedError

    def get(self, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def replace(self, document: Document) -> None:
        raise NotImplementedError

    def delete(self, doc_id: str) -> None:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError

    def _iter_documents(self) -> Iterator[Document]:
        raise NotImplementedError

    def all(self) -> List[Document]:
        """Snapshot of the corpus, oldest upload first, ties broken by id."""
        return sorted(self._iter_documents(), key=lambda d: (d.uploaded_at, d.id))


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._documents: Dict[str, Document] = {}

    def insert(self, document: Document) -> None:
        self._documents[document.id] = document.model_copy(deep=True)

    def get(self, doc_id: str) -> Optional[Document]:
        document = self._documents.get(doc_id)
        return document.model_copy(deep=True) if document else None

    def replace(self, document: Document) -> None:
        self._documents[document.id] = document.model_copy(deep=True)

    def delete(self, doc_id: str) -> None:
        self._documents.pop(doc_id, None)

    def ping(self) -> bool:
        return True

    def _iter_documents(self) -> Iterator[Document]:
        for document in list(self._documents.values()):
            yield document.model_copy(deep=True)


class RedisDocumentStore(DocumentStore):
    def __init__(self, client: redis.Redis, prefix: str = config.key_prefix):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str = config.redis_url, prefix: str = config.key_prefix) -> "RedisDocumentStore":
        return cls(redis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, doc_id: str) -> str:
        return f"{self.prefix}:{doc_id}"

    @contextmanager
    def _operation(self, name: str):
        start = time.time()
        try:
            yield
        except redis.exceptions.RedisError as e:
            record_store_operation(name, time.time() - start, "error")
            logger.error(f"Datastore {name} failed: {e}")
            raise StorageUnavailable(f"Datastore unavailable during {name}") from e
        record_store_operation(name, time.time() - start, "success")

    def insert(self, document: Document) -> None:
        with self._operation("insert"):
            self.client.hset(self._key(document.id), mapping={
                DOCUMENT_FIELD: document.model_dump_json(by_alias=True)
            })

    def get(self, doc_id: str) -> Optional[Document]:
        with self._operation("get"):
            raw = self.client.hget(self._key(doc_id), DOCUMENT_FIELD)
        if raw is None:
            return None
        return Document.model_validate_json(raw)

    def replace(self, document: Document) -> None:
        self.insert(document)

    def delete(self, doc_id: str) -> None:
        with self._operation("delete"):
            self.client.delete(self._key(doc_id))

    def ping(self) -> bool:
        with self._operation("ping"):
            return bool(self.client.ping())

    def _iter_documents(self) -> Iterator[Document]:
        with self._operation("scan"):
            raws = [
                self.client.hget(key, DOCUMENT_FIELD)
                for key in self.client.scan_iter(match=f"{self.prefix}:*")
            ]
        for raw in raws:
            # key removed between SCAN and HGET
            if raw is not None:
                yield Document.model_validate_json(raw)


def create_store(backend: str = config.store_backend) -> DocumentStore:
    if backend == "memory":
        logger.warning("Using in-memory document store; documents will not survive a restart")
        return InMemoryDocumentStore()
    if backend == "redis":
        return RedisDocumentStore.from_url(config.redis_url)
    raise ValueError(f"Unknown document store backend: '{backend}'")


def check_store_connection(store: DocumentStore) -> bool:
    """Probe the datastore once and publish the result as a gauge."""
    try:
        connected = store.ping()
    except StorageUnavailable as e:
        logger.error(f"Datastore connection error: {e}")
        connected = False
    if connected:
        logger.info("Datastore connection successful")
    update_store_connection_status(connected)
    return connected


@retry(
    stop=stop_after_attempt(config.store_connect_attempts),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(StorageUnavailable),
    reraise=True
)
def wait_for_store(store: DocumentStore) -> None:
    """
    Block until the datastore answers a ping. Only used at startup; request
    handlers never retry.
    """
    try:
        store.ping()
    except StorageUnavailable as e:
        logger.warning(f"Datastore not reachable yet: {e}. Retrying...")
        update_store_connection_status(False)
        raise
    update_store_connection_status(True)
    logger.info("Datastore is reachable")
