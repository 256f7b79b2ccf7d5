"""
Document lifecycle: create, read, update and delete against an injected store.

Category and tags are derived at write time. On update they are recomputed
only when the title or content changes; in that case the recomputed values
replace any category/tags supplied in the same call.
"""

import logging
import time
from typing import List, Optional

from doclens.analyzer import derive_metadata, extract_text
from doclens.config import config
from doclens.errors import DocumentNotFound, InvalidDocument
from doclens.metrics import record_document_deleted, record_document_indexed, record_document_updated
from doclens.models import Document, DocumentCreate, DocumentUpdate
from doclens.store import DocumentStore, new_document_id

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def create_document(store: DocumentStore, fields: DocumentCreate) -> str:
    now = now_ms()
    content = extract_text(fields.content, fields.file_type)
    category, tags = derive_metadata(fields.title, content)

    document = Document(
        id=new_document_id(),
        **fields.model_dump(exclude={"content"}),
        content=content,
        category=category,
        tags=tags,
        uploaded_at=now,
        last_modified=now,
        indexed_at=now,
    )
    store.insert(document)
    record_document_indexed(document.file_type)
    logger.info(f"Indexed document {document.id} '{document.title}' as {category} with {len(tags)} tags")
    return document.id


def get_document(store: DocumentStore, doc_id: str) -> Optional[Document]:
    return store.get(doc_id)


def list_documents(store: DocumentStore) -> List[Document]:
    return store.all()


def update_document(store: DocumentStore, doc_id: str, fields: DocumentUpdate) -> Document:
    existing = store.get(doc_id)
    if existing is None:
        raise DocumentNotFound(f"Document not found: {doc_id}")

    changes = fields.model_dump(exclude_none=True)
    # an empty category keeps the stored one
    if not changes.get("category", existing.category):
        changes.pop("category")

    reindex = fields.title is not None or fields.content is not None
    if not reindex and fields.tags is not None and len(fields.tags) > config.max_tags:
        raise InvalidDocument(f"At most {config.max_tags} tags are allowed, got {len(fields.tags)}")
    if reindex:
        title = fields.title if fields.title is not None else existing.title
        content = fields.content if fields.content is not None else existing.content
        changes["category"], changes["tags"] = derive_metadata(title, content)

    changes["last_modified"] = max(now_ms(), existing.uploaded_at)
    updated = existing.model_copy(update=changes)
    store.replace(updated)

    record_document_updated(reindex)
    logger.info(f"Updated document {doc_id} (fields: {', '.join(sorted(changes))})")
    return updated


def delete_document(store: DocumentStore, doc_id: str) -> None:
    store.delete(doc_id)
    record_document_deleted()
    logger.info(f"Deleted document {doc_id}")
