"""
Keyword search over the stored corpus.

This is a linear scan: every call filters and scores every document, with
plain substring matching and no index. Ranking lives behind ``search`` so it
can be swapped without touching callers.
"""

from typing import Iterable, List, Optional

from doclens.config import config
from doclens.errors import InvalidDocument
from doclens.models import Document

TITLE_WEIGHT = 10
CONTENT_WEIGHT = 1
TAG_WEIGHT = 5


def filter_documents(
    corpus: Iterable[Document],
    category: Optional[str] = None,
    team: Optional[str] = None,
    project: Optional[str] = None,
    file_type: Optional[str] = None,
) -> List[Document]:
    """Exact-match facet filters, ANDed. A None filter matches everything."""
    documents = list(corpus)
    if category is not None:
        documents = [d for d in documents if d.category == category]
    if team is not None:
        documents = [d for d in documents if d.team == team]
    if project is not None:
        documents = [d for d in documents if d.project == project]
    if file_type is not None:
        documents = [d for d in documents if d.file_type == file_type]
    return documents


def score_document(document: Document, terms: List[str]) -> int:
    title = document.title.lower()
    content = document.content.lower()
    tags = " ".join(document.tags).lower()

    score = 0
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in content:
            score += CONTENT_WEIGHT
        if term in tags:
            score += TAG_WEIGHT
    return score


def newest_first(documents: Iterable[Document]) -> List[Document]:
    return sorted(documents, key=lambda d: d.uploaded_at, reverse=True)


def search(
    corpus: Iterable[Document],
    query: str,
    category: Optional[str] = None,
    team: Optional[str] = None,
    project: Optional[str] = None,
    file_type: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Document]:
    limit = config.default_search_limit if limit is None else limit
    if limit <= 0:
        raise InvalidDocument(f"limit must be positive, got {limit}")

    documents = filter_documents(corpus, category, team, project, file_type)

    normalized = (query or "").strip().lower()
    if not normalized:
        return newest_first(documents)[:limit]

    terms = normalized.split()
    scored = [(score_document(d, terms), d) for d in documents]
    scored = [item for item in scored if item[0] > 0]
    # sorted() is stable, so equal scores keep corpus order
    scored.sort(key=lambda item: item[0], reverse=True)
    return [d for _, d in scored[:limit]]
