"""Facet listings, recomputed from the live corpus on every call."""

from typing import Iterable, List, Optional

from doclens.config import config
from doclens.errors import InvalidDocument
from doclens.models import Document
from doclens.search import newest_first


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    return sorted({v for v in values if v is not None})


def list_categories(corpus: Iterable[Document]) -> List[str]:
    return _distinct(d.category for d in corpus)


def list_teams(corpus: Iterable[Document]) -> List[str]:
    return _distinct(d.team for d in corpus)


def list_projects(corpus: Iterable[Document]) -> List[str]:
    return _distinct(d.project for d in corpus)


def list_recent(corpus: Iterable[Document], limit: Optional[int] = None) -> List[Document]:
    limit = config.default_recent_limit if limit is None else limit
    if limit <= 0:
        raise InvalidDocument(f"limit must be positive, got {limit}")
    return newest_first(corpus)[:limit]
