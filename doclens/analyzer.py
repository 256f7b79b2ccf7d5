"""
Text analysis used at write time: text extraction, categorization and tag
extraction. Every function here is pure; the same (title, content) always
yields the same category and tags.
"""

import re
from typing import List, Tuple

from doclens.config import config

PLAIN_TEXT_TYPES = ("txt", "md")

# Declaration order decides ties: the first category with a hit wins.
CATEGORY_KEYWORDS = {
    "campaign": ["campaign", "promotion", "launch", "advertising", "ad campaign"],
    "strategy": ["strategy", "plan", "roadmap", "goals", "objectives"],
    "content": ["content", "blog", "article", "copy", "copywriting", "social media"],
    "analytics": ["analytics", "report", "metrics", "kpi", "dashboard", "data"],
    "branding": ["brand", "branding", "identity", "guidelines", "style guide"],
    "research": ["research", "study", "survey", "analysis", "insights"],
    "template": ["template", "boilerplate", "example", "sample"],
}
DEFAULT_CATEGORY = "general"

COMMON_TAGS = [
    "q1", "q2", "q3", "q4",
    "2024", "2025",
    "social media", "email", "seo", "ppc",
    "b2b", "b2c",
    "product launch", "event", "webinar",
]

QUOTED_PHRASE = re.compile(r'"([^"]+)"')
MIN_QUOTED_LENGTH = 3
MAX_QUOTED_LENGTH = 29


def extract_text(content: str, file_type: str) -> str:
    """
    Return the indexable text for an upload.

    No format is parsed: plain text types and every other type are returned
    as given, so callers must supply already-extracted text for binary files.
    """
    if file_type in PLAIN_TEXT_TYPES:
        return content
    return content


def categorize(title: str, content: str) -> str:
    lower_title = title.lower()
    lower_content = content.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(k in lower_title or k in lower_content for k in keywords):
            return category
    return DEFAULT_CATEGORY


def extract_tags(title: str, content: str) -> List[str]:
    """
    Known marketing terms first (in list order), then double-quoted phrases
    (in order of appearance, original casing), capped at ``config.max_tags``.
    Duplicates are kept.
    """
    raw = f"{title} {content}"
    text = raw.lower()
    tags = [tag for tag in COMMON_TAGS if tag in text]

    # Quoted phrases keep their casing, so scan the raw text
    for phrase in QUOTED_PHRASE.findall(raw):
        if MIN_QUOTED_LENGTH <= len(phrase) <= MAX_QUOTED_LENGTH:
            tags.append(phrase)

    return tags[:config.max_tags]


def derive_metadata(title: str, content: str) -> Tuple[str, List[str]]:
    return categorize(title, content), extract_tags(title, content)
