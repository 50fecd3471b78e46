"""
Helpers that turn fetched feed documents into candidate posts.
"""
from __future__ import annotations

import posixpath
from typing import Any, Iterable, List, Optional
from urllib.parse import urlsplit

from pydantic import ValidationError

from relay.models import CandidatePost, MediaType

# Probed in this exact order; the first key holding a list wins.
POST_LIST_KEYS = ("posts", "data", "items", "results", "threads", "newPosts", "hotPosts")

VIDEO_EXTENSIONS = frozenset({".mp4"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".gif", ".png", ".webp"})


def extract_posts(document: Any) -> List[Any]:
    """Return the list of raw posts carried by a feed document."""
    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        for key in POST_LIST_KEYS:
            value = document.get(key)
            if isinstance(value, list):
                return value
    return []


def flatten_documents(documents: Iterable[Any]) -> List[Any]:
    posts: List[Any] = []
    for document in documents:
        if document is None:
            continue
        posts.extend(extract_posts(document))
    return posts


def parse_candidate(raw: Any) -> Optional[CandidatePost]:
    if not isinstance(raw, dict):
        return None
    try:
        return CandidatePost.model_validate(raw)
    except ValidationError:
        return None


def media_type_for_link(link: str) -> Optional[MediaType]:
    """Classify a media link by its path extension; None if unsupported or unparseable."""
    try:
        parts = urlsplit(link.strip())
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return None
    extension = posixpath.splitext(parts.path)[1].lower()
    if extension in VIDEO_EXTENSIONS:
        return MediaType.VIDEO
    if extension in IMAGE_EXTENSIONS:
        return MediaType.IMAGE
    return None
