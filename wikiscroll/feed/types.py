from __future__ import annotations

from dataclasses import dataclass


ArticleId = int | str


@dataclass(frozen=True)
class Article:
    id: ArticleId
    title: str
    display_title: str
    extract: str
    extract_html: str
    description: str
    thumbnail: str | None
    original_image: str | None
    url: str
    lang: str
    timestamp: str | None


@dataclass(frozen=True)
class LoadState:
    loading: bool
    initial_loading: bool
    error: str | None
    article_count: int
