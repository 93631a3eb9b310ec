from __future__ import annotations

from dataclasses import dataclass

from wikiscroll.api.errors import ERROR_NO_ARTICLES, ERROR_OFFLINE, ERROR_RATE_LIMITED, ERROR_TIMEOUT
from wikiscroll.feed.types import Article
from wikiscroll.utils import collapse_ws, truncate


@dataclass(frozen=True)
class ErrorCopy:
    title: str
    text: str
    button: str


ERROR_COPY: dict[str, ErrorCopy] = {
    ERROR_OFFLINE: ErrorCopy(
        "You're offline",
        "Check your internet connection and try again.",
        "Retry connection",
    ),
    ERROR_RATE_LIMITED: ErrorCopy(
        "Too many requests",
        "Wikipedia is rate limiting us. Please wait a moment and try again.",
        "Try again",
    ),
    ERROR_TIMEOUT: ErrorCopy(
        "Request timed out",
        "The request took too long. Check your connection and try again.",
        "Try again",
    ),
    ERROR_NO_ARTICLES: ErrorCopy(
        "No articles found",
        "No articles could be loaded. Try again in a moment.",
        "Try again",
    ),
}

DEFAULT_ERROR_COPY = ErrorCopy(
    "Failed to load articles",
    "Something went wrong while fetching articles.",
    "Try again",
)


def render_article(article: Article, index: int | None = None, max_chars: int = 600) -> str:
    heading = article.display_title or article.title
    if index is not None:
        heading = f"{index + 1}. {heading}"

    lines: list[str] = [heading]
    if article.description:
        lines.append(f"   ({article.description})")
    lines.append(truncate(collapse_ws(article.extract), max_chars))
    lines.append(article.url)
    return "\n".join(lines)


def render_error(error: str) -> str:
    copy = ERROR_COPY.get(error, DEFAULT_ERROR_COPY)
    return f"{copy.title}: {copy.text} [{copy.button}]"
