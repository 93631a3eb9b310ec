from __future__ import annotations

from typing import Any
from urllib.parse import quote

from wikiscroll.feed.types import Article


DEFAULT_LANG = "en"
MIN_EXTRACT_CHARS = 30

# characters encodeURIComponent leaves alone
_URI_SAFE = "!*'()"


def _image_source(value: Any) -> str | None:
    if isinstance(value, dict):
        source = value.get("source")
        if isinstance(source, str) and source:
            return source
    return None


def _page_url(payload: dict, title: str, lang: str) -> str:
    urls = payload.get("content_urls")
    if isinstance(urls, dict):
        desktop = urls.get("desktop")
        if isinstance(desktop, dict):
            page = desktop.get("page")
            if isinstance(page, str) and page:
                return page
    return f"https://{lang}.wikipedia.org/wiki/{quote(title, safe=_URI_SAFE)}"


def is_valid_summary(payload: Any) -> bool:
    """Return True when a summary payload can become an Article.

    Requires a dict with a non-empty string title, a string extract longer
    than MIN_EXTRACT_CHARS once stripped, and a page id. The page id must be
    an int or str; 0 is a real id.
    """
    if not isinstance(payload, dict):
        return False
    title = payload.get("title")
    if not isinstance(title, str) or not title:
        return False
    extract = payload.get("extract")
    if not isinstance(extract, str) or len(extract.strip()) <= MIN_EXTRACT_CHARS:
        return False
    pageid = payload.get("pageid")
    # bool is an int subclass and would collide with 1 during dedup
    return isinstance(pageid, (int, str)) and not isinstance(pageid, bool)


def parse_summary(payload: Any, default_lang: str = DEFAULT_LANG) -> Article | None:
    if not is_valid_summary(payload):
        return None

    title = payload["title"]
    lang = payload.get("lang") or default_lang
    return Article(
        id=payload["pageid"],
        title=title,
        display_title=payload.get("displaytitle") or title,
        extract=payload["extract"],
        extract_html=payload.get("extract_html") or "",
        description=payload.get("description") or "",
        thumbnail=_image_source(payload.get("thumbnail")),
        original_image=_image_source(payload.get("originalimage")),
        url=_page_url(payload, title, lang),
        lang=lang,
        timestamp=payload.get("timestamp") or None,
    )
