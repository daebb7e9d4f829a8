"""Search keyword extraction from visitor referrer URLs.

Only the Korean and global search engines the site cares about are
recognized; any other referrer yields no keyword.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

# engine -> (host suffixes, query parameters holding the search terms)
SEARCH_ENGINES: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "naver": (("naver.com",), ("query",)),
    "google": (("google.com", "google.co.kr"), ("q",)),
    "daum": (("search.daum.net",), ("q",)),
    "bing": (("bing.com",), ("q",)),
    "yahoo": (("search.yahoo.com",), ("p",)),
    "zum": (("search.zum.com",), ("query",)),
}

ENGINE_DISPLAY_NAMES = {
    "naver": "네이버",
    "google": "구글",
    "daum": "다음",
    "bing": "빙",
    "yahoo": "야후",
    "zum": "줌",
}

MIN_KEYWORD_LENGTH = 2
MAX_KEYWORD_LENGTH = 100

# Naver internal parameter values that leak into query strings
_NOISE_PREFIXES = ("http", "www.", "tab_", "nexearch")


@dataclass(frozen=True)
class SearchReferral:
    keyword: str
    search_engine: str
    referrer_url: str


def _host_matches(host: str, suffix: str) -> bool:
    return host == suffix or host.endswith("." + suffix)


def extract_search_keyword(referrer: Optional[str]) -> Optional[SearchReferral]:
    """Return the search terms and engine for a search-result referrer."""
    if not referrer:
        return None
    try:
        parts = urlsplit(referrer.strip())
    except ValueError:
        return None
    host = (parts.hostname or "").lower()
    if parts.scheme not in ("http", "https") or not host:
        return None

    query = parse_qs(parts.query)
    for engine, (suffixes, params) in SEARCH_ENGINES.items():
        if not any(_host_matches(host, s) for s in suffixes):
            continue
        for param in params:
            for value in query.get(param, []):
                keyword = " ".join(value.split())
                if keyword:
                    return SearchReferral(keyword, engine, referrer)
    return None


def is_valid_keyword(keyword: str) -> bool:
    keyword = keyword.strip()
    if not MIN_KEYWORD_LENGTH <= len(keyword) <= MAX_KEYWORD_LENGTH:
        return False
    return not keyword.lower().startswith(_NOISE_PREFIXES)


def engine_display_name(engine: str) -> str:
    return ENGINE_DISPLAY_NAMES.get(engine, engine)
