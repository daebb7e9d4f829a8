"""Shared pieces for the bilingual content collections.

Localized values are stored as {"ko": ..., "en": ...}. Korean is the
primary language and is always required; English falls back to Korean on
public reads.
"""

from __future__ import annotations

import math
import re
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.errors import MSG_INVALID_REQUEST, BadRequest, Unauthorized

LANGUAGES = ("ko", "en")
DEFAULT_LANGUAGE = "ko"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SLUG_PATTERN = r"^[a-z0-9][a-z0-9-]*$"

T = TypeVar("T")


class Localized(BaseModel, Generic[T]):
    """A value per language; Korean required, English optional."""

    model_config = ConfigDict(extra="forbid")

    ko: T
    en: Optional[T] = None


class ListParams(BaseModel):
    """Common list query parameters."""

    lang: str = DEFAULT_LANGUAGE
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None
    active: Optional[bool] = None
    admin: bool = False

    @field_validator("lang")
    @classmethod
    def validate_lang(cls, v: str) -> str:
        return v if v in LANGUAGES else DEFAULT_LANGUAGE


def _query_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "y", "on")


def _query_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequest(MSG_INVALID_REQUEST)


def list_params(request: Request) -> ListParams:
    """FastAPI dependency parsing lang/page/pageSize/search/active/admin."""
    q = request.query_params
    page = max(1, _query_int(q.get("page"), 1))
    page_size = _query_int(q.get("pageSize") or q.get("limit"), DEFAULT_PAGE_SIZE)
    page_size = min(max(1, page_size), MAX_PAGE_SIZE)
    search = (q.get("search") or "").strip() or None
    return ListParams(
        lang=q.get("lang") or DEFAULT_LANGUAGE,
        page=page,
        page_size=page_size,
        search=search,
        active=_query_bool(q.get("active")),
        admin=bool(_query_bool(q.get("admin"))),
    )


def localize(value: Any, lang: str) -> Any:
    """Pick the value for lang, falling back to Korean."""
    if not isinstance(value, dict):
        return value
    picked = value.get(lang)
    if picked in (None, "", [], {}):
        picked = value.get(DEFAULT_LANGUAGE)
    return picked


def localized_dump(value: Optional[BaseModel]) -> Optional[dict[str, Any]]:
    if value is None:
        return None
    return value.model_dump(mode="json")


def text_matches(needle: str, *values: Any) -> bool:
    """Case-insensitive substring match over strings and string lists."""
    needle = needle.lower()
    for value in values:
        if isinstance(value, str) and needle in value.lower():
            return True
        if isinstance(value, (list, tuple)) and any(
            isinstance(v, str) and needle in v.lower() for v in value
        ):
            return True
    return False


def normalize_slug(value: Any) -> Any:
    if isinstance(value, str):
        return re.sub(r"\s+", "-", value.strip().lower())
    return value


def page_envelope(
    results: list[Any], total: int, page: int, page_size: int
) -> dict[str, Any]:
    return {
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size) if total else 0,
        "results": results,
    }


async def fetch_page(
    db: AsyncSession,
    stmt: Select,
    page: int,
    page_size: int,
    predicate: Optional[Callable[[Any], bool]] = None,
) -> tuple[Sequence[Any], int]:
    """Run stmt and return one page of rows plus the total count.

    When a predicate is given, rows are filtered in Python before paging.
    """
    offset = (page - 1) * page_size
    if predicate is None:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int((await db.execute(count_stmt)).scalar_one())
        rows = (await db.execute(stmt.offset(offset).limit(page_size))).scalars().all()
        return rows, total

    rows = [r for r in (await db.execute(stmt)).scalars().all() if predicate(r)]
    return rows[offset : offset + page_size], len(rows)


def wants_admin_view(params: ListParams, user: Optional[Any]) -> bool:
    """True for admin=true reads; those require a session."""
    if params.admin and user is None:
        raise Unauthorized()
    return params.admin


def empty_localized(factory: Callable[[], Any]) -> dict[str, Any]:
    return {"ko": factory(), "en": factory()}
