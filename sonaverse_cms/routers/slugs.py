"""Slug conflict check across press, stories and products."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.content import normalize_slug
from sonaverse_cms.db import PressRelease, Product, SonaverseStory, get_db
from sonaverse_cms.errors import BadRequest, read_json_object

router = APIRouter(prefix="/api/check-slug", tags=["slugs"])

MSG_SLUG_REQUIRED = "슬러그가 필요합니다."


def _title(localized: Any, key: Optional[str] = None) -> Optional[str]:
    if not isinstance(localized, dict):
        return None
    for lang in ("ko", "en"):
        value = localized.get(lang)
        if key is not None:
            value = value.get(key) if isinstance(value, dict) else None
        if value:
            return value
    return None


@router.post("")
async def check_slug(request: Request, db: AsyncSession = Depends(get_db)) -> dict:
    data = await read_json_object(request)
    slug = data.get("slug")
    if not isinstance(slug, str) or not slug.strip():
        raise BadRequest(MSG_SLUG_REQUIRED)
    slug = normalize_slug(slug)

    press = (
        await db.execute(select(PressRelease).where(PressRelease.slug == slug))
    ).scalar_one_or_none()
    story = (
        await db.execute(select(SonaverseStory).where(SonaverseStory.slug == slug))
    ).scalar_one_or_none()
    product = (
        await db.execute(select(Product).where(Product.slug == slug))
    ).scalar_one_or_none()

    results = {
        "press": {"exists": True, "title": _title(press.content, "title") or "제목 없음"}
        if press
        else {"exists": False},
        "sonaverseStory": {
            "exists": True,
            "title": _title(story.content, "title") or "제목 없음",
        }
        if story
        else {"exists": False},
        "product": {"exists": True, "title": _title(product.name) or "제품명 없음"}
        if product
        else {"exists": False},
    }
    has_conflict = any(r["exists"] for r in results.values())
    return {"success": True, "slug": slug, "hasConflict": has_conflict, "results": results}
