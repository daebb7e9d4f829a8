"""Static pages API router."""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.dependencies import get_current_user, get_optional_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.content import (
    SLUG_PATTERN,
    ListParams,
    Localized,
    list_params,
    localize,
    wants_admin_view,
)
from sonaverse_cms.db import Page, get_db
from sonaverse_cms.errors import MSG_INVALID_REQUEST, BadRequest, NotFound

log = logging.getLogger("sonaverse-cms.pages")

router = APIRouter(prefix="/api/pages", tags=["pages"])

MSG_PAGE_NOT_FOUND = "페이지를 찾을 수 없습니다."


class PageSection(BaseModel):
    section_key: str = Field(..., min_length=1, max_length=128)
    type: str = Field(..., min_length=1, max_length=64)
    content: Localized[dict[str, Any]]


class PageUpsert(BaseModel):
    sections: list[PageSection] = Field(default_factory=list)
    is_active: bool = True


def _public_view(page: Page, lang: str) -> dict[str, Any]:
    return {
        "page_key": page.page_key,
        "sections": [
            {
                "section_key": s.get("section_key"),
                "type": s.get("type"),
                "content": localize(s.get("content"), lang) or {},
            }
            for s in (page.sections or [])
        ],
        "last_updated": page.last_updated.isoformat() if page.last_updated else None,
    }


async def _get(db: AsyncSession, page_key: str) -> Optional[Page]:
    result = await db.execute(select(Page).where(Page.page_key == page_key))
    return result.scalar_one_or_none()


@router.get("")
async def list_pages(db: AsyncSession = Depends(get_db)) -> dict:
    """List the keys of active pages."""
    result = await db.execute(
        select(Page.page_key).where(Page.is_active.is_(True)).order_by(Page.page_key)
    )
    return {"success": True, "pages": list(result.scalars().all())}


@router.get("/{page_key}")
async def get_page(
    page_key: str,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    admin = wants_admin_view(params, user)
    page = await _get(db, page_key)
    if page is None or (not admin and not page.is_active):
        raise NotFound(MSG_PAGE_NOT_FOUND)
    if admin:
        return {"success": True, "page": page.to_dict()}
    return {"success": True, "page": _public_view(page, params.lang)}


@router.put("/{page_key}")
async def upsert_page(
    page_key: str,
    data: PageUpsert,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Create or replace a page."""
    if not re.match(SLUG_PATTERN, page_key):
        raise BadRequest(MSG_INVALID_REQUEST)

    keys = [s.section_key for s in data.sections]
    if len(keys) != len(set(keys)):
        raise BadRequest(MSG_INVALID_REQUEST)

    sections = [s.model_dump(mode="json") for s in data.sections]
    page = await _get(db, page_key)
    created = page is None
    if created:
        page = Page(page_key=page_key)
        db.add(page)
    page.sections = sections
    page.is_active = data.is_active
    page.updated_by = user.id

    await db.commit()
    await db.refresh(page)

    log.info(
        "page saved",
        extra={"page_key": page_key, "user_id": user.id, "is_new": created},
    )
    return {"success": True, "page": page.to_dict()}


@router.delete("/{page_key}")
async def delete_page(
    page_key: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    page = await _get(db, page_key)
    if page is None:
        raise NotFound(MSG_PAGE_NOT_FOUND)
    await db.delete(page)
    await db.commit()
    log.info("page deleted", extra={"page_key": page_key, "user_id": user.id})
    return {"success": True}
