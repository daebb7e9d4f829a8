"""Press release API router.

Public reads return active entries localized to the requested language.
Mutations and admin=true reads require an admin session.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.dependencies import get_current_user, get_optional_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.content import (
    SLUG_PATTERN,
    ListParams,
    Localized,
    empty_localized,
    fetch_page,
    list_params,
    localize,
    localized_dump,
    normalize_slug,
    page_envelope,
    text_matches,
    wants_admin_view,
)
from sonaverse_cms.db import PressRelease, get_db
from sonaverse_cms.errors import MSG_DUPLICATE_SLUG, BadRequest, NotFound

log = logging.getLogger("sonaverse-cms.press")

router = APIRouter(prefix="/api/press", tags=["press"])

MSG_PRESS_NOT_FOUND = "언론보도를 찾을 수 없습니다."


# ==============================================================================
# Request Models
# ==============================================================================


class PressContent(BaseModel):
    """Localized press article fields."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500)
    body: str = ""
    external_link: Optional[str] = Field(None, max_length=1024)


class PressCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=256, pattern=SLUG_PATTERN)
    press_name: Localized[str]
    content: Localized[PressContent]
    thumbnail: Optional[str] = Field(None, max_length=1024)
    external_link: Optional[str] = Field(None, max_length=1024)
    tags: Optional[Localized[list[str]]] = None
    is_active: bool = True

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)


class PressUpdate(BaseModel):
    slug: Optional[str] = Field(None, min_length=1, max_length=256, pattern=SLUG_PATTERN)
    press_name: Optional[Localized[str]] = None
    content: Optional[Localized[PressContent]] = None
    thumbnail: Optional[str] = Field(None, max_length=1024)
    external_link: Optional[str] = Field(None, max_length=1024)
    tags: Optional[Localized[list[str]]] = None
    is_active: Optional[bool] = None

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)


# ==============================================================================
# Helpers
# ==============================================================================


def _public_view(press: PressRelease, lang: str) -> dict[str, Any]:
    content = localize(press.content, lang) or {}
    return {
        "id": press.id,
        "slug": press.slug,
        "press_name": localize(press.press_name, lang),
        "title": content.get("title"),
        "body": content.get("body"),
        "external_link": content.get("external_link") or press.external_link,
        "thumbnail": press.thumbnail,
        "tags": localize(press.tags, lang) or [],
        "created_at": press.created_at.isoformat() if press.created_at else None,
        "last_updated": press.last_updated.isoformat() if press.last_updated else None,
    }


async def _get_by_slug(db: AsyncSession, slug: str) -> Optional[PressRelease]:
    result = await db.execute(select(PressRelease).where(PressRelease.slug == slug))
    return result.scalar_one_or_none()


async def _ensure_slug_free(db: AsyncSession, slug: str) -> None:
    if await _get_by_slug(db, slug) is not None:
        raise BadRequest(MSG_DUPLICATE_SLUG)


# ==============================================================================
# Endpoints
# ==============================================================================


@router.get("")
async def list_press(
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """List press releases, newest first."""
    admin = wants_admin_view(params, user)
    lang = params.lang

    stmt = select(PressRelease).order_by(PressRelease.created_at.desc())
    if not admin:
        stmt = stmt.where(PressRelease.is_active.is_(True))
    elif params.active is not None:
        stmt = stmt.where(PressRelease.is_active.is_(params.active))

    predicate = None
    if params.search:
        needle = params.search

        def predicate(p: PressRelease) -> bool:
            content = localize(p.content, lang) or {}
            return text_matches(
                needle,
                content.get("title"),
                localize(p.press_name, lang),
                content.get("body"),
            )

    rows, total = await fetch_page(db, stmt, params.page, params.page_size, predicate)
    results = [p.to_dict() if admin else _public_view(p, lang) for p in rows]
    return page_envelope(results, total, params.page, params.page_size)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_press(
    data: PressCreate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Create a press release."""
    await _ensure_slug_free(db, data.slug)

    press = PressRelease(
        slug=data.slug,
        press_name=localized_dump(data.press_name),
        content=localized_dump(data.content),
        thumbnail=data.thumbnail,
        external_link=data.external_link,
        tags=localized_dump(data.tags) or empty_localized(list),
        is_active=data.is_active,
        updated_by=user.id,
    )
    db.add(press)
    await db.commit()
    await db.refresh(press)

    log.info("press created", extra={"slug": press.slug, "user_id": user.id})
    return {"success": True, "press": press.to_dict()}


@router.get("/{slug}")
async def get_press(
    slug: str,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """Get one press release by slug."""
    admin = wants_admin_view(params, user)
    press = await _get_by_slug(db, slug)
    if press is None or (not admin and not press.is_active):
        raise NotFound(MSG_PRESS_NOT_FOUND)
    if admin:
        return {"success": True, "press": press.to_dict()}
    return {"success": True, "press": _public_view(press, params.lang)}


@router.patch("/{slug}")
async def update_press(
    slug: str,
    data: PressUpdate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Update a press release."""
    press = await _get_by_slug(db, slug)
    if press is None:
        raise NotFound(MSG_PRESS_NOT_FOUND)

    changes = data.model_dump(exclude_unset=True)
    if "slug" in changes and data.slug and data.slug != press.slug:
        await _ensure_slug_free(db, data.slug)
        press.slug = data.slug
    if data.press_name is not None:
        press.press_name = localized_dump(data.press_name)
    if data.content is not None:
        press.content = localized_dump(data.content)
    if "thumbnail" in changes:
        press.thumbnail = data.thumbnail
    if "external_link" in changes:
        press.external_link = data.external_link
    if data.tags is not None:
        press.tags = localized_dump(data.tags)
    if data.is_active is not None:
        press.is_active = data.is_active
    press.updated_by = user.id

    await db.commit()
    await db.refresh(press)

    log.info(
        "press updated",
        extra={"slug": press.slug, "user_id": user.id, "fields": sorted(changes)},
    )
    return {"success": True, "press": press.to_dict()}


@router.delete("/{slug}")
async def delete_press(
    slug: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Delete a press release."""
    press = await _get_by_slug(db, slug)
    if press is None:
        raise NotFound(MSG_PRESS_NOT_FOUND)
    await db.delete(press)
    await db.commit()
    log.info("press deleted", extra={"slug": slug, "user_id": user.id})
    return {"success": True}
