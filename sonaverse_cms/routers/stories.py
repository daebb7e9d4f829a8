"""Sonaverse story API router.

Stories are published articles with an optional embedded YouTube video.
Public reads only see published stories.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.dependencies import get_current_user, get_optional_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.content import (
    SLUG_PATTERN,
    ListParams,
    Localized,
    fetch_page,
    list_params,
    localize,
    localized_dump,
    normalize_slug,
    page_envelope,
    text_matches,
    wants_admin_view,
)
from sonaverse_cms.db import SonaverseStory, get_db
from sonaverse_cms.errors import MSG_DUPLICATE_SLUG, BadRequest, NotFound

log = logging.getLogger("sonaverse-cms.stories")

router = APIRouter(prefix="/api/sonaverse-story", tags=["stories"])

MSG_STORY_NOT_FOUND = "소나버스 스토리를 찾을 수 없습니다."

YOUTUBE_URL_RE = re.compile(
    r"^(https?://)?(www\.|m\.)?"
    r"(youtube\.com/(watch\?v=|embed/|shorts/)|youtu\.be/)"
    r"[A-Za-z0-9_-]{11}.*$"
)


def _valid_youtube_url(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not YOUTUBE_URL_RE.match(v):
        raise ValueError("invalid YouTube URL")
    return v


def _clean_tags(v: Any) -> Any:
    if isinstance(v, list):
        return [t.strip() for t in v if isinstance(t, str) and t.strip()]
    return v


class StoryContent(BaseModel):
    """Localized story fields."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500)
    subtitle: Optional[str] = Field(None, max_length=500)
    body: str = Field(..., min_length=1)
    thumbnail_url: Optional[str] = Field(None, max_length=1024)


class StoryCreate(BaseModel):
    slug: str = Field(..., min_length=1, max_length=256, pattern=SLUG_PATTERN)
    content: Localized[StoryContent]
    youtube_url: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    is_published: bool = True
    is_main: bool = False

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)
    clean_tags = field_validator("tags", mode="before")(_clean_tags)

    @field_validator("youtube_url")
    @classmethod
    def validate_youtube_url(cls, v: Optional[str]) -> Optional[str]:
        return _valid_youtube_url(v)


class StoryUpdate(BaseModel):
    slug: Optional[str] = Field(None, min_length=1, max_length=256, pattern=SLUG_PATTERN)
    content: Optional[Localized[StoryContent]] = None
    youtube_url: Optional[str] = None
    tags: Optional[list[str]] = None
    is_published: Optional[bool] = None
    is_main: Optional[bool] = None

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)
    clean_tags = field_validator("tags", mode="before")(_clean_tags)

    @field_validator("youtube_url")
    @classmethod
    def validate_youtube_url(cls, v: Optional[str]) -> Optional[str]:
        return _valid_youtube_url(v)


def _public_view(story: SonaverseStory, lang: str) -> dict[str, Any]:
    content = localize(story.content, lang) or {}
    return {
        "id": story.id,
        "slug": story.slug,
        "title": content.get("title"),
        "subtitle": content.get("subtitle"),
        "body": content.get("body"),
        "thumbnail_url": content.get("thumbnail_url"),
        "youtube_url": story.youtube_url,
        "tags": story.tags or [],
        "is_main": story.is_main,
        "created_at": story.created_at.isoformat() if story.created_at else None,
        "last_updated": story.last_updated.isoformat() if story.last_updated else None,
    }


async def _get_by_slug(db: AsyncSession, slug: str) -> Optional[SonaverseStory]:
    result = await db.execute(
        select(SonaverseStory).where(SonaverseStory.slug == slug.lower())
    )
    return result.scalar_one_or_none()


@router.get("")
async def list_stories(
    request: Request,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """List stories, newest first.

    Extra filters: tag (exact tag match), main=true (main stories only).
    """
    admin = wants_admin_view(params, user)
    tag = (request.query_params.get("tag") or "").strip()
    main_only = request.query_params.get("main", "").lower() in ("1", "true", "yes")

    stmt = select(SonaverseStory).order_by(SonaverseStory.created_at.desc())
    if not admin:
        stmt = stmt.where(SonaverseStory.is_published.is_(True))
    elif params.active is not None:
        stmt = stmt.where(SonaverseStory.is_published.is_(params.active))
    if main_only:
        stmt = stmt.where(SonaverseStory.is_main.is_(True))

    predicate = None
    if params.search or tag:
        needle = params.search

        def predicate(s: SonaverseStory) -> bool:
            tags = s.tags or []
            if tag and tag not in tags:
                return False
            if not needle:
                return True
            contents = [(s.content or {}).get(lang) or {} for lang in ("ko", "en")]
            return text_matches(
                needle,
                *[c.get("title") for c in contents],
                *[c.get("subtitle") for c in contents],
                tags,
            )

    rows, total = await fetch_page(db, stmt, params.page, params.page_size, predicate)
    results = [s.to_dict() if admin else _public_view(s, params.lang) for s in rows]
    return page_envelope(results, total, params.page, params.page_size)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_story(
    data: StoryCreate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Create a story."""
    if await _get_by_slug(db, data.slug) is not None:
        raise BadRequest(MSG_DUPLICATE_SLUG)

    story = SonaverseStory(
        slug=data.slug,
        content=localized_dump(data.content),
        youtube_url=data.youtube_url,
        tags=data.tags,
        is_published=data.is_published,
        is_main=data.is_main,
        author_id=user.id,
        updated_by=user.id,
    )
    db.add(story)
    await db.commit()
    await db.refresh(story)

    log.info("story created", extra={"slug": story.slug, "user_id": user.id})
    return {"success": True, "story": story.to_dict()}


@router.get("/{slug}")
async def get_story(
    slug: str,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """Get one story by slug."""
    admin = wants_admin_view(params, user)
    story = await _get_by_slug(db, slug)
    if story is None or (not admin and not story.is_published):
        raise NotFound(MSG_STORY_NOT_FOUND)
    if admin:
        return {"success": True, "story": story.to_dict()}
    return {"success": True, "story": _public_view(story, params.lang)}


@router.patch("/{slug}")
async def update_story(
    slug: str,
    data: StoryUpdate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Update a story."""
    story = await _get_by_slug(db, slug)
    if story is None:
        raise NotFound(MSG_STORY_NOT_FOUND)

    changes = data.model_dump(exclude_unset=True)
    if data.slug and data.slug != story.slug:
        if await _get_by_slug(db, data.slug) is not None:
            raise BadRequest(MSG_DUPLICATE_SLUG)
        story.slug = data.slug
    if data.content is not None:
        story.content = localized_dump(data.content)
    if "youtube_url" in changes:
        story.youtube_url = data.youtube_url
    if data.tags is not None:
        story.tags = data.tags
    if data.is_published is not None:
        story.is_published = data.is_published
    if data.is_main is not None:
        story.is_main = data.is_main
    story.updated_by = user.id

    await db.commit()
    await db.refresh(story)

    log.info(
        "story updated",
        extra={"slug": story.slug, "user_id": user.id, "fields": sorted(changes)},
    )
    return {"success": True, "story": story.to_dict()}


@router.delete("/{slug}")
async def delete_story(
    slug: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Delete a story."""
    story = await _get_by_slug(db, slug)
    if story is None:
        raise NotFound(MSG_STORY_NOT_FOUND)
    await db.delete(story)
    await db.commit()
    log.info("story deleted", extra={"slug": slug, "user_id": user.id})
    return {"success": True}
