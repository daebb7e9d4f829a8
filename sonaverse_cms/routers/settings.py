"""Site settings API router.

A single global settings document; last write wins.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.accounts import is_valid_email
from sonaverse_cms.auth.dependencies import get_current_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.content import Localized, localized_dump
from sonaverse_cms.db import SiteSetting, get_db
from sonaverse_cms.errors import MSG_INVALID_EMAIL, BadRequest

log = logging.getLogger("sonaverse-cms.settings")

router = APIRouter(prefix="/api/admin/settings", tags=["settings"])

SETTINGS_ID = "global"

MSG_SETTINGS_REQUIRED = "필수 정보가 누락되었습니다."
MSG_SETTINGS_SAVED = "설정이 성공적으로 저장되었습니다."
MSG_SETTINGS_RESET = "설정이 초기화되었습니다."


def default_settings() -> dict[str, Any]:
    return {
        "site_name": {"ko": "소나버스", "en": "Sonaverse"},
        "site_description": {
            "ko": "소나버스 공식 웹사이트",
            "en": "Sonaverse Official Website",
        },
        "contact_email": "contact@sonaverse.kr",
        "contact_phone": "02-1234-5678",
        "address": {"ko": "서울특별시 강남구", "en": "Gangnam-gu, Seoul"},
        "social_links": {"facebook": "", "twitter": "", "instagram": "", "linkedin": ""},
        "inquiry_categories": [],
    }


class SettingsUpdate(BaseModel):
    site_name: Optional[Localized[str]] = None
    site_description: Optional[Localized[str]] = None
    contact_email: Optional[str] = Field(None, max_length=320)
    contact_phone: Optional[str] = Field(None, max_length=64)
    address: Optional[Localized[str]] = None
    social_links: Optional[dict[str, str]] = None
    inquiry_categories: Optional[list[str]] = None


async def get_or_create_settings(db: AsyncSession) -> SiteSetting:
    settings = await db.get(SiteSetting, SETTINGS_ID)
    if settings is None:
        settings = SiteSetting(id=SETTINGS_ID, **default_settings())
        db.add(settings)
        await db.flush()
    return settings


@router.get("")
async def get_settings(
    db: AsyncSession = Depends(get_db),
    _user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Current settings; defaults are stored on first read."""
    settings = await get_or_create_settings(db)
    await db.commit()
    return {"success": True, "settings": settings.to_dict()}


@router.put("")
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    if not data.site_name or not data.site_description or not data.contact_email:
        raise BadRequest(MSG_SETTINGS_REQUIRED)
    if not is_valid_email(data.contact_email):
        raise BadRequest(MSG_INVALID_EMAIL)

    settings = await get_or_create_settings(db)
    settings.site_name = localized_dump(data.site_name)
    settings.site_description = localized_dump(data.site_description)
    settings.contact_email = data.contact_email.strip()
    if data.contact_phone is not None:
        settings.contact_phone = data.contact_phone
    if data.address is not None:
        settings.address = localized_dump(data.address)
    if data.social_links is not None:
        settings.social_links = data.social_links
    if data.inquiry_categories is not None:
        settings.inquiry_categories = data.inquiry_categories
    settings.updated_by = user.id

    await db.commit()
    await db.refresh(settings)
    log.info("settings saved", extra={"user_id": user.id})
    return {"success": True, "message": MSG_SETTINGS_SAVED, "settings": settings.to_dict()}


@router.post("/reset")
async def reset_settings(
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Restore the default settings."""
    settings = await get_or_create_settings(db)
    for key, value in default_settings().items():
        setattr(settings, key, value)
    settings.updated_by = user.id

    await db.commit()
    await db.refresh(settings)
    log.warning("settings reset", extra={"user_id": user.id})
    return {"success": True, "message": MSG_SETTINGS_RESET, "settings": settings.to_dict()}
