"""Customer inquiry API router.

Submission is public; reading and processing inquiries requires an admin
session. Every status change is recorded in the inquiry's status history.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.accounts import is_valid_email
from sonaverse_cms.auth.dependencies import get_current_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.content import ListParams, fetch_page, list_params, page_envelope
from sonaverse_cms.db import Inquiry, InquiryStatus, InquiryStatusChange, get_db
from sonaverse_cms.db.models import utcnow
from sonaverse_cms.errors import (
    MSG_INQUIRY_NOT_FOUND,
    MSG_INVALID_EMAIL,
    MSG_INVALID_REQUEST,
    BadRequest,
    NotFound,
    read_json_object,
)

log = logging.getLogger("sonaverse-cms.inquiries")

router = APIRouter(prefix="/api/inquiries", tags=["inquiries"])

MSG_PRIVACY_CONSENT_REQUIRED = "개인정보 수집 및 이용에 동의해주세요."

REQUIRED_FIELDS = (
    "inquiry_type",
    "name",
    "company_name",
    "phone_number",
    "email",
    "message",
)
_STATUSES = {s.value for s in InquiryStatus}


def _required_text(data: dict[str, Any], field: str) -> str:
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise BadRequest(MSG_INVALID_REQUEST)
    value = (value or "").strip()
    if not value:
        raise BadRequest(f"필수 필드가 누락되었습니다: {field}")
    return value


def _attached_files(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise BadRequest(MSG_INVALID_REQUEST)
    return [v for v in value if v.strip()]


async def _load(db: AsyncSession, inquiry_id: str) -> Inquiry:
    inquiry = await db.get(Inquiry, inquiry_id)
    if inquiry is None:
        raise NotFound(MSG_INQUIRY_NOT_FOUND)
    return inquiry


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_inquiry(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> JSONResponse:
    """Public inquiry form submission."""
    data = await read_json_object(request)
    fields = {name: _required_text(data, name) for name in REQUIRED_FIELDS}
    if not is_valid_email(fields["email"]):
        raise BadRequest(MSG_INVALID_EMAIL)
    if data.get("privacy_consented") is not True:
        raise BadRequest(MSG_PRIVACY_CONSENT_REQUIRED)

    inquiry = Inquiry(
        **fields,
        attached_files=_attached_files(data.get("attached_files")),
        privacy_consented=True,
        status=InquiryStatus.PENDING.value,
        history=[],
    )
    db.add(inquiry)
    await db.commit()

    log.info(
        "inquiry submitted",
        extra={"inquiry_id": inquiry.id, "inquiry_type": inquiry.inquiry_type},
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"success": True, "inquiry": inquiry.to_dict()},
    )


@router.get("")
async def list_inquiries(
    request: Request,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    _user: TokenClaims = Depends(get_current_user),
) -> dict:
    """List inquiries, newest first. Optional status filter."""
    status_filter = (request.query_params.get("status") or "").strip()
    stmt = select(Inquiry).order_by(Inquiry.submitted_at.desc())
    if status_filter:
        if status_filter not in _STATUSES:
            raise BadRequest(MSG_INVALID_REQUEST)
        stmt = stmt.where(Inquiry.status == status_filter)

    rows, total = await fetch_page(db, stmt, params.page, params.page_size)
    return page_envelope(
        [i.to_dict() for i in rows], total, params.page, params.page_size
    )


@router.get("/{inquiry_id}")
async def get_inquiry(
    inquiry_id: str,
    db: AsyncSession = Depends(get_db),
    _user: TokenClaims = Depends(get_current_user),
) -> dict:
    inquiry = await _load(db, inquiry_id)
    return {"success": True, "inquiry": inquiry.to_dict()}


@router.put("/{inquiry_id}")
async def update_inquiry(
    request: Request,
    inquiry_id: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Change status and/or admin notes.

    A status change appends a history entry; completing an inquiry records
    who responded and when.
    """
    data = await read_json_object(request)
    new_status = data.get("status")
    if new_status is not None and (
        not isinstance(new_status, str) or new_status not in _STATUSES
    ):
        raise BadRequest(MSG_INVALID_REQUEST)
    notes = data.get("notes")
    if notes is not None and not isinstance(notes, str):
        raise BadRequest(MSG_INVALID_REQUEST)

    inquiry = await _load(db, inquiry_id)

    if "admin_notes" in data:
        admin_notes = data["admin_notes"]
        if admin_notes is not None and not isinstance(admin_notes, str):
            raise BadRequest(MSG_INVALID_REQUEST)
        inquiry.admin_notes = admin_notes

    if new_status is not None and new_status != inquiry.status:
        inquiry.history.append(
            InquiryStatusChange(
                status=new_status,
                changed_by=user.id,
                changed_at=utcnow(),
                notes=notes,
            )
        )
        inquiry.status = new_status
        if new_status == InquiryStatus.COMPLETED.value:
            inquiry.responded_at = utcnow()
            inquiry.responded_by = user.id
        log.info(
            "inquiry status changed",
            extra={"inquiry_id": inquiry.id, "status": new_status, "user_id": user.id},
        )

    await db.commit()
    return {"success": True, "inquiry": inquiry.to_dict()}


@router.delete("/{inquiry_id}")
async def delete_inquiry(
    inquiry_id: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    inquiry = await _load(db, inquiry_id)
    await db.delete(inquiry)
    await db.commit()
    log.info("inquiry deleted", extra={"inquiry_id": inquiry_id, "user_id": user.id})
    return {"success": True}
