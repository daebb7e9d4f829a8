"""Sonaverse CMS Database Models.

Admin accounts plus the bilingual content collections managed through the
admin console. Localized fields are stored as JSON maps keyed by language
("ko", "en"); their shape is validated by the pydantic schemas before a row
is written.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AdminRole(str, Enum):
    """Admin account roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    EDITOR = "editor"


class InquiryStatus(str, Enum):
    """Inquiry processing states."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class AdminUser(Base):
    """Admin console account."""

    __tablename__ = "admin_users"

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(320), nullable=False, unique=True, index=True)
    username = Column(String(128), nullable=False, unique=True)
    password_hash = Column(String(512), nullable=False)
    role = Column(String(32), nullable=False, default=AdminRole.ADMIN.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def claims(self) -> dict[str, str]:
        """Token claim set for this account."""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation (never includes the hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "last_login_at": _iso(self.last_login_at),
        }


class PressRelease(Base):
    """Press coverage entry."""

    __tablename__ = "press_releases"

    id = Column(String(32), primary_key=True, default=new_id)
    slug = Column(String(256), nullable=False, unique=True, index=True)
    press_name = Column(JSON, nullable=False)
    content = Column(JSON, nullable=False)
    thumbnail = Column(String(1024), nullable=True)
    external_link = Column(String(1024), nullable=True)
    tags = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
    updated_by = Column(String(128), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "press_name": self.press_name,
            "content": self.content,
            "thumbnail": self.thumbnail,
            "external_link": self.external_link,
            "tags": self.tags or {},
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "last_updated": _iso(self.last_updated),
            "updated_by": self.updated_by,
        }


class SonaverseStory(Base):
    """Brand story article."""

    __tablename__ = "sonaverse_stories"

    id = Column(String(32), primary_key=True, default=new_id)
    slug = Column(String(256), nullable=False, unique=True, index=True)
    content = Column(JSON, nullable=False)
    youtube_url = Column(String(1024), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    is_published = Column(Boolean, nullable=False, default=True)
    is_main = Column(Boolean, nullable=False, default=False)
    author_id = Column(String(32), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
    updated_by = Column(String(128), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "content": self.content,
            "youtube_url": self.youtube_url,
            "tags": self.tags or [],
            "is_published": self.is_published,
            "is_main": self.is_main,
            "author_id": self.author_id,
            "created_at": _iso(self.created_at),
            "last_updated": _iso(self.last_updated),
            "updated_by": self.updated_by,
        }


class Product(Base):
    """Catalog product (mobility aids and care consumables)."""

    __tablename__ = "products"
    __table_args__ = (Index("ix_products_category_active", "category", "is_active"),)

    id = Column(String(32), primary_key=True, default=new_id)
    slug = Column(String(256), nullable=False, unique=True, index=True)
    name = Column(JSON, nullable=False)
    description = Column(JSON, nullable=False)
    category = Column(String(128), nullable=False)
    features = Column(JSON, nullable=False, default=dict)
    specifications = Column(JSON, nullable=False, default=dict)
    main_image_url = Column(String(1024), nullable=True)
    gallery_images = Column(JSON, nullable=False, default=list)
    detail_images = Column(JSON, nullable=False, default=list)
    external_link = Column(String(1024), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
    updated_by = Column(String(128), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "features": self.features or {},
            "specifications": self.specifications or {},
            "main_image_url": self.main_image_url,
            "gallery_images": self.gallery_images or [],
            "detail_images": self.detail_images or [],
            "external_link": self.external_link,
            "is_active": self.is_active,
            "created_at": _iso(self.created_at),
            "last_updated": _iso(self.last_updated),
            "updated_by": self.updated_by,
        }


class Page(Base):
    """Static page composed of ordered bilingual sections."""

    __tablename__ = "pages"

    id = Column(String(32), primary_key=True, default=new_id)
    page_key = Column(String(128), nullable=False, unique=True, index=True)
    sections = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
    updated_by = Column(String(128), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "page_key": self.page_key,
            "sections": self.sections or [],
            "is_active": self.is_active,
            "last_updated": _iso(self.last_updated),
            "updated_by": self.updated_by,
        }


class Inquiry(Base):
    """Customer inquiry submitted through the public form."""

    __tablename__ = "inquiries"
    __table_args__ = (Index("ix_inquiries_status_submitted", "status", "submitted_at"),)

    id = Column(String(32), primary_key=True, default=new_id)
    inquiry_type = Column(String(128), nullable=False)
    name = Column(String(256), nullable=False)
    company_name = Column(String(256), nullable=True)
    phone_number = Column(String(64), nullable=False)
    email = Column(String(320), nullable=False)
    message = Column(Text, nullable=False)
    attached_files = Column(JSON, nullable=False, default=list)
    privacy_consented = Column(Boolean, nullable=False, default=False)

    status = Column(String(32), nullable=False, default=InquiryStatus.PENDING.value)
    admin_notes = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    responded_by = Column(String(128), nullable=True)

    submitted_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    history = relationship(
        "InquiryStatusChange",
        back_populates="inquiry",
        cascade="all, delete-orphan",
        order_by="InquiryStatusChange.id",
        lazy="selectin",
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "inquiry_type": self.inquiry_type,
            "name": self.name,
            "company_name": self.company_name,
            "phone_number": self.phone_number,
            "email": self.email,
            "message": self.message,
            "attached_files": self.attached_files or [],
            "privacy_consented": self.privacy_consented,
            "status": self.status,
            "admin_notes": self.admin_notes,
            "responded_at": _iso(self.responded_at),
            "responded_by": self.responded_by,
            "submitted_at": _iso(self.submitted_at),
            "status_history": [h.to_dict() for h in (self.history or [])],
        }


class InquiryStatusChange(Base):
    """Append-only status history entry for an inquiry."""

    __tablename__ = "inquiry_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    inquiry_id = Column(
        String(32),
        ForeignKey("inquiries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(String(32), nullable=False)
    changed_by = Column(String(128), nullable=False)
    notes = Column(Text, nullable=True)
    changed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    inquiry = relationship("Inquiry", back_populates="history")

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "changed_by": self.changed_by,
            "changed_at": _iso(self.changed_at),
            "notes": self.notes,
        }


class SiteSetting(Base):
    """Single global site settings document."""

    __tablename__ = "site_settings"

    id = Column(String(32), primary_key=True, default="global")
    site_name = Column(JSON, nullable=False)
    site_description = Column(JSON, nullable=False)
    contact_email = Column(String(320), nullable=False)
    contact_phone = Column(String(64), nullable=True)
    address = Column(JSON, nullable=True)
    social_links = Column(JSON, nullable=False, default=dict)
    inquiry_categories = Column(JSON, nullable=False, default=list)

    last_updated = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
    )
    updated_by = Column(String(128), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "site_name": self.site_name,
            "site_description": self.site_description,
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "address": self.address,
            "social_links": self.social_links or {},
            "inquiry_categories": self.inquiry_categories or [],
            "last_updated": _iso(self.last_updated),
            "updated_by": self.updated_by,
        }


class VisitorLog(Base):
    """One page visit per session per UTC day."""

    __tablename__ = "visitor_logs"
    __table_args__ = (
        Index("ix_visitor_logs_session_day", "session_id", "visit_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    page = Column(String(1024), nullable=False)
    session_id = Column(String(128), nullable=False)
    visit_date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD (UTC)
    referrer = Column(String(1024), nullable=True)
    user_agent = Column(String(1024), nullable=True)
    ip = Column(String(64), nullable=True)
    timestamp = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class ReferralKeyword(Base):
    """Search keyword that brought visitors in, counted per search engine."""

    __tablename__ = "referral_keywords"
    __table_args__ = (
        UniqueConstraint("keyword", "search_engine", name="uq_referral_keywords_engine"),
        Index("ix_referral_keywords_last_used", "last_used"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    keyword = Column(String(100), nullable=False)
    search_engine = Column(String(32), nullable=False)
    referrer_url = Column(String(1024), nullable=False)
    count = Column(Integer, nullable=False, default=1)
    last_used = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
