"""Sonaverse CMS Database Module."""

from sonaverse_cms.db.models import (
    AdminRole,
    AdminUser,
    Base,
    Inquiry,
    InquiryStatus,
    InquiryStatusChange,
    Page,
    PressRelease,
    Product,
    ReferralKeyword,
    SiteSetting,
    SonaverseStory,
    VisitorLog,
)
from sonaverse_cms.db.session import (
    close_db,
    get_db,
    get_engine,
    get_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "AdminRole",
    "AdminUser",
    "Base",
    "Inquiry",
    "InquiryStatus",
    "InquiryStatusChange",
    "Page",
    "PressRelease",
    "Product",
    "ReferralKeyword",
    "SiteSetting",
    "SonaverseStory",
    "VisitorLog",
    "close_db",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
