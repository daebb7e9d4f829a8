"""Visitor logging, referral keywords and admin dashboard statistics."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sonaverse_cms.auth.config import AuthConfig, get_auth_config
from sonaverse_cms.auth.dependencies import get_current_user
from sonaverse_cms.auth.tokens import TokenClaims
from sonaverse_cms.db import (
    Inquiry,
    InquiryStatus,
    PressRelease,
    Product,
    ReferralKeyword,
    SonaverseStory,
    VisitorLog,
    get_db,
)
from sonaverse_cms.db.models import utcnow
from sonaverse_cms.errors import MSG_INVALID_REQUEST, BadRequest, read_json_object
from sonaverse_cms.referrals import (
    engine_display_name,
    extract_search_keyword,
    is_valid_keyword,
)

log = logging.getLogger("sonaverse-cms.analytics")

router = APIRouter(tags=["analytics"])

MSG_PAGE_SESSION_REQUIRED = "페이지와 세션 ID가 필요합니다."

TOP_PAGES_DAYS = 7
TOP_PAGES_LIMIT = 5
RECENT_POSTS_LIMIT = 5
TOP_KEYWORDS_LIMIT = 10

PERIODS = ("daily", "weekly", "monthly")
KEYWORD_WINDOW_DAYS = {"weekly": 7, "monthly": 30}


@dataclass(frozen=True)
class Bucket:
    """One point of a trend chart; start and end are inclusive UTC days."""

    label: str
    start: date
    end: date


def _week_of_month(day: date) -> int:
    # weeks start on Sunday
    lead = (day.replace(day=1).weekday() + 1) % 7
    return (day.day + lead - 1) // 7 + 1


def period_buckets(period: str, today: date) -> list[Bucket]:
    """Trend buckets, oldest first.

    daily: the last 7 days. weekly: the last 4 seven-day windows ending
    today. monthly: the last 6 calendar months including the current one.
    """
    if period == "daily":
        days = [today - timedelta(days=n) for n in range(6, -1, -1)]
        return [Bucket(f"{d.month}월 {d.day}일", d, d) for d in days]

    if period == "weekly":
        buckets = []
        for n in range(3, -1, -1):
            end = today - timedelta(days=7 * n)
            start = end - timedelta(days=6)
            label = f"{start.month}월 {_week_of_month(start)}째 주"
            buckets.append(Bucket(label, start, end))
        return buckets

    if period == "monthly":
        buckets = []
        for n in range(5, -1, -1):
            year, month0 = divmod(today.year * 12 + today.month - 1 - n, 12)
            month = month0 + 1
            last_day = calendar.monthrange(year, month)[1]
            buckets.append(
                Bucket(f"{month}월", date(year, month, 1), date(year, month, last_day))
            )
        return buckets

    raise ValueError(f"unknown period: {period}")


def _period_param(request: Request, name: str) -> str:
    value = request.query_params.get(name) or "daily"
    if value not in PERIODS:
        raise BadRequest(MSG_INVALID_REQUEST)
    return value


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _opt_text(data: dict[str, Any], key: str, limit: int = 1024) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise BadRequest(MSG_INVALID_REQUEST)
    return value.strip()[:limit] or None


def visitor_change(today: int, yesterday: int) -> tuple[int, str]:
    """Percent change of today's visitors against yesterday's."""
    if yesterday == 0:
        return (100, "increase") if today > 0 else (0, "same")
    change = (today - yesterday) / yesterday * 100
    if change > 0:
        return round(abs(change)), "increase"
    if change < 0:
        return round(abs(change)), "decrease"
    return 0, "same"


async def _unique_visitors(db: AsyncSession, *days: str) -> int:
    stmt = select(func.count(distinct(VisitorLog.session_id)))
    if days:
        stmt = stmt.where(VisitorLog.visit_date.in_(days))
    return int((await db.execute(stmt)).scalar_one())


async def _unique_visitors_between(db: AsyncSession, start: date, end: date) -> int:
    stmt = select(func.count(distinct(VisitorLog.session_id))).where(
        VisitorLog.visit_date >= start.isoformat(),
        VisitorLog.visit_date <= end.isoformat(),
    )
    return int((await db.execute(stmt)).scalar_one())


async def _count(db: AsyncSession, model, *where) -> int:
    stmt = select(func.count()).select_from(model)
    for clause in where:
        stmt = stmt.where(clause)
    return int((await db.execute(stmt)).scalar_one())


async def _visitor_summary(db: AsyncSession, today: date) -> dict[str, Any]:
    today_visitors = await _unique_visitors(db, today.isoformat())
    yesterday_visitors = await _unique_visitors(
        db, (today - timedelta(days=1)).isoformat()
    )
    change_percent, change_type = visitor_change(today_visitors, yesterday_visitors)
    return {
        "today": today_visitors,
        "yesterday": yesterday_visitors,
        "changePercent": change_percent,
        "changeType": change_type,
    }


async def _count_referral(db: AsyncSession, referrer: str, now: datetime) -> None:
    found = extract_search_keyword(referrer)
    if found is None or not is_valid_keyword(found.keyword):
        return

    result = await db.execute(
        select(ReferralKeyword).where(
            ReferralKeyword.keyword == found.keyword,
            ReferralKeyword.search_engine == found.search_engine,
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        db.add(
            ReferralKeyword(
                keyword=found.keyword,
                search_engine=found.search_engine,
                referrer_url=referrer,
                count=1,
                last_used=now,
            )
        )
    else:
        row.count += 1
        row.last_used = now
    log.info(
        "referral keyword counted",
        extra={"keyword": found.keyword, "search_engine": found.search_engine},
    )


@router.post("/api/analytics/log")
async def log_visit(
    request: Request,
    db: AsyncSession = Depends(get_db),
    config: AuthConfig = Depends(get_auth_config),
) -> dict:
    """Record a page visit, at most once per session per UTC day."""
    if not config.record_analytics:
        return {"success": True, "message": "Skipped in development"}

    data = await read_json_object(request)
    page = _opt_text(data, "page")
    session_id = _opt_text(data, "sessionId", limit=128)
    if not page or not session_id:
        raise BadRequest(MSG_PAGE_SESSION_REQUIRED)

    now = utcnow()
    visit_date = now.date().isoformat()

    existing = await db.execute(
        select(VisitorLog.id)
        .where(VisitorLog.session_id == session_id, VisitorLog.visit_date == visit_date)
        .limit(1)
    )
    if existing.scalar_one_or_none() is not None:
        return {"success": True, "message": "Already visited today"}

    referrer = _opt_text(data, "referrer")
    db.add(
        VisitorLog(
            page=page,
            session_id=session_id,
            visit_date=visit_date,
            referrer=referrer,
            user_agent=_opt_text(data, "userAgent") or request.headers.get("user-agent"),
            ip=_opt_text(data, "ip", limit=64)
            or (request.client.host if request.client else None),
            timestamp=now,
        )
    )
    if referrer:
        await _count_referral(db, referrer, now)
    await db.commit()
    return {"success": True, "message": "New visit logged"}


@router.get("/api/admin/stats")
async def dashboard_stats(
    db: AsyncSession = Depends(get_db),
    _user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Content counts, inquiry backlog and visitor figures for the dashboard."""
    today = utcnow().date()
    visitors = await _visitor_summary(db, today)

    return {
        "success": True,
        "totalPress": await _count(db, PressRelease),
        "totalSonaverseStories": await _count(db, SonaverseStory),
        "totalProducts": await _count(db, Product),
        "totalInquiries": await _count(db, Inquiry),
        "pendingInquiries": await _count(
            db, Inquiry, Inquiry.status == InquiryStatus.PENDING.value
        ),
        "totalVisitors": await _unique_visitors(db),
        "todayVisitors": visitors["today"],
        "yesterdayVisitors": visitors["yesterday"],
        "visitorChangePercent": visitors["changePercent"],
        "visitorChangeType": visitors["changeType"],
        "topPages": await _top_pages(db, today),
        "recentPosts": await _recent_posts(db),
    }


@router.get("/api/admin/analytics")
async def analytics_trends(
    request: Request,
    db: AsyncSession = Depends(get_db),
    _user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Visitor and content trends plus top search keywords.

    visitorPeriod, contentPeriod and keywordPeriod each take daily, weekly
    or monthly (default daily).
    """
    visitor_period = _period_param(request, "visitorPeriod")
    content_period = _period_param(request, "contentPeriod")
    keyword_period = _period_param(request, "keywordPeriod")

    now = utcnow()
    today = now.date()

    visitor_trend = [
        {"date": b.label, "count": await _unique_visitors_between(db, b.start, b.end)}
        for b in period_buckets(visitor_period, today)
    ]
    visitors = await _visitor_summary(db, today)
    visitors.update(trend=visitor_trend, totalUnique=await _unique_visitors(db))

    return {
        "success": True,
        "visitors": visitors,
        "referralKeywords": await _top_keywords(db, keyword_period, now),
        "content": await _content_trends(db, content_period, today),
        "totals": {
            "press": await _count(db, PressRelease),
            "sonaverseStories": await _count(db, SonaverseStory),
        },
    }


async def _content_trends(
    db: AsyncSession, period: str, today: date
) -> dict[str, list[dict[str, Any]]]:
    press: list[dict[str, Any]] = []
    stories: list[dict[str, Any]] = []
    for b in period_buckets(period, today):
        since, until = _day_start(b.start), _day_start(b.end + timedelta(days=1))
        press.append(
            {
                "date": b.label,
                "count": await _count(
                    db,
                    PressRelease,
                    PressRelease.is_active.is_(True),
                    PressRelease.created_at >= since,
                    PressRelease.created_at < until,
                ),
            }
        )
        stories.append(
            {
                "date": b.label,
                "count": await _count(
                    db,
                    SonaverseStory,
                    SonaverseStory.is_published.is_(True),
                    SonaverseStory.created_at >= since,
                    SonaverseStory.created_at < until,
                ),
            }
        )
    return {"press": press, "sonaverseStory": stories}


async def _top_keywords(
    db: AsyncSession, period: str, now: datetime
) -> list[dict[str, Any]]:
    if period == "daily":
        cutoff = _day_start(now.date())
    else:
        cutoff = now - timedelta(days=KEYWORD_WINDOW_DAYS[period])
    result = await db.execute(
        select(ReferralKeyword)
        .where(ReferralKeyword.last_used >= cutoff)
        .order_by(ReferralKeyword.count.desc(), ReferralKeyword.keyword)
        .limit(TOP_KEYWORDS_LIMIT)
    )
    return [
        {
            "keyword": k.keyword,
            "count": k.count,
            "searchEngine": k.search_engine,
            "searchEngineDisplay": engine_display_name(k.search_engine),
        }
        for k in result.scalars().all()
    ]


async def _top_pages(db: AsyncSession, today: date) -> list[dict[str, Any]]:
    since = (today - timedelta(days=TOP_PAGES_DAYS - 1)).isoformat()
    visits = func.count(VisitorLog.id).label("visits")
    result = await db.execute(
        select(VisitorLog.page, visits)
        .where(VisitorLog.visit_date >= since)
        .group_by(VisitorLog.page)
        .order_by(visits.desc(), VisitorLog.page)
        .limit(TOP_PAGES_LIMIT)
    )
    return [{"page": page, "visits": int(count)} for page, count in result.all()]


async def _recent_posts(db: AsyncSession) -> list[dict[str, Any]]:
    posts: list[dict[str, Any]] = []
    for kind, model in (("press", PressRelease), ("sonaverse-story", SonaverseStory)):
        result = await db.execute(
            select(model).order_by(model.created_at.desc()).limit(3)
        )
        for item in result.scalars().all():
            content = item.content or {}
            title = (content.get("ko") or {}).get("title") or (
                content.get("en") or {}
            ).get("title")
            posts.append(
                {
                    "type": kind,
                    "title": title or "제목 없음",
                    "slug": item.slug,
                    "created_at": item.created_at.isoformat() if item.created_at else None,
                }
            )
    posts.sort(key=lambda p: p["created_at"] or "", reverse=True)
    return posts[:RECENT_POSTS_LIMIT]
