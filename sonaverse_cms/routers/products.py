"""Products catalog API router.

Covers both the mobility aids and the care consumables lines; the line is
the product category.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field, field_validator
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
from sonaverse_cms.db import Product, get_db
from sonaverse_cms.errors import MSG_DUPLICATE_SLUG, BadRequest, NotFound

log = logging.getLogger("sonaverse-cms.products")

router = APIRouter(prefix="/api/products", tags=["products"])

MSG_PRODUCT_NOT_FOUND = "제품을 찾을 수 없습니다."


# ==============================================================================
# Request Models
# ==============================================================================


class ProductCreate(BaseModel):
    """Request model for creating a product."""

    slug: str = Field(..., min_length=1, max_length=256, pattern=SLUG_PATTERN)
    name: Localized[str]
    description: Localized[str]
    category: str = Field(..., min_length=1, max_length=128)
    features: Optional[Localized[list[str]]] = None
    specifications: Optional[Localized[dict[str, str]]] = None
    main_image_url: Optional[str] = Field(None, max_length=1024)
    gallery_images: list[str] = Field(default_factory=list)
    detail_images: list[str] = Field(default_factory=list)
    external_link: Optional[str] = Field(None, max_length=1024)
    is_active: bool = True

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)


class ProductUpdate(BaseModel):
    """Request model for updating a product."""

    slug: Optional[str] = Field(None, min_length=1, max_length=256, pattern=SLUG_PATTERN)
    name: Optional[Localized[str]] = None
    description: Optional[Localized[str]] = None
    category: Optional[str] = Field(None, min_length=1, max_length=128)
    features: Optional[Localized[list[str]]] = None
    specifications: Optional[Localized[dict[str, str]]] = None
    main_image_url: Optional[str] = Field(None, max_length=1024)
    gallery_images: Optional[list[str]] = None
    detail_images: Optional[list[str]] = None
    external_link: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None

    normalize_slug_field = field_validator("slug", mode="before")(normalize_slug)


# ==============================================================================
# Helpers
# ==============================================================================


def _public_view(product: Product, lang: str) -> dict[str, Any]:
    return {
        "id": product.id,
        "slug": product.slug,
        "name": localize(product.name, lang),
        "description": localize(product.description, lang),
        "category": product.category,
        "features": localize(product.features, lang) or [],
        "specifications": localize(product.specifications, lang) or {},
        "main_image_url": product.main_image_url,
        "gallery_images": product.gallery_images or [],
        "detail_images": product.detail_images or [],
        "external_link": product.external_link,
        "created_at": product.created_at.isoformat() if product.created_at else None,
    }


async def _get_by_slug(db: AsyncSession, slug: str) -> Optional[Product]:
    result = await db.execute(select(Product).where(Product.slug == slug))
    return result.scalar_one_or_none()


# ==============================================================================
# Endpoints
# ==============================================================================


@router.get("")
async def list_products(
    request: Request,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """List products, newest first. Optional category filter."""
    admin = wants_admin_view(params, user)
    category = (request.query_params.get("category") or "").strip()

    stmt = select(Product).order_by(Product.created_at.desc())
    if not admin:
        stmt = stmt.where(Product.is_active.is_(True))
    elif params.active is not None:
        stmt = stmt.where(Product.is_active.is_(params.active))
    if category:
        stmt = stmt.where(Product.category == category)

    predicate = None
    if params.search:
        needle, lang = params.search, params.lang

        def predicate(p: Product) -> bool:
            return text_matches(
                needle,
                localize(p.name, lang),
                localize(p.description, lang),
                localize(p.features, lang),
            )

    rows, total = await fetch_page(db, stmt, params.page, params.page_size, predicate)
    results = [p.to_dict() if admin else _public_view(p, params.lang) for p in rows]
    return page_envelope(results, total, params.page, params.page_size)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Create a product."""
    if await _get_by_slug(db, data.slug) is not None:
        raise BadRequest(MSG_DUPLICATE_SLUG)

    product = Product(
        slug=data.slug,
        name=localized_dump(data.name),
        description=localized_dump(data.description),
        category=data.category,
        features=localized_dump(data.features) or empty_localized(list),
        specifications=localized_dump(data.specifications) or empty_localized(dict),
        main_image_url=data.main_image_url,
        gallery_images=data.gallery_images,
        detail_images=data.detail_images,
        external_link=data.external_link,
        is_active=data.is_active,
        updated_by=user.id,
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)

    log.info("product created", extra={"slug": product.slug, "user_id": user.id})
    return {"success": True, "product": product.to_dict()}


@router.get("/{slug}")
async def get_product(
    slug: str,
    params: ListParams = Depends(list_params),
    db: AsyncSession = Depends(get_db),
    user: Optional[TokenClaims] = Depends(get_optional_user),
) -> dict:
    """Get a product by slug."""
    admin = wants_admin_view(params, user)
    product = await _get_by_slug(db, slug)
    if product is None or (not admin and not product.is_active):
        raise NotFound(MSG_PRODUCT_NOT_FOUND)
    if admin:
        return {"success": True, "product": product.to_dict()}
    return {"success": True, "product": _public_view(product, params.lang)}


@router.patch("/{slug}")
async def update_product(
    slug: str,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Update a product."""
    product = await _get_by_slug(db, slug)
    if product is None:
        raise NotFound(MSG_PRODUCT_NOT_FOUND)

    changes = data.model_dump(exclude_unset=True)
    if data.slug and data.slug != product.slug:
        if await _get_by_slug(db, data.slug) is not None:
            raise BadRequest(MSG_DUPLICATE_SLUG)
        product.slug = data.slug
    for name in ("name", "description", "features", "specifications"):
        value = getattr(data, name)
        if value is not None:
            setattr(product, name, localized_dump(value))
    if data.category is not None:
        product.category = data.category
    for name in ("main_image_url", "external_link"):
        if name in changes:
            setattr(product, name, getattr(data, name))
    if data.gallery_images is not None:
        product.gallery_images = data.gallery_images
    if data.detail_images is not None:
        product.detail_images = data.detail_images
    if data.is_active is not None:
        product.is_active = data.is_active
    product.updated_by = user.id

    await db.commit()
    await db.refresh(product)

    log.info(
        "product updated",
        extra={"slug": product.slug, "user_id": user.id, "fields": sorted(changes)},
    )
    return {"success": True, "product": product.to_dict()}


@router.delete("/{slug}")
async def delete_product(
    slug: str,
    db: AsyncSession = Depends(get_db),
    user: TokenClaims = Depends(get_current_user),
) -> dict:
    """Delete a product."""
    product = await _get_by_slug(db, slug)
    if product is None:
        raise NotFound(MSG_PRODUCT_NOT_FOUND)
    await db.delete(product)
    await db.commit()
    log.info("product deleted", extra={"slug": slug, "user_id": user.id})
    return {"success": True}
