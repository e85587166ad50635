import logging
import re
from typing import Optional
from urllib.parse import unquote

from motor.motor_asyncio import AsyncIOMotorCollection

from horeca_catalog.models.common import to_object_id

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """'Cups & Saucers' -> 'cups-saucers'"""
    if not text:
        return ""
    return _NON_ALNUM.sub("-", text.lower()).strip("-")


def generate_slug_from_title(title: str) -> str:
    """상품 제목으로 slug 생성. 'Cafe & Bar!' -> 'cafe-and-bar'"""
    if not title:
        return ""
    decoded = unquote(title)
    return slugify(decoded.lower().strip().replace("&", "and"))


async def generate_unique_slug(
    collection: AsyncIOMotorCollection,
    title: str,
    exclude_id: Optional[str] = None,
) -> str:
    """
    중복되지 않는 slug 생성. 이미 있으면 base-1, base-2 ... 중 가장 큰 번호 + 1.
    exclude_id 는 업데이트 시 자기 자신을 제외하기 위함.
    """
    base_slug = generate_slug_from_title(title)
    if not base_slug:
        raise ValueError("Cannot generate slug from empty title")

    base_query = {}
    exclude_oid = to_object_id(exclude_id) if exclude_id else None
    if exclude_oid is not None:
        base_query["_id"] = {"$ne": exclude_oid}

    existing = await collection.find_one({**base_query, "slug": base_slug}, {"_id": 1})
    if not existing:
        return base_slug

    pattern = re.compile(rf"^{re.escape(base_slug)}-(\d+)$")
    max_number = 0
    async for doc in collection.find({**base_query, "slug": {"$regex": pattern.pattern}}, {"slug": 1}):
        match = pattern.match(doc.get("slug", ""))
        if match:
            max_number = max(max_number, int(match.group(1)))

    unique_slug = f"{base_slug}-{max_number + 1}"
    logger.debug("Slug collision resolved.", extra={"base_slug": base_slug, "slug": unique_slug})
    return unique_slug
