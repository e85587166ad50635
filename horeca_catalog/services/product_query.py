"""
Translates storefront query-string parameters into a MongoDB query.

MongoDB only accepts ``$text`` at the top level of a filter, so the text
clause is never wrapped in ``$or``/``$elemMatch`` or a nested ``$and``: it is
either merged into the root document or placed first in the root ``$and``.
"""
import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

from horeca_catalog.core.config import settings
from horeca_catalog.models.common import to_object_ids
from horeca_catalog.models.product import LIST_PROJECTION_FIELDS, normalize_filter_label
from horeca_catalog.services.category_cache import CategoryTreeCache

logger = logging.getLogger(__name__)

SORT_NEWEST = "newest"
SORT_PRICE_ASC = "price-asc"
SORT_PRICE_DESC = "price-desc"

TEXT_SCORE = {"$meta": "textScore"}


@dataclass
class ProductListParams:
    category: Optional[str] = None
    business: Optional[str] = None
    search: Optional[str] = None
    featured: Optional[str] = None
    status: Optional[str] = None
    price_min: Optional[str] = None
    price_max: Optional[str] = None
    colors: Optional[str] = None
    brands: Optional[str] = None
    filters: Optional[str] = None
    sort_by: str = SORT_NEWEST
    page: int = 1
    limit: int = settings.DEFAULT_PAGE_SIZE


@dataclass
class ProductQuery:
    filter: Dict[str, Any]
    sort: List[Tuple[str, Any]]
    skip: int
    limit: int
    projection: Optional[Dict[str, Any]] = None
    use_text_search: bool = False
    conditions: List[Dict[str, Any]] = field(default_factory=list)


def split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def parse_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(value) else value


def parse_dynamic_filters(raw: Optional[str]) -> List[Tuple[str, List[str]]]:
    """
    '{"material": ["porcelain"]}' -> [("Material", ["Porcelain"])]
    정규화 후 같은 key 가 되어도 원래 key 마다 조건을 따로 만든다
    잘못된 JSON 은 경고만 남기고 무시 (요청 전체를 실패시키지 않는다)
    """
    if not raw:
        return []
    try:
        parsed = json.loads(unquote(raw))
    except ValueError as e:
        logger.warning("Failed to parse filters param.", extra={"filters": raw, "error": str(e)})
        return []
    if not isinstance(parsed, dict):
        logger.warning("Ignoring filters param that is not an object.", extra={"filters": raw})
        return []

    normalized: List[Tuple[str, List[str]]] = []
    for key, values in parsed.items():
        if not isinstance(key, str) or not key.strip() or not isinstance(values, list):
            continue
        labels = [normalize_filter_label(v) for v in values if isinstance(v, str) and v.strip()]
        if labels:
            normalized.append((normalize_filter_label(key), labels))
    return normalized


def build_text_clause(search: Optional[str]) -> Optional[Dict[str, Any]]:
    if search and search.strip():
        return {"$text": {"$search": search.strip()}}
    return None


def combine_conditions(text_clause: Optional[Dict[str, Any]], conditions: List[Dict[str, Any]]) -> Dict[str, Any]:
    """텍스트 검색 절은 항상 루트 레벨에 둔다"""
    if text_clause is not None:
        if conditions:
            return {"$and": [text_clause, *conditions]}
        return dict(text_clause)
    if conditions:
        return {"$and": list(conditions)}
    return {}


def build_sort(sort_by: Optional[str], use_text_search: bool) -> List[Tuple[str, Any]]:
    if sort_by == SORT_PRICE_ASC:
        return [("price", 1)]
    if sort_by == SORT_PRICE_DESC:
        return [("price", -1)]
    if use_text_search:
        return [("score", TEXT_SCORE), ("created_at", -1)]
    return [("created_at", -1)]


def build_projection(limit: int, use_text_search: bool) -> Optional[Dict[str, Any]]:
    """목록 조회(limit > 1)는 필요한 필드만, 상세 조회는 전체 문서"""
    projection: Optional[Dict[str, Any]] = None
    if limit > 1:
        projection = {name: 1 for name in LIST_PROJECTION_FIELDS}
    if use_text_search:
        projection = dict(projection or {})
        projection["score"] = TEXT_SCORE
    return projection


def compute_skip(page: int, limit: int) -> int:
    return max(0, (page - 1) * limit)


def build_pagination(total: int, page: int, limit: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


class ProductQueryBuilder:
    def __init__(self, category_cache: CategoryTreeCache):
        self.category_cache = category_cache

    async def category_condition(self, slug: str) -> Dict[str, Any]:
        # 없는 slug 는 빈 $in 이 되어 결과도 비게 된다
        category_ids = to_object_ids(await self.category_cache.get_category_ids_with_children(slug))
        return {
            "$or": [
                {"category_id": {"$in": category_ids}},
                {"category_ids": {"$in": category_ids}},
            ]
        }

    async def context_conditions(self, params: ProductListParams) -> List[Dict[str, Any]]:
        """카테고리/업종 조건 (facet 집계와 공유)"""
        conditions = []
        if params.category:
            conditions.append(await self.category_condition(params.category))
        if params.business:
            conditions.append({"business_type_slugs": params.business})
        return conditions

    def user_conditions(self, params: ProductListParams) -> List[Dict[str, Any]]:
        conditions: List[Dict[str, Any]] = []

        if params.featured == "true":
            conditions.append({"featured": True})

        if params.status:
            conditions.append({"status": params.status})

        price: Dict[str, float] = {}
        price_min = parse_float(params.price_min)
        price_max = parse_float(params.price_max)
        if price_min is not None:
            price["$gte"] = price_min
        if price_max is not None:
            price["$lte"] = price_max
        if price:
            conditions.append({"price": price})

        brands = split_csv(params.brands)
        if brands:
            conditions.append({"brand": {"$in": brands}})

        colors = split_csv(params.colors)
        if colors:
            conditions.append({"color_variants.color_name": {"$in": colors}})

        for key, values in parse_dynamic_filters(params.filters):
            conditions.append({"filters": {"$elemMatch": {"key": key, "values": {"$in": values}}}})

        return conditions

    async def build(self, params: ProductListParams) -> ProductQuery:
        text_clause = build_text_clause(params.search)
        use_text_search = text_clause is not None

        conditions = await self.context_conditions(params)
        conditions.extend(self.user_conditions(params))

        return ProductQuery(
            filter=combine_conditions(text_clause, conditions),
            sort=build_sort(params.sort_by, use_text_search),
            skip=compute_skip(params.page, params.limit),
            limit=params.limit,
            projection=build_projection(params.limit, use_text_search),
            use_text_search=use_text_search,
            conditions=conditions,
        )

    async def build_context_filter(self, params: ProductListParams) -> Dict[str, Any]:
        """facet 집계용: 가격/색상/브랜드/동적 필터를 뺀 컨텍스트 조건만"""
        return combine_conditions(build_text_clause(params.search), await self.context_conditions(params))
