import logging
from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from horeca_catalog.services.product_query import ProductListParams, ProductQueryBuilder

logger = logging.getLogger(__name__)


def build_facet_pipeline(context_filter: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    컨텍스트 조건(카테고리/업종/검색)으로 $match 후 $facet 한 번으로 모든 facet 집계.
    $text 가 있으면 $match 는 반드시 첫 번째 stage 여야 한다.
    """
    return [
        {"$match": context_filter},
        {"$facet": {
            "brands": [
                {"$match": {"brand": {"$nin": [None, ""]}}},
                {"$group": {"_id": "$brand", "count": {"$sum": 1}}},
                {"$sort": {"count": -1, "_id": 1}},
            ],
            # 한 상품에 같은 색상이 여러 번 있어도 1개로 센다
            "colors": [
                {"$unwind": "$color_variants"},
                {"$group": {"_id": "$color_variants.color_name", "products": {"$addToSet": "$_id"}}},
                {"$project": {"count": {"$size": "$products"}}},
                {"$sort": {"count": -1, "_id": 1}},
            ],
            "filters": [
                {"$unwind": "$filters"},
                {"$unwind": "$filters.values"},
                {"$group": {
                    "_id": {"key": "$filters.key", "value": "$filters.values"},
                    "count": {"$sum": 1},
                }},
                {"$sort": {"_id.key": 1, "count": -1, "_id.value": 1}},
            ],
            "price": [
                {"$group": {"_id": None, "min": {"$min": "$price"}, "max": {"$max": "$price"}}},
            ],
        }},
    ]


def _value_counts(rows: List[dict]) -> List[Dict[str, Any]]:
    return [
        {"value": str(row["_id"]), "count": row.get("count", 0)}
        for row in rows
        if row.get("_id") not in (None, "")
    ]


def parse_facet_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """$facet 결과 문서 -> {brands, colors, filters, price_range}"""
    filters: Dict[str, List[Dict[str, Any]]] = {}
    for row in result.get("filters") or []:
        group = row.get("_id") or {}
        key, value = group.get("key"), group.get("value")
        if key in (None, "") or value in (None, ""):
            continue
        filters.setdefault(key, []).append({"value": value, "count": row.get("count", 0)})

    price_rows = result.get("price") or []
    price = price_rows[0] if price_rows else {}

    return {
        "brands": _value_counts(result.get("brands") or []),
        "colors": _value_counts(result.get("colors") or []),
        "filters": [{"key": key, "values": values} for key, values in filters.items()],
        "price_range": {"min": price.get("min"), "max": price.get("max")},
    }


class FacetService:
    def __init__(self, collection: AsyncIOMotorCollection, query_builder: ProductQueryBuilder):
        self.collection = collection
        self.query_builder = query_builder
        self.tracer = trace.get_tracer("horeca_catalog.services.FacetService", "0.1.0")

    async def get_facets(self, params: ProductListParams) -> Dict[str, Any]:
        with self.tracer.start_as_current_span("service.product.get_facets") as span:
            span.set_attribute("app.facets.category", params.category or "")
            span.set_attribute("app.facets.business", params.business or "")
            span.set_attribute("app.facets.search", bool(params.search))
            try:
                context_filter = await self.query_builder.build_context_filter(params)
                rows = await self.collection.aggregate(build_facet_pipeline(context_filter)).to_list(length=1)
                facets = parse_facet_result(rows[0] if rows else {})

                span.set_attribute("app.facets.brand_count", len(facets["brands"]))
                span.set_attribute("app.facets.filter_key_count", len(facets["filters"]))
                span.set_status(Status(StatusCode.OK))
                logger.info("Product facets computed.", extra={
                    "category": params.category,
                    "business": params.business,
                    "brand_count": len(facets["brands"]),
                    "color_count": len(facets["colors"]),
                })
                return facets
            except Exception as e:
                logger.error("Error computing product facets.", extra={"error": str(e)}, exc_info=True)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise
