"""
Product document helpers.

Stored ``filters`` come in two shapes:

* canonical: ``[{"key": "Material", "values": ["Porcelain"]}, ...]``
* legacy: ``{"material": ["Porcelain"], "color": ["White"], ...}``

Everything past this module works only with the canonical shape.
"""
from typing import Any, Dict, List

from horeca_catalog.models.common import document_to_dict, stringify_id

LEGACY_FILTER_KEYS = ("material", "size", "color", "usage")

# 목록 조회용 필드 (payload 축소)
LIST_PROJECTION_FIELDS = (
    "title", "slug", "hero_image", "price", "brand", "category_id", "category_ids",
    "brand_category_id", "brand_category_ids",
    "featured", "status", "created_at", "updated_at", "sku", "tags",
    "color_variants", "filters",
)


def normalize_filter_label(value: str) -> str:
    """'porcelain ' -> 'Porcelain', 'STAINLESS steel' -> 'Stainless steel'"""
    value = value.strip()
    return value[:1].upper() + value[1:].lower()


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def migrate_legacy_filters(legacy: Dict[str, Any]) -> List[Dict[str, Any]]:
    filters = []
    for key in LEGACY_FILTER_KEYS:
        if _non_empty_list(legacy.get(key)):
            filters.append({"key": key.capitalize(), "values": list(legacy[key])})

    for key, values in legacy.items():
        if key in LEGACY_FILTER_KEYS or not _non_empty_list(values):
            continue
        filters.append({"key": key[:1].upper() + key[1:], "values": list(values)})
    return filters


def normalize_filters(raw: Any) -> List[Dict[str, Any]]:
    """저장된 filters 를 canonical [{key, values}] 형태로 변환"""
    if raw is None:
        return []
    if isinstance(raw, dict):
        return migrate_legacy_filters(raw)
    if not isinstance(raw, list):
        return []

    filters = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        key = entry.get("key")
        values = entry.get("values")
        if not isinstance(key, str) or not key.strip() or not isinstance(values, list):
            continue
        filters.append({
            "key": key.strip(),
            "values": [v.strip() for v in values if isinstance(v, str) and v.strip()],
        })
    return filters


def product_document_to_dict(doc: dict) -> dict:
    """Mongo 상품 문서 -> API dict (id 문자열화, filters 정규화)"""
    data = document_to_dict(doc)
    data["filters"] = normalize_filters(data.get("filters"))
    for field in ("category_id", "brand_category_id"):
        if field in data:
            data[field] = stringify_id(data[field])
    for field in ("category_ids", "brand_category_ids"):
        if field in data:
            data[field] = [str(cid) for cid in data.get(field) or []]
    if "related_product_ids" in data:
        data["related_product_ids"] = [str(pid) for pid in data.get("related_product_ids") or []]
    return data
