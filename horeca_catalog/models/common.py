from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from bson import ObjectId


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """문자열 ID를 ObjectId로 변환. 잘못된 형식이면 None"""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def to_object_ids(values: Iterable[Any]) -> List[ObjectId]:
    return [oid for oid in (to_object_id(v) for v in values) if oid is not None]


def stringify_id(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def document_to_dict(doc: dict) -> dict:
    """Mongo 문서의 _id 를 id 문자열로 바꾼 얕은 복사본"""
    data = dict(doc)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    return data
