import logging
from typing import Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from horeca_catalog.models.category import category_document_to_dict
from horeca_catalog.models.common import to_object_id, utcnow
from horeca_catalog.schemas.category import CategoryCreate, CategoryUpdate
from horeca_catalog.services.category_cache import CategoryTreeCache
from horeca_catalog.utils.slug import slugify

logger = logging.getLogger(__name__)

PARENT_REF_PROJECTION = {"name": 1, "slug": 1, "level": 1}
ROOT_PARENT = "null"


class CategoryService:
    """카테고리 CRUD. 쓰기 작업은 항상 카테고리 캐시를 비운다"""

    def __init__(self, collection: AsyncIOMotorCollection, cache: CategoryTreeCache):
        self.collection = collection
        self.cache = cache
        self.tracer = trace.get_tracer("horeca_catalog.services.CategoryService", "0.1.0")

    async def _populate_parents(self, categories: List[dict]) -> List[dict]:
        parent_ids = {c["parent_id"] for c in categories if c.get("parent_id")}
        if not parent_ids:
            return categories

        parents: Dict[str, dict] = {}
        cursor = self.collection.find({"_id": {"$in": [to_object_id(pid) for pid in parent_ids]}}, PARENT_REF_PROJECTION)
        async for parent in cursor:
            parent_id = str(parent["_id"])
            parents[parent_id] = {"id": parent_id, **{k: parent.get(k) for k in PARENT_REF_PROJECTION}}

        for category in categories:
            category["parent"] = parents.get(category.get("parent_id") or "")
        return categories

    async def _resolve_parent(self, parent_id: Optional[str]):
        if not parent_id:
            return None
        parent_oid = to_object_id(parent_id)
        if parent_oid is None or await self.collection.find_one({"_id": parent_oid}, {"_id": 1}) is None:
            raise ValueError(f"Parent category not found: {parent_id}")
        return parent_oid

    async def _ensure_slug_available(self, slug: str, exclude_oid=None):
        query = {"slug": slug}
        if exclude_oid is not None:
            query["_id"] = {"$ne": exclude_oid}
        if await self.collection.find_one(query, {"_id": 1}):
            raise ValueError("Category with this slug already exists")

    async def list_categories(self, level: Optional[str] = None, parent: Optional[str] = None) -> List[dict]:
        """
        level / parent 로 필터한 평탄한 목록 (이름순).
        parent='null' 이면 최상위 카테고리만, parent 가 없으면 필터하지 않는다.
        """
        query = {}
        if level:
            query["level"] = level
        if parent is not None:
            if parent == ROOT_PARENT:
                query["parent_id"] = None
            else:
                query["parent_id"] = to_object_id(parent)
                if query["parent_id"] is None:
                    return []

        documents = await self.collection.find(query).sort("name", ASCENDING).to_list(length=None)
        categories = await self._populate_parents([category_document_to_dict(doc) for doc in documents])
        logger.info("Categories listed.", extra={"level": level, "parent": parent, "count": len(categories)})
        return categories

    async def get_tree(self) -> List[dict]:
        return await self.cache.get_tree()

    async def get_category(self, category_id: str) -> Optional[dict]:
        category_oid = to_object_id(category_id)
        if category_oid is None:
            return None
        document = await self.collection.find_one({"_id": category_oid})
        if document is None:
            return None
        categories = await self._populate_parents([category_document_to_dict(document)])
        return categories[0]

    async def create_category(self, category: CategoryCreate) -> dict:
        with self.tracer.start_as_current_span("service.category.create_category") as span:
            span.set_attribute("app.category.request.name", category.name)
            slug = slugify(category.slug or category.name)
            if not slug:
                raise ValueError("Cannot generate slug from category name")
            await self._ensure_slug_available(slug)

            now = utcnow()
            data = {
                "name": category.name.strip(),
                "slug": slug,
                "level": category.level.value,
                "parent_id": await self._resolve_parent(category.parent_id),
                "image": category.image,
                "tagline": category.tagline.strip(),
                "created_at": now,
                "updated_at": now,
            }
            try:
                result = await self.collection.insert_one(data)
            except DuplicateKeyError:
                raise ValueError("Category with this slug already exists")

            self.cache.clear()
            span.set_attribute("app.category.id", str(result.inserted_id))
            span.set_status(Status(StatusCode.OK))
            logger.info("Category created.", extra={"category_id": str(result.inserted_id), "slug": slug})

            data["_id"] = result.inserted_id
            categories = await self._populate_parents([category_document_to_dict(data)])
            return categories[0]

    async def update_category(self, category_id: str, update: CategoryUpdate) -> Optional[dict]:
        with self.tracer.start_as_current_span("service.category.update_category") as span:
            span.set_attribute("app.category.request.id", category_id)
            category_oid = to_object_id(category_id)
            if category_oid is None or await self.collection.find_one({"_id": category_oid}, {"_id": 1}) is None:
                return None

            # null 로 비울 수 있는 건 parent_id (최상위로 이동) 뿐
            data = {
                k: v for k, v in update.model_dump(exclude_unset=True).items()
                if v is not None or k == "parent_id"
            }
            if "name" in data:
                data["name"] = data["name"].strip()
            if "level" in data:
                data["level"] = data["level"].value
            if "tagline" in data:
                data["tagline"] = data["tagline"].strip()
            if data.get("slug"):
                data["slug"] = slugify(data["slug"])
                await self._ensure_slug_available(data["slug"], exclude_oid=category_oid)
            else:
                data.pop("slug", None)

            if "parent_id" in data:
                # 자기 자신이나 하위 카테고리를 부모로 지정하면 트리에 순환이 생긴다
                if data["parent_id"] and data["parent_id"] in await self.cache.get_descendant_ids(category_id):
                    raise ValueError("A category cannot be moved under itself or one of its descendants")
                data["parent_id"] = await self._resolve_parent(data["parent_id"])

            data["updated_at"] = utcnow()
            try:
                document = await self.collection.find_one_and_update(
                    {"_id": category_oid},
                    {"$set": data},
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError:
                raise ValueError("Category with this slug already exists")

            self.cache.clear()
            span.set_status(Status(StatusCode.OK))
            logger.info("Category updated.", extra={"category_id": category_id, "fields": sorted(data.keys())})
            categories = await self._populate_parents([category_document_to_dict(document)])
            return categories[0]

    async def delete_category(self, category_id: str) -> bool:
        category_oid = to_object_id(category_id)
        if category_oid is None:
            return False
        if await self.collection.find_one({"_id": category_oid}, {"_id": 1}) is None:
            return False

        child_count = await self.collection.count_documents({"parent_id": category_oid})
        if child_count:
            raise ValueError(f"Category has {child_count} subcategories; move or delete them first")

        await self.collection.delete_one({"_id": category_oid})
        self.cache.clear()
        logger.info("Category deleted.", extra={"category_id": category_id})
        return True
