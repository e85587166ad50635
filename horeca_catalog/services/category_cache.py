"""
Process-local cache of the category hierarchy.

Categories change rarely, while every filtered product listing needs the id
closure of the requested category (the category itself plus every
descendant). The cache keeps:

* the full category tree, rebuilt from a single query when older than the TTL
* a per-slug map of id closures, derived from the tree

Both are dropped by :meth:`CategoryTreeCache.clear`, which every category
write must call. There is no locking: two requests racing on an expired cache
both rebuild the same tree from the same data.
"""
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace

from horeca_catalog.config.database import get_category_collection
from horeca_catalog.core.config import settings
from horeca_catalog.models.category import build_category_tree, collect_descendant_ids, find_node

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("horeca_catalog.services.category_cache")

CollectionGetter = Callable[[], Awaitable[AsyncIOMotorCollection]]


class CategoryTreeCache:
    def __init__(
        self,
        collection_getter: CollectionGetter,
        ttl_seconds: float = settings.CATEGORY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._collection_getter = collection_getter
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._tree: Optional[List[dict]] = None
        self._built_at: float = 0.0
        self._ids_by_slug: Dict[str, List[str]] = {}

    def _is_fresh(self) -> bool:
        return self._tree is not None and (self._clock() - self._built_at) < self.ttl_seconds

    async def get_tree(self) -> List[dict]:
        """캐시된 카테고리 트리 반환. TTL 이 지났으면 전체 카테고리를 한 번 조회해서 재구성"""
        if self._is_fresh():
            return self._tree

        with tracer.start_as_current_span("category_cache.rebuild") as span:
            collection = await self._collection_getter()
            categories = await collection.find({}).to_list(length=None)
            self._tree = build_category_tree(categories)
            self._built_at = self._clock()
            # 트리가 바뀌면 파생 캐시도 무효
            self._ids_by_slug = {}
            span.set_attribute("app.category.count", len(categories))

        logger.info("Category tree cache rebuilt.", extra={"category_count": len(categories)})
        return self._tree

    async def get_category_ids_with_children(self, slug: str) -> List[str]:
        """slug 카테고리와 모든 하위 카테고리의 ID 목록. 없는 slug 는 []"""
        if not self._is_fresh():
            self._ids_by_slug = {}

        cached = self._ids_by_slug.get(slug)
        if cached is not None:
            return cached

        collection = await self._collection_getter()
        category = await collection.find_one({"slug": slug}, {"_id": 1})
        if not category:
            logger.info("Category slug not found.", extra={"slug": slug})
            return []

        tree = await self.get_tree()
        node = find_node(tree, str(category["_id"]))
        category_ids = collect_descendant_ids(node) if node is not None else []

        self._ids_by_slug[slug] = category_ids
        logger.debug("Category id closure cached.", extra={"slug": slug, "id_count": len(category_ids)})
        return category_ids

    async def get_descendant_ids(self, category_id: str) -> List[str]:
        """ID 기준 closure (자기 자신 포함). 부모 변경 시 순환 검사에 사용"""
        tree = await self.get_tree()
        node = find_node(tree, category_id)
        return collect_descendant_ids(node) if node is not None else []

    def clear(self):
        self._tree = None
        self._built_at = 0.0
        self._ids_by_slug = {}
        logger.info("Category cache cleared.")


# 전역 캐시 인스턴스
category_cache = CategoryTreeCache(get_category_collection)


def get_category_cache() -> CategoryTreeCache:
    return category_cache
