import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace
from opentelemetry.semconv.trace import SpanAttributes
from opentelemetry.trace import Status, StatusCode
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from horeca_catalog.models.common import to_object_id, to_object_ids, utcnow
from horeca_catalog.models.product import normalize_filters, product_document_to_dict
from horeca_catalog.schemas.product import ProductCreate, ProductUpdate
from horeca_catalog.services.product_query import ProductListParams, ProductQueryBuilder, build_pagination
from horeca_catalog.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

CATEGORY_REF_PROJECTION = {"name": 1, "slug": 1, "level": 1}
# (저장 필드, 응답 필드)
CATEGORY_REF_FIELDS = (("category_id", "category"), ("brand_category_id", "brand_category"))
CATEGORY_REF_LIST_FIELDS = (("category_ids", "categories"), ("brand_category_ids", "brand_categories"))
# PUT 에서 명시적 null 로 비울 수 있는 필드
NULLABLE_UPDATE_FIELDS = {"category_id", "brand_category_id", "brand", "sku"}


def _prepare_references(data: Dict[str, Any]) -> Dict[str, Any]:
    """API 의 문자열 ID 를 저장용 ObjectId 로 변환"""
    for field, _ in CATEGORY_REF_FIELDS:
        if isinstance(data.get(field), str) and data[field].strip():
            category_oid = to_object_id(data[field].strip())
            if category_oid is None:
                raise ValueError(f"Invalid category id: {data[field]}")
            data[field] = category_oid
        elif field in data:
            data[field] = None
    for field, _ in CATEGORY_REF_LIST_FIELDS:
        if data.get(field) is not None:
            data[field] = to_object_ids(cid.strip() for cid in data[field] if cid and cid.strip())
    if data.get("related_product_ids") is not None:
        data["related_product_ids"] = to_object_ids(data["related_product_ids"])
    if "filters" in data:
        data["filters"] = normalize_filters(data["filters"])
    return data


class ProductService:
    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        category_collection: AsyncIOMotorCollection,
        query_builder: Optional[ProductQueryBuilder] = None,
    ):
        self.collection = collection
        self.category_collection = category_collection
        self.query_builder = query_builder
        self.tracer = trace.get_tracer("horeca_catalog.services.ProductService", "0.1.0")

    async def _populate_categories(self, products: List[dict]) -> List[dict]:
        """카테고리 / 브랜드 카테고리 ID 를 {id, name, slug, level} 참조로 채움"""
        category_ids = set()
        for product in products:
            for field, _ in CATEGORY_REF_FIELDS:
                if product.get(field):
                    category_ids.add(product[field])
            for field, _ in CATEGORY_REF_LIST_FIELDS:
                category_ids.update(product.get(field) or [])
        if not category_ids:
            return products

        refs = {}
        cursor = self.category_collection.find({"_id": {"$in": to_object_ids(category_ids)}}, CATEGORY_REF_PROJECTION)
        async for category in cursor:
            category_id = str(category["_id"])
            refs[category_id] = {
                "id": category_id,
                "name": category.get("name"),
                "slug": category.get("slug"),
                "level": category.get("level"),
            }

        for product in products:
            for field, ref_field in CATEGORY_REF_FIELDS:
                product[ref_field] = refs.get(product.get(field) or "")
            for field, ref_field in CATEGORY_REF_LIST_FIELDS:
                product[ref_field] = [refs[cid] for cid in product.get(field) or [] if cid in refs]
        return products

    async def list_products(self, params: ProductListParams) -> Dict[str, Any]:
        """필터/정렬/페이지네이션이 적용된 상품 목록"""
        with self.tracer.start_as_current_span("service.product.list_products") as span:
            span.set_attribute(SpanAttributes.DB_SYSTEM, "mongodb")
            span.set_attribute("app.products.page", params.page)
            span.set_attribute("app.products.limit", params.limit)
            try:
                query = await self.query_builder.build(params)
                span.set_attribute("app.products.text_search", query.use_text_search)

                cursor = self.collection.find(query.filter, query.projection)
                cursor = cursor.sort(query.sort).skip(query.skip).limit(query.limit)
                documents = await cursor.to_list(length=query.limit)
                total = await self.collection.count_documents(query.filter)

                products = await self._populate_categories([product_document_to_dict(doc) for doc in documents])
                span.set_attribute("app.products.total", total)
                span.set_status(Status(StatusCode.OK))
                logger.info("Products listed.", extra={
                    "total": total,
                    "returned": len(products),
                    "page": params.page,
                    "category": params.category,
                })
                return {
                    "products": products,
                    "pagination": build_pagination(total, params.page, query.limit),
                    "total": total,
                    "skip": query.skip,
                }
            except Exception as e:
                logger.error("Error listing products.", extra={"error": str(e)}, exc_info=True)
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise

    async def get_product(self, product_ref: str) -> Optional[dict]:
        """ObjectId 또는 slug 로 상품 조회"""
        with self.tracer.start_as_current_span("service.product.get_product") as span:
            span.set_attribute("app.product.request.ref", product_ref)
            document = None
            product_oid = to_object_id(product_ref)
            if product_oid is not None:
                document = await self.collection.find_one({"_id": product_oid})
            if document is None:
                document = await self.collection.find_one({"slug": product_ref})

            if document is None:
                span.set_attribute("app.product.found", False)
                return None

            span.set_attribute("app.product.found", True)
            products = await self._populate_categories([product_document_to_dict(document)])
            return products[0]

    async def create_product(self, product: ProductCreate) -> dict:
        with self.tracer.start_as_current_span("service.product.create_product") as span:
            span.set_attribute("app.product.request.title", product.title)
            data = _prepare_references(product.model_dump(exclude={"slug"}))
            data["slug"] = await generate_unique_slug(self.collection, product.slug or product.title)
            now = utcnow()
            data["created_at"] = now
            data["updated_at"] = now

            try:
                result = await self.collection.insert_one(data)
            except DuplicateKeyError as e:
                logger.warning("Duplicate product slug.", extra={"slug": data["slug"], "error": str(e)})
                raise ValueError(f"Product with slug '{data['slug']}' already exists")

            span.set_attribute("app.product.id", str(result.inserted_id))
            span.set_status(Status(StatusCode.OK))
            logger.info("Product created.", extra={"product_id": str(result.inserted_id), "slug": data["slug"]})

            data["_id"] = result.inserted_id
            products = await self._populate_categories([product_document_to_dict(data)])
            return products[0]

    async def update_product(self, product_id: str, update: ProductUpdate) -> Optional[dict]:
        with self.tracer.start_as_current_span("service.product.update_product") as span:
            span.set_attribute("app.product.request.id", product_id)
            product_oid = to_object_id(product_id)
            if product_oid is None:
                return None

            data = {
                k: v for k, v in update.model_dump(exclude_unset=True).items()
                if v is not None or k in NULLABLE_UPDATE_FIELDS
            }
            data = _prepare_references(data)
            if data.get("slug"):
                data["slug"] = await generate_unique_slug(self.collection, data["slug"], exclude_id=product_id)
            else:
                data.pop("slug", None)
            data["updated_at"] = utcnow()

            try:
                document = await self.collection.find_one_and_update(
                    {"_id": product_oid},
                    {"$set": data},
                    return_document=ReturnDocument.AFTER,
                )
            except DuplicateKeyError as e:
                logger.warning("Duplicate product slug on update.", extra={"product_id": product_id, "error": str(e)})
                raise ValueError(f"Product with slug '{data.get('slug')}' already exists")

            if document is None:
                return None

            span.set_status(Status(StatusCode.OK))
            logger.info("Product updated.", extra={"product_id": product_id, "fields": sorted(data.keys())})
            products = await self._populate_categories([product_document_to_dict(document)])
            return products[0]

    async def delete_product(self, product_id: str) -> bool:
        product_oid = to_object_id(product_id)
        if product_oid is None:
            return False
        result = await self.collection.delete_one({"_id": product_oid})
        if result.deleted_count:
            logger.info("Product deleted.", extra={"product_id": product_id})
        return result.deleted_count > 0
