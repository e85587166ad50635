import logging
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from horeca_catalog.models.common import document_to_dict, to_object_id, utcnow
from horeca_catalog.schemas.business_type import BusinessTypeCreate, BusinessTypeUpdate
from horeca_catalog.utils.slug import slugify

logger = logging.getLogger(__name__)


class BusinessTypeService:
    """'whom we serve' 업종 태그 CRUD"""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def _ensure_unique(self, name: Optional[str], slug: Optional[str], exclude_oid=None):
        conditions = []
        if name:
            conditions.append({"name": name})
        if slug:
            conditions.append({"slug": slug})
        if not conditions:
            return
        query = {"$or": conditions}
        if exclude_oid is not None:
            query["_id"] = {"$ne": exclude_oid}
        if await self.collection.find_one(query, {"_id": 1}):
            raise ValueError("Business type with this name or slug already exists")

    async def list_business_types(self) -> List[dict]:
        documents = await self.collection.find({}).sort("name", ASCENDING).to_list(length=None)
        return [document_to_dict(doc) for doc in documents]

    async def get_business_type(self, business_type_id: str) -> Optional[dict]:
        business_type_oid = to_object_id(business_type_id)
        if business_type_oid is None:
            return None
        document = await self.collection.find_one({"_id": business_type_oid})
        return document_to_dict(document) if document else None

    async def create_business_type(self, business_type: BusinessTypeCreate) -> dict:
        name = business_type.name.strip()
        slug = slugify(business_type.slug or name)
        if not slug:
            raise ValueError("Cannot generate slug from business type name")
        await self._ensure_unique(name, slug)

        now = utcnow()
        data = {
            "name": name,
            "slug": slug,
            "image": business_type.image,
            "description": business_type.description.strip(),
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(data)
        except DuplicateKeyError:
            raise ValueError("Business type with this name or slug already exists")

        data["_id"] = result.inserted_id
        logger.info("Business type created.", extra={"business_type_id": str(result.inserted_id), "slug": slug})
        return document_to_dict(data)

    async def update_business_type(self, business_type_id: str, update: BusinessTypeUpdate) -> Optional[dict]:
        business_type_oid = to_object_id(business_type_id)
        if business_type_oid is None:
            return None

        data = {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}
        if "name" in data:
            data["name"] = data["name"].strip()
        # slug 없이 이름만 바뀌면 이름으로 slug 재생성
        if data.get("slug"):
            data["slug"] = slugify(data["slug"])
        elif "name" in data:
            data["slug"] = slugify(data["name"])
        await self._ensure_unique(data.get("name"), data.get("slug"), exclude_oid=business_type_oid)

        data["updated_at"] = utcnow()
        try:
            document = await self.collection.find_one_and_update(
                {"_id": business_type_oid},
                {"$set": data},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ValueError("Business type with this name or slug already exists")

        if document is None:
            return None
        logger.info("Business type updated.", extra={"business_type_id": business_type_id})
        return document_to_dict(document)

    async def delete_business_type(self, business_type_id: str) -> bool:
        business_type_oid = to_object_id(business_type_id)
        if business_type_oid is None:
            return False
        result = await self.collection.delete_one({"_id": business_type_oid})
        if result.deleted_count:
            logger.info("Business type deleted.", extra={"business_type_id": business_type_id})
        return result.deleted_count > 0
