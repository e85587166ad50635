import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pymongo import DESCENDING, ReturnDocument

from horeca_catalog.core.config import settings
from horeca_catalog.models.common import document_to_dict, stringify_id, to_object_id, utcnow
from horeca_catalog.models.enquiry import EnquiryStatus
from horeca_catalog.schemas.enquiry import EnquiryCreate, EnquiryUpdate
from horeca_catalog.services.customer_service import CustomerService
from horeca_catalog.utils.phone import normalize_phone

logger = logging.getLogger(__name__)

RELATED_ENQUIRY_PROJECTION = {"name": 1, "phone": 1, "status": 1, "created_at": 1}
# 같은 밀리초에 생성된 문의는 _id 로 순서 보장
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def enquiry_document_to_dict(doc: dict) -> dict:
    data = document_to_dict(doc)
    data["customer_id"] = stringify_id(data.get("customer_id"))
    return data


class EnquiryService:
    def __init__(self, collection: AsyncIOMotorCollection, customer_service: CustomerService):
        self.collection = collection
        self.customer_service = customer_service
        self.tracer = trace.get_tracer("horeca_catalog.services.EnquiryService", "0.1.0")

    async def create_enquiry(self, enquiry: EnquiryCreate) -> dict:
        with self.tracer.start_as_current_span("service.enquiry.create_enquiry") as span:
            span.set_attribute("app.enquiry.cart_item_count", len(enquiry.cart_items))
            # 단일 category 필드는 예전 폼 호환용
            categories = enquiry.categories
            if categories is None:
                categories = [enquiry.category] if enquiry.category else []

            customer = await self.customer_service.find_or_create(
                phone=enquiry.phone,
                email=enquiry.email,
                name=enquiry.name.strip(),
                company_name=enquiry.company.strip(),
            )

            now = utcnow()
            data = {
                "name": enquiry.name.strip(),
                "email": enquiry.email.strip().lower(),
                "phone": enquiry.phone.strip(),
                "company": enquiry.company.strip(),
                "categories": [c.strip() for c in categories if c and c.strip()],
                "message": enquiry.message.strip(),
                "cart_items": [item.model_dump() for item in enquiry.cart_items],
                "status": EnquiryStatus.NEW.value,
                "notes": "",
                "customer_id": customer["_id"] if customer else None,
                "created_at": now,
                "updated_at": now,
            }
            result = await self.collection.insert_one(data)
            data["_id"] = result.inserted_id

            span.set_attribute("app.enquiry.id", str(result.inserted_id))
            span.set_status(Status(StatusCode.OK))
            logger.info("Enquiry created.", extra={
                "enquiry_id": str(result.inserted_id),
                "customer_id": stringify_id(data["customer_id"]),
                "cart_item_count": len(data["cart_items"]),
            })
            return enquiry_document_to_dict(data)

    async def list_enquiries(
        self,
        status: Optional[str] = None,
        limit: int = settings.ENQUIRY_PAGE_SIZE,
        skip: int = 0,
    ) -> Dict[str, Any]:
        query = {}
        if status:
            query["status"] = status

        cursor = self.collection.find(query).sort(NEWEST_FIRST).skip(skip).limit(limit)
        documents = await cursor.to_list(length=limit)
        total = await self.collection.count_documents(query)
        logger.info("Enquiries listed.", extra={"status": status, "total": total, "returned": len(documents)})
        return {
            "enquiries": [enquiry_document_to_dict(doc) for doc in documents],
            "total": total,
            "limit": limit,
            "skip": skip,
        }

    async def get_enquiry(self, enquiry_id: str) -> Optional[dict]:
        """문의 상세 + 같은 고객의 다른 문의 목록 (고객이 없으면 전화번호로 매칭)"""
        with self.tracer.start_as_current_span("service.enquiry.get_enquiry") as span:
            span.set_attribute("app.enquiry.request.id", enquiry_id)
            enquiry_oid = to_object_id(enquiry_id)
            if enquiry_oid is None:
                return None
            document = await self.collection.find_one({"_id": enquiry_oid})
            if document is None:
                return None

            customer_id = document.get("customer_id")
            customer_enquiries_count = 0
            if customer_id:
                customer_enquiries_count = await self.collection.count_documents({"customer_id": customer_id})

            related_query: Dict[str, Any] = {"_id": {"$ne": enquiry_oid}}
            if customer_id:
                related_query["customer_id"] = customer_id
            elif document.get("phone"):
                related_query["phone"] = normalize_phone(document["phone"])

            related = []
            if len(related_query) > 1:
                cursor = (
                    self.collection.find(related_query, RELATED_ENQUIRY_PROJECTION)
                    .sort(NEWEST_FIRST)
                    .limit(settings.RELATED_ENQUIRIES_LIMIT)
                )
                related = [document_to_dict(doc) async for doc in cursor]

            span.set_attribute("app.enquiry.related_count", len(related))
            enquiry = enquiry_document_to_dict(document)
            enquiry["customer_enquiries_count"] = customer_enquiries_count
            enquiry["related_enquiries"] = related
            return enquiry

    async def update_enquiry(self, enquiry_id: str, update: EnquiryUpdate) -> Optional[dict]:
        enquiry_oid = to_object_id(enquiry_id)
        if enquiry_oid is None:
            return None

        data = {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}
        if "status" in data:
            data["status"] = data["status"].value
        if "notes" in data:
            data["notes"] = data["notes"].strip()
        if "phone" in data:
            data["phone"] = data["phone"].strip()
        data["updated_at"] = utcnow()

        document = await self.collection.find_one_and_update(
            {"_id": enquiry_oid},
            {"$set": data},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            return None
        logger.info("Enquiry updated.", extra={"enquiry_id": enquiry_id, "fields": sorted(data.keys())})
        return enquiry_document_to_dict(document)
