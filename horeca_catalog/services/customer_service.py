import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from horeca_catalog.models.common import utcnow
from horeca_catalog.models.enquiry import GUEST_CUSTOMER_NAME, TEMP_EMAIL_DOMAIN
from horeca_catalog.utils.phone import normalize_phone

logger = logging.getLogger(__name__)


def is_temp_email(email: Optional[str]) -> bool:
    return bool(email) and email.endswith(f"@{TEMP_EMAIL_DOMAIN}")


class CustomerService:
    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_or_create(
        self,
        phone: Optional[str],
        email: Optional[str] = None,
        name: Optional[str] = None,
        company_name: Optional[str] = None,
    ) -> Optional[dict]:
        """
        정규화된 전화번호로 고객을 찾고 (없으면 이메일), 없으면 새로 생성.
        전화번호와 이메일이 모두 없으면 None.
        기존 고객이면 Guest 이름, 회사명, 임시 이메일을 새 정보로 보강한다.
        """
        normalized_phone = normalize_phone(phone or "")
        email = email.strip().lower() if email else None

        if normalized_phone:
            query = {"phone": normalized_phone}
        elif email:
            query = {"email": email}
        else:
            return None

        customer = await self.collection.find_one(query)
        if customer is None:
            now = utcnow()
            customer = {
                "name": name or GUEST_CUSTOMER_NAME,
                "company_name": company_name or "",
                "email": email or f"{normalized_phone}@{TEMP_EMAIL_DOMAIN}",
                "phone": normalized_phone,
                "tags": [],
                "created_at": now,
                "updated_at": now,
            }
            result = await self.collection.insert_one(customer)
            customer["_id"] = result.inserted_id
            logger.info("Customer created.", extra={"customer_id": str(result.inserted_id)})
            return customer

        changes = {}
        if name and customer.get("name") == GUEST_CUSTOMER_NAME and name != GUEST_CUSTOMER_NAME:
            changes["name"] = name
        if company_name and customer.get("company_name") != company_name:
            changes["company_name"] = company_name
        if email and is_temp_email(customer.get("email")) and not is_temp_email(email):
            changes["email"] = email
        if normalized_phone and customer.get("phone") != normalized_phone:
            changes["phone"] = normalized_phone

        if changes:
            changes["updated_at"] = utcnow()
            await self.collection.update_one({"_id": customer["_id"]}, {"$set": changes})
            customer.update(changes)
            logger.info("Customer updated.", extra={"customer_id": str(customer["_id"]), "fields": sorted(changes)})
        return customer
