from datetime import datetime
from typing import List, Optional

from pydantic import Field

from horeca_catalog.models.enquiry import EnquiryStatus
from horeca_catalog.schemas.common import CamelModel

EMAIL_PATTERN = r"^\S+@\S+\.\S+$"


class CartItem(CamelModel):
    product_id: str
    product_name: str
    quantity: int = Field(..., ge=1)


class EnquiryCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    phone: str = Field(..., min_length=1)
    company: str = ""
    categories: Optional[List[str]] = None
    # 예전 폼은 단일 category 를 보냄
    category: Optional[str] = None
    message: str = ""
    cart_items: List[CartItem] = []


class EnquiryUpdate(CamelModel):
    status: Optional[EnquiryStatus] = None
    notes: Optional[str] = None
    phone: Optional[str] = None


class EnquiryResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    company: str = ""
    categories: List[str] = []
    message: str = ""
    cart_items: List[CartItem] = []
    status: EnquiryStatus = EnquiryStatus.NEW
    notes: str = ""
    customer_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RelatedEnquiry(CamelModel):
    id: str
    name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class EnquiryDetail(EnquiryResponse):
    customer_enquiries_count: int = 0
    related_enquiries: List[RelatedEnquiry] = []


class EnquiryCreateResponse(CamelModel):
    success: bool = True
    enquiry: EnquiryResponse


class EnquiryDetailResponse(CamelModel):
    success: bool = True
    enquiry: EnquiryDetail


class EnquiryListResponse(CamelModel):
    success: bool = True
    enquiries: List[EnquiryResponse]
    total: int
    limit: int
    skip: int
