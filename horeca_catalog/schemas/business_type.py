from datetime import datetime
from typing import List, Optional

from pydantic import Field

from horeca_catalog.schemas.common import CamelModel


class BusinessTypeCreate(CamelModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    image: str = ""
    description: str = ""


class BusinessTypeUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None


class BusinessTypeResponse(CamelModel):
    id: str
    name: str
    slug: str
    image: str = ""
    description: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BusinessTypeListResponse(CamelModel):
    success: bool = True
    business_types: List[BusinessTypeResponse]


class BusinessTypeDetailResponse(CamelModel):
    success: bool = True
    business_type: BusinessTypeResponse
