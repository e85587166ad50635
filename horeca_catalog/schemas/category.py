from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from horeca_catalog.models.category import CategoryLevel
from horeca_catalog.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1)
    level: CategoryLevel
    slug: Optional[str] = None
    parent_id: Optional[str] = None
    image: str = ""
    tagline: str = ""


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    level: Optional[CategoryLevel] = None
    slug: Optional[str] = None
    parent_id: Optional[str] = None
    image: Optional[str] = None
    tagline: Optional[str] = None


class ParentRef(CamelModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    level: Optional[str] = None


class CategoryResponse(CamelModel):
    id: str
    name: str
    slug: str
    level: str
    parent_id: Optional[str] = None
    parent: Optional[ParentRef] = None
    image: str = ""
    tagline: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryNode(CategoryResponse):
    children: List[CategoryNode] = []


class CategoryListResponse(CamelModel):
    success: bool = True
    categories: List[CategoryResponse]


class CategoryTreeResponse(CamelModel):
    success: bool = True
    categories: List[CategoryNode]


class CategoryDetailResponse(CamelModel):
    success: bool = True
    category: CategoryResponse
