from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import Field

from horeca_catalog.schemas.common import CamelModel


class ProductFilter(CamelModel):
    key: str
    values: List[str] = []


class ColorVariant(CamelModel):
    color_name: str
    color_code: Optional[str] = None
    image: Optional[str] = None


class Specification(CamelModel):
    label: str
    value: str


class CategoryRef(CamelModel):
    id: str
    name: Optional[str] = None
    slug: Optional[str] = None
    level: Optional[str] = None


# legacy 형식 {material: [...], color: [...]} 도 입력으로 허용
FiltersInput = Union[List[ProductFilter], Dict[str, List[str]]]


class ProductCreate(CamelModel):
    title: str = Field(..., min_length=1)
    hero_image: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: str = ""
    price: float = Field(default=0, ge=0)
    brand: Optional[str] = None
    sku: Optional[str] = None
    category_id: Optional[str] = None
    category_ids: List[str] = []
    brand_category_id: Optional[str] = None
    brand_category_ids: List[str] = []
    status: str = "In Stock"
    featured: bool = False
    gallery: List[str] = []
    color_variants: List[ColorVariant] = []
    filters: Optional[FiltersInput] = None
    specifications: List[Specification] = []
    tags: List[str] = []
    available_sizes: str = ""
    business_type_slugs: List[str] = []
    related_product_ids: List[str] = []


class ProductUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    hero_image: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    brand: Optional[str] = None
    sku: Optional[str] = None
    category_id: Optional[str] = None
    category_ids: Optional[List[str]] = None
    brand_category_id: Optional[str] = None
    brand_category_ids: Optional[List[str]] = None
    status: Optional[str] = None
    featured: Optional[bool] = None
    gallery: Optional[List[str]] = None
    color_variants: Optional[List[ColorVariant]] = None
    filters: Optional[FiltersInput] = None
    specifications: Optional[List[Specification]] = None
    tags: Optional[List[str]] = None
    available_sizes: Optional[str] = None
    business_type_slugs: Optional[List[str]] = None
    related_product_ids: Optional[List[str]] = None


class ProductResponse(CamelModel):
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    price: float = 0
    brand: Optional[str] = None
    sku: Optional[str] = None
    hero_image: Optional[str] = None
    category_id: Optional[str] = None
    category_ids: List[str] = []
    brand_category_id: Optional[str] = None
    brand_category_ids: List[str] = []
    category: Optional[CategoryRef] = None
    categories: List[CategoryRef] = []
    brand_category: Optional[CategoryRef] = None
    brand_categories: List[CategoryRef] = []
    status: Optional[str] = None
    featured: bool = False
    gallery: Optional[List[str]] = None
    color_variants: List[ColorVariant] = []
    filters: List[ProductFilter] = []
    specifications: Optional[List[Specification]] = None
    tags: List[str] = []
    available_sizes: Optional[str] = None
    business_type_slugs: Optional[List[str]] = None
    related_product_ids: Optional[List[str]] = None
    score: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class ProductListResponse(CamelModel):
    success: bool = True
    products: List[ProductResponse]
    pagination: Pagination
    # 이전 클라이언트 호환용
    total: int
    skip: int


class ProductDetailResponse(CamelModel):
    success: bool = True
    product: ProductResponse


class FacetValue(CamelModel):
    value: str
    count: int


class FilterFacet(CamelModel):
    key: str
    values: List[FacetValue]


class PriceRange(CamelModel):
    min: Optional[float] = None
    max: Optional[float] = None


class ProductFacets(CamelModel):
    brands: List[FacetValue] = []
    colors: List[FacetValue] = []
    filters: List[FilterFacet] = []
    price_range: PriceRange = PriceRange()


class ProductFacetsResponse(CamelModel):
    success: bool = True
    facets: ProductFacets
