from .product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductDetailResponse,
    ProductFacetsResponse,
)
from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryNode,
)
from .business_type import BusinessTypeCreate, BusinessTypeUpdate, BusinessTypeResponse
from .enquiry import EnquiryCreate, EnquiryUpdate, EnquiryResponse, EnquiryDetail

__all__ = [
    'ProductCreate',
    'ProductUpdate',
    'ProductResponse',
    'ProductListResponse',
    'ProductDetailResponse',
    'ProductFacetsResponse',
    'CategoryCreate',
    'CategoryUpdate',
    'CategoryResponse',
    'CategoryNode',
    'BusinessTypeCreate',
    'BusinessTypeUpdate',
    'BusinessTypeResponse',
    'EnquiryCreate',
    'EnquiryUpdate',
    'EnquiryResponse',
    'EnquiryDetail',
]
