import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from opentelemetry import trace
from opentelemetry.semconv.trace import SpanAttributes
from opentelemetry.trace import Status, StatusCode

from horeca_catalog.api.dependencies import get_facet_service, get_product_service
from horeca_catalog.core.config import settings
from horeca_catalog.schemas.common import DeleteResponse
from horeca_catalog.schemas.product import (
    ProductCreate,
    ProductDetailResponse,
    ProductFacetsResponse,
    ProductListResponse,
    ProductUpdate,
)
from horeca_catalog.services.facet_service import FacetService
from horeca_catalog.services.product_query import SORT_NEWEST, ProductListParams
from horeca_catalog.services.product_service import ProductService

router = APIRouter()
tracer = trace.get_tracer("horeca_catalog.api.product_router")

logger = logging.getLogger(__name__)


def product_list_params(
    category: Optional[str] = None,
    business: Optional[str] = None,
    search: Optional[str] = None,
    featured: Optional[str] = None,
    status: Optional[str] = None,
    price_min: Optional[str] = Query(default=None, alias="priceMin"),
    price_max: Optional[str] = Query(default=None, alias="priceMax"),
    colors: Optional[str] = None,
    brands: Optional[str] = None,
    filters: Optional[str] = None,
    sort_by: str = Query(default=SORT_NEWEST, alias="sortBy"),
    page: int = 1,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
) -> ProductListParams:
    """쿼리스트링은 원문 그대로 넘기고 해석은 ProductQueryBuilder 가 담당"""
    return ProductListParams(
        category=category,
        business=business,
        search=search,
        featured=featured,
        status=status,
        price_min=price_min,
        price_max=price_max,
        colors=colors,
        brands=brands,
        filters=filters,
        sort_by=sort_by,
        # page=0 이나 음수는 첫 페이지로
        page=max(page, 1),
        limit=limit,
    )


@router.get("/", response_model=ProductListResponse, summary="List products with filters")
async def list_products(
    params: ProductListParams = Depends(product_list_params),
    service: ProductService = Depends(get_product_service),
):
    """카테고리/업종/검색/가격/색상/브랜드/동적 필터 + 정렬 + 페이지네이션"""
    with tracer.start_as_current_span("endpoint.list_products") as span:
        span.set_attribute(SpanAttributes.HTTP_METHOD, "GET")
        span.set_attribute(SpanAttributes.HTTP_ROUTE, "/products")
        span.set_attribute("app.products.request.category", params.category or "")
        span.set_attribute("app.products.request.page", params.page)
        try:
            result = await service.list_products(params)
            span.set_status(Status(StatusCode.OK))
            return result
        except Exception as e:
            logger.error("Failed to fetch products.", extra={"category": params.category, "error": str(e)}, exc_info=True)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise HTTPException(status_code=500, detail={"error": "Failed to fetch products", "details": str(e)})


@router.get("/facets", response_model=ProductFacetsResponse, summary="Available filter values for a context")
async def get_product_facets(
    category: Optional[str] = None,
    business: Optional[str] = None,
    search: Optional[str] = None,
    service: FacetService = Depends(get_facet_service),
):
    """현재 카테고리/업종/검색 컨텍스트에서 선택 가능한 브랜드, 색상, 동적 필터 값과 가격 범위"""
    params = ProductListParams(category=category, business=business, search=search)
    try:
        facets = await service.get_facets(params)
        return {"facets": facets}
    except Exception as e:
        logger.error("Failed to fetch product facets.", extra={"category": category, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch product facets", "details": str(e)})


@router.get("/{product_ref}", response_model=ProductDetailResponse, summary="Get a product by ID or slug")
async def get_product(product_ref: str, service: ProductService = Depends(get_product_service)):
    """상품 조회 (ObjectId 또는 slug)"""
    with tracer.start_as_current_span("endpoint.get_product") as span:
        span.set_attribute(SpanAttributes.HTTP_METHOD, "GET")
        span.set_attribute(SpanAttributes.HTTP_ROUTE, "/products/{product_ref}")
        span.set_attribute("app.product.request.ref", product_ref)
        try:
            product = await service.get_product(product_ref)
        except Exception as e:
            logger.error("Failed to fetch product.", extra={"product_ref": product_ref, "error": str(e)}, exc_info=True)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise HTTPException(status_code=500, detail={"error": "Failed to fetch product", "details": str(e)})

        if product is None:
            logger.warning("Product not found.", extra={"product_ref": product_ref})
            span.set_attribute(SpanAttributes.HTTP_STATUS_CODE, 404)
            raise HTTPException(status_code=404, detail="Product not found")

        span.set_status(Status(StatusCode.OK))
        return {"product": product}


@router.post("/", response_model=ProductDetailResponse, status_code=201, summary="Create a new product")
async def create_product(product: ProductCreate, service: ProductService = Depends(get_product_service)):
    """새 상품 생성"""
    with tracer.start_as_current_span("endpoint.create_product") as span:
        span.set_attribute(SpanAttributes.HTTP_METHOD, "POST")
        span.set_attribute(SpanAttributes.HTTP_ROUTE, "/products")
        span.set_attribute("app.product.request.title", product.title)
        logger.info("Attempting to create product.", extra={"product_title": product.title})
        try:
            created = await service.create_product(product)
            span.set_attribute("app.product.response.id", created["id"])
            span.set_status(Status(StatusCode.OK))
            logger.info("Successfully created product.", extra={"product_id": created["id"], "slug": created["slug"]})
            return {"product": created}
        except ValueError as ve:
            logger.warning("ValueError while creating product.", extra={"product_title": product.title, "error": str(ve)})
            span.set_attribute(SpanAttributes.HTTP_STATUS_CODE, 400)
            raise HTTPException(status_code=400, detail=str(ve))
        except Exception as e:
            logger.error("Failed to create product.", extra={"product_title": product.title, "error": str(e)}, exc_info=True)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise HTTPException(status_code=500, detail={"error": "Failed to create product", "details": str(e)})


@router.put("/{product_id}", response_model=ProductDetailResponse, summary="Update a product")
async def update_product(
    product_id: str,
    update: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    """상품 부분 수정"""
    try:
        updated = await service.update_product(product_id, update)
    except ValueError as ve:
        logger.warning("ValueError while updating product.", extra={"product_id": product_id, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Failed to update product.", extra={"product_id": product_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update product", "details": str(e)})

    if updated is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": updated}


@router.delete("/{product_id}", response_model=DeleteResponse, summary="Delete a product")
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """상품 삭제"""
    try:
        deleted = await service.delete_product(product_id)
    except Exception as e:
        logger.error("Failed to delete product.", extra={"product_id": product_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to delete product", "details": str(e)})

    if not deleted:
        raise HTTPException(status_code=404, detail="Product not found")
    return DeleteResponse(message="Product deleted successfully")
