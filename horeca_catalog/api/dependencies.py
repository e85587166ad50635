from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorCollection

from horeca_catalog.config.database import (
    get_business_type_collection,
    get_category_collection,
    get_customer_collection,
    get_enquiry_collection,
    get_product_collection,
)
from horeca_catalog.services.business_type_service import BusinessTypeService
from horeca_catalog.services.category_cache import CategoryTreeCache, get_category_cache
from horeca_catalog.services.category_service import CategoryService
from horeca_catalog.services.customer_service import CustomerService
from horeca_catalog.services.enquiry_service import EnquiryService
from horeca_catalog.services.facet_service import FacetService
from horeca_catalog.services.product_query import ProductQueryBuilder
from horeca_catalog.services.product_service import ProductService


def get_query_builder(cache: CategoryTreeCache = Depends(get_category_cache)) -> ProductQueryBuilder:
    return ProductQueryBuilder(cache)


def get_product_service(
    products: AsyncIOMotorCollection = Depends(get_product_collection),
    categories: AsyncIOMotorCollection = Depends(get_category_collection),
    query_builder: ProductQueryBuilder = Depends(get_query_builder),
) -> ProductService:
    return ProductService(products, categories, query_builder)


def get_facet_service(
    products: AsyncIOMotorCollection = Depends(get_product_collection),
    query_builder: ProductQueryBuilder = Depends(get_query_builder),
) -> FacetService:
    return FacetService(products, query_builder)


def get_category_service(
    categories: AsyncIOMotorCollection = Depends(get_category_collection),
    cache: CategoryTreeCache = Depends(get_category_cache),
) -> CategoryService:
    return CategoryService(categories, cache)


def get_business_type_service(
    business_types: AsyncIOMotorCollection = Depends(get_business_type_collection),
) -> BusinessTypeService:
    return BusinessTypeService(business_types)


def get_enquiry_service(
    enquiries: AsyncIOMotorCollection = Depends(get_enquiry_collection),
    customers: AsyncIOMotorCollection = Depends(get_customer_collection),
) -> EnquiryService:
    return EnquiryService(enquiries, CustomerService(customers))
