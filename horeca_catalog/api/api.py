from fastapi import APIRouter
from horeca_catalog.api.endpoints import business_types, categories, enquiries, products

api_router = APIRouter()
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(business_types.router, prefix="/business-types", tags=["business-types"])
api_router.include_router(enquiries.router, prefix="/enquiries", tags=["enquiries"])
