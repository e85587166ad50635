import logging

from fastapi import APIRouter, Depends, HTTPException

from horeca_catalog.api.dependencies import get_business_type_service
from horeca_catalog.schemas.business_type import (
    BusinessTypeCreate,
    BusinessTypeDetailResponse,
    BusinessTypeListResponse,
    BusinessTypeUpdate,
)
from horeca_catalog.schemas.common import DeleteResponse
from horeca_catalog.services.business_type_service import BusinessTypeService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=BusinessTypeListResponse)
async def read_business_types(service: BusinessTypeService = Depends(get_business_type_service)):
    """업종 목록 (이름순)"""
    try:
        business_types = await service.list_business_types()
        return {"business_types": business_types}
    except Exception as e:
        logger.error("Error reading business types.", extra={"error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch business types", "details": str(e)})


@router.post("/", response_model=BusinessTypeDetailResponse, status_code=201)
async def create_business_type(
    business_type: BusinessTypeCreate,
    service: BusinessTypeService = Depends(get_business_type_service),
):
    try:
        created = await service.create_business_type(business_type)
        return {"business_type": created}
    except ValueError as ve:
        logger.warning("ValueError while creating business type.", extra={"name": business_type.name, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Error creating business type.", extra={"name": business_type.name, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to create business type", "details": str(e)})


@router.get("/{business_type_id}", response_model=BusinessTypeDetailResponse)
async def read_business_type(business_type_id: str, service: BusinessTypeService = Depends(get_business_type_service)):
    try:
        business_type = await service.get_business_type(business_type_id)
    except Exception as e:
        logger.error("Error reading business type.", extra={"business_type_id": business_type_id, "error": str(e)},
                     exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch business type", "details": str(e)})

    if business_type is None:
        raise HTTPException(status_code=404, detail="Business type not found")
    return {"business_type": business_type}


@router.put("/{business_type_id}", response_model=BusinessTypeDetailResponse)
async def update_business_type(
    business_type_id: str,
    update: BusinessTypeUpdate,
    service: BusinessTypeService = Depends(get_business_type_service),
):
    try:
        business_type = await service.update_business_type(business_type_id, update)
    except ValueError as ve:
        logger.warning("ValueError while updating business type.",
                       extra={"business_type_id": business_type_id, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Error updating business type.", extra={"business_type_id": business_type_id, "error": str(e)},
                     exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update business type", "details": str(e)})

    if business_type is None:
        raise HTTPException(status_code=404, detail="Business type not found")
    return {"business_type": business_type}


@router.delete("/{business_type_id}", response_model=DeleteResponse)
async def delete_business_type(business_type_id: str, service: BusinessTypeService = Depends(get_business_type_service)):
    try:
        deleted = await service.delete_business_type(business_type_id)
    except Exception as e:
        logger.error("Error deleting business type.", extra={"business_type_id": business_type_id, "error": str(e)},
                     exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to delete business type", "details": str(e)})

    if not deleted:
        raise HTTPException(status_code=404, detail="Business type not found")
    return DeleteResponse(message="Business type deleted successfully")
