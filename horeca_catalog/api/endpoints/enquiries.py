import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from opentelemetry import trace
from opentelemetry.semconv.trace import SpanAttributes
from opentelemetry.trace import Status, StatusCode

from horeca_catalog.api.dependencies import get_enquiry_service
from horeca_catalog.core.config import settings
from horeca_catalog.models.enquiry import EnquiryStatus
from horeca_catalog.schemas.enquiry import (
    EnquiryCreate,
    EnquiryCreateResponse,
    EnquiryDetailResponse,
    EnquiryListResponse,
    EnquiryUpdate,
)
from horeca_catalog.services.enquiry_service import EnquiryService

router = APIRouter()
tracer = trace.get_tracer("horeca_catalog.api.enquiry_router")

logger = logging.getLogger(__name__)


@router.post("/", response_model=EnquiryCreateResponse, status_code=201)
async def create_enquiry(enquiry: EnquiryCreate, service: EnquiryService = Depends(get_enquiry_service)):
    """견적 문의 접수. 전화번호 기준으로 고객을 찾거나 새로 만든다"""
    with tracer.start_as_current_span("endpoint.create_enquiry") as span:
        span.set_attribute(SpanAttributes.HTTP_METHOD, "POST")
        span.set_attribute(SpanAttributes.HTTP_ROUTE, "/enquiries")
        try:
            created = await service.create_enquiry(enquiry)
            span.set_attribute("app.enquiry.response.id", created["id"])
            span.set_status(Status(StatusCode.OK))
            return {"enquiry": created}
        except Exception as e:
            logger.error("Error creating enquiry.", extra={"error": str(e)}, exc_info=True)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise HTTPException(status_code=500, detail={"error": "Failed to create enquiry", "details": str(e)})


@router.get("/", response_model=EnquiryListResponse)
async def read_enquiries(
    status: Optional[EnquiryStatus] = None,
    limit: int = Query(default=settings.ENQUIRY_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    skip: int = Query(default=0, ge=0),
    service: EnquiryService = Depends(get_enquiry_service),
):
    """관리자용 문의 목록 (최신순)"""
    try:
        return await service.list_enquiries(status=status.value if status else None, limit=limit, skip=skip)
    except Exception as e:
        logger.error("Error fetching enquiries.", extra={"status": status, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch enquiries", "details": str(e)})


@router.get("/{enquiry_id}", response_model=EnquiryDetailResponse)
async def read_enquiry(enquiry_id: str, service: EnquiryService = Depends(get_enquiry_service)):
    """문의 상세 + 같은 고객의 관련 문의"""
    try:
        enquiry = await service.get_enquiry(enquiry_id)
    except Exception as e:
        logger.error("Error fetching enquiry.", extra={"enquiry_id": enquiry_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch enquiry", "details": str(e)})

    if enquiry is None:
        logger.warning("Enquiry not found.", extra={"enquiry_id": enquiry_id})
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return {"enquiry": enquiry}


@router.put("/{enquiry_id}", response_model=EnquiryCreateResponse)
async def update_enquiry(
    enquiry_id: str,
    update: EnquiryUpdate,
    service: EnquiryService = Depends(get_enquiry_service),
):
    """상태 / 메모 / 전화번호 수정"""
    try:
        enquiry = await service.update_enquiry(enquiry_id, update)
    except Exception as e:
        logger.error("Error updating enquiry.", extra={"enquiry_id": enquiry_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update enquiry", "details": str(e)})

    if enquiry is None:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return {"enquiry": enquiry}
