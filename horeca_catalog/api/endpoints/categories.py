import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from horeca_catalog.api.dependencies import get_category_service
from horeca_catalog.schemas.category import (
    CategoryCreate,
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryTreeResponse,
    CategoryUpdate,
)
from horeca_catalog.schemas.common import DeleteResponse
from horeca_catalog.services.category_service import CategoryService

logger = logging.getLogger(__name__)

router = APIRouter()


# tree / 평탄한 목록의 응답 형태가 달라서 모델 인스턴스를 직접 반환
@router.get("/", response_model=None)
async def read_categories(
    tree: bool = False,
    level: Optional[str] = None,
    parent: Optional[str] = None,
    service: CategoryService = Depends(get_category_service),
):
    """
    tree=true 이면 캐시된 전체 트리,
    아니면 level / parent 로 필터한 평탄한 목록 (parent=null 은 최상위만)
    """
    try:
        if tree:
            categories = await service.get_tree()
            logger.info("Successfully read category tree.", extra={"root_count": len(categories)})
            return CategoryTreeResponse(categories=categories)

        categories = await service.list_categories(level=level, parent=parent)
        return CategoryListResponse(categories=categories)
    except Exception as e:
        logger.error("Error reading categories.", extra={"tree": tree, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch categories", "details": str(e)})


@router.post("/", response_model=CategoryDetailResponse, status_code=201)
async def create_category(category: CategoryCreate, service: CategoryService = Depends(get_category_service)):
    """새 카테고리 생성"""
    try:
        logger.info("Attempting to create category.", extra={"category_name": category.name, "parent_id": category.parent_id})
        created = await service.create_category(category)
        logger.info("Successfully created category.", extra={"category_id": created["id"], "slug": created["slug"]})
        return {"category": created}
    except ValueError as ve:
        logger.warning("ValueError while creating category.",
                       extra={"category_name": category.name, "parent_id": category.parent_id, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Error creating category.",
                     extra={"category_name": category.name, "parent_id": category.parent_id, "error": str(e)},
                     exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to create category", "details": str(e)})


@router.get("/{category_id}", response_model=CategoryDetailResponse)
async def read_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    """카테고리 ID로 카테고리 조회"""
    try:
        category = await service.get_category(category_id)
    except Exception as e:
        logger.error("Error reading category by ID.", extra={"category_id": category_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch category", "details": str(e)})

    if category is None:
        logger.warning("Category not found by ID.", extra={"category_id": category_id})
        raise HTTPException(status_code=404, detail="Category not found")
    return {"category": category}


@router.put("/{category_id}", response_model=CategoryDetailResponse)
async def update_category(
    category_id: str,
    update: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
):
    """카테고리 수정 (부모 변경 시 순환 검사)"""
    try:
        category = await service.update_category(category_id, update)
    except ValueError as ve:
        logger.warning("ValueError while updating category.", extra={"category_id": category_id, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Error updating category.", extra={"category_id": category_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update category", "details": str(e)})

    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return {"category": category}


@router.delete("/{category_id}", response_model=DeleteResponse)
async def delete_category(category_id: str, service: CategoryService = Depends(get_category_service)):
    """카테고리 삭제 (하위 카테고리가 있으면 거부)"""
    try:
        deleted = await service.delete_category(category_id)
    except ValueError as ve:
        logger.warning("ValueError while deleting category.", extra={"category_id": category_id, "error": str(ve)})
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error("Error deleting category.", extra={"category_id": category_id, "error": str(e)}, exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to delete category", "details": str(e)})

    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
    return DeleteResponse(message="Category deleted successfully")
