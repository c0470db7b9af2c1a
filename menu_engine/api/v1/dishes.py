"""
组合菜品路由模块
公开菜单查询和管理端菜品维护
"""

from fastapi import APIRouter, Depends
from typing import List

from ...schemas.dish import (
    CompositeDishResponse,
    DishCreateRequest,
    DishUpdateRequest,
)
from ...core.exceptions import DishNotFoundError
from ...services.catalog_service import CatalogService
from ..deps import get_catalog_service

router = APIRouter()


@router.get("", response_model=List[CompositeDishResponse])
def list_dishes(catalog: CatalogService = Depends(get_catalog_service)):
    """可售组合菜品列表（新建的在前）"""
    return [CompositeDishResponse.from_model(dish) for dish in catalog.list_available()]


@router.get("/{dish_id}", response_model=CompositeDishResponse)
def get_dish(dish_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    """组合菜品详情，已下架的菜品也可查看"""
    dish = catalog.fetch(dish_id)
    if dish is None:
        raise DishNotFoundError(dish_id)
    return CompositeDishResponse.from_model(dish)


@router.post("", response_model=CompositeDishResponse, status_code=201)
def create_dish(req: DishCreateRequest, catalog: CatalogService = Depends(get_catalog_service)):
    """创建组合菜品（含基础部件、可选元素和替换选项）"""
    return CompositeDishResponse.from_model(catalog.create_dish(req))


@router.patch("/{dish_id}", response_model=CompositeDishResponse)
def update_dish(dish_id: str, req: DishUpdateRequest,
                catalog: CatalogService = Depends(get_catalog_service)):
    """更新组合菜品"""
    return CompositeDishResponse.from_model(catalog.update_dish(dish_id, req))


@router.delete("/{dish_id}", response_model=CompositeDishResponse)
def withdraw_dish(dish_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    """下架组合菜品"""
    return CompositeDishResponse.from_model(catalog.withdraw_dish(dish_id))
