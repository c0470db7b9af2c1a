"""
菜单单品路由模块
"""

from fastapi import APIRouter, Depends
from typing import List

from ...schemas.dish import MenuItemCreateRequest, MenuItemResponse
from ...services.catalog_service import CatalogService
from ..deps import get_catalog_service

router = APIRouter()


@router.get("", response_model=List[MenuItemResponse])
def list_menu_items(include_unavailable: bool = False,
                    catalog: CatalogService = Depends(get_catalog_service)):
    """菜单单品列表"""
    items = catalog.list_menu_items(include_unavailable=include_unavailable)
    return [MenuItemResponse.from_model(item) for item in items]


@router.post("", response_model=MenuItemResponse, status_code=201)
def create_menu_item(req: MenuItemCreateRequest,
                     catalog: CatalogService = Depends(get_catalog_service)):
    """创建菜单单品"""
    return MenuItemResponse.from_model(catalog.create_menu_item(req))
