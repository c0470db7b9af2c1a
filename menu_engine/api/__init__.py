"""
API routes and endpoints.
"""

from fastapi import APIRouter
from .v1 import customizations, dishes, menu_items, orders

api_router = APIRouter()

# 包含所有v1路由
api_router.include_router(dishes.router, prefix="/dishes", tags=["组合菜品"])
api_router.include_router(menu_items.router, prefix="/menu-items", tags=["菜单单品"])
api_router.include_router(customizations.router, prefix="/customizations", tags=["菜品定制"])
api_router.include_router(orders.router, prefix="/orders", tags=["订单"])
