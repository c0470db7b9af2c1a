"""
路由依赖
数据库、服务实例都通过依赖注入获取，测试中可用 dependency_overrides 替换
"""

from fastapi import Depends, Request

from ..core.database import db_manager
from ..services.catalog_service import CatalogService
from ..services.order_service import OrderService
from ..services.session_service import CustomizationService, SessionStore, session_store


def get_db(request: Request):
    """应用绑定的数据库管理器，未绑定时使用全局实例"""
    return getattr(request.app.state, "db", None) or db_manager


def get_session_store(request: Request) -> SessionStore:
    return getattr(request.app.state, "session_store", None) or session_store


def get_catalog_service(db=Depends(get_db)) -> CatalogService:
    return CatalogService(db)


def get_order_service(db=Depends(get_db)) -> OrderService:
    return OrderService(db)


def get_customization_service(
    catalog: CatalogService = Depends(get_catalog_service),
    orders: OrderService = Depends(get_order_service),
    store: SessionStore = Depends(get_session_store),
) -> CustomizationService:
    return CustomizationService(catalog, orders, store)
