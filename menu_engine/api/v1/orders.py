"""
订单路由模块
"""

from fastapi import APIRouter, Depends

from ...schemas.order import OrderCreateRequest, OrderDetailResponse
from ...services.order_service import OrderService
from ..deps import get_order_service

router = APIRouter()


@router.post("", response_model=OrderDetailResponse, status_code=201)
def create_order(req: OrderCreateRequest, orders: OrderService = Depends(get_order_service)):
    """创建订单"""
    return orders.create_order(req.customer_id, req.notes)


@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order(order_id: str, orders: OrderService = Depends(get_order_service)):
    """订单详情（含订单行和定制明细）"""
    return orders.get_order(order_id)
