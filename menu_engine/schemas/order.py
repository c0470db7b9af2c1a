"""
订单相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from ..models.order import OrderStatus


class OrderCreateRequest(BaseModel):
    """订单创建请求"""
    customer_id: Optional[str] = Field(None, description="顾客ID")
    notes: Optional[str] = Field(None, max_length=500, description="备注")


class OrderLineCustomizationResponse(BaseModel):
    """订单行定制明细（只含偏离默认配置的元素）"""
    element_id: str = Field(..., description="可选元素ID")
    is_included: bool = Field(..., description="是否包含")
    replacement_item_id: Optional[str] = Field(None, description="替换单品ID")
    replacement_item_name: Optional[str] = Field(None, description="替换单品名称")
    price_adjustment_cents: int = Field(..., description="价格调整（分）")


class OrderLineResponse(BaseModel):
    """订单行"""
    line_id: str = Field(..., description="订单行ID")
    dish_id: Optional[str] = Field(None, description="组合菜品ID")
    dish_name: Optional[str] = Field(None, description="菜品名称")
    quantity: int = Field(..., description="数量")
    unit_price_cents: int = Field(..., description="单价（分）")
    total_price_cents: int = Field(..., description="小计（分）")
    customizations: List[OrderLineCustomizationResponse] = Field(..., description="定制明细")


class OrderDetailResponse(BaseModel):
    """订单详情响应"""
    order_id: str = Field(..., description="订单ID")
    customer_id: Optional[str] = Field(None, description="顾客ID")
    status: OrderStatus = Field(..., description="订单状态")
    total_amount_cents: int = Field(..., description="订单总额（分）")
    notes: Optional[str] = Field(None, description="备注")
    lines: List[OrderLineResponse] = Field(..., description="订单行")
    created_at: Optional[datetime] = Field(None, description="创建时间")
