"""
订单相关数据模型
"""

from pydantic import Field
from typing import Optional, Tuple
from enum import Enum
from .base import SnapshotEntity, cents_to_display


class OrderStatus(str, Enum):
    """订单状态枚举"""
    PENDING = "pending"         # 待确认，可追加菜品
    CONFIRMED = "confirmed"     # 已确认
    PREPARING = "preparing"     # 制作中
    READY = "ready"             # 待取餐
    DELIVERED = "delivered"     # 已送达
    CANCELLED = "cancelled"     # 已取消


class CustomizationRecord(SnapshotEntity):
    """订单行的单条定制明细，用于审计和回显"""
    element_id: str = Field(..., description="可选元素ID")
    referenced_item_id: str = Field(..., description="默认单品ID")
    referenced_item_name: str = Field(..., description="默认单品名称")
    is_included: bool = Field(..., description="是否包含")
    included_by_default: bool = Field(..., description="是否默认包含")
    replacement_item_id: Optional[str] = Field(None, description="替换单品ID")
    replacement_item_name: Optional[str] = Field(None, description="替换单品名称")
    price_adjustment_cents: int = Field(0, description="价格调整（分）")

    @property
    def matches_default(self) -> bool:
        """与菜品默认配置一致（默认包含且未替换，或默认不包含且未加）"""
        return self.is_included == self.included_by_default and self.replacement_item_id is None


class OrderLineDraft(SnapshotEntity):
    """
    待落库的订单行

    定制后的菜品折叠为一个单价，不拆成多个子商品分别计价。
    """
    line_id: str = Field(..., description="订单行ID")
    dish_id: str = Field(..., description="组合菜品ID")
    dish_name: str = Field(..., description="组合菜品名称")
    quantity: int = Field(1, ge=1, description="数量")
    unit_price_cents: int = Field(..., description="单价（分）")
    total_price_cents: int = Field(..., description="小计（分）")
    customizations: Tuple[CustomizationRecord, ...] = Field(default_factory=tuple, description="定制明细")

    @property
    def unit_price_display(self) -> str:
        return cents_to_display(self.unit_price_cents)

    @property
    def persisted_customizations(self) -> Tuple[CustomizationRecord, ...]:
        """需要写入审计表的明细：只保留偏离默认配置的条目"""
        return tuple(record for record in self.customizations if not record.matches_default)
