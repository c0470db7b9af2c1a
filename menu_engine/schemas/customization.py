"""
定制会话相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from ..models.order import OrderLineDraft
from ..models.selection import CustomizationSession, PricedSelection, SessionStatus
from ..models.base import cents_to_display


class OpenSessionRequest(BaseModel):
    """开始定制请求"""
    dish_id: str = Field(..., description="组合菜品ID")
    customer_id: Optional[str] = Field(None, description="顾客ID")


class ElementRequest(BaseModel):
    """针对单个可选元素的操作请求（切换包含/撤销替换）"""
    element_id: str = Field(..., description="可选元素ID")


class ReplaceRequest(BaseModel):
    """替换请求"""
    element_id: str = Field(..., description="可选元素ID")
    replacement_item_id: str = Field(..., description="替换单品ID")


class ConfirmRequest(BaseModel):
    """确认定制请求"""
    order_id: str = Field(..., description="写入的订单ID")
    quantity: int = Field(1, ge=1, le=99, description="数量")


class SelectionEntryResponse(BaseModel):
    """单个可选元素的选择"""
    element_id: str = Field(..., description="可选元素ID")
    name: str = Field(..., description="当前显示名称")
    element_type: str = Field(..., description="元素类别")
    is_included: bool = Field(..., description="是否包含")
    included_by_default: bool = Field(..., description="是否默认包含")
    replacement_item_id: Optional[str] = Field(None, description="替换单品ID")
    price_adjustment_cents: int = Field(..., description="价格调整（分）")
    price_adjustment_display: str = Field(..., description="价格调整（元）")


class PriceLineResponse(BaseModel):
    """计价明细行"""
    element_id: str = Field(..., description="可选元素ID")
    label: str = Field(..., description="名称")
    amount_cents: int = Field(..., description="金额（分）")
    amount_display: str = Field(..., description="金额（元）")


class PriceResponse(BaseModel):
    """计价结果"""
    base_price_cents: int = Field(..., description="基础价格（分）")
    base_price_display: str = Field(..., description="基础价格（元）")
    lines: List[PriceLineResponse] = Field(..., description="调整明细")
    total_price_cents: int = Field(..., description="总价（分）")
    total_price_display: str = Field(..., description="总价（元）")

    @classmethod
    def from_priced(cls, priced: PricedSelection) -> "PriceResponse":
        return cls(
            base_price_cents=priced.base_price_cents,
            base_price_display=cents_to_display(priced.base_price_cents),
            lines=[
                PriceLineResponse(
                    element_id=line.element_id,
                    label=line.label,
                    amount_cents=line.amount_cents,
                    amount_display=line.amount_display,
                )
                for line in priced.lines
            ],
            total_price_cents=priced.total_price_cents,
            total_price_display=priced.total_price_display,
        )


class SessionResponse(BaseModel):
    """定制会话响应"""
    session_id: str = Field(..., description="会话ID")
    customer_id: Optional[str] = Field(None, description="顾客ID")
    dish_id: str = Field(..., description="菜品ID")
    dish_name: str = Field(..., description="菜品名称")
    status: SessionStatus = Field(..., description="会话状态")
    entries: List[SelectionEntryResponse] = Field(..., description="当前选择")
    price: PriceResponse = Field(..., description="当前价格")
    line_id: Optional[str] = Field(None, description="确认后的订单行ID")
    order_id: Optional[str] = Field(None, description="确认时写入的订单ID")
    updated_at: datetime = Field(..., description="最后更新时间")

    @classmethod
    def from_session(cls, session: CustomizationSession, priced: PricedSelection) -> "SessionResponse":
        entries = []
        for entry in session.state.entries:
            element = session.dish.get_element(entry.element_id)
            if element is None:
                continue
            name = element.referenced_item_name
            if entry.replacement_item_id is not None:
                option = element.find_replacement(entry.replacement_item_id)
                name = option.replacement_item_name if option else entry.replacement_item_id
            entries.append(SelectionEntryResponse(
                element_id=entry.element_id,
                name=name,
                element_type=element.element_type,
                is_included=entry.is_included,
                included_by_default=element.included_by_default,
                replacement_item_id=entry.replacement_item_id,
                price_adjustment_cents=entry.price_adjustment_cents,
                price_adjustment_display=cents_to_display(entry.price_adjustment_cents),
            ))

        return cls(
            session_id=session.session_id,
            customer_id=session.customer_id,
            dish_id=session.dish.id,
            dish_name=session.dish.name,
            status=session.status,
            entries=entries,
            price=PriceResponse.from_priced(priced),
            line_id=session.line_id,
            order_id=session.order_id,
            updated_at=session.updated_at,
        )


class CustomizationRecordResponse(BaseModel):
    """订单行定制明细"""
    element_id: str = Field(..., description="可选元素ID")
    referenced_item_name: str = Field(..., description="默认单品名称")
    is_included: bool = Field(..., description="是否包含")
    included_by_default: bool = Field(..., description="是否默认包含")
    replacement_item_id: Optional[str] = Field(None, description="替换单品ID")
    replacement_item_name: Optional[str] = Field(None, description="替换单品名称")
    price_adjustment_cents: int = Field(..., description="价格调整（分）")


class DraftLineResponse(BaseModel):
    """确认生成的订单行"""
    line_id: str = Field(..., description="订单行ID")
    dish_id: str = Field(..., description="菜品ID")
    dish_name: str = Field(..., description="菜品名称")
    quantity: int = Field(..., description="数量")
    unit_price_cents: int = Field(..., description="单价（分）")
    unit_price_display: str = Field(..., description="单价（元）")
    total_price_cents: int = Field(..., description="小计（分）")
    customizations: List[CustomizationRecordResponse] = Field(..., description="定制明细")

    @classmethod
    def from_draft(cls, draft: OrderLineDraft) -> "DraftLineResponse":
        return cls(
            line_id=draft.line_id,
            dish_id=draft.dish_id,
            dish_name=draft.dish_name,
            quantity=draft.quantity,
            unit_price_cents=draft.unit_price_cents,
            unit_price_display=draft.unit_price_display,
            total_price_cents=draft.total_price_cents,
            customizations=[
                CustomizationRecordResponse(**record.model_dump(
                    exclude={"referenced_item_id"}
                ))
                for record in draft.customizations
            ],
        )
