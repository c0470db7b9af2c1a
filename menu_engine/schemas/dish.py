"""
菜品目录相关的请求/响应模式
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from ..models.base import cents_to_display
from ..models.dish import (
    CompositeDish,
    CompositeDishCreate,
    CompositeDishUpdate,
    MenuItem,
    MenuItemCreate,
)

# 请求模式直接复用领域层的创建/更新模型
DishCreateRequest = CompositeDishCreate
DishUpdateRequest = CompositeDishUpdate
MenuItemCreateRequest = MenuItemCreate


class MenuItemResponse(BaseModel):
    """菜单单品响应"""
    id: str = Field(..., description="单品ID")
    name: str = Field(..., description="名称")
    description: Optional[str] = Field(None, description="描述")
    price_cents: int = Field(..., description="价格（分）")
    price_display: str = Field(..., description="价格（元）")
    is_available: bool = Field(..., description="是否在售")

    @classmethod
    def from_model(cls, item: MenuItem) -> "MenuItemResponse":
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            price_cents=item.price_cents,
            price_display=item.price_display,
            is_available=item.is_available,
        )


class BaseComponentResponse(BaseModel):
    """基础部件响应"""
    menu_item_id: str = Field(..., description="单品ID")
    name: str = Field(..., description="单品名称")
    quantity: int = Field(..., description="数量")


class ReplacementOptionResponse(BaseModel):
    """替换选项响应"""
    id: str = Field(..., description="替换选项ID")
    replacement_item_id: str = Field(..., description="替换单品ID")
    name: str = Field(..., description="替换单品名称")
    price_difference_cents: int = Field(..., description="差价（分）")
    price_difference_display: str = Field(..., description="差价（元）")


class OptionalElementResponse(BaseModel):
    """可选元素响应"""
    id: str = Field(..., description="可选元素ID")
    menu_item_id: str = Field(..., description="默认单品ID")
    name: str = Field(..., description="默认单品名称")
    is_included_by_default: bool = Field(..., description="是否默认包含")
    additional_price_cents: int = Field(..., description="附加价（分）")
    additional_price_display: str = Field(..., description="附加价（元）")
    element_type: str = Field(..., description="元素类别")
    replacement_options: List[ReplacementOptionResponse] = Field(..., description="替换选项")


class CompositeDishResponse(BaseModel):
    """组合菜品响应（含完整嵌套结构）"""
    id: str = Field(..., description="菜品ID")
    name: str = Field(..., description="菜品名称")
    description: Optional[str] = Field(None, description="描述")
    base_price_cents: int = Field(..., description="基础价格（分）")
    base_price_display: str = Field(..., description="基础价格（元）")
    is_available: bool = Field(..., description="是否可售")
    preparation_time: Optional[str] = Field(None, description="预计制作时间")
    base_products: List[BaseComponentResponse] = Field(..., description="基础部件")
    optional_elements: List[OptionalElementResponse] = Field(..., description="可选元素")
    created_at: Optional[datetime] = Field(None, description="创建时间")
    updated_at: Optional[datetime] = Field(None, description="更新时间")

    @classmethod
    def from_model(cls, dish: CompositeDish) -> "CompositeDishResponse":
        return cls(
            id=dish.id,
            name=dish.name,
            description=dish.description,
            base_price_cents=dish.base_price_cents,
            base_price_display=dish.base_price_display,
            is_available=dish.is_available,
            preparation_time=dish.preparation_time,
            base_products=[
                BaseComponentResponse(
                    menu_item_id=c.referenced_item_id,
                    name=c.referenced_item_name,
                    quantity=c.quantity,
                )
                for c in dish.base_components
            ],
            optional_elements=[
                OptionalElementResponse(
                    id=e.id,
                    menu_item_id=e.referenced_item_id,
                    name=e.referenced_item_name,
                    is_included_by_default=e.included_by_default,
                    additional_price_cents=e.additional_price_cents,
                    additional_price_display=cents_to_display(e.additional_price_cents),
                    element_type=e.element_type,
                    replacement_options=[
                        ReplacementOptionResponse(
                            id=o.id,
                            replacement_item_id=o.replacement_item_id,
                            name=o.replacement_item_name,
                            price_difference_cents=o.price_difference_cents,
                            price_difference_display=cents_to_display(o.price_difference_cents),
                        )
                        for o in e.replacement_options
                    ],
                )
                for e in dish.optional_elements
            ],
            created_at=dish.created_at,
            updated_at=dish.updated_at,
        )
