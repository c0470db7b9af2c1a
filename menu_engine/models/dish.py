"""
组合菜品相关数据模型

组合菜品 = 固定基础部件 + 顾客可增减/替换的可选元素。
加载进定制会话的菜品是冻结快照：集合字段为元组，后续目录修改不会影响已加载的实例。
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional, Tuple
from enum import Enum
from .base import SnapshotEntity, TimestampMixin, cents_to_display


class ElementType(str, Enum):
    """可选元素类别（自由标签，非穷举）"""
    DRINK = "drink"
    SIDE = "side"
    BREAD = "bread"
    SAUCE = "sauce"
    DESSERT = "dessert"
    OTHER = "other"


class MenuItem(SnapshotEntity, TimestampMixin):
    """菜单单品"""
    id: str = Field(..., description="单品ID")
    name: str = Field(..., max_length=200, description="单品名称")
    description: Optional[str] = Field(None, description="描述")
    price_cents: int = Field(..., ge=0, description="价格（分）")
    is_available: bool = Field(True, description="是否在售")

    @property
    def price_display(self) -> str:
        return cents_to_display(self.price_cents)


class BaseComponent(SnapshotEntity):
    """基础部件：始终包含，价格已计入菜品基础价"""
    referenced_item_id: str = Field(..., description="引用的单品ID")
    referenced_item_name: str = Field(..., description="引用的单品名称")
    quantity: int = Field(1, ge=1, description="数量")


class ReplacementOption(SnapshotEntity):
    """替换选项，差价相对于所属元素的附加价"""
    id: str = Field(..., description="替换选项ID")
    replacement_item_id: str = Field(..., description="替换单品ID")
    replacement_item_name: str = Field(..., description="替换单品名称")
    price_difference_cents: int = Field(0, description="差价（分），可为负数")


class OptionalElement(SnapshotEntity):
    """可选元素：可增减，可替换为其他单品"""
    id: str = Field(..., description="可选元素ID")
    referenced_item_id: str = Field(..., description="默认单品ID")
    referenced_item_name: str = Field(..., description="默认单品名称")
    included_by_default: bool = Field(True, description="是否默认包含")
    additional_price_cents: int = Field(0, description="附加价（分），可为负数")
    element_type: str = Field(ElementType.SIDE.value, description="元素类别")
    replacement_options: Tuple[ReplacementOption, ...] = Field(
        default_factory=tuple, description="替换选项"
    )

    @model_validator(mode="after")
    def validate_replacements(self):
        """替换单品不能是元素自身，且同一元素内不能重复"""
        seen = set()
        for option in self.replacement_options:
            if option.replacement_item_id == self.referenced_item_id:
                raise ValueError(f"可选元素 {self.id} 不能替换为自身")
            if option.replacement_item_id in seen:
                raise ValueError(f"可选元素 {self.id} 的替换单品重复")
            seen.add(option.replacement_item_id)
        return self

    def find_replacement(self, replacement_item_id: str) -> Optional[ReplacementOption]:
        """按替换单品ID查找替换选项"""
        for option in self.replacement_options:
            if option.replacement_item_id == replacement_item_id:
                return option
        return None


class CompositeDish(SnapshotEntity, TimestampMixin):
    """组合菜品完整模型"""
    id: str = Field(..., description="菜品ID")
    name: str = Field(..., max_length=200, description="菜品名称")
    description: Optional[str] = Field(None, description="描述")
    base_price_cents: int = Field(..., ge=0, description="基础价格（分）")
    is_available: bool = Field(True, description="是否可售")
    preparation_time: Optional[str] = Field(None, description="预计制作时间")
    base_components: Tuple[BaseComponent, ...] = Field(default_factory=tuple, description="基础部件")
    optional_elements: Tuple[OptionalElement, ...] = Field(default_factory=tuple, description="可选元素")

    @field_validator("optional_elements")
    @classmethod
    def validate_element_ids(cls, v):
        """可选元素ID必须唯一"""
        ids = [element.id for element in v]
        if len(ids) != len(set(ids)):
            raise ValueError("可选元素ID必须唯一")
        return v

    @property
    def base_price_display(self) -> str:
        return cents_to_display(self.base_price_cents)

    def get_element(self, element_id: str) -> Optional[OptionalElement]:
        """按ID获取可选元素"""
        for element in self.optional_elements:
            if element.id == element_id:
                return element
        return None


# ---- 管理端创建模型 ----

class ReplacementOptionCreate(BaseModel):
    """替换选项创建"""
    replacement_item_id: str = Field(..., description="替换单品ID")
    price_difference_cents: int = Field(0, description="差价（分）")


class OptionalElementCreate(BaseModel):
    """可选元素创建"""
    menu_item_id: str = Field(..., description="默认单品ID")
    is_included_by_default: bool = Field(True, description="是否默认包含")
    additional_price_cents: int = Field(0, description="附加价（分）")
    element_type: str = Field(ElementType.SIDE.value, max_length=30, description="元素类别")
    replacement_options: List[ReplacementOptionCreate] = Field(default_factory=list, description="替换选项")

    @model_validator(mode="after")
    def validate_replacements(self):
        """替换单品不能是元素自身，且不能重复"""
        ids = [option.replacement_item_id for option in self.replacement_options]
        if self.menu_item_id in ids:
            raise ValueError("替换单品不能与默认单品相同")
        if len(ids) != len(set(ids)):
            raise ValueError("替换单品不能重复")
        return self


class BaseProductCreate(BaseModel):
    """基础部件创建"""
    menu_item_id: str = Field(..., description="单品ID")
    quantity: int = Field(1, ge=1, description="数量")


class CompositeDishCreate(BaseModel):
    """组合菜品创建（含嵌套部件）"""
    name: str = Field(..., min_length=1, max_length=200, description="菜品名称")
    description: Optional[str] = Field(None, max_length=1000, description="描述")
    base_price_cents: int = Field(..., ge=0, description="基础价格（分）")
    preparation_time: Optional[str] = Field("20-25 min", description="预计制作时间")
    base_products: List[BaseProductCreate] = Field(default_factory=list, description="基础部件")
    optional_elements: List[OptionalElementCreate] = Field(default_factory=list, description="可选元素")


class CompositeDishUpdate(BaseModel):
    """组合菜品更新（仅标量字段）"""
    name: Optional[str] = Field(None, min_length=1, max_length=200, description="菜品名称")
    description: Optional[str] = Field(None, max_length=1000, description="描述")
    base_price_cents: Optional[int] = Field(None, ge=0, description="基础价格（分）")
    preparation_time: Optional[str] = Field(None, description="预计制作时间")
    is_available: Optional[bool] = Field(None, description="是否可售")

    @model_validator(mode="after")
    def validate_required_fields(self):
        """名称、基础价格和可售状态可以不传，但不能清空；描述和制作时间可以置空"""
        for field in ("name", "base_price_cents", "is_available"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} 不能为空")
        return self


class MenuItemCreate(BaseModel):
    """菜单单品创建"""
    name: str = Field(..., min_length=1, max_length=200, description="单品名称")
    description: Optional[str] = Field(None, max_length=1000, description="描述")
    price_cents: int = Field(..., ge=0, description="价格（分）")
