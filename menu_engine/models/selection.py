"""
定制选择相关数据模型
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional, Tuple, List
from enum import Enum
from .base import SnapshotEntity, cents_to_display
from .dish import CompositeDish
from ..core.exceptions import BaseApplicationError


class SelectionEntry(SnapshotEntity):
    """单个可选元素的选择状态"""
    element_id: str = Field(..., description="可选元素ID")
    is_included: bool = Field(..., description="是否包含")
    replacement_item_id: Optional[str] = Field(None, description="替换单品ID，仅包含时有效")
    # 派生缓存值，只由 customization 中的函数根据目录价格计算
    price_adjustment_cents: int = Field(0, description="价格调整（分）")


class SelectionState(SnapshotEntity):
    """一次定制会话中顾客的全部选择，每个可选元素一条"""
    dish_id: str = Field(..., description="菜品ID")
    entries: Tuple[SelectionEntry, ...] = Field(default_factory=tuple, description="选择条目")

    @field_validator("entries")
    @classmethod
    def validate_element_ids(cls, v):
        """每个可选元素最多一条"""
        ids = [entry.element_id for entry in v]
        if len(ids) != len(set(ids)):
            raise ValueError("选择条目的可选元素ID必须唯一")
        return v

    def get_entry(self, element_id: str) -> Optional[SelectionEntry]:
        for entry in self.entries:
            if entry.element_id == element_id:
                return entry
        return None

    def with_entry(self, new_entry: SelectionEntry) -> "SelectionState":
        """返回替换了对应条目的新状态"""
        entries = tuple(
            new_entry if entry.element_id == new_entry.element_id else entry
            for entry in self.entries
        )
        return self.model_copy(update={"entries": entries})


class MutationResult(SnapshotEntity):
    """
    选择变更结果

    失败时 error 非空，state 为变更前的原状态。
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    state: SelectionState
    error: Optional[BaseApplicationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PriceLine(SnapshotEntity):
    """计价明细行"""
    element_id: str = Field(..., description="可选元素ID")
    label: str = Field(..., description="展示名称")
    amount_cents: int = Field(..., description="金额（分）")

    @property
    def amount_display(self) -> str:
        return cents_to_display(self.amount_cents)


class PricedSelection(SnapshotEntity):
    """计价结果"""
    base_price_cents: int = Field(..., description="基础价格（分）")
    lines: Tuple[PriceLine, ...] = Field(default_factory=tuple, description="调整明细")
    total_price_cents: int = Field(..., description="总价（分）")

    @property
    def total_price_display(self) -> str:
        return cents_to_display(self.total_price_cents)


class SessionStatus(str, Enum):
    """定制会话状态"""
    OPENED = "opened"
    CUSTOMIZING = "customizing"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.CONFIRMED, SessionStatus.CANCELLED)


class CustomizationSession(SnapshotEntity):
    """定制会话：独占一份菜品快照和一份选择状态"""
    session_id: str = Field(..., description="会话ID")
    customer_id: Optional[str] = Field(None, description="顾客ID")
    dish: CompositeDish = Field(..., description="菜品快照")
    state: SelectionState = Field(..., description="当前选择")
    status: SessionStatus = Field(SessionStatus.OPENED, description="会话状态")
    line_id: Optional[str] = Field(None, description="确认后生成的订单行ID")
    order_id: Optional[str] = Field(None, description="确认时写入的订单ID")
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class ValidationReason(str, Enum):
    """确认前校验失败原因"""
    DISH_MISMATCH = "DISH_MISMATCH"
    DISH_UNAVAILABLE = "DISH_UNAVAILABLE"
    UNKNOWN_ELEMENT = "UNKNOWN_ELEMENT"
    UNKNOWN_REPLACEMENT = "UNKNOWN_REPLACEMENT"
    MISSING_ELEMENT = "MISSING_ELEMENT"
    REPLACEMENT_ON_EXCLUDED = "REPLACEMENT_ON_EXCLUDED"
    STALE_PRICE = "STALE_PRICE"


class ValidationIssue(SnapshotEntity):
    """单条校验问题"""
    reason: ValidationReason
    message: str
    element_id: Optional[str] = None
    replacement_item_id: Optional[str] = None


class ValidationResult(SnapshotEntity):
    """校验结果，issues 为空即通过"""
    issues: Tuple[ValidationIssue, ...] = Field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def reasons(self) -> List[ValidationReason]:
        return [issue.reason for issue in self.issues]
