"""
领域数据模型
"""

from .dish import (
    ElementType,
    MenuItem,
    BaseComponent,
    ReplacementOption,
    OptionalElement,
    CompositeDish,
)
from .selection import (
    SelectionEntry,
    SelectionState,
    MutationResult,
    PriceLine,
    PricedSelection,
    SessionStatus,
    CustomizationSession,
    ValidationReason,
    ValidationIssue,
    ValidationResult,
)
from .order import OrderStatus, CustomizationRecord, OrderLineDraft

__all__ = [
    "ElementType",
    "MenuItem",
    "BaseComponent",
    "ReplacementOption",
    "OptionalElement",
    "CompositeDish",
    "SelectionEntry",
    "SelectionState",
    "MutationResult",
    "PriceLine",
    "PricedSelection",
    "SessionStatus",
    "CustomizationSession",
    "ValidationReason",
    "ValidationIssue",
    "ValidationResult",
    "OrderStatus",
    "CustomizationRecord",
    "OrderLineDraft",
]
