"""
确认前校验

在选择状态转成订单行之前，用确认时刻的最新菜品数据检查一遍。
校验结果作为返回值给出，不抛异常；调用方不得用未通过校验的状态生成订单行。
"""

from typing import List

from ..models.dish import CompositeDish
from ..models.selection import SelectionState, ValidationIssue, ValidationReason, ValidationResult
from .customization import expected_adjustment


def validate(dish: CompositeDish, state: SelectionState) -> ValidationResult:
    """
    校验选择状态

    检查项：
    - 状态属于该菜品
    - 菜品此刻仍可售
    - 每个条目对应的可选元素仍然存在
    - 每个替换仍在该元素的替换选项中
    - 替换只出现在已包含的条目上
    - 菜品新增的可选元素在状态中有条目
    - 缓存的价格调整与当前目录价格一致
    """
    issues: List[ValidationIssue] = []

    if state.dish_id != dish.id:
        issues.append(ValidationIssue(
            reason=ValidationReason.DISH_MISMATCH,
            message=f"选择状态属于菜品 {state.dish_id}，而非 {dish.id}",
        ))
        return ValidationResult(issues=tuple(issues))

    if not dish.is_available:
        issues.append(ValidationIssue(
            reason=ValidationReason.DISH_UNAVAILABLE,
            message="菜品已下架",
        ))

    seen = set()
    for entry in state.entries:
        seen.add(entry.element_id)
        element = dish.get_element(entry.element_id)
        if element is None:
            issues.append(ValidationIssue(
                reason=ValidationReason.UNKNOWN_ELEMENT,
                message="可选元素已从菜品中移除",
                element_id=entry.element_id,
            ))
            continue

        if entry.replacement_item_id is not None:
            if not entry.is_included:
                issues.append(ValidationIssue(
                    reason=ValidationReason.REPLACEMENT_ON_EXCLUDED,
                    message="未包含的元素不能带替换",
                    element_id=entry.element_id,
                    replacement_item_id=entry.replacement_item_id,
                ))
                continue
            if element.find_replacement(entry.replacement_item_id) is None:
                issues.append(ValidationIssue(
                    reason=ValidationReason.UNKNOWN_REPLACEMENT,
                    message="替换选项已不存在",
                    element_id=entry.element_id,
                    replacement_item_id=entry.replacement_item_id,
                ))
                continue

        expected = expected_adjustment(element, entry.is_included, entry.replacement_item_id)
        if expected != entry.price_adjustment_cents:
            issues.append(ValidationIssue(
                reason=ValidationReason.STALE_PRICE,
                message=f"价格已变动，当前应为 {expected} 分",
                element_id=entry.element_id,
                replacement_item_id=entry.replacement_item_id,
            ))

    for element in dish.optional_elements:
        if element.id not in seen:
            issues.append(ValidationIssue(
                reason=ValidationReason.MISSING_ELEMENT,
                message="菜品新增了可选元素，请重新定制",
                element_id=element.id,
            ))

    return ValidationResult(issues=tuple(issues))
