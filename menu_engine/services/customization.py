"""
定制选择状态

初始化和变更顾客对组合菜品可选元素的选择。所有函数都是纯函数：
菜品与状态都作为参数传入，返回新的状态，不修改任何输入。
变更失败不抛异常，而是在 MutationResult.error 中返回，同时保留原状态。
"""

from typing import Optional

from ..core.exceptions import UnknownElementError, UnknownReplacementError
from ..models.dish import CompositeDish, OptionalElement
from ..models.selection import MutationResult, SelectionEntry, SelectionState


def expected_adjustment(element: OptionalElement, is_included: bool,
                        replacement_item_id: Optional[str] = None) -> Optional[int]:
    """
    根据目录价格计算条目应有的价格调整

    Returns:
        int: 价格调整（分）；替换选项已不存在时返回 None
    """
    if not is_included:
        return 0
    if replacement_item_id is None:
        return element.additional_price_cents
    option = element.find_replacement(replacement_item_id)
    if option is None:
        return None
    return element.additional_price_cents + option.price_difference_cents


def initialize(dish: CompositeDish) -> SelectionState:
    """按各元素的默认包含设置生成初始选择"""
    entries = tuple(
        SelectionEntry(
            element_id=element.id,
            is_included=element.included_by_default,
            replacement_item_id=None,
            price_adjustment_cents=element.additional_price_cents if element.included_by_default else 0,
        )
        for element in dish.optional_elements
    )
    return SelectionState(dish_id=dish.id, entries=entries)


def _locate(dish: CompositeDish, state: SelectionState, element_id: str):
    element = dish.get_element(element_id)
    entry = state.get_entry(element_id)
    if element is None or entry is None:
        return None, None
    return element, entry


def toggle(dish: CompositeDish, state: SelectionState, element_id: str) -> MutationResult:
    """
    切换元素的包含状态

    每次切换都会清除已选的替换，即使先去掉再加回也不保留之前的替换。
    """
    element, entry = _locate(dish, state, element_id)
    if element is None:
        return MutationResult(state=state, error=UnknownElementError(element_id))

    is_included = not entry.is_included
    new_entry = entry.model_copy(update={
        "is_included": is_included,
        "replacement_item_id": None,
        "price_adjustment_cents": element.additional_price_cents if is_included else 0,
    })
    return MutationResult(state=state.with_entry(new_entry))


def replace(dish: CompositeDish, state: SelectionState, element_id: str,
            replacement_item_id: str) -> MutationResult:
    """用替换选项替换元素的默认单品，未包含的元素会被一并加入"""
    element, entry = _locate(dish, state, element_id)
    if element is None:
        return MutationResult(state=state, error=UnknownElementError(element_id))

    option = element.find_replacement(replacement_item_id)
    if option is None:
        return MutationResult(
            state=state,
            error=UnknownReplacementError(element_id, replacement_item_id),
        )

    new_entry = entry.model_copy(update={
        "is_included": True,
        "replacement_item_id": option.replacement_item_id,
        "price_adjustment_cents": element.additional_price_cents + option.price_difference_cents,
    })
    return MutationResult(state=state.with_entry(new_entry))


def clear_replacement(dish: CompositeDish, state: SelectionState, element_id: str) -> MutationResult:
    """撤销替换，元素保持包含；对未包含的元素不做任何改变"""
    element, entry = _locate(dish, state, element_id)
    if element is None:
        return MutationResult(state=state, error=UnknownElementError(element_id))

    if not entry.is_included:
        return MutationResult(state=state)

    new_entry = entry.model_copy(update={
        "replacement_item_id": None,
        "price_adjustment_cents": element.additional_price_cents,
    })
    return MutationResult(state=state.with_entry(new_entry))


def reconcile(dish: CompositeDish, state: SelectionState) -> SelectionState:
    """
    按最新菜品数据重建选择状态

    已移除元素的条目被丢弃，新增元素按默认设置加入；
    保留顾客的包含选择，已失效的替换被撤销，价格调整按当前目录重新计算。
    """
    defaults = initialize(dish)
    entries = []
    for element in dish.optional_elements:
        entry = state.get_entry(element.id)
        if entry is None:
            entries.append(defaults.get_entry(element.id))
            continue

        replacement_item_id = entry.replacement_item_id if entry.is_included else None
        if replacement_item_id is not None and element.find_replacement(replacement_item_id) is None:
            replacement_item_id = None
        entries.append(SelectionEntry(
            element_id=element.id,
            is_included=entry.is_included,
            replacement_item_id=replacement_item_id,
            price_adjustment_cents=expected_adjustment(element, entry.is_included, replacement_item_id),
        ))
    return SelectionState(dish_id=dish.id, entries=tuple(entries))
