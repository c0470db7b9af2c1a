"""
计价

把选择状态折叠到所属菜品上，得到总价和逐项调整明细。
resolve 是全函数：不抛异常、不读全局状态，相同输入总是得到相同输出。
金额全程以整数分累加，两位小数只在展示时出现。
"""

from ..models.base import cents_to_display
from ..models.dish import CompositeDish, OptionalElement
from ..models.selection import PriceLine, PricedSelection, SelectionEntry, SelectionState


def _display_label(element: OptionalElement, entry: SelectionEntry) -> str:
    """有替换时显示替换单品名称，否则显示默认单品名称"""
    if entry.replacement_item_id is not None:
        option = element.find_replacement(entry.replacement_item_id)
        return option.replacement_item_name if option else entry.replacement_item_id
    return element.referenced_item_name


def resolve(dish: CompositeDish, state: SelectionState) -> PricedSelection:
    """
    计算定制后的价格

    按菜品中可选元素的顺序遍历，只有已包含且调整不为零的元素才生成明细行。
    没有对应条目的元素、以及没有对应元素的条目都被跳过，交由校验处理。
    """
    entries = {entry.element_id: entry for entry in state.entries}
    total = dish.base_price_cents
    lines = []

    for element in dish.optional_elements:
        entry = entries.get(element.id)
        if entry is None or not entry.is_included:
            continue
        if entry.price_adjustment_cents == 0:
            continue
        lines.append(PriceLine(
            element_id=element.id,
            label=_display_label(element, entry),
            amount_cents=entry.price_adjustment_cents,
        ))
        total += entry.price_adjustment_cents

    return PricedSelection(
        base_price_cents=dish.base_price_cents,
        lines=tuple(lines),
        total_price_cents=total,
    )


def format_cents(cents: int) -> str:
    """展示用金额，如 900 -> "9.00"，-150 -> "-1.50" """
    return cents_to_display(cents)
