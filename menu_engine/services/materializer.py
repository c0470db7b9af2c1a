"""
订单行生成

把已校验、已计价的选择转成待落库的订单行草稿，本身不做任何存储或网络操作。
"""

import uuid
from typing import Optional

from ..core.exceptions import InvalidQuantityError
from ..models.dish import CompositeDish
from ..models.order import CustomizationRecord, OrderLineDraft
from ..models.selection import PricedSelection, SelectionState


def materialize(dish: CompositeDish, state: SelectionState, priced: PricedSelection,
                line_id: Optional[str] = None, quantity: int = 1) -> OrderLineDraft:
    """
    生成订单行草稿

    单价取计价总价；定制明细为每个已包含或偏离默认配置的可选元素各记一条，
    这样默认包含却被去掉的元素也会留下记录。
    """
    if quantity is None or quantity < 1:
        raise InvalidQuantityError(quantity)

    records = []
    for element in dish.optional_elements:
        entry = state.get_entry(element.id)
        if entry is None:
            continue
        if not entry.is_included and not element.included_by_default:
            continue

        replacement = None
        if entry.replacement_item_id is not None:
            replacement = element.find_replacement(entry.replacement_item_id)

        records.append(CustomizationRecord(
            element_id=element.id,
            referenced_item_id=element.referenced_item_id,
            referenced_item_name=element.referenced_item_name,
            is_included=entry.is_included,
            included_by_default=element.included_by_default,
            replacement_item_id=entry.replacement_item_id,
            replacement_item_name=replacement.replacement_item_name if replacement else None,
            price_adjustment_cents=entry.price_adjustment_cents,
        ))

    return OrderLineDraft(
        line_id=line_id or uuid.uuid4().hex,
        dish_id=dish.id,
        dish_name=dish.name,
        quantity=quantity,
        unit_price_cents=priced.total_price_cents,
        total_price_cents=priced.total_price_cents * quantity,
        customizations=tuple(records),
    )
