"""
测试辅助函数
"""

import json


def element_for(dish, menu_item_id):
    """按默认单品查找可选元素"""
    for element in dish.optional_elements:
        if element.referenced_item_id == menu_item_id:
            return element
    raise KeyError(menu_item_id)


def logged_actions(db, action):
    """读取某类操作日志的明细"""
    rows = db.execute_query(
        "SELECT detail_json FROM logs WHERE action=? ORDER BY log_id", [action]
    )
    return [json.loads(row[0]) for row in rows]
