"""
自定义异常类
提供更精确的错误处理和异常信息

纯计价核心（customization / pricing / validator）不抛出这些异常，
而是把它们作为返回值交给调用方；服务层再决定是否抛出。
"""

from typing import Any, Dict, List, Optional


class BaseApplicationError(Exception):
    """应用基础异常类"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class DatabaseError(BaseApplicationError):
    """数据库相关异常"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message, "DATABASE_ERROR", details)


class BusinessLogicError(BaseApplicationError):
    """业务逻辑异常"""
    pass


class NotFoundError(BusinessLogicError):
    """资源不存在异常"""
    pass


# ---- 目录相关 ----

class DishNotFoundError(NotFoundError):
    """组合菜品不存在"""

    def __init__(self, dish_id: str, reason: str = "missing"):
        unavailable = reason == "unavailable"
        super().__init__(
            "组合菜品已下架" if unavailable else "组合菜品不存在",
            "DISH_UNAVAILABLE" if unavailable else "DISH_NOT_FOUND",
            {"dish_id": dish_id, "reason": reason}
        )
        self.dish_id = dish_id
        self.reason = reason


class DishUnavailableError(DishNotFoundError):
    """组合菜品已下架，调用方应展示为不可选"""

    def __init__(self, dish_id: str):
        super().__init__(dish_id, reason="unavailable")


class MenuItemNotFoundError(NotFoundError):
    """菜单单品不存在"""

    def __init__(self, item_ids: List[str]):
        super().__init__(
            "引用的菜单单品不存在",
            "MENU_ITEM_NOT_FOUND",
            {"item_ids": list(item_ids)}
        )


class CatalogIntegrityError(BaseApplicationError):
    """目录数据结构不合法（存储中的嵌套行无法组装为合法菜品）"""

    def __init__(self, dish_id: str, reason: str):
        super().__init__(
            f"菜品目录数据异常: {reason}",
            "CATALOG_INTEGRITY_ERROR",
            {"dish_id": dish_id}
        )


# ---- 定制相关 ----

class UnknownElementError(BusinessLogicError):
    """可选元素不属于该菜品"""

    def __init__(self, element_id: str):
        super().__init__(
            "可选元素不存在",
            "UNKNOWN_ELEMENT",
            {"element_id": element_id}
        )
        self.element_id = element_id


class UnknownReplacementError(BusinessLogicError):
    """该可选元素没有对应的替换选项"""

    def __init__(self, element_id: str, replacement_item_id: str):
        super().__init__(
            "替换选项不存在",
            "UNKNOWN_REPLACEMENT",
            {"element_id": element_id, "replacement_item_id": replacement_item_id}
        )
        self.element_id = element_id
        self.replacement_item_id = replacement_item_id


class CustomizationValidationError(BusinessLogicError):
    """确认时校验失败，会话回到定制中状态"""

    def __init__(self, issues: List[Dict[str, Any]]):
        super().__init__(
            "定制内容校验失败",
            "CUSTOMIZATION_INVALID",
            {"issues": issues}
        )
        self.issues = issues


class SessionNotFoundError(NotFoundError):
    """定制会话不存在"""

    def __init__(self, session_id: str):
        super().__init__(
            "定制会话不存在",
            "SESSION_NOT_FOUND",
            {"session_id": session_id}
        )


class SessionClosedError(BusinessLogicError):
    """定制会话已结束（已确认或已取消）"""

    def __init__(self, session_id: str, status: str):
        super().__init__(
            f"定制会话已{'确认' if status == 'confirmed' else '取消'}，请重新开始定制",
            "SESSION_CLOSED",
            {"session_id": session_id, "status": status}
        )


class LineNotFoundError(NotFoundError):
    """确认生成的订单行不在缓存中（未生成或已被淘汰）"""

    def __init__(self, line_id: str):
        super().__init__(
            "订单行不在缓存中",
            "LINE_NOT_FOUND",
            {"line_id": line_id}
        )


# ---- 订单相关 ----

class OrderNotFoundError(NotFoundError):
    """订单不存在"""

    def __init__(self, order_id: str):
        super().__init__(
            "订单不存在",
            "ORDER_NOT_FOUND",
            {"order_id": order_id}
        )


class OrderNotEditableError(BusinessLogicError):
    """订单已进入后续流程，不能再追加订单行"""

    def __init__(self, order_id: str, status: str):
        super().__init__(
            f"订单状态为{status}，无法追加菜品",
            "ORDER_NOT_EDITABLE",
            {"order_id": order_id, "status": status}
        )


class InvalidQuantityError(BusinessLogicError):
    """订单行数量无效"""

    def __init__(self, quantity: Optional[int]):
        super().__init__(
            "订单行数量必须大于0",
            "INVALID_QUANTITY",
            {"quantity": quantity}
        )
