"""
订单服务模块
提供订单和订单行写入的核心业务逻辑

主要功能：
- 创建待确认订单
- 写入定制菜品订单行（含定制明细审计）
- 查询订单及其订单行

业务规则：
- 只有 pending 状态的订单可以追加订单行
- 订单行、定制明细、订单总额在同一事务中写入
- 定制明细只记录偏离默认配置的元素
"""

import uuid
from typing import Any, Dict, List, Optional

from ..core.database import db_manager
from ..core.exceptions import OrderNotEditableError, OrderNotFoundError
from ..models.order import OrderLineDraft, OrderStatus


class OrderService:
    """订单服务类，封装订单相关的业务逻辑"""

    def __init__(self, db=None):
        self.db = db or db_manager

    def create_order(self, customer_id: Optional[str] = None,
                     notes: Optional[str] = None) -> Dict[str, Any]:
        """
        创建新订单

        Args:
            customer_id: 顾客ID
            notes: 订单备注

        Returns:
            dict: 新订单信息（不含订单行）
        """
        order_id = str(uuid.uuid4())
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO orders(id, customer_id, status, total_amount_cents, notes) VALUES (?,?,?,?,?)",
                [order_id, customer_id, OrderStatus.PENDING.value, 0, notes]
            )
            self.db.log_action("order_create", {
                "order_id": order_id,
                "notes": notes,
            }, customer_id, con=conn)

        return self.get_order(order_id)

    def add_line(self, order_id: str, draft: OrderLineDraft) -> Dict[str, Any]:
        """
        写入一条定制菜品订单行

        Args:
            order_id: 订单ID
            draft: 已校验、已计价的订单行草稿

        Returns:
            dict: 订单行ID、订单行金额和订单最新总额

        Raises:
            OrderNotFoundError: 订单不存在时
            OrderNotEditableError: 订单不是 pending 状态时
        """
        records = draft.persisted_customizations

        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT customer_id, status FROM orders WHERE id=?", [order_id]
            ).fetchone()
            if not row:
                raise OrderNotFoundError(order_id)
            customer_id, status = row
            if status != OrderStatus.PENDING.value:
                raise OrderNotEditableError(order_id, status)

            conn.execute(
                "INSERT INTO order_items(id, order_id, composite_dish_id, dish_name, quantity, "
                "unit_price_cents, total_price_cents) VALUES (?,?,?,?,?,?,?)",
                [draft.line_id, order_id, draft.dish_id, draft.dish_name, draft.quantity,
                 draft.unit_price_cents, draft.total_price_cents]
            )

            for record in records:
                conn.execute(
                    "INSERT INTO order_dish_customizations(id, order_item_id, optional_element_id, "
                    "is_included, replacement_item_id, price_adjustment_cents) VALUES (?,?,?,?,?,?)",
                    [str(uuid.uuid4()), draft.line_id, record.element_id, record.is_included,
                     record.replacement_item_id, record.price_adjustment_cents]
                )

            total = conn.execute(
                "SELECT COALESCE(SUM(total_price_cents), 0) FROM order_items WHERE order_id=?",
                [order_id]
            ).fetchone()[0]
            conn.execute(
                "UPDATE orders SET total_amount_cents=?, updated_at=now() WHERE id=?",
                [total, order_id]
            )

            self.db.log_action("order_line_add", {
                "order_id": order_id,
                "line_id": draft.line_id,
                "dish_id": draft.dish_id,
                "quantity": draft.quantity,
                "unit_price_cents": draft.unit_price_cents,
                "customizations": [record.model_dump() for record in records],
            }, customer_id, con=conn)

        return {
            "order_id": order_id,
            "line_id": draft.line_id,
            "unit_price_cents": draft.unit_price_cents,
            "total_price_cents": draft.total_price_cents,
            "order_total_cents": total,
        }

    def get_order(self, order_id: str) -> Dict[str, Any]:
        """
        查询订单详情

        Raises:
            OrderNotFoundError: 订单不存在时
        """
        row = self.db.execute_one(
            "SELECT id, customer_id, status, total_amount_cents, notes, created_at, updated_at "
            "FROM orders WHERE id=?",
            [order_id]
        )
        if not row:
            raise OrderNotFoundError(order_id)

        return {
            "order_id": row[0],
            "customer_id": row[1],
            "status": row[2],
            "total_amount_cents": row[3],
            "notes": row[4],
            "created_at": row[5],
            "updated_at": row[6],
            "lines": self._get_order_lines(order_id),
        }

    def _get_order_lines(self, order_id: str) -> List[Dict[str, Any]]:
        """获取订单行及其定制明细"""
        line_rows = self.db.execute_query(
            "SELECT id, composite_dish_id, dish_name, quantity, unit_price_cents, total_price_cents "
            "FROM order_items WHERE order_id=? ORDER BY created_at, id",
            [order_id]
        )
        customization_rows = self.db.execute_query(
            """
            SELECT c.order_item_id, c.optional_element_id, c.is_included,
                   c.replacement_item_id, mi.name, c.price_adjustment_cents
            FROM order_dish_customizations c
            JOIN order_items oi ON oi.id = c.order_item_id
            LEFT JOIN menu_items mi ON mi.id = c.replacement_item_id
            WHERE oi.order_id = ?
            ORDER BY c.created_at, c.id
            """,
            [order_id]
        )

        by_line: Dict[str, List[Dict[str, Any]]] = {}
        for c in customization_rows:
            by_line.setdefault(c[0], []).append({
                "element_id": c[1],
                "is_included": bool(c[2]),
                "replacement_item_id": c[3],
                "replacement_item_name": c[4],
                "price_adjustment_cents": c[5],
            })

        return [
            {
                "line_id": r[0],
                "dish_id": r[1],
                "dish_name": r[2],
                "quantity": r[3],
                "unit_price_cents": r[4],
                "total_price_cents": r[5],
                "customizations": by_line.get(r[0], []),
            }
            for r in line_rows
        ]