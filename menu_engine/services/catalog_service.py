"""
菜品目录服务
负责从存储读取组合菜品并组装成不可变快照，以及管理端的目录维护

主要功能：
- 按ID加载组合菜品（三层嵌套：菜品 → 可选元素 → 替换选项）
- 公开菜单列表（仅可售菜品）
- 管理端创建/更新/下架组合菜品，维护菜单单品

存储中的嵌套行在这里统一经过 pydantic 模型校验，结构不合法的数据
不会流到定制和计价逻辑中。
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.database import db_manager
from ..core.exceptions import (
    CatalogIntegrityError,
    DishNotFoundError,
    DishUnavailableError,
    MenuItemNotFoundError,
)
from ..models.dish import (
    CompositeDish,
    CompositeDishCreate,
    CompositeDishUpdate,
    MenuItem,
    MenuItemCreate,
)


class CatalogService:
    """菜品目录服务"""

    DISH_COLUMNS = (
        "id, name, description, base_price_cents, is_available, "
        "preparation_time, created_at, updated_at"
    )

    def __init__(self, db=None):
        self.db = db or db_manager

    # ---- 读取 ----

    def load(self, dish_id: str) -> CompositeDish:
        """
        加载可供定制的组合菜品

        Raises:
            DishNotFoundError: 菜品不存在
            DishUnavailableError: 菜品已下架
        """
        dish = self.fetch(dish_id)
        if dish is None:
            raise DishNotFoundError(dish_id)
        if not dish.is_available:
            raise DishUnavailableError(dish_id)
        return dish

    def fetch(self, dish_id: str) -> Optional[CompositeDish]:
        """读取菜品快照，不论是否可售；不存在时返回 None"""
        row = self.db.execute_one(
            f"SELECT {self.DISH_COLUMNS} FROM composite_dishes WHERE id=?",
            [dish_id]
        )
        if not row:
            return None
        return self._assemble(row)

    def list_available(self) -> List[CompositeDish]:
        """公开菜单：所有可售组合菜品，新建的在前"""
        rows = self.db.execute_query(
            f"SELECT {self.DISH_COLUMNS} FROM composite_dishes "
            "WHERE is_available = TRUE ORDER BY created_at DESC, name"
        )
        return [self._assemble(row) for row in rows]

    def _assemble(self, dish_row: tuple) -> CompositeDish:
        """把菜品行及其嵌套行组装为冻结的 CompositeDish"""
        dish_id = dish_row[0]

        base_rows = self.db.execute_query(
            """
            SELECT bp.menu_item_id, mi.name, bp.quantity
            FROM dish_base_products bp
            LEFT JOIN menu_items mi ON mi.id = bp.menu_item_id
            WHERE bp.dish_id = ?
            ORDER BY bp.position, bp.id
            """,
            [dish_id]
        )
        element_rows = self.db.execute_query(
            """
            SELECT e.id, e.menu_item_id, mi.name, e.is_included_by_default,
                   e.additional_price_cents, e.element_type
            FROM dish_optional_elements e
            LEFT JOIN menu_items mi ON mi.id = e.menu_item_id
            WHERE e.dish_id = ?
            ORDER BY e.position, e.id
            """,
            [dish_id]
        )
        replacement_rows = self.db.execute_query(
            """
            SELECT r.id, r.optional_element_id, r.replacement_item_id, mi.name,
                   r.price_difference_cents
            FROM dish_replacement_options r
            JOIN dish_optional_elements e ON e.id = r.optional_element_id
            LEFT JOIN menu_items mi ON mi.id = r.replacement_item_id
            WHERE e.dish_id = ?
            ORDER BY r.position, r.id
            """,
            [dish_id]
        )

        replacements_by_element: Dict[str, List[Dict[str, Any]]] = {}
        for row in replacement_rows:
            replacements_by_element.setdefault(row[1], []).append({
                "id": row[0],
                "replacement_item_id": row[2],
                "replacement_item_name": row[3],
                "price_difference_cents": row[4] if row[4] is not None else 0,
            })

        raw = {
            "id": dish_id,
            "name": dish_row[1],
            "description": dish_row[2],
            "base_price_cents": dish_row[3],
            "is_available": bool(dish_row[4]),
            "preparation_time": dish_row[5],
            "created_at": dish_row[6],
            "updated_at": dish_row[7],
            "base_components": [
                {
                    "referenced_item_id": row[0],
                    "referenced_item_name": row[1],
                    "quantity": row[2],
                }
                for row in base_rows
            ],
            "optional_elements": [
                {
                    "id": row[0],
                    "referenced_item_id": row[1],
                    "referenced_item_name": row[2],
                    "included_by_default": True if row[3] is None else bool(row[3]),
                    "additional_price_cents": row[4] if row[4] is not None else 0,
                    "element_type": row[5] or "side",
                    "replacement_options": replacements_by_element.get(row[0], []),
                }
                for row in element_rows
            ],
        }

        try:
            return CompositeDish.model_validate(raw)
        except PydanticValidationError as e:
            raise CatalogIntegrityError(dish_id, str(e))

    # ---- 菜单单品 ----

    def create_menu_item(self, item: MenuItemCreate, actor_id: Optional[str] = None) -> MenuItem:
        """创建菜单单品"""
        item_id = str(uuid.uuid4())
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO menu_items(id, name, description, price_cents) VALUES (?,?,?,?)",
                [item_id, item.name, item.description, item.price_cents]
            )
            self.db.log_action("menu_item_create", {
                "item_id": item_id,
                "name": item.name,
                "price_cents": item.price_cents,
            }, actor_id, con=conn)
        return self.get_menu_item(item_id)

    def get_menu_item(self, item_id: str) -> Optional[MenuItem]:
        """获取单个菜单单品"""
        row = self.db.execute_one(
            "SELECT id, name, description, price_cents, is_available, created_at, updated_at "
            "FROM menu_items WHERE id=?",
            [item_id]
        )
        return self._menu_item_from_row(row) if row else None

    def list_menu_items(self, include_unavailable: bool = False) -> List[MenuItem]:
        """列出菜单单品"""
        query = (
            "SELECT id, name, description, price_cents, is_available, created_at, updated_at "
            "FROM menu_items"
        )
        if not include_unavailable:
            query += " WHERE is_available = TRUE"
        rows = self.db.execute_query(query + " ORDER BY name")
        return [self._menu_item_from_row(row) for row in rows]

    @staticmethod
    def _menu_item_from_row(row: tuple) -> MenuItem:
        return MenuItem(
            id=row[0],
            name=row[1],
            description=row[2],
            price_cents=row[3],
            is_available=bool(row[4]),
            created_at=row[5],
            updated_at=row[6],
        )

    def _ensure_menu_items_exist(self, item_ids: List[str]):
        """检查引用的单品都存在"""
        wanted = sorted(set(item_ids))
        if not wanted:
            return
        placeholders = ",".join("?" for _ in wanted)
        rows = self.db.execute_query(
            f"SELECT id FROM menu_items WHERE id IN ({placeholders})",
            wanted
        )
        found = {row[0] for row in rows}
        missing = [item_id for item_id in wanted if item_id not in found]
        if missing:
            raise MenuItemNotFoundError(missing)

    # ---- 组合菜品维护 ----

    def create_dish(self, dish_data: CompositeDishCreate, actor_id: Optional[str] = None) -> CompositeDish:
        """创建组合菜品，基础部件、可选元素和替换选项在同一事务中写入"""
        referenced = [p.menu_item_id for p in dish_data.base_products]
        for element in dish_data.optional_elements:
            referenced.append(element.menu_item_id)
            referenced.extend(o.replacement_item_id for o in element.replacement_options)
        self._ensure_menu_items_exist(referenced)

        dish_id = str(uuid.uuid4())
        with self.db.transaction() as conn:
            conn.execute(
                "INSERT INTO composite_dishes(id, name, description, base_price_cents, preparation_time) "
                "VALUES (?,?,?,?,?)",
                [dish_id, dish_data.name, dish_data.description,
                 dish_data.base_price_cents, dish_data.preparation_time]
            )

            for position, product in enumerate(dish_data.base_products):
                conn.execute(
                    "INSERT INTO dish_base_products(id, dish_id, menu_item_id, quantity, position) "
                    "VALUES (?,?,?,?,?)",
                    [str(uuid.uuid4()), dish_id, product.menu_item_id, product.quantity, position]
                )

            for position, element in enumerate(dish_data.optional_elements):
                element_id = str(uuid.uuid4())
                conn.execute(
                    "INSERT INTO dish_optional_elements(id, dish_id, menu_item_id, is_included_by_default, "
                    "additional_price_cents, element_type, position) VALUES (?,?,?,?,?,?,?)",
                    [element_id, dish_id, element.menu_item_id, element.is_included_by_default,
                     element.additional_price_cents, element.element_type, position]
                )
                for option_position, option in enumerate(element.replacement_options):
                    conn.execute(
                        "INSERT INTO dish_replacement_options(id, optional_element_id, replacement_item_id, "
                        "price_difference_cents, position) VALUES (?,?,?,?,?)",
                        [str(uuid.uuid4()), element_id, option.replacement_item_id,
                         option.price_difference_cents, option_position]
                    )

            self.db.log_action("dish_create", {
                "dish_id": dish_id,
                "name": dish_data.name,
                "base_price_cents": dish_data.base_price_cents,
                "optional_elements": len(dish_data.optional_elements),
            }, actor_id, con=conn)

        return self.fetch(dish_id)

    def update_dish(self, dish_id: str, updates: CompositeDishUpdate,
                    actor_id: Optional[str] = None) -> CompositeDish:
        """更新组合菜品的标量字段，已加载的快照不受影响"""
        if self.fetch(dish_id) is None:
            raise DishNotFoundError(dish_id)

        changes = updates.model_dump(exclude_unset=True)
        if changes:
            assignments = ", ".join(f"{column}=?" for column in changes)
            with self.db.transaction() as conn:
                conn.execute(
                    f"UPDATE composite_dishes SET {assignments}, updated_at=now() WHERE id=?",
                    list(changes.values()) + [dish_id]
                )
                self.db.log_action("dish_update", {
                    "dish_id": dish_id,
                    "changes": changes,
                }, actor_id, con=conn)

        return self.fetch(dish_id)

    def withdraw_dish(self, dish_id: str, actor_id: Optional[str] = None) -> CompositeDish:
        """下架组合菜品（软删除，历史订单仍可引用）"""
        return self.update_dish(dish_id, CompositeDishUpdate(is_available=False), actor_id)
