"""
菜品目录服务测试
"""

import pytest
from pydantic import ValidationError

from menu_engine.core.exceptions import (
    CatalogIntegrityError,
    DishNotFoundError,
    DishUnavailableError,
    MenuItemNotFoundError,
)
from menu_engine.models.dish import (
    CompositeDishCreate,
    CompositeDishUpdate,
    MenuItemCreate,
    OptionalElementCreate,
    ReplacementOptionCreate,
)
from .utils import element_for, logged_actions


class TestCatalogLoad:
    """菜品加载测试"""

    def test_load_nested_structure(self, catalog, stored_dish, menu_items):
        """三层嵌套结构完整加载，顺序与创建时一致"""
        dish = catalog.load(stored_dish.id)

        assert dish.name == "经典汉堡套餐"
        assert dish.base_price_cents == 800
        assert [c.referenced_item_name for c in dish.base_components] == ["牛肉汉堡"]
        assert [e.referenced_item_name for e in dish.optional_elements] == ["可乐", "薯条"]

        drink = element_for(dish, menu_items["cola"].id)
        assert drink.element_type == "drink"
        assert drink.included_by_default is True
        assert len(drink.replacement_options) == 1
        option = drink.replacement_options[0]
        assert option.replacement_item_id == menu_items["juice"].id
        assert option.replacement_item_name == "橙汁"
        assert option.price_difference_cents == 100

    def test_snapshot_is_frozen(self, catalog, stored_dish):
        dish = catalog.load(stored_dish.id)

        with pytest.raises(ValidationError):
            dish.base_price_cents = 1
        assert isinstance(dish.optional_elements, tuple)

    def test_snapshot_unaffected_by_catalog_edit(self, catalog, stored_dish):
        """已加载的快照不随目录修改变化"""
        dish = catalog.load(stored_dish.id)
        catalog.update_dish(stored_dish.id, CompositeDishUpdate(base_price_cents=1000))

        assert dish.base_price_cents == 800
        assert catalog.load(stored_dish.id).base_price_cents == 1000

    def test_load_missing(self, catalog):
        with pytest.raises(DishNotFoundError) as exc_info:
            catalog.load("no-such-dish")

        assert exc_info.value.error_code == "DISH_NOT_FOUND"
        assert exc_info.value.reason == "missing"

    def test_load_withdrawn(self, catalog, stored_dish):
        """已下架菜品不能开始定制，但仍可读取"""
        catalog.withdraw_dish(stored_dish.id)

        with pytest.raises(DishUnavailableError) as exc_info:
            catalog.load(stored_dish.id)

        assert isinstance(exc_info.value, DishNotFoundError)
        assert exc_info.value.reason == "unavailable"
        assert exc_info.value.error_code == "DISH_UNAVAILABLE"
        assert catalog.fetch(stored_dish.id).is_available is False

    def test_fetch_missing_returns_none(self, catalog):
        assert catalog.fetch("no-such-dish") is None

    def test_malformed_rows_rejected(self, catalog, stored_dish, test_db):
        """引用了不存在单品的可选元素在加载边界被拦截"""
        test_db.execute_query(
            "INSERT INTO dish_optional_elements(id, dish_id, menu_item_id, position) VALUES (?,?,?,?)",
            ["el-broken", stored_dish.id, "item-deleted", 9]
        )

        with pytest.raises(CatalogIntegrityError):
            catalog.load(stored_dish.id)

    def test_self_replacement_rejected_at_load(self, catalog, stored_dish, menu_items, test_db):
        drink = element_for(stored_dish, menu_items["cola"].id)
        test_db.execute_query(
            "INSERT INTO dish_replacement_options(id, optional_element_id, replacement_item_id, position) "
            "VALUES (?,?,?,?)",
            ["opt-self", drink.id, menu_items["cola"].id, 5]
        )

        with pytest.raises(CatalogIntegrityError):
            catalog.fetch(stored_dish.id)


class TestCatalogListing:
    """公开菜单测试"""

    def test_only_available(self, catalog, stored_dish):
        other = catalog.create_dish(CompositeDishCreate(name="素食套餐", base_price_cents=600))
        catalog.withdraw_dish(stored_dish.id)

        listed = catalog.list_available()

        assert [d.id for d in listed] == [other.id]

    def test_menu_items(self, catalog, menu_items):
        names = [item.name for item in catalog.list_menu_items()]

        assert set(names) == {"牛肉汉堡", "可乐", "橙汁", "薯条", "沙拉"}
        assert menu_items["cola"].price_display == "6.00"


class TestCatalogMaintenance:
    """管理端维护测试"""

    def test_create_dish_writes_log(self, catalog, stored_dish, test_db):
        logs = logged_actions(test_db, "dish_create")

        assert len(logs) == 1
        assert logs[0]["dish_id"] == stored_dish.id
        assert logs[0]["optional_elements"] == 2

    def test_create_with_missing_item(self, catalog, menu_items):
        """引用不存在的单品时整道菜都不写入"""
        with pytest.raises(MenuItemNotFoundError) as exc_info:
            catalog.create_dish(CompositeDishCreate(
                name="坏数据套餐",
                base_price_cents=500,
                optional_elements=[
                    OptionalElementCreate(
                        menu_item_id=menu_items["cola"].id,
                        replacement_options=[ReplacementOptionCreate(replacement_item_id="item-ghost")],
                    )
                ],
            ))

        assert exc_info.value.details["item_ids"] == ["item-ghost"]
        assert catalog.list_available() == []

    def test_create_rejects_self_replacement(self):
        with pytest.raises(ValidationError):
            OptionalElementCreate(
                menu_item_id="item-cola",
                replacement_options=[ReplacementOptionCreate(replacement_item_id="item-cola")],
            )

    def test_update_partial(self, catalog, stored_dish, test_db):
        updated = catalog.update_dish(stored_dish.id, CompositeDishUpdate(name="超值汉堡套餐"))

        assert updated.name == "超值汉堡套餐"
        assert updated.base_price_cents == 800
        assert logged_actions(test_db, "dish_update")[0]["changes"] == {"name": "超值汉堡套餐"}

    def test_update_clears_optional_fields(self, catalog, stored_dish, test_db):
        """描述和制作时间可以置空，未传的字段不变"""
        updated = catalog.update_dish(stored_dish.id, CompositeDishUpdate(description=None, preparation_time=None))

        assert updated.description is None
        assert updated.preparation_time is None
        assert updated.name == "经典汉堡套餐"
        assert logged_actions(test_db, "dish_update")[0]["changes"] == {
            "description": None,
            "preparation_time": None,
        }

    def test_update_rejects_null_required_fields(self):
        for field in ["name", "base_price_cents", "is_available"]:
            with pytest.raises(ValidationError):
                CompositeDishUpdate(**{field: None})

    def test_update_missing(self, catalog):
        with pytest.raises(DishNotFoundError):
            catalog.update_dish("no-such-dish", CompositeDishUpdate(name="x"))

    def test_create_menu_item(self, catalog, test_db):
        item = catalog.create_menu_item(MenuItemCreate(name="奶昔", price_cents=1250))

        assert item.id
        assert item.is_available is True
        assert catalog.get_menu_item(item.id).price_cents == 1250
        assert logged_actions(test_db, "menu_item_create")[-1]["name"] == "奶昔"
