"""
测试配置文件
提供测试所需的fixtures和配置
"""

import pytest
from fastapi.testclient import TestClient

from menu_engine.app import create_app
from menu_engine.core.database import DatabaseManager
from menu_engine.models.dish import (
    BaseComponent,
    BaseProductCreate,
    CompositeDish,
    CompositeDishCreate,
    MenuItemCreate,
    OptionalElement,
    OptionalElementCreate,
    ReplacementOption,
    ReplacementOptionCreate,
)
from menu_engine.services.catalog_service import CatalogService
from menu_engine.services.order_service import OrderService
from menu_engine.services.session_service import CustomizationService, SessionStore


@pytest.fixture
def burger_combo():
    """汉堡套餐：基础价 8.00，饮料默认包含，可换橙汁（+1.00）"""
    return CompositeDish(
        id="dish-burger",
        name="经典汉堡套餐",
        base_price_cents=800,
        base_components=(
            BaseComponent(referenced_item_id="item-burger", referenced_item_name="牛肉汉堡"),
        ),
        optional_elements=(
            OptionalElement(
                id="el-drink",
                referenced_item_id="item-cola",
                referenced_item_name="可乐",
                included_by_default=True,
                additional_price_cents=0,
                element_type="drink",
                replacement_options=(
                    ReplacementOption(
                        id="opt-juice",
                        replacement_item_id="item-juice",
                        replacement_item_name="橙汁",
                        price_difference_cents=100,
                    ),
                ),
            ),
        ),
    )


@pytest.fixture
def family_combo():
    """多元素套餐：薯条默认包含（+2.00），酱料默认不含（+1.00），饮料默认包含（免费）"""
    return CompositeDish(
        id="dish-family",
        name="家庭套餐",
        base_price_cents=1500,
        base_components=(
            BaseComponent(referenced_item_id="item-chicken", referenced_item_name="炸鸡", quantity=2),
        ),
        optional_elements=(
            OptionalElement(
                id="el-fries",
                referenced_item_id="item-fries",
                referenced_item_name="薯条",
                included_by_default=True,
                additional_price_cents=200,
                element_type="side",
                replacement_options=(
                    ReplacementOption(
                        id="opt-sweet",
                        replacement_item_id="item-sweet-fries",
                        replacement_item_name="红薯条",
                        price_difference_cents=150,
                    ),
                    ReplacementOption(
                        id="opt-salad",
                        replacement_item_id="item-salad",
                        replacement_item_name="沙拉",
                        price_difference_cents=-50,
                    ),
                ),
            ),
            OptionalElement(
                id="el-sauce",
                referenced_item_id="item-sauce",
                referenced_item_name="蜂蜜芥末酱",
                included_by_default=False,
                additional_price_cents=100,
                element_type="sauce",
            ),
            OptionalElement(
                id="el-drink",
                referenced_item_id="item-cola",
                referenced_item_name="可乐",
                included_by_default=True,
                additional_price_cents=0,
                element_type="drink",
            ),
        ),
    )


@pytest.fixture
def test_db():
    """测试数据库（内存）"""
    db = DatabaseManager(":memory:")
    db.init_database()

    yield db

    db.close()


@pytest.fixture
def catalog(test_db):
    return CatalogService(test_db)


@pytest.fixture
def order_service(test_db):
    return OrderService(test_db)


@pytest.fixture
def session_store():
    return SessionStore(line_cache_size=4)


@pytest.fixture
def customization_service(catalog, order_service, session_store):
    return CustomizationService(catalog, order_service, session_store)


@pytest.fixture
def menu_items(catalog):
    """示例菜单单品，按名称索引"""
    items = {}
    for key, name, price in [
        ("burger", "牛肉汉堡", 2500),
        ("cola", "可乐", 600),
        ("juice", "橙汁", 800),
        ("fries", "薯条", 1000),
        ("salad", "沙拉", 1200),
    ]:
        items[key] = catalog.create_menu_item(MenuItemCreate(name=name, price_cents=price))
    return items


@pytest.fixture
def stored_dish(catalog, menu_items):
    """已落库的汉堡套餐：饮料可换橙汁（+1.00），薯条默认包含可换沙拉（+0.50）"""
    return catalog.create_dish(CompositeDishCreate(
        name="经典汉堡套餐",
        description="汉堡配薯条和饮料",
        base_price_cents=800,
        base_products=[BaseProductCreate(menu_item_id=menu_items["burger"].id)],
        optional_elements=[
            OptionalElementCreate(
                menu_item_id=menu_items["cola"].id,
                is_included_by_default=True,
                additional_price_cents=0,
                element_type="drink",
                replacement_options=[
                    ReplacementOptionCreate(replacement_item_id=menu_items["juice"].id, price_difference_cents=100),
                ],
            ),
            OptionalElementCreate(
                menu_item_id=menu_items["fries"].id,
                is_included_by_default=True,
                additional_price_cents=0,
                element_type="side",
                replacement_options=[
                    ReplacementOptionCreate(replacement_item_id=menu_items["salad"].id, price_difference_cents=50),
                ],
            ),
        ],
    ))


@pytest.fixture
def app_instance(test_db, session_store):
    """测试应用"""
    return create_app(db=test_db, store=session_store)


@pytest.fixture
def client(app_instance):
    """测试客户端"""
    return TestClient(app_instance)
