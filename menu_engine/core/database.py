"""
数据库连接和管理模块
提供 DuckDB 单连接管理、事务上下文和表结构初始化

数据库表说明：
- menu_items: 菜单单品（组合菜品各部件引用的商品）
- composite_dishes: 组合菜品
- dish_base_products: 组合菜品的必选基础部件
- dish_optional_elements: 组合菜品的可选元素
- dish_replacement_options: 可选元素的替换选项
- orders: 订单
- order_items: 订单行（定制后的组合菜品按单价记一行）
- order_dish_customizations: 订单行的定制明细（审计用）
- logs: 业务操作日志
"""

import duckdb
import json
from pathlib import Path
from typing import Any, Dict, Generator, Optional
from contextlib import contextmanager
import threading

from .exceptions import BaseApplicationError, DatabaseError
from ..config.settings import settings


# 金额统一用分存储，避免浮点累加误差
SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS menu_items (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  description TEXT,
  price_cents INTEGER NOT NULL,
  is_available BOOLEAN DEFAULT TRUE,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS composite_dishes (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  description TEXT,
  base_price_cents INTEGER NOT NULL DEFAULT 0,
  is_available BOOLEAN DEFAULT TRUE,
  preparation_time TEXT DEFAULT '20-25 min',
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS dish_base_products (
  id TEXT PRIMARY KEY,
  dish_id TEXT NOT NULL,
  menu_item_id TEXT NOT NULL,
  quantity INTEGER NOT NULL DEFAULT 1,
  position INTEGER NOT NULL DEFAULT 0,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_base_products_dish ON dish_base_products(dish_id);

CREATE TABLE IF NOT EXISTS dish_optional_elements (
  id TEXT PRIMARY KEY,
  dish_id TEXT NOT NULL,
  menu_item_id TEXT NOT NULL,
  is_included_by_default BOOLEAN DEFAULT TRUE,
  additional_price_cents INTEGER DEFAULT 0,
  element_type TEXT DEFAULT 'side',
  position INTEGER NOT NULL DEFAULT 0,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_optional_elements_dish ON dish_optional_elements(dish_id);

CREATE TABLE IF NOT EXISTS dish_replacement_options (
  id TEXT PRIMARY KEY,
  optional_element_id TEXT NOT NULL,
  replacement_item_id TEXT NOT NULL,
  price_difference_cents INTEGER DEFAULT 0,
  position INTEGER NOT NULL DEFAULT 0,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_replacements_element ON dish_replacement_options(optional_element_id);

CREATE TABLE IF NOT EXISTS orders (
  id TEXT PRIMARY KEY,
  customer_id TEXT,
  status TEXT CHECK(status IN ('pending','confirmed','preparing','ready','delivered','cancelled')) NOT NULL,
  total_amount_cents INTEGER NOT NULL DEFAULT 0,
  notes TEXT,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE TABLE IF NOT EXISTS order_items (
  id TEXT PRIMARY KEY,
  order_id TEXT NOT NULL,
  composite_dish_id TEXT,
  dish_name TEXT,
  quantity INTEGER NOT NULL DEFAULT 1,
  unit_price_cents INTEGER NOT NULL,
  total_price_cents INTEGER NOT NULL,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_order_items_order ON order_items(order_id);

CREATE TABLE IF NOT EXISTS order_dish_customizations (
  id TEXT PRIMARY KEY,
  order_item_id TEXT NOT NULL,
  optional_element_id TEXT NOT NULL,
  is_included BOOLEAN,
  replacement_item_id TEXT,
  price_adjustment_cents INTEGER DEFAULT 0,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_customizations_item ON order_dish_customizations(order_item_id);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  actor_id TEXT,
  action TEXT,
  detail_json TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


class DatabaseManager:
    """数据库管理器，封装所有数据库操作"""

    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or self._get_db_path_from_settings()

    def _get_db_path_from_settings(self) -> str:
        """从设置中获取数据库路径"""
        db_url = settings.database_url
        if db_url.startswith("duckdb://"):
            return db_url.replace("duckdb://", "")
        return db_url

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接"""
        with self._lock:
            if self._connection is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._connection = duckdb.connect(self.db_path)
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接"""
        return self.connection

    def _init_schema(self):
        """初始化数据库表结构"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """初始化数据库"""
        self.get_connection()

    def close(self):
        """关闭连接"""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        数据库事务上下文管理器

        业务异常原样抛出，其他异常包装为 DatabaseError。
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN TRANSACTION")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseApplicationError:
                conn.execute("ROLLBACK")
                raise
            except Exception as e:
                conn.execute("ROLLBACK")
                raise DatabaseError(f"数据库操作失败: {str(e)}")

    def execute_query(self, query: str, params: list = None) -> list:
        """执行查询并返回结果"""
        with self._lock:
            try:
                con = self.get_connection()
                if params:
                    return con.execute(query, params).fetchall()
                return con.execute(query).fetchall()
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """执行查询并返回单条结果"""
        with self._lock:
            try:
                con = self.get_connection()
                if params:
                    return con.execute(query, params).fetchone()
                return con.execute(query).fetchone()
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def log_action(self, action: str, detail: Dict[str, Any],
                   actor_id: Optional[str] = None, con=None):
        """记录业务操作日志，可在已有事务的连接上执行"""
        sql = "INSERT INTO logs(actor_id, action, detail_json) VALUES (?,?,?)"
        params = [actor_id, action, json.dumps(detail, ensure_ascii=False, default=str)]
        if con is not None:
            con.execute(sql, params)
        else:
            self.execute_query(sql, params)


# 全局数据库管理器实例
db_manager = DatabaseManager()
