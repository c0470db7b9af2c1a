"""
定制会话服务
管理顾客定制组合菜品的会话状态机，并把确认后的选择写成订单行

会话状态：
    opened → customizing → confirmed
                         ↘ cancelled
confirmed 和 cancelled 为终态，终态会话拒绝一切后续操作。

每个会话独占一份菜品快照和一份选择状态，会话之间互不影响。
"""

import threading
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Dict, Optional

from ..config.settings import settings
from ..core.exceptions import (
    CustomizationValidationError,
    DishNotFoundError,
    SessionClosedError,
    SessionNotFoundError,
)
from ..models.order import OrderLineDraft
from ..models.selection import (
    CustomizationSession,
    MutationResult,
    PricedSelection,
    SessionStatus,
)
from . import customization, pricing, validator
from .catalog_service import CatalogService
from .materializer import materialize
from .order_service import OrderService


class SessionStore:
    """
    进程内会话存储

    每个会话有自己的锁，一个会话的确认写库不会阻塞其他会话；
    store.lock 只保护字典本身。会话进入终态后即从存储中释放，
    只在有界记录中保留其ID和终态，后续操作仍会得到 SessionClosedError。
    附带确认订单行的有界缓存。
    """

    def __init__(self, line_cache_size: Optional[int] = None,
                 closed_session_cache_size: Optional[int] = None):
        self.lock = threading.RLock()
        self._sessions: Dict[str, CustomizationSession] = {}
        self._session_locks: Dict[str, threading.Lock] = {}
        self._closed: "OrderedDict[str, SessionStatus]" = OrderedDict()
        self._lines: "OrderedDict[str, OrderLineDraft]" = OrderedDict()
        self.line_cache_size = line_cache_size or settings.line_cache_size
        self.closed_session_cache_size = closed_session_cache_size or settings.closed_session_cache_size

    def _missing(self, session_id: str, closed: Optional[SessionStatus]):
        if closed is not None:
            return SessionClosedError(session_id, closed.value)
        return SessionNotFoundError(session_id)

    def get(self, session_id: str) -> CustomizationSession:
        """
        Raises:
            SessionNotFoundError: 会话不存在
            SessionClosedError: 会话已结束
        """
        with self.lock:
            session = self._sessions.get(session_id)
            closed = self._closed.get(session_id)
        if session is None:
            raise self._missing(session_id, closed)
        return session

    def session_lock(self, session_id: str) -> threading.Lock:
        """获取会话自己的锁"""
        with self.lock:
            lock = self._session_locks.get(session_id)
            closed = self._closed.get(session_id)
        if lock is None:
            raise self._missing(session_id, closed)
        return lock

    def save(self, session: CustomizationSession):
        """保存会话；终态会话被释放，只记录其终态"""
        with self.lock:
            if not session.status.is_terminal:
                self._sessions[session.session_id] = session
                self._session_locks.setdefault(session.session_id, threading.Lock())
                return

            self._sessions.pop(session.session_id, None)
            self._session_locks.pop(session.session_id, None)
            self._closed[session.session_id] = session.status
            self._closed.move_to_end(session.session_id)
            while len(self._closed) > self.closed_session_cache_size:
                self._closed.popitem(last=False)

    def cache_line(self, draft: OrderLineDraft):
        """缓存订单行草稿，超出容量时淘汰最早的"""
        with self.lock:
            self._lines[draft.line_id] = draft
            self._lines.move_to_end(draft.line_id)
            while len(self._lines) > self.line_cache_size:
                self._lines.popitem(last=False)

    def drop_line(self, line_id: str):
        with self.lock:
            self._lines.pop(line_id, None)

    def get_line(self, line_id: str) -> Optional[OrderLineDraft]:
        with self.lock:
            return self._lines.get(line_id)


class CustomizationService:
    """定制会话服务"""

    def __init__(self, catalog: CatalogService = None, orders: OrderService = None,
                 store: SessionStore = None):
        self.catalog = catalog or CatalogService()
        self.orders = orders or OrderService()
        self.store = store or session_store

    def open_session(self, dish_id: str, customer_id: Optional[str] = None) -> CustomizationSession:
        """
        开始定制

        Raises:
            DishNotFoundError: 菜品不存在
            DishUnavailableError: 菜品已下架
        """
        dish = self.catalog.load(dish_id)
        session = CustomizationSession(
            session_id=uuid.uuid4().hex,
            customer_id=customer_id,
            dish=dish,
            state=customization.initialize(dish),
            status=SessionStatus.OPENED,
        )
        self.store.save(session)
        return session

    def get_session(self, session_id: str) -> CustomizationSession:
        return self.store.get(session_id)

    def _mutate(self, session_id: str,
                mutator: Callable[..., MutationResult], *args) -> CustomizationSession:
        with self.store.session_lock(session_id):
            session = self.store.get(session_id)
            result = mutator(session.dish, session.state, *args)
            if not result.ok:
                raise result.error
            updated = session.model_copy(update={
                "state": result.state,
                "status": SessionStatus.CUSTOMIZING,
                "updated_at": datetime.now(),
            })
            self.store.save(updated)
            return updated

    def toggle(self, session_id: str, element_id: str) -> CustomizationSession:
        """切换可选元素的包含状态"""
        return self._mutate(session_id, customization.toggle, element_id)

    def replace(self, session_id: str, element_id: str, replacement_item_id: str) -> CustomizationSession:
        """替换可选元素"""
        return self._mutate(session_id, customization.replace, element_id, replacement_item_id)

    def clear_replacement(self, session_id: str, element_id: str) -> CustomizationSession:
        """撤销替换"""
        return self._mutate(session_id, customization.clear_replacement, element_id)

    def quote(self, session_id: str) -> PricedSelection:
        """当前选择的价格"""
        session = self.store.get(session_id)
        return pricing.resolve(session.dish, session.state)

    def confirm(self, session_id: str, order_id: str, quantity: int = 1) -> CustomizationSession:
        """
        确认定制并写入订单行

        用确认时刻的菜品数据重新校验。校验失败时会话换上最新的菜品快照，
        选择状态按新快照重建并回到 customizing，顾客看过新价格后可以再次确认；
        写入失败时会话同样回到 customizing。

        Raises:
            SessionNotFoundError: 会话不存在
            SessionClosedError: 会话已结束
            DishNotFoundError: 菜品已被删除
            CustomizationValidationError: 校验未通过
            OrderNotFoundError / OrderNotEditableError: 订单不可写入
        """
        with self.store.session_lock(session_id):
            session = self.store.get(session_id)

            current = self.catalog.fetch(session.dish.id)
            if current is None:
                raise DishNotFoundError(session.dish.id)

            result = validator.validate(current, session.state)
            if not result.ok:
                self.store.save(session.model_copy(update={
                    "dish": current,
                    "state": customization.reconcile(current, session.state),
                    "status": SessionStatus.CUSTOMIZING,
                    "updated_at": datetime.now(),
                }))
                raise CustomizationValidationError(
                    [issue.model_dump(mode="json") for issue in result.issues]
                )

            priced = pricing.resolve(current, session.state)
            draft = materialize(current, session.state, priced, quantity=quantity)

            self.store.cache_line(draft)
            try:
                self.orders.add_line(order_id, draft)
            except Exception:
                self.store.drop_line(draft.line_id)
                self.store.save(session.model_copy(update={
                    "status": SessionStatus.CUSTOMIZING,
                    "updated_at": datetime.now(),
                }))
                raise

            confirmed = session.model_copy(update={
                "dish": current,
                "status": SessionStatus.CONFIRMED,
                "line_id": draft.line_id,
                "order_id": order_id,
                "updated_at": datetime.now(),
            })
            self.store.save(confirmed)
            return confirmed

    def cancel(self, session_id: str) -> CustomizationSession:
        """放弃定制，会话连同选择状态一起释放"""
        with self.store.session_lock(session_id):
            session = self.store.get(session_id)
            cancelled = session.model_copy(update={
                "status": SessionStatus.CANCELLED,
                "updated_at": datetime.now(),
            })
            self.store.save(cancelled)
            return cancelled

    def get_cached_line(self, line_id: str) -> Optional[OrderLineDraft]:
        return self.store.get_line(line_id)


# 全局会话存储
session_store = SessionStore()
