"""
菜品定制路由模块
顾客在会话中增减、替换可选元素，确认后写入订单行

每次变更都返回最新的选择和价格，前端无需自行计价。
"""

from fastapi import APIRouter, Depends

from ...schemas.customization import (
    ConfirmRequest,
    DraftLineResponse,
    ElementRequest,
    OpenSessionRequest,
    ReplaceRequest,
    SessionResponse,
)
from ...core.exceptions import LineNotFoundError
from ...models.selection import CustomizationSession
from ...services import pricing
from ...services.session_service import CustomizationService
from ..deps import get_customization_service

router = APIRouter()


def _session_response(session: CustomizationSession) -> SessionResponse:
    return SessionResponse.from_session(session, pricing.resolve(session.dish, session.state))


@router.post("", response_model=SessionResponse, status_code=201)
def open_session(req: OpenSessionRequest,
                 service: CustomizationService = Depends(get_customization_service)):
    """开始定制"""
    return _session_response(service.open_session(req.dish_id, req.customer_id))


@router.get("/lines/{line_id}", response_model=DraftLineResponse)
def get_line(line_id: str, service: CustomizationService = Depends(get_customization_service)):
    """查看刚确认的订单行（进程内缓存，可能已被淘汰）"""
    draft = service.get_cached_line(line_id)
    if draft is None:
        raise LineNotFoundError(line_id)
    return DraftLineResponse.from_draft(draft)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(session_id: str, service: CustomizationService = Depends(get_customization_service)):
    """查看定制会话"""
    return _session_response(service.get_session(session_id))


@router.post("/{session_id}/toggle", response_model=SessionResponse)
def toggle_element(session_id: str, req: ElementRequest,
                   service: CustomizationService = Depends(get_customization_service)):
    """切换可选元素的包含状态"""
    return _session_response(service.toggle(session_id, req.element_id))


@router.post("/{session_id}/replace", response_model=SessionResponse)
def replace_element(session_id: str, req: ReplaceRequest,
                    service: CustomizationService = Depends(get_customization_service)):
    """替换可选元素"""
    return _session_response(service.replace(session_id, req.element_id, req.replacement_item_id))


@router.post("/{session_id}/clear-replacement", response_model=SessionResponse)
def clear_replacement(session_id: str, req: ElementRequest,
                      service: CustomizationService = Depends(get_customization_service)):
    """撤销替换"""
    return _session_response(service.clear_replacement(session_id, req.element_id))


@router.post("/{session_id}/confirm", response_model=SessionResponse)
def confirm_session(session_id: str, req: ConfirmRequest,
                    service: CustomizationService = Depends(get_customization_service)):
    """确认定制，写入订单行"""
    return _session_response(service.confirm(session_id, req.order_id, req.quantity))


@router.post("/{session_id}/cancel", response_model=SessionResponse)
def cancel_session(session_id: str, service: CustomizationService = Depends(get_customization_service)):
    """放弃定制"""
    return _session_response(service.cancel(session_id))
