"""
组合菜品定制服务 - 主应用入口
提供组合菜品目录、顾客定制计价和订单行写入的后端API服务

主要功能模块：
- 菜单单品和组合菜品维护
- 顾客定制会话（增减、替换可选元素，实时计价）
- 确认校验和订单行写入
- 操作日志记录

技术栈：FastAPI + DuckDB + Pydantic
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager

from .core.database import DatabaseManager, db_manager
from .core.exceptions import BaseApplicationError
from .core.error_handler import (
    application_error_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler
)
from .config.settings import settings
from .api import api_router
from .services.session_service import SessionStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    try:
        app.state.db.init_database()
        print("Database initialized successfully")
    except Exception as e:
        print(f"Database initialization failed: {e}")
        # 不让应用启动失败，首次请求时会再次连接

    yield

    app.state.db.close()


def create_app(db: DatabaseManager = None, store: SessionStore = None) -> FastAPI:
    """创建FastAPI应用"""
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="组合菜品定制与计价API",
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.db = db or db_manager
    app.state.session_store = store or SessionStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 注册异常处理器
    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # 注册路由
    app.include_router(api_router, prefix=settings.api_prefix)

    # 健康检查
    @app.get("/health")
    def health_check():
        try:
            app.state.db.get_connection()
            return {
                "status": "healthy",
                "version": settings.api_version,
                "database": "connected"
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "version": settings.api_version,
                "database": f"error: {str(e)}"
            }

    @app.get("/")
    def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": "组合菜品定制与计价API"
        }

    return app


# 应用实例
app = create_app()
