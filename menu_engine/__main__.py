"""
开发环境启动入口：python -m menu_engine
"""

import uvicorn

from .config.settings import settings


if __name__ == "__main__":
    uvicorn.run("menu_engine.app:app", host=settings.host, port=settings.port, reload=settings.debug)
