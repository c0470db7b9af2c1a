from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./data/menu_engine.duckdb"

    # API配置
    api_title: str = "组合菜品定制 API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # 已确认订单行的本地缓存条数上限
    line_cache_size: int = 256

    # 已结束会话ID的保留条数上限（会话本身在结束时即释放）
    closed_session_cache_size: int = 1024

    # 服务监听
    host: str = "127.0.0.1"
    port: int = 8000

    # 开发模式
    debug: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = False

# 全局设置实例
settings = Settings()
