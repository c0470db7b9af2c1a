"""
业务服务层

customization / pricing / validator / materializer 为纯函数模块，不做任何 I/O；
catalog_service / order_service / session_service 负责存储和会话。
"""
