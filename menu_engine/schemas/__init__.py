"""
API 请求/响应模式
"""
