"""
组合菜品定制与计价服务

餐厅点餐平台的后端核心：组合菜品目录、顾客定制会话、计价、
下单前校验以及订单行落库。
"""

__version__ = "1.0.0"
