"""
基础数据模型
定义通用的模型基类和常用字段
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TimestampMixin(BaseModel):
    """时间戳混入类"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SnapshotEntity(BaseModel):
    """
    不可变快照模型

    目录快照和定制状态一经生成不再修改，更新只能通过 model_copy 生成新实例。
    """

    model_config = {"frozen": True, "from_attributes": True}


def cents_to_display(cents: int) -> str:
    """分转两位小数的展示字符串，仅在展示层使用"""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(int(cents)), 100)
    return f"{sign}{whole}.{frac:02d}"
