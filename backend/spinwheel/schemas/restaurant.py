"""
餐厅数据请求 Schema
"""
from typing import Optional

from pydantic import BaseModel, Field


class AdvertisementUpdate(BaseModel):
    """广告更新请求"""
    name: Optional[str] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class MenuItemPayload(BaseModel):
    """菜品新增/更新请求"""
    name: str = Field(..., min_length=1)
    price: float = Field(0, ge=0)
    description: str = ""
    category: str = ""
    available: bool = True
    order: int = 0
    image_url: str = ""


class RecommendationPayload(BaseModel):
    """今日推荐新增/更新请求"""
    name: str = Field(..., min_length=1)
    price: float = Field(0, ge=0)
    description: str = ""
    special: str = ""
    active: bool = True
    order: int = 0


class MessageResponse(BaseModel):
    message: str
