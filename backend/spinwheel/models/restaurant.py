"""
餐厅展示数据模型
广告、菜单、今日推荐均为简单记录，按 order 排序展示
"""
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field


class RestaurantConfig(BaseModel):
    """餐厅展示配置"""
    name: str = "幸运餐厅"
    ad_rotation_time: int = Field(5, ge=1, description="广告轮播间隔（秒）")
    auto_switch_time: int = Field(30, ge=0, description="抽奖后广告页停留时间（秒），0 表示不切回")
    enable_auto_switch: bool = False


class Advertisement(BaseModel):
    """广告图片"""
    id: str
    filename: str
    name: str
    active: bool = True
    order: int = 0
    created: datetime


class MenuItem(BaseModel):
    """菜品"""
    id: str
    name: str
    price: float = 0
    description: str = ""
    category: str = ""
    available: bool = True
    order: int = 0
    image_url: str = ""


class Recommendation(BaseModel):
    """今日推荐"""
    id: str
    name: str
    price: float = 0
    description: str = ""
    special: str = ""
    active: bool = True
    order: int = 0
    date: datetime


class RestaurantData(BaseModel):
    """餐厅数据（单条记录持久化）"""
    config: RestaurantConfig = Field(default_factory=RestaurantConfig)
    advertisements: List[Advertisement] = Field(default_factory=list)
    menu_items: List[MenuItem] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)


def get_default_restaurant_data() -> RestaurantData:
    """首次运行时的示例数据"""
    menu = [
        ("招牌红烧肉", 48, "精选五花肉，慢火炖制", "热菜"),
        ("宫保鸡丁", 32, "花生香脆，微辣开胃", "热菜"),
        ("清炒时蔬", 18, "当季新鲜蔬菜", "素菜"),
        ("酸辣汤", 16, "酸辣适中，暖胃驱寒", "汤类"),
        ("扬州炒饭", 22, "粒粒分明，配料丰富", "主食"),
    ]
    return RestaurantData(
        config=RestaurantConfig(),
        menu_items=[
            MenuItem(
                id=f"menu{i}",
                name=name,
                price=price,
                description=description,
                category=category,
                order=i,
            )
            for i, (name, price, description, category) in enumerate(menu, start=1)
        ],
        recommendations=[
            Recommendation(
                id="rec1",
                name="招牌红烧肉",
                price=48,
                description="本店人气第一",
                special="今日八折",
                order=1,
                date=datetime.now(timezone.utc),
            )
        ],
    )
