"""
餐厅数据 API
- 展示配置
- 广告图片上传/修改/删除
- 菜单、今日推荐的增删改
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from spinwheel.core.dependencies import get_restaurant_service
from spinwheel.models.restaurant import (
    Advertisement,
    MenuItem,
    Recommendation,
    RestaurantConfig,
    RestaurantData,
)
from spinwheel.schemas.restaurant import (
    AdvertisementUpdate,
    MenuItemPayload,
    MessageResponse,
    RecommendationPayload,
)
from spinwheel.services.restaurant_service import RestaurantService

router = APIRouter()


@router.get("/restaurant", response_model=RestaurantData)
async def get_restaurant_data(service: RestaurantService = Depends(get_restaurant_service)):
    """获取餐厅配置与全部数据"""
    return await service.get_data()


@router.post("/restaurant/config", response_model=RestaurantConfig)
async def update_restaurant_config(
    body: RestaurantConfig,
    service: RestaurantService = Depends(get_restaurant_service),
):
    """更新餐厅展示配置"""
    return await service.update_config(body)


# ==================== 广告 ====================

@router.get("/advertisements", response_model=List[Advertisement])
async def list_active_advertisements(service: RestaurantService = Depends(get_restaurant_service)):
    """展示端轮播用：启用中的广告，按 order 排序"""
    data = await service.get_data()
    return service.sorted_active_ads(data)


@router.post("/advertisements", response_model=Advertisement)
async def upload_advertisement(
    image: UploadFile = File(...),
    name: Optional[str] = Form(None),
    service: RestaurantService = Depends(get_restaurant_service),
):
    """上传广告图片（仅支持 JPG/PNG/GIF）"""
    content = await image.read()
    return await service.add_advertisement(
        original_filename=image.filename or "",
        content_type=image.content_type,
        content=content,
        name=name,
    )


@router.put("/advertisements/{ad_id}", response_model=Advertisement)
async def update_advertisement(
    ad_id: str,
    body: AdvertisementUpdate,
    service: RestaurantService = Depends(get_restaurant_service),
):
    """修改广告名称、启用状态或排序"""
    return await service.update_advertisement(ad_id, body.model_dump(exclude_none=True))


@router.delete("/advertisements/{ad_id}", response_model=MessageResponse)
async def delete_advertisement(
    ad_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
):
    """删除广告及其图片"""
    await service.delete_advertisement(ad_id)
    return MessageResponse(message="Advertisement deleted successfully")


# ==================== 菜单 ====================

@router.post("/menu", response_model=MenuItem)
async def add_menu_item(
    body: MenuItemPayload,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.add_menu_item(body.model_dump())


@router.put("/menu/{item_id}", response_model=MenuItem)
async def update_menu_item(
    item_id: str,
    body: MenuItemPayload,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.update_menu_item(item_id, body.model_dump())


@router.delete("/menu/{item_id}", response_model=MessageResponse)
async def delete_menu_item(
    item_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
):
    await service.delete_menu_item(item_id)
    return MessageResponse(message="Menu item deleted successfully")


# ==================== 今日推荐 ====================

@router.post("/recommendations", response_model=Recommendation)
async def add_recommendation(
    body: RecommendationPayload,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.add_recommendation(body.model_dump())


@router.put("/recommendations/{rec_id}", response_model=Recommendation)
async def update_recommendation(
    rec_id: str,
    body: RecommendationPayload,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.update_recommendation(rec_id, body.model_dump())


@router.delete("/recommendations/{rec_id}", response_model=MessageResponse)
async def delete_recommendation(
    rec_id: str,
    service: RestaurantService = Depends(get_restaurant_service),
):
    await service.delete_recommendation(rec_id)
    return MessageResponse(message="Recommendation deleted successfully")
