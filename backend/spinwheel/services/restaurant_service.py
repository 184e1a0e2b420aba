"""
餐厅数据服务
包含：展示配置、广告图片、菜单、今日推荐的增删改
每次修改后广播对应事件，展示端据此刷新
"""
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from spinwheel.core.exceptions import RecordNotFound, StorageError, ValidationError
from spinwheel.models.restaurant import (
    Advertisement,
    MenuItem,
    Recommendation,
    RestaurantConfig,
    RestaurantData,
)
from spinwheel.services.broadcast import BroadcastHub
from spinwheel.storage.json_store import JsonStore

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}


def generate_id() -> str:
    return uuid.uuid4().hex[:16]


def is_valid_image(filename: str, content_type: Optional[str]) -> bool:
    """按 Content-Type 判断，扩展名兜底"""
    if content_type and content_type.lower() in ALLOWED_IMAGE_TYPES:
        return True
    return Path(filename or "").suffix.lower() in ALLOWED_IMAGE_EXTENSIONS


def _find_index(items: Sequence[Any], record_id: str, label: str) -> int:
    for i, item in enumerate(items):
        if item.id == record_id:
            return i
    raise RecordNotFound(f"{label} with ID {record_id} not found")


class RestaurantService:
    """餐厅数据服务"""

    def __init__(self, store: JsonStore, hub: BroadcastHub, upload_max_bytes: int = 10 * 1024 * 1024):
        self.store = store
        self.hub = hub
        self.upload_max_bytes = upload_max_bytes

    async def get_data(self) -> RestaurantData:
        return await self.store.get_restaurant_data()

    async def update_config(self, config: RestaurantConfig) -> RestaurantConfig:
        def mutate(data: RestaurantData) -> RestaurantConfig:
            data.config = config
            return config

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("restaurant_config_updated", config)
        logger.info("餐厅配置已更新: auto_switch=%s", config.enable_auto_switch)
        return config

    # ==================== 广告 ====================

    async def add_advertisement(
        self,
        original_filename: str,
        content_type: Optional[str],
        content: bytes,
        name: Optional[str] = None,
    ) -> Advertisement:
        """保存上传的图片并新增广告记录，记录写入失败时删除图片"""
        if not is_valid_image(original_filename, content_type):
            raise ValidationError("Invalid file type. Only JPG, PNG, and GIF are allowed.")
        if not content:
            raise ValidationError("Image file is empty")
        if len(content) > self.upload_max_bytes:
            raise ValidationError(f"Image file exceeds {self.upload_max_bytes} bytes")

        ad_id = generate_id()
        filename = f"ad_{ad_id}{Path(original_filename or '').suffix.lower()}"
        file_path = self.store.uploads_path / filename
        try:
            await asyncio.to_thread(file_path.write_bytes, content)
        except OSError as exc:
            raise StorageError(f"failed to save file: {exc}") from exc

        now = datetime.now(timezone.utc)
        ad = Advertisement(
            id=ad_id,
            filename=filename,
            name=name or "Advertisement",
            active=True,
            order=int(now.timestamp()),  # 默认按上传时间排序
            created=now,
        )

        def mutate(data: RestaurantData) -> None:
            data.advertisements.append(ad)

        try:
            await self.store.update_restaurant_data(mutate)
        except StorageError:
            await self._remove_upload(filename)
            raise

        self.hub.publish("advertisement_added", ad)
        logger.info("新增广告: id=%s, file=%s", ad.id, filename)
        return ad

    async def update_advertisement(self, ad_id: str, updates: Dict[str, Any]) -> Advertisement:
        def mutate(data: RestaurantData) -> Advertisement:
            i = _find_index(data.advertisements, ad_id, "advertisement")
            updated = data.advertisements[i].model_copy(update=updates)
            data.advertisements[i] = updated
            return updated

        ad = await self.store.update_restaurant_data(mutate)
        self.hub.publish("advertisement_updated", ad)
        return ad

    async def delete_advertisement(self, ad_id: str) -> None:
        def mutate(data: RestaurantData) -> Advertisement:
            i = _find_index(data.advertisements, ad_id, "advertisement")
            return data.advertisements.pop(i)

        ad = await self.store.update_restaurant_data(mutate)
        await self._remove_upload(ad.filename)
        self.hub.publish("advertisement_deleted", {"id": ad_id})
        logger.info("删除广告: id=%s", ad_id)

    async def _remove_upload(self, filename: str) -> None:
        try:
            await asyncio.to_thread((self.store.uploads_path / filename).unlink, missing_ok=True)
        except OSError as exc:
            logger.warning("删除广告图片失败: file=%s, error=%s", filename, exc)

    # ==================== 菜单 ====================

    async def add_menu_item(self, payload: Dict[str, Any]) -> MenuItem:
        item = MenuItem(id=generate_id(), **payload)

        def mutate(data: RestaurantData) -> None:
            data.menu_items.append(item)

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("menu_item_added", item)
        return item

    async def update_menu_item(self, item_id: str, payload: Dict[str, Any]) -> MenuItem:
        item = MenuItem(id=item_id, **payload)

        def mutate(data: RestaurantData) -> None:
            i = _find_index(data.menu_items, item_id, "menu item")
            data.menu_items[i] = item

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("menu_item_updated", item)
        return item

    async def delete_menu_item(self, item_id: str) -> None:
        def mutate(data: RestaurantData) -> None:
            data.menu_items.pop(_find_index(data.menu_items, item_id, "menu item"))

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("menu_item_deleted", {"id": item_id})

    # ==================== 今日推荐 ====================

    async def add_recommendation(self, payload: Dict[str, Any]) -> Recommendation:
        rec = Recommendation(id=generate_id(), date=datetime.now(timezone.utc), **payload)

        def mutate(data: RestaurantData) -> None:
            data.recommendations.append(rec)

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("recommendation_added", rec)
        return rec

    async def update_recommendation(self, rec_id: str, payload: Dict[str, Any]) -> Recommendation:
        def mutate(data: RestaurantData) -> Recommendation:
            i = _find_index(data.recommendations, rec_id, "recommendation")
            # 保留原发布日期
            updated = Recommendation(id=rec_id, date=data.recommendations[i].date, **payload)
            data.recommendations[i] = updated
            return updated

        rec = await self.store.update_restaurant_data(mutate)
        self.hub.publish("recommendation_updated", rec)
        return rec

    async def delete_recommendation(self, rec_id: str) -> None:
        def mutate(data: RestaurantData) -> None:
            data.recommendations.pop(_find_index(data.recommendations, rec_id, "recommendation"))

        await self.store.update_restaurant_data(mutate)
        self.hub.publish("recommendation_deleted", {"id": rec_id})

    @staticmethod
    def sorted_active_ads(data: RestaurantData) -> List[Advertisement]:
        """启用中的广告，按 order 排序"""
        return sorted((ad for ad in data.advertisements if ad.active), key=lambda ad: ad.order)
