"""
游戏管理服务
包含：配置更新、页面切换、重置、历史查询
所有修改操作在转盘锁定期间被拒绝
"""
import logging
from typing import Any, Dict

from spinwheel.models.game import DisplayPage, GameConfig, SpinHistory
from spinwheel.services.broadcast import BroadcastHub
from spinwheel.services.spin_coordinator import SpinCoordinator
from spinwheel.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


class GameService:
    """游戏管理服务"""

    def __init__(self, store: JsonStore, hub: BroadcastHub, coordinator: SpinCoordinator):
        self.store = store
        self.hub = hub
        self.coordinator = coordinator

    async def get_config(self) -> GameConfig:
        return await self.store.get_config()

    async def get_history(self) -> SpinHistory:
        return await self.store.get_history()

    async def update_config(self, updates: Dict[str, Any]) -> GameConfig:
        """部分更新配置，updates 中只包含需要修改的字段"""
        async with self.coordinator.idle_guard("update configuration"):
            config = await self.store.get_config()
            merged = GameConfig.model_validate({**config.model_dump(), **updates})
            await self.store.save_config(merged)

            self.hub.publish("config_updated", merged)

        logger.info("游戏配置已更新: fields=%s", sorted(updates))
        return merged

    async def switch_page(self, page: DisplayPage) -> GameConfig:
        """切换展示页面，切到抽奖页时同步模式"""
        async with self.coordinator.idle_guard("switch pages"):
            config = await self.store.get_config()
            config.current_page = page
            config.sync_mode_with_page()
            await self.store.save_config(config)

            self.hub.publish("page_switched", {"page": page, "config": config})

        logger.info("展示页面已切换: page=%s, mode=%s", page.value, config.mode)
        return config

    async def reset(self) -> GameConfig:
        """重置玩家与次数，清空历史"""
        async with self.coordinator.idle_guard("reset game"):
            config = await self.store.reset_game()

            self.hub.publish("state_updated", config)

        logger.info("游戏已重置")
        return config
