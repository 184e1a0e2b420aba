"""
JSON 文件存储

每个逻辑实体一个文件：
- config.json      游戏配置
- history.json     抽奖历史（仅保留最近 48 小时）
- restaurant.json  餐厅展示数据

写操作按记录加锁并通过临时文件原子替换，读操作不加锁也不会读到半截数据。
不同记录之间不保证原子性（例如历史与配置分两次写入）。
"""
import asyncio
import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, TypeVar

from spinwheel.core.exceptions import StorageError
from spinwheel.models.game import GameConfig, SpinHistory, SpinResult, get_default_config
from spinwheel.models.restaurant import RestaurantData, get_default_restaurant_data

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONFIG_FILE = "config.json"
HISTORY_FILE = "history.json"
RESTAURANT_FILE = "restaurant.json"
UPLOADS_DIR = "uploads"


def _dump_json(data: Any) -> str:
    # 中文原样写入，不转义
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class JsonStore:
    """配置/历史/餐厅数据存储"""

    def __init__(self, data_dir: str, history_retention_hours: int = 48):
        self.data_dir = Path(data_dir)
        self.retention = timedelta(hours=history_retention_hours)
        self._locks: Dict[str, asyncio.Lock] = {
            CONFIG_FILE: asyncio.Lock(),
            HISTORY_FILE: asyncio.Lock(),
            RESTAURANT_FILE: asyncio.Lock(),
        }

    @property
    def uploads_path(self) -> Path:
        return self.data_dir / UPLOADS_DIR

    async def initialize(self) -> None:
        """创建数据目录，缺失的文件写入默认值"""
        try:
            await asyncio.to_thread(self.uploads_path.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"failed to create data directory: {exc}") from exc

        if not (self.data_dir / CONFIG_FILE).exists():
            logger.info("初始化默认游戏配置: %s", self.data_dir / CONFIG_FILE)
            await self.save_config(get_default_config())
        if not (self.data_dir / HISTORY_FILE).exists():
            await self._write(HISTORY_FILE, SpinHistory().model_dump(mode="json"), "history")
        if not (self.data_dir / RESTAURANT_FILE).exists():
            logger.info("初始化默认餐厅数据: %s", self.data_dir / RESTAURANT_FILE)
            await self.save_restaurant_data(get_default_restaurant_data())

    # ==================== 底层读写 ====================

    def _read_sync(self, name: str) -> Any:
        with open(self.data_dir / name, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_sync(self, name: str, data: Any) -> None:
        path = self.data_dir / name
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(_dump_json(data))
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    async def _read(self, name: str, what: str) -> Any:
        try:
            return await asyncio.to_thread(self._read_sync, name)
        except (OSError, ValueError) as exc:
            raise StorageError(f"failed to read {what}: {exc}") from exc

    async def _write(self, name: str, data: Any, what: str) -> None:
        try:
            await asyncio.to_thread(self._write_sync, name, data)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"failed to write {what}: {exc}") from exc

    # ==================== 游戏配置 ====================

    async def get_config(self) -> GameConfig:
        raw = await self._read(CONFIG_FILE, "config")
        try:
            return GameConfig.model_validate(raw)
        except ValueError as exc:
            raise StorageError(f"failed to parse config: {exc}") from exc

    async def save_config(self, config: GameConfig) -> None:
        """校验后保存，校验失败抛出 ValidationError"""
        config.validate_config()
        async with self._locks[CONFIG_FILE]:
            await self._write(CONFIG_FILE, config.model_dump(mode="json"), "config")

    # ==================== 抽奖历史 ====================

    def _prune(self, history: SpinHistory) -> SpinHistory:
        cutoff = datetime.now(timezone.utc) - self.retention
        history.results = [r for r in history.results if r.timestamp > cutoff]
        return history

    async def _load_history(self) -> SpinHistory:
        raw = await self._read(HISTORY_FILE, "history")
        try:
            return SpinHistory.model_validate(raw)
        except ValueError as exc:
            raise StorageError(f"failed to parse history: {exc}") from exc

    async def get_history(self) -> SpinHistory:
        """读取历史，过期记录不返回"""
        return self._prune(await self._load_history())

    async def add_spin_result(self, result: SpinResult) -> None:
        """追加一条结果并清理过期记录"""
        async with self._locks[HISTORY_FILE]:
            history = await self._load_history()
            history.results.append(result)
            self._prune(history)
            await self._write(HISTORY_FILE, history.model_dump(mode="json"), "history")

    async def reset_game(self) -> GameConfig:
        """重置玩家/次数并清空历史（两次独立写入）"""
        async with self._locks[CONFIG_FILE]:
            config = await self.get_config()
            config.current_player = 1
            config.remaining_spins = 100
            config.total_spins = 0
            await self._write(CONFIG_FILE, config.model_dump(mode="json"), "config")

        async with self._locks[HISTORY_FILE]:
            await self._write(HISTORY_FILE, SpinHistory().model_dump(mode="json"), "history")

        return config

    # ==================== 餐厅数据 ====================

    async def get_restaurant_data(self) -> RestaurantData:
        raw = await self._read(RESTAURANT_FILE, "restaurant data")
        try:
            return RestaurantData.model_validate(raw)
        except ValueError as exc:
            raise StorageError(f"failed to parse restaurant data: {exc}") from exc

    async def save_restaurant_data(self, data: RestaurantData) -> None:
        async with self._locks[RESTAURANT_FILE]:
            await self._write(RESTAURANT_FILE, data.model_dump(mode="json"), "restaurant data")

    async def update_restaurant_data(self, mutate: Callable[[RestaurantData], T]) -> T:
        """
        读-改-写餐厅数据

        mutate 原地修改数据并返回结果；mutate 抛出的异常（如 RecordNotFound）
        会直接向上传播且不写入文件。
        """
        async with self._locks[RESTAURANT_FILE]:
            data = await self.get_restaurant_data()
            result = mutate(data)
            await self._write(RESTAURANT_FILE, data.model_dump(mode="json"), "restaurant data")
            return result
