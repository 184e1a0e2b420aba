"""
抽奖协调器

转盘锁状态机：
- IDLE --spin--> SPINNING(started_at)
- SPINNING --动画结束(8s)--> IDLE，广播 spin_lock_cleared
- SPINNING --超时回收(>12s)--> IDLE，广播 spin_lock_recovered

spin() 在整个「检查-抽奖-持久化-广播」过程中持有同一把锁，
解锁定时器、超时回收以及配置修改都经过这把锁。
"""
import asyncio
import logging
import random
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Coroutine, Dict, Optional, Set, Tuple

from spinwheel.core.exceptions import (
    NoSpinsRemaining,
    SpinAlreadyInProgress,
    SpinInProgress,
    StorageError,
    WheelError,
)
from spinwheel.models.game import DisplayPage, GameConfig, SpinResult
from spinwheel.services.broadcast import BroadcastHub
from spinwheel.services.prize_selector import select_prize
from spinwheel.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


@dataclass
class SpinLockState:
    """转盘锁（仅内存，不持久化）"""
    spinning: bool = False
    started_at: Optional[float] = None  # 未转动时为 None
    spin_id: int = 0


class SpinCoordinator:
    """抽奖协调器"""

    def __init__(
        self,
        store: JsonStore,
        hub: BroadcastHub,
        animation_seconds: float = 8.0,
        stale_after_seconds: float = 12.0,
        stale_check_interval: float = 2.0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.hub = hub
        self.animation_seconds = animation_seconds
        self.stale_after_seconds = stale_after_seconds
        self.stale_check_interval = stale_check_interval
        self.rng = rng
        self.clock = clock

        self._lock = asyncio.Lock()
        self._state = SpinLockState()
        self._closing = asyncio.Event()
        self._tasks: Set[asyncio.Task] = set()

    # ==================== 状态 ====================

    @property
    def is_spinning(self) -> bool:
        return self._state.spinning

    def elapsed(self) -> float:
        """当前转动已持续的秒数，未转动时为 0"""
        if not self._state.spinning or self._state.started_at is None:
            return 0.0
        return max(0.0, self.clock() - self._state.started_at)

    def status(self) -> Dict[str, Any]:
        return {"is_spinning": self._state.spinning, "spin_time": round(self.elapsed(), 3)}

    def _acquire(self) -> int:
        self._state.spin_id += 1
        self._state.spinning = True
        self._state.started_at = self.clock()
        return self._state.spin_id

    def _release(self, spin_id: Optional[int] = None) -> bool:
        """
        释放转盘锁，返回是否真的发生了状态变化

        指定 spin_id 时只释放同一次抽奖持有的锁；已空闲时为空操作
        """
        if not self._state.spinning:
            return False
        if spin_id is not None and self._state.spin_id != spin_id:
            return False
        self._state.spinning = False
        self._state.started_at = None
        return True

    # ==================== 生命周期 ====================

    def start(self) -> None:
        """启动超时回收巡检"""
        self._spawn(self._stale_sweep_loop(), "spin-stale-sweep")
        logger.info(
            "抽奖协调器已启动: animation=%.1fs, stale_after=%.1fs",
            self.animation_seconds,
            self.stale_after_seconds,
        )

    async def shutdown(self) -> None:
        """通知所有后台任务退出并等待结束"""
        self._closing.set()
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("抽奖协调器已关闭")

    def _spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("后台任务异常退出: %s", task.get_name(), exc_info=exc)

    async def _sleep(self, delay: float) -> bool:
        """等待 delay 秒；服务关闭时提前返回 True"""
        if self._closing.is_set():
            return True
        try:
            await asyncio.wait_for(self._closing.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    # ==================== 互斥 ====================

    @asynccontextmanager
    async def idle_guard(self, action: str = "modify game state") -> AsyncIterator[None]:
        """
        修改配置/切换页面/重置前使用

        转盘锁定时抛出 SpinInProgress；持有锁直到修改完成，
        避免修改与抽奖交错
        """
        async with self._lock:
            if self._state.spinning:
                raise SpinInProgress(self.elapsed(), action)
            yield

    # ==================== 抽奖 ====================

    async def spin(self) -> Tuple[SpinResult, GameConfig]:
        """
        执行一次抽奖
        - 检查锁与剩余次数
        - 上锁并广播 spin_started
        - 选奖、写历史、扣次数
        - 广播 spin_completed（is_spinning 仍为 true，展示端继续动画）
        - 安排动画结束解锁与自动切页

        不等待动画结束即返回 (结果, 最新配置)
        """
        async with self._lock:
            if self._state.spinning:
                raise SpinAlreadyInProgress()

            config = await self.store.get_config()
            if config.remaining_spins <= 0:
                raise NoSpinsRemaining()

            spin_id = self._acquire()
            self.hub.publish(
                "spin_started",
                {"player": config.current_player, "is_spinning": True},
            )

            try:
                result = await self._draw_and_persist(config)
            except asyncio.CancelledError:
                self._abort(spin_id)
                raise
            except WheelError:
                self._abort(spin_id)
                raise
            except Exception as exc:
                self._abort(spin_id)
                raise StorageError(f"failed to save spin result: {exc}") from exc

            self.hub.publish(
                "spin_completed",
                {"result": result, "config": config, "is_spinning": True},
            )
            logger.info(
                "抽奖完成: player=%s, mode=%s, index=%s, prize=%s, remaining=%s",
                result.player,
                result.mode,
                result.index,
                result.prize,
                config.remaining_spins,
            )

            self._spawn(self._release_after_animation(spin_id), f"spin-unlock-{spin_id}")
            self._spawn(self._auto_switch_after_spin(), f"spin-auto-switch-{spin_id}")
            return result, config

    async def _draw_and_persist(self, config: GameConfig) -> SpinResult:
        index, prize = select_prize(config, self.rng)
        result = SpinResult(
            player=config.current_player,
            prize=prize,
            index=index,
            timestamp=datetime.now(timezone.utc),
            mode=config.mode,
        )
        await self.store.add_spin_result(result)

        config.remaining_spins -= 1
        config.total_spins += 1
        await self.store.save_config(config)
        return result

    def _abort(self, spin_id: int) -> None:
        """持久化失败时立即回滚为 IDLE，避免锁永久占用"""
        if self._release(spin_id):
            logger.warning("抽奖失败，转盘锁已回滚: spin_id=%s", spin_id)
            self.hub.publish("spin_lock_cleared", {"is_spinning": False, "aborted": True})

    async def _release_after_animation(self, spin_id: int) -> None:
        if await self._sleep(self.animation_seconds):
            return
        async with self._lock:
            if self._release(spin_id):
                logger.debug("转盘动画结束，解锁: spin_id=%s", spin_id)
                self.hub.publish("spin_lock_cleared", {"is_spinning": False})

    # ==================== 超时回收 ====================

    async def recover_stale(self) -> bool:
        """锁持续时间超过阈值则强制释放，返回是否发生回收"""
        async with self._lock:
            if not self._state.spinning:
                return False
            elapsed = self.elapsed()
            if elapsed <= self.stale_after_seconds:
                return False
            self._release()
            logger.warning("回收失效的转盘锁（已持续 %.1f 秒）", elapsed)
            self.hub.publish("spin_lock_recovered", {"is_spinning": False, "recovered": True})
            return True

    async def _stale_sweep_loop(self) -> None:
        while not await self._sleep(self.stale_check_interval):
            await self.recover_stale()

    # ==================== 自动切页 ====================

    async def _auto_switch_after_spin(self) -> None:
        """
        抽奖后自动切到广告页，停留 auto_switch_time 秒后切回当前模式的抽奖页

        后台任务：任何存储错误只记录日志，不影响抽奖调用方
        """
        try:
            restaurant = await self.store.get_restaurant_data()
        except StorageError as exc:
            logger.warning("读取餐厅配置失败，跳过自动切页: %s", exc)
            return

        if not restaurant.config.enable_auto_switch:
            return

        # 先让展示端播完动画
        if await self._sleep(self.animation_seconds):
            return
        if not await self._auto_switch_to(DisplayPage.ADVERTISEMENT):
            return

        stay_seconds = restaurant.config.auto_switch_time
        if stay_seconds <= 0:
            return
        if await self._sleep(stay_seconds):
            return
        await self._auto_switch_to(None)

    async def _auto_switch_to(self, page: Optional[DisplayPage]) -> bool:
        """
        page 为 None 时切回与当前模式对应的抽奖页

        读-改-写期间持有转盘锁，与 spin() 的扣次数串行；转动中也照常切页
        """
        async with self._lock:
            try:
                config = await self.store.get_config()
                config.current_page = page or DisplayPage.for_mode(config.mode)
                config.sync_mode_with_page()
                await self.store.save_config(config)
            except WheelError as exc:
                logger.warning("自动切页失败: page=%s, error=%s", page, exc)
                return False

            self.hub.publish(
                "page_switched",
                {"page": config.current_page, "config": config, "auto": True},
            )
        return True
