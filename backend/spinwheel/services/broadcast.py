"""
广播中心

与传输层无关的发布/订阅：每个订阅者持有一个有界队列，
publish 只负责入队，由各连接自己的发送任务把消息写出。
"""
import asyncio
import logging
from typing import Any, Dict, Optional, Set

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


def build_message(event_type: str, data: Any = None) -> Dict[str, Any]:
    """构造推送信封 {type, data}"""
    return {"type": event_type, "data": jsonable_encoder(data)}


class Subscription:
    """单个展示端的订阅句柄"""

    def __init__(self, maxsize: int):
        self.queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def deliver(self, message: Dict[str, Any]) -> bool:
        """入队，队列已满或已关闭返回 False"""
        if self.closed:
            return False
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    async def next_message(self) -> Optional[Dict[str, Any]]:
        """取下一条消息，订阅关闭后返回 None"""
        return await self.queue.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        # 放入结束标记唤醒发送任务，队列满时丢弃最旧的消息
        while True:
            try:
                self.queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                self.queue.get_nowait()


class BroadcastHub:
    """广播中心"""

    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, queue_size: Optional[int] = None) -> Subscription:
        subscription = Subscription(queue_size or self.queue_size)
        self._subscribers.add(subscription)
        logger.info("展示端已连接，当前连接数: %d", len(self._subscribers))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """重复取消订阅无副作用"""
        subscription.close()
        if subscription in self._subscribers:
            self._subscribers.discard(subscription)
            logger.info("展示端已断开，当前连接数: %d", len(self._subscribers))

    def publish(self, event_type: str, data: Any = None) -> int:
        """
        向所有订阅者广播，返回成功投递的数量

        投递失败只移除对应订阅者，不影响其他订阅者，也不向调用方抛错
        """
        if not self._subscribers:
            return 0

        message = build_message(event_type, data)
        logger.debug("广播 %s 到 %d 个展示端", event_type, len(self._subscribers))

        delivered = 0
        for subscription in list(self._subscribers):
            if subscription.deliver(message):
                delivered += 1
            else:
                logger.warning("展示端消息积压或已关闭，移除订阅: event=%s", event_type)
                self.unsubscribe(subscription)
        return delivered
