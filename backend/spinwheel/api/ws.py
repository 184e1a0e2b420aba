"""
展示端 WebSocket

连接后推送所有广播事件；客户端发送 {"type": "ping", "data": x}
收到 {"type": "pong", "data": x}
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from spinwheel.core.dependencies import get_ws_coordinator, get_ws_hub
from spinwheel.services.broadcast import BroadcastHub, Subscription, build_message
from spinwheel.services.spin_coordinator import SpinCoordinator

logger = logging.getLogger(__name__)

router = APIRouter()


async def _pump(websocket: WebSocket, subscription: Subscription) -> None:
    """把订阅队列中的消息依次写出，连接是唯一的写入方"""
    while True:
        message = await subscription.next_message()
        if message is None:
            break
        try:
            await websocket.send_json(message)
        except Exception as exc:
            logger.info("展示端发送失败，断开连接: %s", exc)
            break


@router.websocket("/ws")
async def display_socket(
    websocket: WebSocket,
    hub: BroadcastHub = Depends(get_ws_hub),
    coordinator: SpinCoordinator = Depends(get_ws_coordinator),
):
    await websocket.accept()
    subscription = hub.subscribe()
    subscription.deliver(
        build_message(
            "connected",
            {
                "message": "Connected to spinner wheel server",
                "is_spinning": coordinator.is_spinning,
            },
        )
    )
    sender = asyncio.create_task(_pump(websocket, subscription))
    receiver = None

    try:
        while True:
            # 发送任务结束（写失败）时不再等待客户端消息
            receiver = asyncio.create_task(websocket.receive_json())
            done, _ = await asyncio.wait({receiver, sender}, return_when=asyncio.FIRST_COMPLETED)
            if receiver not in done:
                break

            try:
                message = receiver.result()
            except ValueError:
                logger.debug("忽略无法解析的展示端消息")
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                if not subscription.deliver(build_message("pong", message.get("data"))):
                    break
    except WebSocketDisconnect:
        pass
    finally:
        if receiver is not None and not receiver.done():
            receiver.cancel()
        hub.unsubscribe(subscription)
        await sender
