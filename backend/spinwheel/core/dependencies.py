"""
通用依赖：从 app.state 取出启动时创建的组件
"""
from fastapi import Request, WebSocket

from spinwheel.services.broadcast import BroadcastHub
from spinwheel.services.game_service import GameService
from spinwheel.services.restaurant_service import RestaurantService
from spinwheel.services.spin_coordinator import SpinCoordinator


def get_coordinator(request: Request) -> SpinCoordinator:
    return request.app.state.coordinator


def get_game_service(request: Request) -> GameService:
    return request.app.state.game_service


def get_restaurant_service(request: Request) -> RestaurantService:
    return request.app.state.restaurant_service


def get_ws_hub(websocket: WebSocket) -> BroadcastHub:
    """WebSocket 连接使用的广播中心"""
    return websocket.app.state.hub


def get_ws_coordinator(websocket: WebSocket) -> SpinCoordinator:
    return websocket.app.state.coordinator
