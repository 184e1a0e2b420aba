"""
转盘游戏 API
- 展示端：获取配置、抽奖、历史、锁状态
- 管理端：更新配置、切换页面、重置
"""
from fastapi import APIRouter, Depends, Request

from spinwheel.core.dependencies import get_coordinator, get_game_service
from spinwheel.core.rate_limit import limiter, spin_rate_limit
from spinwheel.models.game import GameConfig, SpinHistory
from spinwheel.schemas.game import (
    ConfigUpdateRequest,
    PageSwitchRequest,
    PageSwitchResponse,
    ResetResponse,
    SpinResponse,
    SpinStatusResponse,
)
from spinwheel.services.game_service import GameService
from spinwheel.services.spin_coordinator import SpinCoordinator

router = APIRouter()


@router.get("/config", response_model=GameConfig)
async def get_config(service: GameService = Depends(get_game_service)):
    """获取当前游戏配置"""
    return await service.get_config()


@router.post("/config", response_model=GameConfig)
async def update_config(
    body: ConfigUpdateRequest,
    service: GameService = Depends(get_game_service),
):
    """部分更新游戏配置（转盘锁定时返回 423）"""
    return await service.update_config(body.model_dump(exclude_none=True))


@router.post("/spin", response_model=SpinResponse)
@limiter.limit(spin_rate_limit)
async def spin(
    request: Request,
    coordinator: SpinCoordinator = Depends(get_coordinator),
):
    """
    执行抽奖
    - 结果由后端生成
    - 返回后转盘仍锁定，动画结束后自动解锁
    """
    result, config = await coordinator.spin()
    return SpinResponse(result=result, config=config)


@router.get("/spin/status", response_model=SpinStatusResponse)
async def spin_status(coordinator: SpinCoordinator = Depends(get_coordinator)):
    """查询转盘锁状态，顺带回收超时的锁"""
    await coordinator.recover_stale()
    return SpinStatusResponse(**coordinator.status())


@router.get("/history", response_model=SpinHistory)
async def get_history(service: GameService = Depends(get_game_service)):
    """最近 48 小时的抽奖记录"""
    return await service.get_history()


@router.post("/reset", response_model=ResetResponse)
async def reset(service: GameService = Depends(get_game_service)):
    """重置游戏（转盘锁定时返回 423）"""
    config = await service.reset()
    return ResetResponse(message="Game reset successfully", config=config)


@router.post("/switch-page", response_model=PageSwitchResponse)
async def switch_page(
    body: PageSwitchRequest,
    service: GameService = Depends(get_game_service),
):
    """切换展示页面（转盘锁定时返回 423）"""
    await service.switch_page(body.page)
    return PageSwitchResponse(message="Page switched successfully", page=body.page)
