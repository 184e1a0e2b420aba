"""
转盘相关请求/响应 Schema
"""
from typing import List, Optional

from pydantic import BaseModel

from spinwheel.models.game import DisplayPage, GameConfig, PrizeOption, SpinResult


class ConfigUpdateRequest(BaseModel):
    """配置更新请求，未提供的字段保持不变"""
    mode: Optional[int] = None
    mode1_options: Optional[List[PrizeOption]] = None
    mode2_win_text: Optional[str] = None
    mode2_lose_text: Optional[str] = None
    mode2_win_rate: Optional[float] = None
    current_player: Optional[int] = None
    remaining_spins: Optional[int] = None


class PageSwitchRequest(BaseModel):
    """页面切换请求"""
    page: DisplayPage


class SpinResponse(BaseModel):
    """抽奖结果响应"""
    result: SpinResult
    config: GameConfig


class SpinStatusResponse(BaseModel):
    """转盘锁状态"""
    is_spinning: bool
    spin_time: float = 0.0


class ResetResponse(BaseModel):
    message: str
    config: GameConfig


class PageSwitchResponse(BaseModel):
    message: str
    page: DisplayPage
