"""
转盘游戏数据模型
包含：游戏配置、奖项、抽奖结果、历史记录
"""
import enum
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, field_validator

from spinwheel.core.exceptions import ValidationError

# 转盘固定 12 格
WHEEL_SEGMENTS = 12
# 模式 2 中奖格固定在最后一格，与展示端转盘布局一致
MODE2_WIN_INDEX = 11

PROBABILITY_TOLERANCE = 0.01


class DisplayPage(str, enum.Enum):
    """展示屏当前页面"""
    LOTTERY1 = "lottery1"            # 模式 1 抽奖页
    LOTTERY2 = "lottery2"            # 模式 2 抽奖页
    ADVERTISEMENT = "advertisement"  # 广告页

    @classmethod
    def for_mode(cls, mode: int) -> "DisplayPage":
        """模式对应的抽奖页"""
        return cls.LOTTERY2 if mode == 2 else cls.LOTTERY1

    @property
    def mode(self):
        """抽奖页对应的模式，广告页返回 None"""
        return {DisplayPage.LOTTERY1: 1, DisplayPage.LOTTERY2: 2}.get(self)


class PrizeOption(BaseModel):
    """模式 1 奖项"""
    text: str
    probability: float  # 0-100


class GameConfig(BaseModel):
    """游戏主配置"""
    mode: int = 1
    mode1_options: List[PrizeOption] = Field(default_factory=list)
    mode2_win_text: str = "中奖了!"
    mode2_lose_text: str = "没中奖"
    mode2_win_rate: float = 5.0
    current_player: int = 1
    remaining_spins: int = 100
    total_spins: int = 0
    current_page: DisplayPage = DisplayPage.LOTTERY1

    def sync_mode_with_page(self) -> None:
        """切换到抽奖页时同步模式"""
        page_mode = self.current_page.mode
        if page_mode is not None and self.mode != page_mode:
            self.mode = page_mode

    def validate_config(self) -> None:
        """保存前校验，失败抛出 ValidationError"""
        if self.mode not in (1, 2):
            raise ValidationError("invalid mode: must be 1 or 2")

        if self.current_player < 1:
            raise ValidationError("current player must be positive")

        if self.remaining_spins < 0:
            raise ValidationError("remaining spins cannot be negative")

        if not 0 <= self.mode2_win_rate <= 100:
            raise ValidationError("mode 2 win rate must be between 0 and 100")

        if self.mode == 1:
            if len(self.mode1_options) != WHEEL_SEGMENTS:
                raise ValidationError(f"mode 1 must have exactly {WHEEL_SEGMENTS} options")

            total = 0.0
            for i, option in enumerate(self.mode1_options, start=1):
                if not option.text:
                    raise ValidationError(f"option {i} text cannot be empty")
                if option.probability < 0 or option.probability > 100:
                    raise ValidationError(f"option {i} probability must be between 0 and 100")
                total += option.probability

            # 浮点误差容忍
            if abs(total - 100) > PROBABILITY_TOLERANCE:
                raise ValidationError(f"total probability must equal 100%, got {total:.2f}%")


class SpinResult(BaseModel):
    """单次抽奖结果，创建后不再修改"""
    player: int
    prize: str
    index: int
    timestamp: datetime
    mode: int

    @field_validator("timestamp")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        # 旧数据可能不带时区，按 UTC 处理
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SpinHistory(BaseModel):
    """抽奖历史"""
    results: List[SpinResult] = Field(default_factory=list)


def get_default_config() -> GameConfig:
    """首次运行时的默认配置"""
    options = [PrizeOption(text=f"奖品{i}", probability=8.33) for i in range(1, WHEEL_SEGMENTS)]
    # 最后一项略高，保证总和为 100
    options.append(PrizeOption(text=f"奖品{WHEEL_SEGMENTS}", probability=8.37))
    return GameConfig(mode=1, mode1_options=options)
