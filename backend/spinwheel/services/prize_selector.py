"""
奖项选择

纯函数，给定随机源即结果确定；随机源只影响公平性/体验，无需密码学强度
"""
import random
from typing import Optional, Sequence, Tuple

from spinwheel.models.game import MODE2_WIN_INDEX, GameConfig, PrizeOption

# 模式 2 未中奖时可落在的格子：0-10
MODE2_LOSE_SLOTS = MODE2_WIN_INDEX


def select_mode1(
    options: Sequence[PrizeOption],
    rng: Optional[random.Random] = None,
) -> Tuple[int, str]:
    """按概率加权随机选择，返回 (格子下标, 奖项文字)"""
    rng = rng or random
    if not options:
        raise ValueError("奖项列表为空")

    cumulative = []
    total = 0.0
    for option in options:
        total += option.probability
        cumulative.append(total)

    if total <= 0:
        raise ValueError("奖项概率配置无效")

    r = rng.random() * total
    for i, threshold in enumerate(cumulative):
        if r <= threshold:
            return i, options[i].text

    # 浮点误差兜底
    return len(options) - 1, options[-1].text


def select_mode2(
    win_rate: float,
    win_text: str,
    lose_text: str,
    rng: Optional[random.Random] = None,
) -> Tuple[int, str]:
    """
    固定中奖率抽奖

    中奖固定落在最后一格（与展示端转盘布局约定），未中奖随机落在其余格子
    """
    rng = rng or random
    if rng.random() < win_rate / 100.0:
        return MODE2_WIN_INDEX, win_text
    return rng.randrange(MODE2_LOSE_SLOTS), lose_text


def select_prize(config: GameConfig, rng: Optional[random.Random] = None) -> Tuple[int, str]:
    """按当前模式选择奖项"""
    if config.mode == 1:
        return select_mode1(config.mode1_options, rng)
    return select_mode2(config.mode2_win_rate, config.mode2_win_text, config.mode2_lose_text, rng)
