"""
速率限制

limiter 在导入时创建，create_app() 通过 configure_limiter() 按传入的配置
设置开关与抽奖限额
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from spinwheel.core.config import Settings, settings

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

_spin_rate_limit = settings.SPIN_RATE_LIMIT


def configure_limiter(config: Settings) -> None:
    global _spin_rate_limit
    limiter.enabled = config.RATE_LIMIT_ENABLED
    _spin_rate_limit = config.SPIN_RATE_LIMIT


def spin_rate_limit() -> str:
    """抽奖限额，每次请求时读取"""
    return _spin_rate_limit


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """超限时返回 429"""
    logger.warning("请求过于频繁: %s %s (%s)", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=429,
        content={"detail": f"请求过于频繁，请稍后再试（{exc.detail}）"},
    )
