"""
幸运转盘 - FastAPI 后端入口
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded

from spinwheel import __version__
from spinwheel.api import ws
from spinwheel.api.v1 import router as api_router
from spinwheel.core.config import Settings, settings
from spinwheel.core.exceptions import WheelError
from spinwheel.core.rate_limit import configure_limiter, limiter, rate_limit_exceeded_handler
from spinwheel.middleware import RequestLoggerMiddleware
from spinwheel.services.broadcast import BroadcastHub
from spinwheel.services.game_service import GameService
from spinwheel.services.restaurant_service import RestaurantService
from spinwheel.services.spin_coordinator import SpinCoordinator
from spinwheel.storage.json_store import JsonStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    config: Settings = app.state.settings

    store = JsonStore(config.DATA_DIR, history_retention_hours=config.HISTORY_RETENTION_HOURS)
    await store.initialize()

    hub = BroadcastHub(queue_size=config.WS_QUEUE_SIZE)
    coordinator = SpinCoordinator(
        store,
        hub,
        animation_seconds=config.SPIN_ANIMATION_SECONDS,
        stale_after_seconds=config.SPIN_STALE_AFTER_SECONDS,
        stale_check_interval=config.SPIN_STALE_CHECK_INTERVAL_SECONDS,
    )

    app.state.store = store
    app.state.hub = hub
    app.state.coordinator = coordinator
    app.state.game_service = GameService(store, hub, coordinator)
    app.state.restaurant_service = RestaurantService(
        store, hub, upload_max_bytes=config.UPLOAD_MAX_BYTES
    )

    # 启动锁超时回收巡检
    coordinator.start()
    logger.info("服务已启动: data_dir=%s", Path(config.DATA_DIR).resolve())
    yield
    # 关闭时通知后台任务退出
    await coordinator.shutdown()


async def wheel_error_handler(request: Request, exc: WheelError) -> JSONResponse:
    """业务异常 -> 对应状态码"""
    if exc.status_code >= 500:
        logger.error("请求失败: %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体格式错误统一按 400 返回"""
    errors = exc.errors()
    reasons = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in errors
    )
    return JSONResponse(status_code=400, content={"detail": f"Invalid request: {reasons}"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """兜底异常处理，避免直接返回 500 堆栈"""
    logger.exception("未捕获异常: %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "服务器内部错误"},
    )


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """创建应用，测试中可传入独立的配置"""
    config = config or settings

    app = FastAPI(
        title=config.PROJECT_NAME,
        description="餐厅展示屏幸运转盘 API",
        version=__version__,
        openapi_url=f"{config.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = config

    # 速率限制
    configure_limiter(config)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(WheelError, wheel_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # 请求日志中间件
    # 注意：中间件按添加顺序的逆序执行，CORS 需要最后添加以确保最先执行
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # 注册路由
    app.include_router(api_router, prefix=config.API_V1_PREFIX)
    app.include_router(ws.router)

    # 上传的广告图片（目录在启动时由存储层创建）
    app.mount(
        "/uploads",
        StaticFiles(directory=Path(config.DATA_DIR) / "uploads", check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health_check():
        """健康检查"""
        return {"status": "ok", "message": "幸运转盘 API 运行中"}

    return app


app = create_app()


def run() -> None:
    """启动入口"""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
