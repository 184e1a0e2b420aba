"""
应用配置

所有配置项均可通过环境变量或 .env 文件覆盖
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """服务配置"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "幸运转盘"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api"
    CORS_ORIGINS: List[str] = ["*"]

    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # 数据目录（config.json / history.json / restaurant.json / uploads）
    DATA_DIR: str = "data"
    HISTORY_RETENTION_HOURS: int = 48

    # 转盘动画时长，锁在此之后释放
    SPIN_ANIMATION_SECONDS: float = 8.0
    # 动画时长 + 4 秒余量，超过即视为锁已失效
    SPIN_STALE_AFTER_SECONDS: float = 12.0
    SPIN_STALE_CHECK_INTERVAL_SECONDS: float = 2.0

    # 每个展示端待发送消息上限，溢出即断开该客户端
    WS_QUEUE_SIZE: int = 100

    RATE_LIMIT_ENABLED: bool = True
    SPIN_RATE_LIMIT: str = "30/minute"

    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024


settings = Settings()
