"""
业务异常

每个异常携带对应的 HTTP 状态码，由 main 中的统一处理器转换为响应
"""
from typing import Any, Dict


class WheelError(Exception):
    """转盘服务基础异常"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"detail": self.message}


class ValidationError(WheelError):
    """请求体或配置不合法"""

    status_code = 400


class NoSpinsRemaining(WheelError):
    """剩余次数为 0"""

    status_code = 400

    def __init__(self, message: str = "No spins remaining"):
        super().__init__(message)


class SpinAlreadyInProgress(WheelError):
    """已有抽奖在进行中"""

    status_code = 400

    def __init__(self, message: str = "Spin already in progress"):
        super().__init__(message)


class SpinInProgress(WheelError):
    """转盘锁定期间尝试修改状态"""

    status_code = 423

    def __init__(self, elapsed: float, action: str = "modify game state"):
        super().__init__(f"Cannot {action} while spin is in progress")
        self.elapsed = elapsed

    def to_payload(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "spinning": True,
            "spin_time": round(self.elapsed, 3),
        }


class RecordNotFound(WheelError):
    """广告/菜品/推荐不存在"""

    status_code = 404


class StorageError(WheelError):
    """文件读写或序列化失败"""

    status_code = 500
