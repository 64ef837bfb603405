"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 API 层或 UI 层做统一捕获与用户提示。
"""


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_WRITE_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 key、path 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class ConfigurationError(BusinessError):
    """启动期配置错误：知识库缺失/格式错误、兜底模板为空等，属于致命错误。"""


class StorageError(BusinessError):
    """持久化读写失败。会话层将其降级为 StorageWarning。"""


class SessionBusyError(BusinessError):
    """同一会话在已有待完成回复时又尝试启动新的打字延迟。"""


class StorageWarning(UserWarning):
    """持久化写入失败时发出的非致命警告，内存中的会话状态仍然有效。"""
