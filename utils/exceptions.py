from typing import Any, List, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    data: Optional[Any]  # 附加数据
    details: Optional[List[str]]  # 字段级校验错误

    def __init__(self, message: str = "Request failed", code: int = 400, data: Any = None,
                 details: Optional[List[str]] = None):
        self.code = code
        self.message = message
        self.data = data
        self.details = details
        super().__init__(description=message)


class ValidationError(BizError):
    def __init__(self, message: str = "Validation failed", details: Optional[List[str]] = None, data: Any = None):
        super().__init__(message, code=400, data=data, details=details)


class AuthenticationError(BizError):
    """凭证缺失 / 无效 / 过期，提示语保持笼统"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code=401)


class AuthorizationError(BizError):
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, code=403)


class NotFoundError(BizError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, code=404)


class ConflictError(BizError):
    def __init__(self, message: str = "Conflict"):
        super().__init__(message, code=409)
