import re

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
APPLICATION_NAME_RE = re.compile(r"^[a-zA-Z0-9\s\-_.]+$")
URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)


def validate_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_RE.match(email))


def normalize_email(email) -> str:
    """邮箱统一去空白并转小写；非字符串按空串处理"""
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def validate_url(url: str) -> bool:
    return bool(url) and bool(URL_RE.match(url))


def mask_email(email: str) -> str:
    """
    邮箱脱敏：保留首尾字符
      alice@example.com -> a***e@example.com
      ab@example.com    -> a*@example.com
    """
    if not email or "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        masked = local[:1] + "*" * max(len(local) - 1, 1)
    else:
        masked = local[0] + "***" + local[-1]
    return f"{masked}@{domain}"


def check_length(value, field: str, max_len: int, min_len: int = 0) -> list[str]:
    """返回长度校验错误列表（空列表表示通过）"""
    errors = []
    if value is None:
        return errors
    size = len(value)
    if size < min_len:
        errors.append(f"{field} must be at least {min_len} characters")
    if size > max_len:
        errors.append(f"{field} cannot exceed {max_len} characters")
    return errors


def parse_bool(raw):
    """查询参数布尔解析：无法识别时返回 None"""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    low = str(raw).strip().lower()
    if low in ("1", "true", "t", "yes"):
        return True
    if low in ("0", "false", "f", "no"):
        return False
    return None


def string_list(raw, field: str) -> list[str]:
    """将 JSON 数组规整为去空白的字符串列表"""
    from utils.exceptions import ValidationError

    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError(f"{field} must be a list")
    return [str(v).strip() for v in raw if v is not None and str(v).strip()]
