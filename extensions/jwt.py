# extensions/jwt.py
import time, json, base64, hmac, hashlib, uuid, logging
from flask import current_app
from extensions.redis_client import get_redis

logger = logging.getLogger(__name__)

REVOKED_PREFIX = "jwt:blk:"


def _b64(data: bytes):
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64json(obj):
    return _b64(json.dumps(obj, separators=(",", ":")).encode())


def _decode_segment(seg: str):
    pad = "=" * (-len(seg) % 4)
    return json.loads(base64.urlsafe_b64decode(seg + pad).decode())


class TokenError(ValueError):
    pass


class JwtCodec:
    """
    HS256 签名 / 校验。
    启动时由 init_jwt 根据配置构造一次，挂在 app.extensions["jwt"] 上。
    """

    def __init__(self, secret: str, expires_seconds: int):
        if not secret:
            raise RuntimeError("JWT_SECRET_KEY is not configured")
        self._secret = secret.encode()
        self.expires_seconds = expires_seconds

    def _sign(self, signing: bytes) -> bytes:
        return _b64(hmac.new(self._secret, signing, hashlib.sha256).digest())

    def encode(self, claims: dict, now: int | None = None) -> str:
        now = int(time.time()) if now is None else now
        header = {"alg": "HS256", "typ": "JWT"}
        payload = dict(claims)
        payload.update({
            "iat": now,
            "exp": now + self.expires_seconds,
            "jti": uuid.uuid4().hex,
        })
        signing = _b64json(header) + b"." + _b64json(payload)
        return (signing + b"." + self._sign(signing)).decode()

    def decode(self, token: str) -> dict:
        try:
            h_b, p_b, sig_b = token.split(".")
            expected = self._sign(f"{h_b}.{p_b}".encode()).decode()
            if not hmac.compare_digest(expected, sig_b):
                raise TokenError("signature mismatch")
            payload = _decode_segment(p_b)
            exp = payload.get("exp")
            if not exp or time.time() > exp:
                raise TokenError("token expired")
            return payload
        except TokenError:
            raise
        except Exception:
            raise TokenError("malformed token")


def init_jwt(app) -> JwtCodec:
    codec = JwtCodec(app.config.get("JWT_SECRET_KEY"), app.config["JWT_EXPIRES_SECONDS"])
    app.extensions["jwt"] = codec
    return codec


def _codec() -> JwtCodec:
    return current_app.extensions["jwt"]


def create_token(user) -> str:
    claims = {
        "userId": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }
    return _codec().encode(claims)


def decode_token(token: str, check_revoked: bool = True) -> dict:
    payload = _codec().decode(token)
    if check_revoked and current_app.config.get("JWT_REVOCATION_ENABLED", True):
        jti = payload.get("jti")
        if jti and is_token_revoked(jti):
            raise TokenError("token revoked")
    return payload


def verify_token(token: str | None):
    """
    校验 token，任何失败（格式 / 签名 / 过期 / 已注销）统一返回 None，
    调用方不区分具体原因。
    """
    if not token:
        return None
    try:
        return decode_token(token)
    except TokenError as e:
        logger.debug("token rejected: %s", e)
        return None


def revoke_token(token: str):
    """
    解析 token -> jti+exp 写入 Redis 黑名单。
    幂等：解析失败或过期直接返回。
    """
    try:
        payload = decode_token(token, check_revoked=False)
    except TokenError:
        return
    jti = payload.get("jti")
    exp = payload.get("exp")
    if not jti or not exp:
        return
    ttl = max(int(exp - time.time()), 1)
    get_redis().setex(f"{REVOKED_PREFIX}{jti}", ttl, "1")


def is_token_revoked(jti: str) -> bool:
    try:
        return bool(get_redis().get(f"{REVOKED_PREFIX}{jti}"))
    except Exception:
        # Redis 不可用时仅记录，不阻断已签名的合法 token
        logger.warning("revocation check unavailable for jti=%s", jti, exc_info=True)
        return False
