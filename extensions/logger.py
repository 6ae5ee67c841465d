# extensions/logger.py
import json
import logging
import os
import sys
import time
import uuid
from logging.handlers import RotatingFileHandler

from flask import g, has_request_context, request
from werkzeug.exceptions import HTTPException

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_KEY = "request_id"

TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(request_id)s | user=%(user_id)s | %(name)s | %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# 第三方库日志降噪
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
    "werkzeug": logging.INFO,
}


class JsonFormatter(logging.Formatter):
    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        user_id = getattr(record, "user_id", "-")
        if user_id != "-":
            data["user_id"] = user_id
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class RequestContextFilter(logging.Filter):
    """为每条日志补充 request_id 与当前 token 中的 userId"""

    def filter(self, record):
        record.request_id = "-"
        record.user_id = "-"
        if has_request_context():
            record.request_id = getattr(g, _REQUEST_ID_KEY, "-")
            claims = getattr(g, "claims", None) or {}
            record.user_id = claims.get("userId", "-")
        return True


def current_request_id() -> str:
    if not hasattr(g, _REQUEST_ID_KEY):
        # 沿用上游网关传入的请求 ID
        setattr(g, _REQUEST_ID_KEY, request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex)
    return getattr(g, _REQUEST_ID_KEY)


def _formatter(cfg) -> logging.Formatter:
    if cfg["LOG_JSON"]:
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, TEXT_DATEFMT)


def _handlers(cfg, level):
    formatter = _formatter(cfg)
    log_dir = cfg["LOG_DIR"]
    os.makedirs(log_dir, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]
    for filename, lvl in (("app.log", level), ("error.log", logging.ERROR)):
        fh = RotatingFileHandler(
            os.path.join(log_dir, filename),
            maxBytes=cfg["LOG_MAX_BYTES"],
            backupCount=cfg["LOG_BACKUP_COUNT"],
            encoding="utf-8",
        )
        fh.setLevel(lvl)
        handlers.append(fh)
    for h in handlers:
        h.setFormatter(formatter)
        h.addFilter(RequestContextFilter())
    return handlers


def init_logger(app):
    cfg = app.config
    level = getattr(logging, cfg["LOG_LEVEL"].upper(), logging.INFO)

    root = logging.getLogger()
    # 测试中会多次 create_app，handler 只挂一次
    if not root.handlers:
        root.setLevel(level)
        for handler in _handlers(cfg, level):
            root.addHandler(handler)
        for name, lvl in QUIET_LOGGERS.items():
            logging.getLogger(name).setLevel(lvl)

    app.logger.info("Logger initialized level=%s json=%s", cfg["LOG_LEVEL"], cfg["LOG_JSON"])

    @app.before_request
    def _before():
        g._req_start = time.time()
        current_request_id()
        app.logger.info("REQ %s %s from %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _after(resp):
        duration = (time.time() - getattr(g, "_req_start", time.time())) * 1000
        resp.headers[REQUEST_ID_HEADER] = getattr(g, _REQUEST_ID_KEY, "-")
        app.logger.info("RESP %s %s %s %.1fms", request.method, request.path, resp.status_code, duration)
        return resp

    @app.errorhandler(Exception)
    def _err(e):
        from utils.exceptions import BizError
        from utils.response import json_response
        if isinstance(e, BizError):
            return json_response(code=e.code, message=e.message, data=e.data, details=e.details)
        if isinstance(e, HTTPException):
            return json_response(code=e.code, message=e.description)
        app.logger.exception("unhandled exception on %s %s", request.method, request.path)
        return json_response(code=500, message="Internal server error")
