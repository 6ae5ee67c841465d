# app.py
import logging

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from config.settings import get_config
from extensions.database import db, migrate
from extensions.jwt import init_jwt
from extensions.logger import init_logger
from controllers.auth_controller import auth_bp
from controllers.user_controller import user_bp
from controllers.release_controller import release_bp
from controllers.search_controller import search_bp
from controllers.prompt_controller import prompt_bp
from controllers.prompt_category_controller import prompt_category_bp
from controllers.application_controller import application_bp
from controllers.project_controller import project_bp
from controllers.release_plan_controller import release_plan_bp
from controllers.activity_controller import activity_bp
from services.application_service import ApplicationService
from services.user_service import UserService
from utils.exceptions import BizError
from utils.response import json_response

logger = logging.getLogger(__name__)


def create_app(config_name="development", seed: bool = True):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    if not app.config.get("JWT_SECRET_KEY"):
        raise RuntimeError("JWT_SECRET_KEY is not configured")

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    init_jwt(app)
    init_logger(app)
    app.logger.info("当前数据库 URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    if seed:
        try:
            # 首次启动时表可能尚未创建，需先执行 flask db upgrade
            with app.app_context():
                ApplicationService.ensure_default_applications(app)
                UserService.ensure_default_admin(app)
        except SQLAlchemyError as e:
            logger.warning("表结构未就绪，跳过默认数据初始化: %s", e)

    # 登录 / 注册 / 找回密码
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    # 用户管理
    app.register_blueprint(user_bp, url_prefix="/api/users")
    # 发布与工作项
    app.register_blueprint(release_bp)
    app.register_blueprint(search_bp)
    # Prompt 库
    app.register_blueprint(prompt_bp)
    app.register_blueprint(prompt_category_bp)
    # 应用目录
    app.register_blueprint(application_bp)
    # 项目与发布计划
    app.register_blueprint(project_bp)
    app.register_blueprint(release_plan_bp)
    # 审计日志
    app.register_blueprint(activity_bp)

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return json_response(message="Not found", code=404)

    @app.errorhandler(500)
    def server_error(e):
        return json_response(message="Internal server error", code=500)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return json_response(code=e.code, message=e.message, data=e.data, details=e.details)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=8888, debug=True)
