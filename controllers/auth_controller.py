# controllers/auth_controller.py
from flask import Blueprint, request

from constants.activity import ActivityAction, ActivityResource
from controllers.auth_helpers import auth_required, optional_auth
from repositories.user_repository import UserRepository
from services.activity_service import ActivityService
from services.password_service import PasswordService
from services.token_service import TokenService
from services.user_service import UserService
from utils.permissions import get_permission_scope, require_scope
from utils.response import json_response

auth_bp = Blueprint("auth", __name__)


def _session_response(user, message: str, code: int = 200):
    token = TokenService.issue(user)
    resp = json_response(message=message, data={"user": user.to_dict(), "token": token}, code=code)
    return TokenService.set_auth_cookie(resp, token)


@auth_bp.post("/register")
@optional_auth()
def register():
    data = request.get_json(silent=True) or {}
    user = UserService.register(
        email=data.get("email"),
        name=data.get("name"),
        password=data.get("password"),
        role_raw=data.get("role"),
        actor=get_permission_scope(),
    )
    return _session_response(user, "User created successfully", code=201)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    user = UserService.authenticate(data.get("email"), data.get("password"))
    return _session_response(user, "Login successful")


@auth_bp.post("/logout")
@optional_auth()
def logout():
    scope = get_permission_scope()
    TokenService.revoke(TokenService.extract_token(request))
    if scope is not None:
        ActivityService.log(scope, ActivityAction.LOGOUT, ActivityResource.USER,
                            details="User logged out", resource_id=scope.user_id)
    resp = json_response(message="Logout successful")
    return TokenService.clear_auth_cookie(resp)


@auth_bp.get("/me")
@auth_required()
def me():
    scope = require_scope()
    user = UserRepository.find_by_id(scope.user_id)
    if not user:
        return json_response(code=404, message="User not found")
    return json_response(data={"user": user.to_dict()})


@auth_bp.post("/forgot-password")
def forgot_password():
    data = request.get_json(silent=True) or {}
    message = PasswordService.forgot_password(data.get("email"))
    return json_response(message=message)


@auth_bp.get("/reset-password")
def validate_reset_token():
    result = PasswordService.validate_reset_token(request.args.get("token"))
    return json_response(message="Reset token is valid", data=result)


@auth_bp.post("/reset-password")
def reset_password():
    data = request.get_json(silent=True) or {}
    PasswordService.reset_password(data.get("token"), data.get("password"))
    return json_response(message="Password has been reset successfully")
