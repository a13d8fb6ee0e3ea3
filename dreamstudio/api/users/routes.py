# dreamstudio/api/users/routes.py
from flask import Blueprint, request, jsonify, current_app, g

from dreamstudio.core.exceptions import load_schema
from dreamstudio.core.security import auth_required
from dreamstudio.api.users.schemas import UserResponseSchema, PreferencesSchema

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/me', methods=['GET'])
@auth_required
def get_my_profile():
    """현재 로그인된 사용자의 계정 정보(선호 설정, 사용량 포함)를 조회합니다."""
    user = current_app.services['users'].get_profile(g.user.subject_id)
    return jsonify({"success": True, "data": UserResponseSchema().dump(user)}), 200


@users_bp.route('/me/preferences', methods=['PATCH'])
@auth_required
def update_my_preferences():
    """현재 로그인된 사용자의 선호 설정을 부분 업데이트합니다."""
    preferences = load_schema(PreferencesSchema(), request.get_json(silent=True))
    user = current_app.services['users'].update_preferences(g.user.subject_id, preferences)
    return jsonify({"success": True, "data": UserResponseSchema().dump(user)}), 200
