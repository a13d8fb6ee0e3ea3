# dreamstudio/api/exports/routes.py
from flask import Blueprint, jsonify, current_app, g

from dreamstudio.core.security import auth_required

exports_bp = Blueprint('exports_bp', __name__)


@exports_bp.route('/story/<string:story_id>/pdf', methods=['GET'])
@auth_required
def export_story_pdf(story_id: str):
    return jsonify(current_app.services['exports'].to_pdf(story_id, g.user.subject_id)), 200


@exports_bp.route('/story/<string:story_id>/epub', methods=['GET'])
@auth_required
def export_story_epub(story_id: str):
    return jsonify(current_app.services['exports'].to_epub(story_id, g.user.subject_id)), 200


@exports_bp.route('/story/<string:story_id>/images', methods=['GET'])
@auth_required
def export_story_images(story_id: str):
    return jsonify(current_app.services['exports'].images_archive(story_id, g.user.subject_id)), 200


@exports_bp.route('/user/data', methods=['GET'])
@auth_required
def export_user_data():
    """호출자 본인의 데이터 내보내기 요청."""
    return jsonify(current_app.services['exports'].user_data_archive(g.account)), 200
