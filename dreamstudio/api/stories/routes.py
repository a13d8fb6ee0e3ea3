# dreamstudio/api/stories/routes.py
from flask import Blueprint, request, jsonify, current_app, g

from dreamstudio.core.exceptions import load_schema
from dreamstudio.core.security import auth_required
from .schemas import (
    StoryListQuerySchema,
    PublicStoryQuerySchema,
    GenerateImagesSchema,
    StoryResponseSchema
)

stories_bp = Blueprint('stories_bp', __name__)


def _page_response(result):
    return {
        "success": True,
        "count": result['count'],
        "total": result['total'],
        "pagination": result['pagination'],
        "data": StoryResponseSchema(many=True).dump(result['stories'])
    }


@stories_bp.route('/', methods=['GET'])
@auth_required
def list_stories():
    """스토리 목록을 조회합니다. (?page, ?limit, ?sort, ?style)"""
    query = load_schema(StoryListQuerySchema(), request.args)
    result = current_app.services['stories'].list_stories(
        g.user.subject_id,
        art_style=query.get('style'),
        page=query['page'],
        limit=query['limit'],
        sort=query['sort']
    )
    return jsonify(_page_response(result)), 200


# '/<story_id>' 보다 먼저 등록되어야 합니다.
@stories_bp.route('/public/featured', methods=['GET'])
def list_public_stories():
    """[인증 불필요] 공개 스토리 목록을 최신순으로 조회합니다."""
    query = load_schema(PublicStoryQuerySchema(), request.args)
    result = current_app.services['stories'].list_public_stories(page=query['page'], limit=query['limit'])
    return jsonify(_page_response(result)), 200


@stories_bp.route('/', methods=['POST'])
@auth_required
def create_story():
    story = current_app.services['stories'].create_story(request.get_json(silent=True), g.user.subject_id)
    return jsonify({"success": True, "data": StoryResponseSchema().dump(story)}), 201


@stories_bp.route('/<string:story_id>', methods=['GET'])
@auth_required
def get_story(story_id: str):
    """소유자이거나 공개된 스토리만 조회할 수 있습니다."""
    story = current_app.services['stories'].get_story(story_id, g.user.subject_id)
    return jsonify({"success": True, "data": StoryResponseSchema().dump(story)}), 200


@stories_bp.route('/<string:story_id>', methods=['PUT'])
@auth_required
def update_story(story_id: str):
    """[소유자 전용] 전달된 필드만 교체합니다 (부분 업데이트)."""
    story = current_app.services['stories'].update_story(story_id, request.get_json(silent=True), g.user.subject_id)
    return jsonify({"success": True, "data": StoryResponseSchema().dump(story)}), 200


@stories_bp.route('/<string:story_id>', methods=['DELETE'])
@auth_required
def delete_story(story_id: str):
    current_app.services['stories'].delete_story(story_id, g.user.subject_id)
    return jsonify({"success": True, "data": {}}), 200


@stories_bp.route('/<string:story_id>/generate-images', methods=['POST'])
@auth_required
def generate_story_images(story_id: str):
    """[소유자 전용] 모든 장면의 이미지를 장면 텍스트로 다시 생성합니다."""
    payload = load_schema(GenerateImagesSchema(), request.get_json(silent=True))
    story = current_app.services['stories'].generate_images_for_story(
        story_id, g.user.subject_id, art_style=payload.get('art_style')
    )
    return jsonify({"success": True, "data": StoryResponseSchema().dump(story)}), 200
