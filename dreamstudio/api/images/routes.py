# dreamstudio/api/images/routes.py
from urllib.parse import urljoin

from flask import Blueprint, request, jsonify, current_app

from dreamstudio.core.security import auth_required
from .schemas import GeneratedImageResponseSchema, UploadedImageResponseSchema

images_bp = Blueprint('images_bp', __name__)


@images_bp.route('/generate', methods=['POST'])
@auth_required
def generate_image():
    """프롬프트와 화풍으로 이미지를 한 장 생성합니다."""
    data = request.get_json(silent=True) or {}
    result = current_app.services['images'].generate(
        data.get('prompt'),
        data.get('artStyle'),
        data.get('negativePrompt'),
        seed=data.get('seed')
    )
    return jsonify({"success": True, "data": GeneratedImageResponseSchema().dump(result)}), 200


@images_bp.route('/upload', methods=['POST'])
@auth_required
def upload_image():
    """multipart 'image' 필드로 전달된 이미지를 저장하고 절대 URL을 반환합니다."""
    result = current_app.services['images'].upload(request.files.get('image'))
    # 로컬 저장소는 '/uploads/...' 상대 경로를 반환하므로 요청 호스트 기준으로 변환
    result['image_url'] = urljoin(request.host_url, result['image_url'])
    return jsonify({"success": True, "data": UploadedImageResponseSchema().dump(result)}), 201


@images_bp.route('/<path:filename>', methods=['DELETE'])
@auth_required
def delete_image(filename: str):
    current_app.services['images'].delete_asset(filename)
    return jsonify({"success": True, "data": {}}), 200
