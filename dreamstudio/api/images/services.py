# dreamstudio/api/images/services.py
import os
import logging
from typing import Optional, Dict, Any

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from dreamstudio.api.images.schemas import ImageGenerateSchema
from dreamstudio.core.exceptions import ApiError, ValidationError, load_schema
from dreamstudio.services.segmind_service import (
    SegmindService,
    enhance_prompt_with_style,
    enhance_negative_prompt
)
from dreamstudio.services.storage_service import validate_filename


class ImageService:
    """
    이미지 생성(Segmind), 업로드, 삭제를 담당하는 서비스 클래스.
    이미지 바이트는 주입된 이미지 저장소(로컬 디렉터리 또는 Firebase Storage)에 저장됩니다.
    """
    def __init__(self, segmind_service: SegmindService, image_storage, max_file_size: int = 10 * 1024 * 1024):
        self.segmind = segmind_service
        self.image_storage = image_storage
        self.max_file_size = max_file_size

    def generate(self, prompt: str, art_style: str, negative_prompt: Optional[str] = '',
                 seed: Optional[int] = None) -> Dict[str, Any]:
        """
        프롬프트에 화풍 수식어를 덧붙여 이미지를 한 장 생성하고 저장합니다.
        벤더 오류는 재시도 없이 그대로 전파됩니다.
        """
        data = load_schema(ImageGenerateSchema(), {
            'prompt': prompt,
            'artStyle': art_style,
            'negativePrompt': negative_prompt,
            'seed': seed,
        })

        enhanced_prompt = enhance_prompt_with_style(data['prompt'], data['art_style'])
        params = self.segmind.build_params(
            enhanced_prompt,
            enhance_negative_prompt(data['negative_prompt']),
            seed=data['seed']
        )
        image_bytes = self.segmind.txt2img(params)
        saved = self.image_storage.save(image_bytes, extension='.png', content_type='image/png')
        logging.info(f"Image generated (style: {data['art_style']}, seed: {params['seed']}, file: {saved['filename']})")

        return {
            "image_url": saved['url'],
            "prompt": enhanced_prompt,
            "art_style": data['art_style'],
            "params": {
                "width": params['img_width'],
                "height": params['img_height'],
                "steps": params['num_inference_steps'],
                "seed": params['seed'],
            }
        }

    def upload(self, file: Optional[FileStorage]) -> Dict[str, Any]:
        """multipart로 전달된 이미지 파일 하나를 원래 확장자를 유지한 고유 파일명으로 저장합니다."""
        if file is None or not file.filename:
            raise ValidationError('No image file provided')
        if not (file.mimetype or '').startswith('image/'):
            raise ValidationError('Only image files are allowed')

        data = file.read()
        if len(data) > self.max_file_size:
            raise ApiError('File too large', status_code=413)

        _, extension = os.path.splitext(secure_filename(file.filename))
        saved = self.image_storage.save(data, extension=extension.lower(), content_type=file.mimetype)
        return {
            "image_url": saved['url'],
            "filename": saved['filename'],
            "mimetype": file.mimetype,
            "size": len(data),
        }

    def delete_asset(self, filename: str):
        # 경로 구분자가 포함된 이름은 저장소에 접근하기 전에 거부
        validate_filename(filename)
        self.image_storage.delete(filename)
