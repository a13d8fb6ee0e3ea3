# dreamstudio/services/segmind_service.py
import logging
import random
from typing import Optional, Dict, Any

import requests
from flask import Flask

from dreamstudio.core.exceptions import Internal, UpstreamQuotaExceeded, UpstreamRateLimited

# 화풍별로 프롬프트 끝에 덧붙이는 수식어
STYLE_MODIFIERS = {
    'realistic': 'photorealistic, detailed, high resolution',
    'cartoon': 'cartoon style, vibrant colors, simplified shapes',
    'watercolor': 'watercolor painting, soft edges, flowing colors',
    'pixar': 'Pixar animation style, 3D, colorful, expressive',
    'anime': 'anime style, cel shaded, vibrant, detailed',
    'digital-art': 'digital art, detailed, vibrant colors, high resolution',
    'oil-painting': 'oil painting, textured, rich colors, classical style',
    'pencil-sketch': 'pencil sketch, detailed linework, shading, monochrome',
    'comic-book': 'comic book style, bold lines, flat colors, dynamic',
    'fantasy': 'fantasy art, magical, ethereal, detailed, vibrant',
}

# 모델이 자주 만드는 결함을 억제하기 위해 항상 붙이는 네거티브 프롬프트
QUALITY_NEGATIVE_TERMS = (
    'deformed, distorted, disfigured, poorly drawn, bad anatomy, wrong anatomy, '
    'extra limb, missing limb, floating limbs, disconnected limbs, mutation, mutated, '
    'ugly, disgusting, blurry, out of focus'
)

DEFAULT_PARAMS = {
    "samples": 1,
    "scheduler": "UniPC",
    "num_inference_steps": 25,
    "guidance_scale": 7.5,
    "strength": 0.9,
    "img_width": 512,
    "img_height": 512,
    "model_id": "sd1.5",
}


def enhance_prompt_with_style(prompt: str, art_style: str) -> str:
    """화풍 수식어가 프롬프트에 (대소문자 무시) 이미 없으면 끝에 덧붙입니다."""
    style_modifier = STYLE_MODIFIERS.get(art_style, '')
    if style_modifier and style_modifier.lower() not in prompt.lower():
        return f"{prompt}, {style_modifier}"
    return prompt


def enhance_negative_prompt(negative_prompt: Optional[str] = None) -> str:
    if negative_prompt and negative_prompt.strip():
        return f"{negative_prompt.strip()}, {QUALITY_NEGATIVE_TERMS}"
    return QUALITY_NEGATIVE_TERMS


def random_seed() -> int:
    return random.randrange(1_000_000)


class SegmindService:
    """
    Segmind txt2img API 연동을 담당하는 서비스 클래스.
    한 번의 HTTP 호출로 이미지 바이트를 받아오며, 실패 시 재시도하지 않습니다.
    """

    def __init__(self):
        """
        설정값은 None으로 초기화합니다.
        실제 값은 init_app 메서드를 통해 설정됩니다.
        """
        self.api_url = None
        self.api_key = None
        self.timeout = None

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 API 주소와 키를 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        api_url = app.config.get('SEGMIND_API_URL')
        if not api_url:
            raise ValueError("SEGMIND_API_URL 설정이 .env 파일에 필요합니다.")
        if not app.config.get('SEGMIND_API_KEY'):
            logging.warning("SegmindService: SEGMIND_API_KEY가 설정되지 않았습니다. 이미지 생성 요청은 실패합니다.")

        self.api_url = api_url.rstrip('/')
        self.api_key = app.config.get('SEGMIND_API_KEY')
        self.timeout = app.config.get('IMAGE_API_TIMEOUT', 60)
        logging.info("SegmindService: Segmind API 서비스가 성공적으로 초기화되었습니다.")

    def build_params(self, prompt: str, negative_prompt: str, seed: Optional[int] = None) -> Dict[str, Any]:
        params = dict(DEFAULT_PARAMS)
        params.update({
            "prompt": prompt,
            "negative_prompt": negative_prompt,
            "seed": seed if seed is not None else random_seed(),
        })
        return params

    def txt2img(self, params: Dict[str, Any]) -> bytes:
        """
        txt2img 엔드포인트를 호출하고 이미지 바이트를 반환합니다.

        :raises UpstreamRateLimited: 벤더가 429를 반환한 경우
        :raises UpstreamQuotaExceeded: 벤더가 402를 반환한 경우
        :raises Internal: 그 밖의 벤더 오류, 타임아웃, 네트워크 오류
        """
        if not self.api_url:
            raise RuntimeError("SegmindService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

        try:
            response = requests.post(
                f"{self.api_url}/txt2img",
                json=params,
                headers={"x-api-key": self.api_key or "", "Content-Type": "application/json"},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logging.error(f"Segmind 요청 실패: {e}", exc_info=True)
            raise Internal('Failed to generate image') from e

        if response.status_code == 429:
            logging.warning("Segmind rate limit exceeded")
            raise UpstreamRateLimited()
        if response.status_code == 402:
            logging.warning("Segmind usage limit reached")
            raise UpstreamQuotaExceeded()
        if not response.ok:
            logging.error(f"Segmind 이미지 생성 실패 (status: {response.status_code}): {response.text[:200]}")
            raise Internal('Failed to generate image')

        return response.content
