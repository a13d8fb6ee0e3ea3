# dreamstudio/services/test_segmind_service.py
"""
Segmind 어댑터 테스트: 프롬프트 보강 규칙과 벤더 상태 코드 매핑.
"""

from unittest.mock import MagicMock

import pytest
import requests
from flask import Flask

from dreamstudio.conftest import FAKE_PNG, make_vendor_response
from dreamstudio.core.exceptions import Internal, UpstreamQuotaExceeded, UpstreamRateLimited
from dreamstudio.services.segmind_service import (
    STYLE_MODIFIERS,
    QUALITY_NEGATIVE_TERMS,
    SegmindService,
    enhance_prompt_with_style,
    enhance_negative_prompt
)


@pytest.fixture
def segmind():
    app = Flask(__name__)
    app.config.update(SEGMIND_API_URL='https://segmind.test/v1/', SEGMIND_API_KEY='secret', IMAGE_API_TIMEOUT=5)
    service = SegmindService()
    service.init_app(app)
    return service


def test_style_modifier_is_appended():
    assert enhance_prompt_with_style('a castle', 'fantasy') == 'a castle, fantasy art, magical, ethereal, detailed, vibrant'


def test_style_modifier_is_not_duplicated():
    prompt = 'a castle, FANTASY ART, MAGICAL, ETHEREAL, DETAILED, VIBRANT'
    assert enhance_prompt_with_style(prompt, 'fantasy') == prompt


def test_unknown_style_adds_nothing():
    assert enhance_prompt_with_style('a castle', 'crayon') == 'a castle'


def test_every_art_style_has_a_modifier():
    from dreamstudio.models.story import ArtStyle
    assert set(STYLE_MODIFIERS) == set(ArtStyle.values())


def test_negative_prompt_composition():
    assert enhance_negative_prompt() == QUALITY_NEGATIVE_TERMS
    assert enhance_negative_prompt('   ') == QUALITY_NEGATIVE_TERMS
    assert enhance_negative_prompt('text, watermark') == f'text, watermark, {QUALITY_NEGATIVE_TERMS}'


def test_build_params_defaults(segmind):
    params = segmind.build_params('a fox', 'blurry', seed=7)
    assert params == {
        'prompt': 'a fox',
        'negative_prompt': 'blurry',
        'samples': 1,
        'scheduler': 'UniPC',
        'num_inference_steps': 25,
        'guidance_scale': 7.5,
        'strength': 0.9,
        'seed': 7,
        'img_width': 512,
        'img_height': 512,
        'model_id': 'sd1.5',
    }
    random_seed = segmind.build_params('a fox', 'blurry')['seed']
    assert 0 <= random_seed < 1_000_000


def test_txt2img_returns_bytes(segmind, monkeypatch):
    post = MagicMock(return_value=make_vendor_response())
    monkeypatch.setattr('dreamstudio.services.segmind_service.requests.post', post)

    assert segmind.txt2img({'prompt': 'a fox'}) == FAKE_PNG
    post.assert_called_once_with(
        'https://segmind.test/v1/txt2img',
        json={'prompt': 'a fox'},
        headers={'x-api-key': 'secret', 'Content-Type': 'application/json'},
        timeout=5
    )


@pytest.mark.parametrize('status_code, expected', [
    (429, UpstreamRateLimited),
    (402, UpstreamQuotaExceeded),
    (400, Internal),
    (500, Internal),
])
def test_txt2img_status_mapping(segmind, monkeypatch, status_code, expected):
    monkeypatch.setattr(
        'dreamstudio.services.segmind_service.requests.post',
        MagicMock(return_value=make_vendor_response(status_code))
    )
    with pytest.raises(expected):
        segmind.txt2img({'prompt': 'a fox'})


def test_txt2img_network_error(segmind, monkeypatch):
    monkeypatch.setattr(
        'dreamstudio.services.segmind_service.requests.post',
        MagicMock(side_effect=requests.ConnectionError('unreachable'))
    )
    with pytest.raises(Internal) as exc_info:
        segmind.txt2img({'prompt': 'a fox'})
    assert exc_info.value.message == 'Failed to generate image'


def test_uninitialized_service_fails_loudly():
    with pytest.raises(RuntimeError):
        SegmindService().txt2img({'prompt': 'a fox'})
