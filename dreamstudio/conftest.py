# dreamstudio/conftest.py
"""
pytest 공용 fixture.

- 기본 앱은 TestingConfig(메모리 저장소, 게스트 인증, 로컬 이미지 저장소)로 생성합니다.
- firebase_client 는 AUTH_MODE=firebase 로 생성하되, Firebase 초기화와
  ID 토큰 검증을 가짜 구현으로 바꿔 두 명의 호출자(user-a, user-b)를 흉내냅니다.
- Segmind 호출은 requests.post 를 mock 으로 바꿔 실제 네트워크를 사용하지 않습니다.
"""

from unittest.mock import MagicMock

import pytest
from firebase_admin import auth as firebase_auth

import dreamstudio
from dreamstudio import create_app

FAKE_PNG = b'\x89PNG\r\n\x1a\nfake-image-bytes'

FAKE_TOKENS = {
    'token-a': {'uid': 'user-a', 'email': 'Alice@Example.com', 'email_verified': True, 'name': 'Alice'},
    'token-b': {'uid': 'user-b', 'email': 'bob@example.com', 'email_verified': True},
    'token-info': {'uid': 'user-c', 'email': 'carol@company.info', 'email_verified': True},
    'token-phone': {'uid': 'user-d', 'phone_number': '+821012345678'},
    'token-reused-email': {'uid': 'user-e', 'email': 'alice@example.com', 'email_verified': True},
}


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


def story_payload(**overrides):
    payload = {
        'title': 'The Lost Fox',
        'artStyle': 'watercolor',
        'scenes': [
            {'text': 'The fox finds its way home.', 'imageUrl': '/uploads/b.png', 'order': 2},
            {'text': 'A fox wakes up in the forest.', 'imageUrl': '/uploads/a.png', 'order': 1},
        ],
    }
    payload.update(overrides)
    return payload


def _fake_verify_id_token(token, *args, **kwargs):
    if token == 'expired-token':
        raise firebase_auth.ExpiredIdTokenError('Token expired', None)
    if token not in FAKE_TOKENS:
        raise firebase_auth.InvalidIdTokenError('Invalid token')
    return dict(FAKE_TOKENS[token])


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', UPLOAD_PATH=str(tmp_path / 'uploads'))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def firebase_app(tmp_path, monkeypatch):
    monkeypatch.setattr(dreamstudio, 'init_firebase', lambda app: None)
    monkeypatch.setattr(firebase_auth, 'verify_id_token', _fake_verify_id_token)
    app = create_app('testing', AUTH_MODE='firebase', UPLOAD_PATH=str(tmp_path / 'uploads'))
    yield app


@pytest.fixture
def firebase_client(firebase_app):
    return firebase_app.test_client()


def make_vendor_response(status_code=200, content=FAKE_PNG):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.content = content
    response.text = '' if response.ok else 'vendor error'
    return response


@pytest.fixture
def mock_segmind(monkeypatch):
    """Segmind txt2img 호출을 가로채는 mock. 기본값은 200 + PNG 바이트."""
    post = MagicMock(return_value=make_vendor_response())
    monkeypatch.setattr('dreamstudio.services.segmind_service.requests.post', post)
    return post
