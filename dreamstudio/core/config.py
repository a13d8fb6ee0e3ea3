# dreamstudio/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # Firebase 서비스 계정 키 파일 경로. 비어 있으면 Application Default Credentials를 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 문서 저장소: 'firestore' 또는 'memory'
    STORE_BACKEND = os.getenv('STORE_BACKEND', 'firestore')

    # 인증 게이트 변형: 'firebase'(ID 토큰 검증) 또는 'guest'(고정 게스트 사용자)
    AUTH_MODE = os.getenv('AUTH_MODE', 'firebase')

    # 스토리 목록 정책: 'owner'(본인 스토리만) 또는 'all'(전체)
    STORY_LIST_SCOPE = os.getenv('STORY_LIST_SCOPE', 'owner')

    # Segmind 이미지 생성 API
    SEGMIND_API_URL = os.getenv('SEGMIND_API_URL', 'https://api.segmind.com/v1')
    SEGMIND_API_KEY = os.getenv('SEGMIND_API_KEY')
    IMAGE_API_TIMEOUT = _int_env('IMAGE_API_TIMEOUT', 60)

    # 이미지 저장소: 'local'(UPLOAD_PATH 디렉터리) 또는 'firebase'(Storage 버킷)
    IMAGE_STORAGE = os.getenv('IMAGE_STORAGE', 'local')
    UPLOAD_PATH = os.getenv('UPLOAD_PATH', './uploads')
    MAX_FILE_SIZE = _int_env('MAX_FILE_SIZE', 10 * 1024 * 1024)
    # Flask가 요청 본문 크기를 제한할 때 사용하는 키입니다.
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다. 외부 서비스 없이 동작하도록 구성합니다."""
    TESTING = True
    DEBUG = False
    STORE_BACKEND = 'memory'
    AUTH_MODE = 'guest'
    STORY_LIST_SCOPE = 'owner'
    IMAGE_STORAGE = 'local'
    SEGMIND_API_URL = 'https://segmind.test/v1'
    SEGMIND_API_KEY = 'test-key'


class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False


# config_by_name: FLASK_ENV 값에 따라 create_app에서 설정 클래스를 선택할 때 사용합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
