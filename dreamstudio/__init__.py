# dreamstudio/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import atexit
import logging
from flask import Flask, send_from_directory

# - 설정 및 공통 모듈
from dreamstudio.core.config import config_by_name
from dreamstudio.core.exceptions import register_error_handlers
from dreamstudio.core.security import create_authenticator

# - API 블루프린트
from dreamstudio.api.stories.routes import stories_bp
from dreamstudio.api.images.routes import images_bp
from dreamstudio.api.exports.routes import exports_bp
from dreamstudio.api.users.routes import users_bp
from dreamstudio.api.health.routes import health_bp

# - 서비스 모듈
from dreamstudio.services.firestore_service import FirestoreService, init_firebase
from dreamstudio.services.segmind_service import SegmindService
from dreamstudio.services.storage_service import create_image_storage, LocalImageStorage
from dreamstudio.stores.firestore_store import FirestoreStoryStore, FirestoreUserStore
from dreamstudio.stores.memory_store import MemoryStoryStore, MemoryUserStore
from dreamstudio.api.users.services import UserService
from dreamstudio.api.stories.services import StoryService
from dreamstudio.api.images.services import ImageService
from dreamstudio.api.exports.services import ExportService


def _needs_firebase(app: Flask) -> bool:
    return (
        app.config['STORE_BACKEND'] == 'firestore'
        or app.config['AUTH_MODE'] == 'firebase'
        or app.config['IMAGE_STORAGE'] == 'firebase'
    )


def create_app(config_name=None, **config_overrides):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' / 'testing' / 'production'. 생략하면 FLASK_ENV 값을 사용합니다.
    :param config_overrides: 설정 클래스 값 위에 덮어쓸 설정 (테스트에서 UPLOAD_PATH 등을 바꿀 때 사용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    if config_name not in config_by_name:
        raise ValueError(f"'{config_name}'은(는) 유효한 환경 이름이 아닙니다.")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.config.update(config_overrides)
    app.config['MAX_CONTENT_LENGTH'] = app.config['MAX_FILE_SIZE']
    app.json.ensure_ascii = False
    app.url_map.strict_slashes = False

    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    # =====================================================================================
    # 4. 외부 서비스 초기화
    # =====================================================================================
    if _needs_firebase(app):
        init_firebase(app)

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 문서 저장소
    store_backend = app.config['STORE_BACKEND']
    if store_backend == 'firestore':
        try:
            firestore_instance = FirestoreService()
            firestore_instance.init_app(app)
            app.services['firestore'] = firestore_instance
        except Exception as e:
            logging.error(f"Failed to connect to Firestore: {e}")
            raise
        story_store = FirestoreStoryStore(firestore_instance)
        user_store = FirestoreUserStore(firestore_instance)
    elif store_backend == 'memory':
        story_store = MemoryStoryStore()
        user_store = MemoryUserStore()
    else:
        raise ValueError(f"'{store_backend}'은(는) 유효한 STORE_BACKEND 값이 아닙니다.")

    app.services['story_store'] = story_store
    app.services['user_store'] = user_store
    logging.info(f"Document store initialized ({store_backend})")

    # 5-2. 인증 게이트, 이미지 저장소, 이미지 생성 API
    app.services['authenticator'] = create_authenticator(app)

    try:
        app.services['storage'] = create_image_storage(app)
        logging.info("Image storage initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize image storage: {e}")
        raise

    segmind_instance = SegmindService()
    segmind_instance.init_app(app)
    app.services['segmind'] = segmind_instance

    # 5-3. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    app.services['users'] = UserService(user_store)
    app.services['images'] = ImageService(
        segmind_service=app.services['segmind'],
        image_storage=app.services['storage'],
        max_file_size=app.config['MAX_FILE_SIZE']
    )
    app.services['stories'] = StoryService(
        story_store,
        user_service=app.services['users'],
        image_service=app.services['images'],
        list_scope=app.config['STORY_LIST_SCOPE']
    )
    app.services['exports'] = ExportService(story_service=app.services['stories'])

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(stories_bp, url_prefix='/api/stories')
    app.register_blueprint(images_bp, url_prefix='/api/images')
    app.register_blueprint(exports_bp, url_prefix='/api/exports')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(health_bp, url_prefix='/api/health')

    # - 로컬 저장소에 저장된 이미지 제공
    if isinstance(app.services['storage'], LocalImageStorage):
        upload_dir = app.services['storage'].upload_dir

        @app.route('/uploads/<path:filename>', methods=['GET'])
        def serve_upload(filename):
            return send_from_directory(upload_dir, filename)

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    register_error_handlers(app)

    # =====================================================================================
    # 8. 종료 처리 및 앱 반환
    # =====================================================================================
    if 'firestore' in app.services:
        atexit.register(app.services['firestore'].close)

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
