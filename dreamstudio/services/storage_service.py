# dreamstudio/services/storage_service.py
import os
import uuid
import logging
from typing import Dict, Optional

from flask import Flask
from firebase_admin import storage

from dreamstudio.core.exceptions import NotFound, ValidationError


def validate_filename(filename: str):
    """디렉터리 탐색 공격을 막기 위해 경로 구분자가 포함된 파일명을 거부합니다."""
    if not filename or '/' in filename or '\\' in filename:
        raise ValidationError('Invalid filename', errors=[{"field": "filename", "message": "Invalid filename"}])


def unique_filename(extension: str) -> str:
    extension = extension if not extension or extension.startswith('.') else f".{extension}"
    return f"{uuid.uuid4()}{extension}"


class LocalImageStorage:
    """
    이미지 파일을 로컬 디렉터리(UPLOAD_PATH)에 저장하는 저장소.
    저장된 파일은 '/uploads/<filename>' 경로로 제공됩니다.
    """
    url_prefix = '/uploads'

    def __init__(self):
        self.upload_dir: Optional[str] = None

    def init_app(self, app: Flask):
        self.upload_dir = os.path.abspath(app.config['UPLOAD_PATH'])
        logging.info(f"LocalImageStorage: 이미지 저장 경로 {self.upload_dir}")

    def _ensure_dir(self):
        if not self.upload_dir:
            raise RuntimeError("LocalImageStorage가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        os.makedirs(self.upload_dir, exist_ok=True)

    def path_for(self, filename: str) -> str:
        validate_filename(filename)
        return os.path.join(self.upload_dir, filename)

    def save(self, data: bytes, extension: str = '.png', content_type: str = 'image/png') -> Dict[str, str]:
        """바이트를 고유한 파일명으로 저장하고 {filename, url}을 반환합니다."""
        self._ensure_dir()
        filename = unique_filename(extension)
        with open(os.path.join(self.upload_dir, filename), 'wb') as f:
            f.write(data)
        logging.info(f"Image saved to local storage: {filename} ({len(data)} bytes)")
        return {"filename": filename, "url": f"{self.url_prefix}/{filename}"}

    def delete(self, filename: str):
        file_path = self.path_for(filename)
        if not os.path.isfile(file_path):
            raise NotFound('Image not found')
        os.remove(file_path)
        logging.info(f"Image deleted from local storage: {filename}")


class FirebaseImageStorage:
    """
    이미지 파일을 Firebase Storage 버킷의 'images/' 경로에 저장하는 저장소.
    업로드한 객체는 공개로 전환하고 public URL을 반환합니다.
    """
    folder = 'images'

    def __init__(self):
        self.bucket = None

    def init_app(self, app: Flask):
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("IMAGE_STORAGE=firebase 를 사용하려면 FIREBASE_STORAGE_BUCKET 설정이 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("FirebaseImageStorage: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _blob(self, filename: str):
        if not self.bucket:
            raise RuntimeError("FirebaseImageStorage가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.bucket.blob(f"{self.folder}/{filename}")

    def save(self, data: bytes, extension: str = '.png', content_type: str = 'image/png') -> Dict[str, str]:
        filename = unique_filename(extension)
        blob = self._blob(filename)
        blob.upload_from_string(data, content_type=content_type)
        try:
            blob.make_public()
        except Exception as e:
            logging.error(f"파일 공개 전환 실패: {e}", exc_info=True)
            raise
        return {"filename": filename, "url": blob.public_url}

    def delete(self, filename: str):
        validate_filename(filename)
        blob = self._blob(filename)
        if not blob.exists():
            raise NotFound('Image not found')
        blob.delete()
        logging.info(f"Image deleted from Firebase Storage: {filename}")


def create_image_storage(app: Flask):
    """IMAGE_STORAGE 설정에 맞는 이미지 저장소를 생성하고 초기화합니다."""
    storage_map = {
        'local': LocalImageStorage,
        'firebase': FirebaseImageStorage,
    }
    backend = app.config.get('IMAGE_STORAGE', 'local')
    storage_cls = storage_map.get(backend)
    if not storage_cls:
        raise ValueError(f"'{backend}'은(는) 유효한 IMAGE_STORAGE 값이 아닙니다.")

    image_storage = storage_cls()
    image_storage.init_app(app)
    return image_storage
