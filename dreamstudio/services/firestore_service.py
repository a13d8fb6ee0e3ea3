# dreamstudio/services/firestore_service.py
import os
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from flask import Flask


def init_firebase(app: Flask):
    """
    firebase_admin 기본 앱을 초기화합니다. 이미 초기화되어 있으면 아무것도 하지 않습니다.
    인증 파일 경로가 설정되어 있는데 파일이 없으면 시작 단계에서 실패합니다.
    """
    if firebase_admin._apps:
        return

    cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
    if cred_path:
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase credentials file not found: {cred_path}")
        cred = credentials.Certificate(cred_path)
    else:
        cred = credentials.ApplicationDefault()

    options = {}
    if app.config.get('FIREBASE_PROJECT_ID'):
        options['projectId'] = app.config['FIREBASE_PROJECT_ID']
    if app.config.get('FIREBASE_STORAGE_BUCKET'):
        options['storageBucket'] = app.config['FIREBASE_STORAGE_BUCKET']

    firebase_admin.initialize_app(cred, options)
    logging.info("Firebase Admin SDK initialized")


class FirestoreService:
    """
    Firestore 클라이언트 핸들. 앱 시작 시 init_app으로 연결하고,
    앱 종료 시 close로 해제합니다. 저장소(store) 객체들이 이 핸들을 주입받아 사용합니다.
    """

    def __init__(self):
        self.client: Optional[firestore.Client] = None

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Firestore 클라이언트를 생성합니다.
        연결 확인을 위해 컬렉션 목록을 한 번 조회하며, 실패하면 예외를 그대로 올립니다.
        """
        self.client = firestore.client()
        next(iter(self.client.collections()), None)
        logging.info("FirestoreService: Firestore 클라이언트가 성공적으로 연결되었습니다.")

    def collection(self, name: str):
        if not self.client:
            raise RuntimeError("FirestoreService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.client.collection(name)

    def close(self):
        if self.client is not None:
            self.client.close()
            self.client = None
            logging.info("FirestoreService: Firestore 클라이언트 연결을 종료했습니다.")
