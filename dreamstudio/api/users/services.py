# dreamstudio/api/users/services.py
import re
import logging
from typing import Dict, Any

from dreamstudio.core.exceptions import NotFound, ValidationError
from dreamstudio.core.security import CallerIdentity
from dreamstudio.models.user import User, EMAIL_PATTERN
from dreamstudio.stores.base import UserStore


class UserService:
    """
    사용자 계정 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 인증된 호출자의 계정 find-or-create
    - 프로필/선호 설정 조회 및 수정
    - 스토리 작업에 따른 사용량 카운터 증가
    """
    def __init__(self, user_store: UserStore):
        self.user_store = user_store

    def find_or_create(self, identity: CallerIdentity) -> User:
        user = self.user_store.get(identity.subject_id)
        if user:
            return user

        # 인증은 이미 성공했으므로 이메일 문제로 요청을 막지 않고, 이메일 없이 계정을 만듭니다.
        email = (identity.email or '').strip().lower()
        if email and not re.match(EMAIL_PATTERN, email):
            logging.warning(f"Invalid email in token, stored without email (firebase_uid: {identity.subject_id})")
            email = ''
        if email:
            existing = self.user_store.find_by_email(email)
            if existing and existing.firebase_uid != identity.subject_id:
                logging.warning(
                    f"Email already registered to {existing.firebase_uid}, stored without email "
                    f"(firebase_uid: {identity.subject_id})"
                )
                email = ''

        new_user = User(
            firebase_uid=identity.subject_id,
            email=email,
            display_name=(identity.display_name or '').strip() or email.split('@')[0] or identity.subject_id,
            photo_url=identity.photo_url or '',
        )
        try:
            self.user_store.create(new_user)
        except Exception as e:
            # 동시에 들어온 첫 요청이 먼저 문서를 만든 경우에는 그 문서를 사용합니다.
            user = self.user_store.get(identity.subject_id)
            if user:
                return user
            logging.error(f"사용자 생성 실패 (firebase_uid: {identity.subject_id}): {e}", exc_info=True)
            raise
        logging.info(f"New user registered (firebase_uid: {identity.subject_id})")
        return new_user

    def get_profile(self, firebase_uid: str) -> User:
        user = self.user_store.get(firebase_uid)
        if not user:
            raise NotFound('User not found')
        return user

    def update_preferences(self, firebase_uid: str, preferences: Dict[str, Any]) -> User:
        if not preferences:
            raise ValidationError.for_field('preferences', 'No preferences provided')
        user = self.user_store.update_preferences(firebase_uid, preferences)
        if not user:
            raise NotFound('User not found')
        return user

    def record_usage(self, firebase_uid: str, stories_created: int = 0, images_generated: int = 0):
        """사용량 카운터를 원자적으로 증가시킵니다. 사용자 문서가 없으면 경고만 남깁니다."""
        if not self.user_store.increment_usage(firebase_uid, stories_created, images_generated):
            logging.warning(f"Usage not recorded, user document missing (firebase_uid: {firebase_uid})")
