# dreamstudio/stores/firestore_store.py
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore
from google.api_core.exceptions import NotFound as DocumentNotFound

from dreamstudio.models.story import Story
from dreamstudio.models.user import User
from dreamstudio.services.firestore_service import FirestoreService
from dreamstudio.stores.base import StoryStore, UserStore, SortSpec
from dreamstudio.utils.datetime_utils import DateTimeUtils


class FirestoreStoryStore(StoryStore):
    """Firestore 'stories' 컬렉션 구현. 문서 ID는 story_id와 같습니다."""

    def __init__(self, firestore_service: FirestoreService):
        self.stories_ref = firestore_service.collection('stories')

    def _query(self, filters: Dict[str, Any]):
        query = self.stories_ref
        for field_name, value in filters.items():
            query = query.where(field_name, '==', value)
        return query

    def insert(self, story: Story) -> Story:
        self.stories_ref.document(story.story_id).set(DateTimeUtils.for_firestore(story.to_dict()))
        logging.info(f"Story stored (story_id: {story.story_id}, user_id: {story.user_id})")
        return story

    def get(self, story_id: str) -> Optional[Story]:
        doc = self.stories_ref.document(story_id).get()
        if not doc.exists:
            return None
        return Story.from_dict(doc.to_dict())

    def replace(self, story: Story) -> Story:
        self.stories_ref.document(story.story_id).set(DateTimeUtils.for_firestore(story.to_dict()))
        return story

    def delete(self, story_id: str) -> bool:
        doc_ref = self.stories_ref.document(story_id)
        if not doc_ref.get().exists:
            return False
        doc_ref.delete()
        return True

    def find(self, filters: Dict[str, Any], sort: SortSpec,
             skip: int = 0, limit: Optional[int] = None) -> List[Story]:
        field_name, descending = sort
        direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
        query = self._query(filters).order_by(field_name, direction=direction)
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [Story.from_dict(doc.to_dict()) for doc in query.stream()]

    def count(self, filters: Dict[str, Any]) -> int:
        # count()는 문서를 모두 가져오지 않고 개수만 집계합니다.
        count_result = self._query(filters).count().get()
        return count_result[0][0].value


class FirestoreUserStore(UserStore):
    """Firestore 'users' 컬렉션 구현. 문서 ID는 firebase_uid 입니다."""

    def __init__(self, firestore_service: FirestoreService):
        self.users_ref = firestore_service.collection('users')

    def get(self, firebase_uid: str) -> Optional[User]:
        doc = self.users_ref.document(firebase_uid).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.to_dict())

    def find_by_email(self, email: str) -> Optional[User]:
        query = self.users_ref.where('email', '==', email).limit(1).stream()
        user_doc = next(query, None)
        return User.from_dict(user_doc.to_dict()) if user_doc else None

    def create(self, user: User) -> User:
        # create()는 같은 ID의 문서가 이미 있으면 실패하므로 uid 중복 생성을 막습니다.
        self.users_ref.document(user.firebase_uid).create(DateTimeUtils.for_firestore(user.to_dict()))
        logging.info(f"User document created (firebase_uid: {user.firebase_uid})")
        return user

    def increment_usage(self, firebase_uid: str, stories_created: int = 0,
                        images_generated: int = 0) -> bool:
        update_data = {'usage.last_active': DateTimeUtils.now()}
        if stories_created:
            update_data['usage.stories_created'] = firestore.Increment(stories_created)
        if images_generated:
            update_data['usage.images_generated'] = firestore.Increment(images_generated)
        try:
            self.users_ref.document(firebase_uid).update(update_data)
            return True
        except DocumentNotFound:
            return False

    def update_preferences(self, firebase_uid: str, preferences: Dict[str, Any]) -> Optional[User]:
        user_ref = self.users_ref.document(firebase_uid)
        update_data = {f'preferences.{key}': value for key, value in preferences.items()}
        update_data['updated_at'] = DateTimeUtils.now()
        try:
            user_ref.update(update_data)
        except DocumentNotFound:
            return None
        return User.from_dict(user_ref.get().to_dict())
