# dreamstudio/stores/memory_store.py
"""
프로세스 메모리 기반 저장소. 테스트와 로컬 개발(STORE_BACKEND=memory)에 사용합니다.
모든 변경은 하나의 잠금 안에서 수행되어 문서 단위 원자성을 보장합니다.
"""

import copy
import threading
from typing import Any, Dict, List, Optional

from dreamstudio.models.story import Story
from dreamstudio.models.user import User
from dreamstudio.stores.base import StoryStore, UserStore, SortSpec
from dreamstudio.utils.datetime_utils import DateTimeUtils


def _matches(document: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in filters.items())


class MemoryStoryStore(StoryStore):

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert(self, story: Story) -> Story:
        with self._lock:
            self._documents[story.story_id] = copy.deepcopy(story.to_dict())
        return story

    def get(self, story_id: str) -> Optional[Story]:
        with self._lock:
            document = self._documents.get(story_id)
            return Story.from_dict(copy.deepcopy(document)) if document else None

    def replace(self, story: Story) -> Story:
        return self.insert(story)

    def delete(self, story_id: str) -> bool:
        with self._lock:
            return self._documents.pop(story_id, None) is not None

    def find(self, filters: Dict[str, Any], sort: SortSpec,
             skip: int = 0, limit: Optional[int] = None) -> List[Story]:
        field_name, descending = sort
        with self._lock:
            matched = [copy.deepcopy(doc) for doc in self._documents.values() if _matches(doc, filters)]
        matched.sort(key=lambda doc: doc.get(field_name), reverse=descending)
        end = None if limit is None else skip + limit
        return [Story.from_dict(doc) for doc in matched[skip:end]]

    def count(self, filters: Dict[str, Any]) -> int:
        with self._lock:
            return sum(1 for doc in self._documents.values() if _matches(doc, filters))


class MemoryUserStore(UserStore):

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, firebase_uid: str) -> Optional[User]:
        with self._lock:
            document = self._documents.get(firebase_uid)
            return User.from_dict(copy.deepcopy(document)) if document else None

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            for document in self._documents.values():
                if document.get('email') == email:
                    return User.from_dict(copy.deepcopy(document))
        return None

    def create(self, user: User) -> User:
        with self._lock:
            if user.firebase_uid in self._documents:
                raise ValueError(f"User document already exists: {user.firebase_uid}")
            self._documents[user.firebase_uid] = copy.deepcopy(user.to_dict())
        return user

    def increment_usage(self, firebase_uid: str, stories_created: int = 0,
                        images_generated: int = 0) -> bool:
        with self._lock:
            document = self._documents.get(firebase_uid)
            if document is None:
                return False
            usage = document['usage']
            usage['stories_created'] += stories_created
            usage['images_generated'] += images_generated
            usage['last_active'] = DateTimeUtils.now()
            return True

    def update_preferences(self, firebase_uid: str, preferences: Dict[str, Any]) -> Optional[User]:
        with self._lock:
            document = self._documents.get(firebase_uid)
            if document is None:
                return None
            document['preferences'].update(preferences)
            document['updated_at'] = DateTimeUtils.now()
            return User.from_dict(copy.deepcopy(document))
