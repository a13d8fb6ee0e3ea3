# dreamstudio/stores/base.py
"""
문서 저장소 인터페이스.
서비스 계층은 이 인터페이스만 알고, 실제 구현(Firestore / 메모리)은 create_app에서 주입됩니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from dreamstudio.models.story import Story
from dreamstudio.models.user import User

# (필드명, 내림차순 여부)
SortSpec = Tuple[str, bool]


class StoryStore(ABC):
    """'stories' 컬렉션. 필터(동등 비교)/정렬/페이지네이션 조회를 책임집니다."""

    @abstractmethod
    def insert(self, story: Story) -> Story: ...

    @abstractmethod
    def get(self, story_id: str) -> Optional[Story]: ...

    @abstractmethod
    def replace(self, story: Story) -> Story: ...

    @abstractmethod
    def delete(self, story_id: str) -> bool: ...

    @abstractmethod
    def find(self, filters: Dict[str, Any], sort: SortSpec,
             skip: int = 0, limit: Optional[int] = None) -> List[Story]: ...

    @abstractmethod
    def count(self, filters: Dict[str, Any]) -> int: ...


class UserStore(ABC):
    """'users' 컬렉션. 문서 ID는 firebase_uid 입니다."""

    @abstractmethod
    def get(self, firebase_uid: str) -> Optional[User]: ...

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def create(self, user: User) -> User: ...

    @abstractmethod
    def increment_usage(self, firebase_uid: str, stories_created: int = 0,
                        images_generated: int = 0) -> bool:
        """사용량 카운터를 원자적으로 증가시키고 last_active를 갱신합니다. 문서가 없으면 False."""

    @abstractmethod
    def update_preferences(self, firebase_uid: str, preferences: Dict[str, Any]) -> Optional[User]: ...
