# dreamstudio/models/story.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any

from dreamstudio.utils.datetime_utils import DateTimeUtils

# 소유자가 없는(익명) 스토리에 사용하는 예약 user_id
ANONYMOUS_USER_ID = "anonymous"


class ArtStyle(Enum):
    """스토리, 사용자 선호 설정, 이미지 생성에서 공통으로 쓰는 10가지 화풍."""
    REALISTIC = "realistic"
    CARTOON = "cartoon"
    WATERCOLOR = "watercolor"
    PIXAR = "pixar"
    ANIME = "anime"
    DIGITAL_ART = "digital-art"
    OIL_PAINTING = "oil-painting"
    PENCIL_SKETCH = "pencil-sketch"
    COMIC_BOOK = "comic-book"
    FANTASY = "fantasy"

    @classmethod
    def values(cls) -> List[str]:
        return [style.value for style in cls]


@dataclass
class Scene:
    """Story 문서 내부에 저장되는 장면. 단독으로 조회되지 않습니다."""
    text: str
    image_url: str
    order: float
    image_prompt: Optional[str] = None


@dataclass
class Story:
    """
    Firestore 'stories' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    scenes는 저장될 때마다 order 오름차순으로 다시 정렬됩니다.
    """
    story_id: str
    title: str
    user_id: str
    art_style: str
    scenes: List[Scene] = field(default_factory=list)
    is_public: bool = False
    tags: List[str] = field(default_factory=list)
    cover_image: str = ""
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def scene_count(self) -> int:
        return len(self.scenes)

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and self.user_id == user_id

    def can_be_read_by(self, user_id: Optional[str]) -> bool:
        return self.is_public or self.is_owned_by(user_id)

    def sort_scenes(self):
        self.scenes.sort(key=lambda scene: scene.order)

    def image_urls(self) -> List[str]:
        return [scene.image_url for scene in self.scenes]

    def to_dict(self) -> Dict[str, Any]:
        """저장용 딕셔너리. scene_count는 파생값이므로 저장하지 않습니다."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Story":
        """Firestore에서 받은 딕셔너리로부터 Story 인스턴스를 생성합니다."""
        processed_data = DateTimeUtils.from_firestore(dict(data))
        processed_data['scenes'] = [
            scene if isinstance(scene, Scene) else Scene(**scene)
            for scene in processed_data.get('scenes') or []
        ]
        if processed_data.get('tags') is None:
            processed_data['tags'] = []
        return cls(**processed_data)
