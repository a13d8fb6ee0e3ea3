# dreamstudio/models/user.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, Any

from dreamstudio.models.story import ArtStyle
from dreamstudio.utils.datetime_utils import DateTimeUtils

EMAIL_PATTERN = r'^\w+([\.-]?\w+)*@\w+([\.-]?\w+)*(\.\w{2,})+$'


class Theme(Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class UserPreferences:
    default_art_style: str = ArtStyle.REALISTIC.value
    email_notifications: bool = True
    theme: str = Theme.SYSTEM.value


@dataclass
class UserUsage:
    stories_created: int = 0
    images_generated: int = 0
    last_active: datetime = field(default_factory=DateTimeUtils.now)


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    문서 ID는 Firebase Authentication의 uid(firebase_uid)와 같습니다.
    """
    firebase_uid: str
    email: str
    display_name: str
    photo_url: str = ""
    preferences: UserPreferences = field(default_factory=UserPreferences)
    usage: UserUsage = field(default_factory=UserUsage)
    role: str = UserRole.USER.value
    is_active: bool = True
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @property
    def full_name(self) -> str:
        return self.display_name or self.email.split('@')[0]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        processed_data = DateTimeUtils.from_firestore(dict(data))
        processed_data['preferences'] = UserPreferences(**(processed_data.get('preferences') or {}))
        processed_data['usage'] = UserUsage(**(processed_data.get('usage') or {}))
        return cls(**processed_data)
