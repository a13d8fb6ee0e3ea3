# dreamstudio/api/users/schemas.py
from marshmallow import Schema, fields, validate

from dreamstudio.models.story import ArtStyle
from dreamstudio.models.user import Theme
from dreamstudio.schemas.common import UtcDateTime


class PreferencesSchema(Schema):
    """사용자 선호 설정. 응답과 PATCH 요청(부분 업데이트)에 함께 사용합니다."""
    default_art_style = fields.Str(data_key="defaultArtStyle", validate=validate.OneOf(ArtStyle.values()))
    email_notifications = fields.Bool(data_key="emailNotifications")
    theme = fields.Str(validate=validate.OneOf([t.value for t in Theme]))


class UsageSchema(Schema):
    stories_created = fields.Int(data_key="storiesCreated")
    images_generated = fields.Int(data_key="imagesGenerated")
    last_active = UtcDateTime(data_key="lastActive")


class UserResponseSchema(Schema):
    """GET /api/users/me 응답 스키마."""
    firebase_uid = fields.Str(data_key="firebaseUid")
    email = fields.Email()
    display_name = fields.Str(data_key="displayName")
    full_name = fields.Str(data_key="fullName")
    photo_url = fields.Str(data_key="photoURL")
    preferences = fields.Nested(PreferencesSchema)
    usage = fields.Nested(UsageSchema)
    role = fields.Str()
    is_active = fields.Bool(data_key="isActive")
    created_at = UtcDateTime(data_key="createdAt")
    updated_at = UtcDateTime(data_key="updatedAt")
