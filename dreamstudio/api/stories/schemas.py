# dreamstudio/api/stories/schemas.py
from marshmallow import Schema, EXCLUDE, fields, validate, pre_load, post_load

from dreamstudio.models.story import ArtStyle
from dreamstudio.schemas.common import UtcDateTime

ART_STYLE_VALIDATOR = validate.OneOf(ArtStyle.values(), error="Invalid art style")


class TrimmedSchema(Schema):
    """
    문자열 필드의 앞뒤 공백을 제거한 뒤 검증하는 기반 스키마.
    조회 응답을 그대로 되돌려 보내는 경우(id, userId, sceneCount 등)를 위해 알 수 없는 필드는 무시합니다.
    """
    class Meta:
        unknown = EXCLUDE

    trimmed_fields = ()

    @pre_load
    def strip_strings(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in self.trimmed_fields:
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        if isinstance(data.get('tags'), list):
            data['tags'] = [tag.strip() if isinstance(tag, str) else tag for tag in data['tags']]
        return data


# --- 요청 스키마 ---

class SceneSchema(TrimmedSchema):
    """스토리에 포함되는 장면 하나의 유효성을 검사합니다."""
    trimmed_fields = ('text', 'imagePrompt')

    text = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=1000, error="Scene text must be between 1 and 1000 characters"),
        error_messages={"required": "Scene text is required"}
    )
    image_url = fields.Str(
        data_key="imageUrl", required=True,
        validate=validate.Length(min=1, error="Scene image URL is required"),
        error_messages={"required": "Scene image URL is required"}
    )
    image_prompt = fields.Str(data_key="imagePrompt", allow_none=True)
    order = fields.Float(
        required=True,
        error_messages={"required": "Scene order is required", "invalid": "Scene order must be a number"}
    )

    @post_load
    def normalize_order(self, data, **kwargs):
        if float(data['order']).is_integer():
            data['order'] = int(data['order'])
        return data


class StoryCreateSchema(TrimmedSchema):
    """POST /api/stories 요청 본문의 유효성을 검사합니다."""
    trimmed_fields = ('title', 'coverImage')

    title = fields.Str(
        required=True,
        validate=validate.Length(min=1, max=100, error="Title must be between 1 and 100 characters"),
        error_messages={"required": "Title is required"}
    )
    art_style = fields.Str(
        data_key="artStyle", required=True, validate=ART_STYLE_VALIDATOR,
        error_messages={"required": "Art style is required"}
    )
    scenes = fields.List(
        fields.Nested(SceneSchema), required=True,
        error_messages={"required": "Scenes must be an array", "invalid": "Scenes must be an array"}
    )
    is_public = fields.Bool(data_key="isPublic", load_default=False)
    tags = fields.List(fields.Str(validate=validate.Length(min=1)), load_default=list)
    cover_image = fields.Str(data_key="coverImage")


class StoryUpdateSchema(TrimmedSchema):
    """PUT /api/stories/<id> 부분 업데이트 요청 스키마. 전달된 필드만 교체합니다."""
    trimmed_fields = ('title', 'coverImage')

    title = fields.Str(validate=validate.Length(min=1, max=100, error="Title must be between 1 and 100 characters"))
    art_style = fields.Str(data_key="artStyle", validate=ART_STYLE_VALIDATOR)
    scenes = fields.List(fields.Nested(SceneSchema), error_messages={"invalid": "Scenes must be an array"})
    is_public = fields.Bool(data_key="isPublic")
    tags = fields.List(fields.Str(validate=validate.Length(min=1)))
    cover_image = fields.Str(data_key="coverImage")


class QuerySchema(Schema):
    """쿼리 파라미터용 기반 스키마. 알 수 없는 파라미터와 빈 값은 무시합니다."""
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def drop_empty(self, data, **kwargs):
        return {key: value for key, value in data.items() if value not in (None, '')}


class StoryListQuerySchema(QuerySchema):
    """GET /api/stories 쿼리 파라미터."""
    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))
    sort = fields.Str(load_default='-createdAt')
    style = fields.Str(validate=ART_STYLE_VALIDATOR)


class PublicStoryQuerySchema(QuerySchema):
    """GET /api/stories/public/featured 쿼리 파라미터."""
    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=10, validate=validate.Range(min=1, max=100))


class GenerateImagesSchema(Schema):
    """POST /api/stories/<id>/generate-images 요청 스키마."""
    art_style = fields.Str(data_key="artStyle", validate=ART_STYLE_VALIDATOR)


# --- 응답 스키마 ---

class SceneResponseSchema(Schema):
    text = fields.Str()
    image_url = fields.Str(data_key="imageUrl")
    image_prompt = fields.Str(data_key="imagePrompt", allow_none=True)
    order = fields.Raw()


class StoryResponseSchema(Schema):
    """스토리 응답을 위한 최종 JSON 형식을 정의합니다."""
    story_id = fields.Str(data_key="id")
    title = fields.Str()
    user_id = fields.Str(data_key="userId")
    art_style = fields.Str(data_key="artStyle")
    scenes = fields.List(fields.Nested(SceneResponseSchema))
    scene_count = fields.Int(data_key="sceneCount")
    is_public = fields.Bool(data_key="isPublic")
    tags = fields.List(fields.Str())
    cover_image = fields.Str(data_key="coverImage")
    created_at = UtcDateTime(data_key="createdAt")
    updated_at = UtcDateTime(data_key="updatedAt")
