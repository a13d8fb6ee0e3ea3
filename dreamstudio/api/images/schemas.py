# dreamstudio/api/images/schemas.py
from marshmallow import Schema, fields, validate, pre_load

from dreamstudio.models.story import ArtStyle


class ImageGenerateSchema(Schema):
    """POST /api/images/generate 요청 본문의 유효성을 검사합니다."""
    prompt = fields.Str(
        required=True,
        validate=validate.Length(min=3, max=1000, error="Prompt must be between 3 and 1000 characters"),
        error_messages={"required": "Prompt is required", "null": "Prompt is required"}
    )
    art_style = fields.Str(
        data_key="artStyle", required=True,
        validate=validate.OneOf(ArtStyle.values(), error="Invalid art style"),
        error_messages={"required": "Art style is required", "null": "Art style is required"}
    )
    negative_prompt = fields.Str(data_key="negativePrompt", allow_none=True, load_default=None)
    seed = fields.Int(allow_none=True, load_default=None, validate=validate.Range(min=0))

    @pre_load
    def strip_prompt(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('prompt'), str):
            data = dict(data)
            data['prompt'] = data['prompt'].strip()
        return data


class ImageParamsSchema(Schema):
    width = fields.Int()
    height = fields.Int()
    steps = fields.Int()
    seed = fields.Int()


class GeneratedImageResponseSchema(Schema):
    image_url = fields.Str(data_key="imageUrl")
    prompt = fields.Str()
    art_style = fields.Str(data_key="artStyle")
    params = fields.Nested(ImageParamsSchema)


class UploadedImageResponseSchema(Schema):
    image_url = fields.Str(data_key="imageUrl")
    filename = fields.Str()
    mimetype = fields.Str()
    size = fields.Int()
