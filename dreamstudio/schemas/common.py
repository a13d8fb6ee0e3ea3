# dreamstudio/schemas/common.py
from marshmallow import fields

from dreamstudio.utils import DateTimeUtils


class UtcDateTime(fields.DateTime):
    """응답 시각을 UTC ISO 문자열('Z' 접미사)로 직렬화하는 필드."""

    def _serialize(self, value, attr, obj, **kwargs):
        if value is None:
            return None
        return DateTimeUtils.to_iso_string(value)
