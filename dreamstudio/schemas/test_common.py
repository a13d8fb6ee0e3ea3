# dreamstudio/schemas/test_common.py
"""
응답 공통 필드 테스트.
"""

from datetime import datetime, timezone, timedelta

from marshmallow import Schema

from dreamstudio.schemas.common import UtcDateTime


class StampSchema(Schema):
    stamp = UtcDateTime(data_key="stampedAt")


def test_naive_datetime_is_treated_as_utc():
    data = StampSchema().dump({'stamp': datetime(2024, 1, 15, 10, 30)})
    assert data == {'stampedAt': '2024-01-15T10:30:00Z'}


def test_aware_datetime_is_converted_to_utc():
    kst = timezone(timedelta(hours=9))
    data = StampSchema().dump({'stamp': datetime(2024, 1, 15, 19, 30, tzinfo=kst)})
    assert data['stampedAt'] == '2024-01-15T10:30:00Z'


def test_none_is_dumped_as_none():
    assert StampSchema().dump({'stamp': None}) == {'stampedAt': None}
