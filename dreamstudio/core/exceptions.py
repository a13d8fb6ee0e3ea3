# dreamstudio/core/exceptions.py
"""
API 예외 계층과 중앙 에러 핸들러.

모든 라우트는 실패 시 ApiError 하위 클래스를 raise 하고,
register_error_handlers 에서 등록한 핸들러가 공통 에러 봉투
{"error": {"message", "status"}} 로 변환합니다.
"""

import logging
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """모든 API 오류의 기본 클래스."""
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": {"message": self.message, "status": self.status_code}}


class ValidationError(ApiError):
    """입력값이 형식에 맞지 않거나 허용 범위를 벗어난 경우 (400)."""
    status_code = 400
    default_message = "Validation Error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": message}])

    @classmethod
    def from_schema_error(cls, err: SchemaValidationError) -> "ValidationError":
        return cls(errors=flatten_messages(err.messages))

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["error"]["errors"] = self.errors
        return payload


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not Found"


class UpstreamQuotaExceeded(ApiError):
    status_code = 402
    default_message = "API usage limit reached. Please check your subscription."


class UpstreamRateLimited(ApiError):
    status_code = 429
    default_message = "API rate limit exceeded. Please try again later."


class Internal(ApiError):
    status_code = 500
    default_message = "Internal Server Error"


def flatten_messages(messages: Any, prefix: str = "") -> List[Dict[str, str]]:
    """
    marshmallow의 중첩 에러 딕셔너리를 [{field, message}] 목록으로 펼칩니다.
    리스트 필드의 인덱스는 'scenes.0.text' 처럼 점 표기법으로 이어 붙입니다.
    """
    errors = []
    if isinstance(messages, dict):
        for key, value in messages.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            errors.extend(flatten_messages(value, field))
    elif isinstance(messages, list):
        for item in messages:
            if isinstance(item, (dict, list)):
                errors.extend(flatten_messages(item, prefix))
            else:
                errors.append({"field": prefix or "_schema", "message": str(item)})
    else:
        errors.append({"field": prefix or "_schema", "message": str(messages)})
    return errors


def load_schema(schema, data: Any) -> Dict[str, Any]:
    """marshmallow 스키마로 입력을 검증하고, 실패하면 필드별 목록을 담은 ValidationError를 raise 합니다."""
    if data is None:
        data = {}
    try:
        return schema.load(data)
    except SchemaValidationError as err:
        raise ValidationError.from_schema_error(err) from err


def register_error_handlers(app: Flask):
    """앱 전역 에러 핸들러를 등록합니다. create_app에서 한 번만 호출됩니다."""

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logging.error(f"API error {err.status_code}: {err.message}", exc_info=err.__cause__ is not None)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SchemaValidationError)
    def handle_marshmallow_validation(err: SchemaValidationError):
        return handle_api_error(ValidationError.from_schema_error(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        response = {"error": {"message": err.name, "status": err.code}}
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err: Exception):
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        return jsonify(Internal().to_dict()), 500
