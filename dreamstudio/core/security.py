# dreamstudio/core/security.py
"""
인증 게이트.

Authenticator 인터페이스에는 두 가지 구현이 있으며, 앱 시작 시 AUTH_MODE 설정으로
둘 중 하나만 선택됩니다.
- FirebaseAuthenticator: Authorization 헤더의 Firebase ID 토큰을 검증합니다.
- GuestAuthenticator: 자격 증명을 확인하지 않고 항상 고정된 게스트 사용자를 주입합니다.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from firebase_admin import auth as firebase_auth
from flask import Flask, Request, request, g, current_app

from dreamstudio.core.exceptions import Unauthorized


@dataclass(frozen=True)
class CallerIdentity:
    """인증 게이트가 요청마다 확인한 호출자 정보."""
    subject_id: str
    email: Optional[str] = None
    email_verified: bool = False
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


class Authenticator(ABC):

    @abstractmethod
    def authenticate(self, req: Request) -> CallerIdentity:
        """요청의 자격 증명을 확인합니다. 실패하면 Unauthorized를 raise 합니다."""


def extract_bearer_token(req: Request) -> str:
    auth_header = req.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise Unauthorized("Authorization header is missing or invalid")

    token = auth_header[len("Bearer "):].strip()
    if not token:
        raise Unauthorized("Authorization header is missing or invalid")
    return token


class FirebaseAuthenticator(Authenticator):
    """Firebase Authentication이 발급한 ID 토큰을 검증합니다."""

    def authenticate(self, req: Request) -> CallerIdentity:
        token = extract_bearer_token(req)
        try:
            decoded = firebase_auth.verify_id_token(token)
        except firebase_auth.ExpiredIdTokenError:
            raise Unauthorized("Token has expired")
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError,
                firebase_auth.CertificateFetchError, ValueError) as e:
            logging.warning(f"Firebase ID token verification failed: {e}")
            raise Unauthorized("Invalid token")

        return CallerIdentity(
            subject_id=decoded['uid'],
            email=decoded.get('email'),
            email_verified=decoded.get('email_verified', False),
            display_name=decoded.get('name'),
            photo_url=decoded.get('picture'),
        )


GUEST_IDENTITY = CallerIdentity(
    subject_id='guest-user',
    email='guest@example.com',
    email_verified=True,
    display_name='Guest User',
    photo_url=None,
)


class GuestAuthenticator(Authenticator):
    """자격 증명 확인 없이 항상 고정된 게스트 사용자를 반환합니다."""

    def authenticate(self, req: Request) -> CallerIdentity:
        return GUEST_IDENTITY


def create_authenticator(app: Flask) -> Authenticator:
    authenticator_map = {
        'firebase': FirebaseAuthenticator,
        'guest': GuestAuthenticator,
    }
    mode = app.config.get('AUTH_MODE', 'firebase')
    authenticator_cls = authenticator_map.get(mode)
    if not authenticator_cls:
        raise ValueError(f"'{mode}'은(는) 유효한 AUTH_MODE 값이 아닙니다.")

    logging.info(f"Authentication gate: {authenticator_cls.__name__}")
    return authenticator_cls()


def auth_required(f):
    """
    요청 호출자를 인증하고 g.user 에 CallerIdentity를 설정한 뒤 뷰를 실행합니다.
    첫 인증 시 사용자 문서가 없으면 생성합니다(find-or-create).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = current_app.services['authenticator'].authenticate(request)
        g.user = identity
        g.account = current_app.services['users'].find_or_create(identity)
        return f(*args, **kwargs)

    return decorated_function
