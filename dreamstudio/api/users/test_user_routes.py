# dreamstudio/api/users/test_user_routes.py
"""
사용자 find-or-create, 프로필 조회, 선호 설정 수정 테스트.
"""

import pytest

from dreamstudio.api.users.services import UserService
from dreamstudio.conftest import bearer
from dreamstudio.core.exceptions import NotFound
from dreamstudio.core.security import CallerIdentity
from dreamstudio.stores.memory_store import MemoryUserStore


def test_first_authentication_creates_user(firebase_client):
    response = firebase_client.get('/api/users/me', headers=bearer('token-a'))
    data = response.get_json()['data']

    assert response.status_code == 200
    assert data['firebaseUid'] == 'user-a'
    assert data['email'] == 'alice@example.com'
    assert data['displayName'] == 'Alice'
    assert data['fullName'] == 'Alice'
    assert data['photoURL'] == ''
    assert data['role'] == 'user'
    assert data['isActive'] is True
    assert data['preferences'] == {'defaultArtStyle': 'realistic', 'emailNotifications': True, 'theme': 'system'}
    assert data['usage']['storiesCreated'] == 0
    assert data['usage']['imagesGenerated'] == 0


def test_display_name_falls_back_to_email_local_part(firebase_client):
    data = firebase_client.get('/api/users/me', headers=bearer('token-b')).get_json()['data']
    assert data['displayName'] == 'bob'


def test_long_top_level_domain_email_is_accepted(firebase_client):
    response = firebase_client.get('/api/stories', headers=bearer('token-info'))
    assert response.status_code == 200

    data = firebase_client.get('/api/users/me', headers=bearer('token-info')).get_json()['data']
    assert data['email'] == 'carol@company.info'
    assert data['displayName'] == 'carol'


def test_caller_without_email_is_admitted(firebase_client):
    """전화번호로 로그인해 이메일 클레임이 없는 토큰도 계정이 생성되어야 합니다."""
    response = firebase_client.get('/api/stories', headers=bearer('token-phone'))
    assert response.status_code == 200

    data = firebase_client.get('/api/users/me', headers=bearer('token-phone')).get_json()['data']
    assert data['firebaseUid'] == 'user-d'
    assert data['email'] == ''
    assert data['displayName'] == 'user-d'


def test_email_registered_to_another_account_is_not_stored_twice(firebase_client):
    firebase_client.get('/api/users/me', headers=bearer('token-a'))

    response = firebase_client.get('/api/users/me', headers=bearer('token-reused-email'))
    data = response.get_json()['data']

    assert response.status_code == 200
    assert data['firebaseUid'] == 'user-e'
    assert data['email'] == ''


def test_user_timestamps_are_utc_iso_strings(client):
    data = client.get('/api/users/me').get_json()['data']
    assert data['createdAt'].endswith('Z')
    assert data['updatedAt'].endswith('Z')
    assert data['usage']['lastActive'].endswith('Z')


def test_guest_mode_uses_fixed_identity(client):
    data = client.get('/api/users/me').get_json()['data']
    assert data['firebaseUid'] == 'guest-user'
    assert data['email'] == 'guest@example.com'
    assert data['displayName'] == 'Guest User'


def test_update_preferences(client):
    response = client.patch('/api/users/me/preferences', json={'theme': 'dark', 'defaultArtStyle': 'anime'})
    preferences = response.get_json()['data']['preferences']

    assert response.status_code == 200
    assert preferences == {'defaultArtStyle': 'anime', 'emailNotifications': True, 'theme': 'dark'}


def test_update_preferences_validation(client):
    assert client.patch('/api/users/me/preferences', json={'theme': 'neon'}).status_code == 400
    assert client.patch('/api/users/me/preferences', json={'defaultArtStyle': 'crayon'}).status_code == 400
    assert client.patch('/api/users/me/preferences', json={}).status_code == 400


def test_update_preferences_validation_lists_field_errors(client):
    response = client.patch('/api/users/me/preferences', json={'theme': 'neon', 'emailNotifications': 'maybe'})
    error = response.get_json()['error']
    fields = {entry['field'] for entry in error['errors']}

    assert response.status_code == 400
    assert error['status'] == 400
    assert {'theme', 'emailNotifications'} <= fields


def test_update_preferences_rejects_non_object_body(client):
    response = client.patch('/api/users/me/preferences', json=['dark'])
    assert response.status_code == 400
    assert response.get_json()['error']['errors']


# --- UserService ---

@pytest.fixture
def users():
    return UserService(MemoryUserStore())


def test_find_or_create_is_idempotent(users):
    identity = CallerIdentity(subject_id='uid-1', email='Carol@Example.COM', display_name='Carol')
    first = users.find_or_create(identity)
    second = users.find_or_create(identity)

    assert first.email == 'carol@example.com'
    assert second.created_at == first.created_at


def test_find_or_create_keeps_caller_with_unusable_email(users):
    invalid = users.find_or_create(CallerIdentity(subject_id='uid-1', email='not-an-email'))
    assert invalid.email == ''
    assert invalid.display_name == 'uid-1'

    users.find_or_create(CallerIdentity(subject_id='uid-2', email='dave@example.com'))
    taken = users.find_or_create(CallerIdentity(subject_id='uid-3', email='dave@example.com', display_name='Dave'))
    assert taken.email == ''
    assert taken.display_name == 'Dave'
    assert users.get_profile('uid-2').email == 'dave@example.com'


def test_long_top_level_domain_is_a_valid_email(users):
    user = users.find_or_create(CallerIdentity(subject_id='uid-1', email='erin@studio.design'))
    assert user.email == 'erin@studio.design'


def test_record_usage_for_missing_user_is_skipped(users):
    users.record_usage('ghost', stories_created=1)
    with pytest.raises(NotFound):
        users.get_profile('ghost')
