import re

import pytest

from conftest import PASSWORD, login
from extensions import db, mail
from models import User


def reset_token(message):
    return re.search(r'/reset-password/(\S+)', message.body).group(1)


class TestLogin:
    def test_login_page(self, client):
        response = client.get('/login')
        assert response.status_code == 200
        assert b'password' in response.data

    def test_json_login(self, app, client, users):
        response = login(client, 'Editor@School.test')
        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['user']['role'] == 'editor'
        assert 'password_hash' not in body['user']
        with app.app_context():
            assert db.session.get(User, users['editor']).login_count == 1

    def test_wrong_password(self, client, users):
        response = login(client, 'editor@school.test', 'wrong-password')
        assert response.status_code == 401
        assert response.get_json() == {'success': False, 'message': 'Invalid email or password.'}
        assert client.get('/api/me').status_code == 401

    def test_missing_fields(self, client, users):
        assert client.post('/login', json={'email': 'editor@school.test'}).status_code == 400

    @pytest.mark.parametrize('payload', [
        {'email': 123, 'password': PASSWORD},
        {'email': 'editor@school.test', 'password': ['password123']},
        {'email': 'editor@school.test', 'password': PASSWORD, 'remember': 'maybe'},
    ])
    def test_non_text_credentials(self, client, users, payload):
        response = client.post('/login', json=payload)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    @pytest.mark.parametrize('flag, remembered', [('false', False), ('off', False), ('1', True), ('on', True)])
    def test_remember_flag(self, client, users, flag, remembered):
        client.post('/login', data={'email': 'viewer@school.test', 'password': PASSWORD, 'remember': flag})
        assert (client.get_cookie('remember_token') is not None) is remembered

    def test_form_login_redirects(self, client, users):
        response = client.post('/login', data={'email': 'viewer@school.test', 'password': PASSWORD})
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/dashboard')

    def test_form_login_follows_local_next(self, client, users):
        response = client.post(
            '/login?next=/week/2025-03-05', data={'email': 'viewer@school.test', 'password': PASSWORD}
        )
        assert response.headers['Location'].endswith('/week/2025-03-05')

    def test_form_login_ignores_external_next(self, client, users):
        response = client.post(
            '/login?next=//evil.example/', data={'email': 'viewer@school.test', 'password': PASSWORD}
        )
        assert response.headers['Location'].endswith('/dashboard')

    def test_pages_require_login(self, client, users):
        response = client.get('/')
        assert response.status_code == 302
        assert '/login' in response.headers['Location']


class TestSession:
    def test_me(self, viewer_client):
        body = viewer_client.get('/api/me').get_json()
        assert body['user']['email'] == 'viewer@school.test'
        assert body['user']['display_name'] == 'Viewer User'

    def test_dashboard_lands_on_calendar(self, viewer_client):
        response = viewer_client.get('/dashboard')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/')

    def test_logout(self, viewer_client):
        assert viewer_client.get('/logout').status_code == 302
        assert viewer_client.get('/api/me').status_code == 401


class TestPasswordReset:
    def test_unknown_email_gets_the_same_answer(self, client, users):
        with mail.record_messages() as outbox:
            response = client.post('/forgot-password', json={'email': 'nobody@school.test'})
        assert response.status_code == 200
        assert response.get_json()['success'] is True
        assert outbox == []

    def test_email_required(self, client):
        assert client.post('/forgot-password', json={}).status_code == 400

    def test_full_reset(self, app, client, users):
        with mail.record_messages() as outbox:
            client.post('/forgot-password', json={'email': 'editor@school.test'})
        assert len(outbox) == 1
        assert outbox[0].recipients == ['editor@school.test']
        token = reset_token(outbox[0])

        assert client.get(f'/reset-password/{token}').status_code == 200

        mismatch = client.post(
            f'/reset-password/{token}', json={'new_password': 'new-secret-1', 'confirm_password': 'new-secret-2'}
        )
        assert mismatch.status_code == 400
        assert mismatch.get_json()['message'] == 'Passwords do not match.'

        too_short = client.post(f'/reset-password/{token}', json={'new_password': 'short', 'confirm_password': 'short'})
        assert too_short.status_code == 400

        response = client.post(
            f'/reset-password/{token}', json={'new_password': 'new-secret-1', 'confirm_password': 'new-secret-1'}
        )
        assert response.status_code == 200
        assert login(client, 'editor@school.test', 'new-secret-1').status_code == 200
        with app.app_context():
            user = db.session.get(User, users['editor'])
            assert user.is_temporary_password is False
            assert user.password_changed_at is not None

    def test_token_works_only_once(self, client, users):
        with mail.record_messages() as outbox:
            client.post('/forgot-password', json={'email': 'editor@school.test'})
        token = reset_token(outbox[0])
        payload = {'new_password': 'new-secret-1', 'confirm_password': 'new-secret-1'}
        assert client.post(f'/reset-password/{token}', json=payload).status_code == 200
        assert client.post(f'/reset-password/{token}', json=payload).status_code == 400

    def test_expired_token(self, app, client, users):
        with mail.record_messages() as outbox:
            client.post('/forgot-password', json={'email': 'editor@school.test'})
        app.config['PASSWORD_RESET_MAX_AGE'] = -1
        token = reset_token(outbox[0])
        response = client.post(
            f'/reset-password/{token}', json={'new_password': 'new-secret-1', 'confirm_password': 'new-secret-1'}
        )
        assert response.status_code == 400

    def test_tampered_token_redirects_page_requests(self, client, users):
        response = client.get('/reset-password/not-a-token')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/forgot-password')
