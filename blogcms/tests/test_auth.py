import base64
import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from jose import jwt

from blogcms import crud
from blogcms.auth import create_access_token, decode_token, SECRET, ALGORITHM


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(',', ':')).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode()


class TestRegistrationAndLogin:

    @pytest.mark.asyncio
    async def test_register_then_login_returns_token(self, client, store):
        r = await client.post('/api/register', json={'username': 'bob', 'password': 'bob123'})
        assert r.status_code == 201, r.text
        body = r.json()
        assert body['message'] == 'User registered successfully'

        login = await client.post('/api/login', json={'username': 'bob', 'password': 'bob123'})
        assert login.status_code == 200, login.text
        payload = decode_token(login.json()['token'])
        assert payload['username'] == 'bob'
        assert payload['id'] == body['id']

        user = await store.get_user_by_username('bob')
        assert user['password_hash'] != 'bob123'
        assert crud.pwd_ctx.verify('bob123', user['password_hash'])

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(self, client):
        await client.post('/api/register', json={'username': 'carol', 'password': 'right'})
        res = await client.post('/api/login', json={'username': 'carol', 'password': 'wrong'})
        assert res.status_code == 401
        assert res.json()['detail'] == 'Invalid username or password'

    @pytest.mark.asyncio
    async def test_unknown_user_skips_password_check(self, client, monkeypatch):
        ctx = MagicMock()
        monkeypatch.setattr(crud, 'pwd_ctx', ctx)
        res = await client.post('/api/login', json={'username': 'ghost', 'password': 'x'})
        assert res.status_code == 401
        ctx.verify.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_username_is_409(self, client):
        first = await client.post('/api/register', json={'username': 'dave', 'password': 'one'})
        assert first.status_code == 201
        second = await client.post('/api/register', json={'username': 'dave', 'password': 'two'})
        assert second.status_code == 409

        # first registration's password still works
        login = await client.post('/api/login', json={'username': 'dave', 'password': 'one'})
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_register_requires_fields(self, client):
        res = await client.post('/api/register', json={'username': 'erin'})
        assert res.status_code == 422
        res = await client.post('/api/register', json={'username': '', 'password': 'pw'})
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_register_store_failure_is_500(self, client, store, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError('db down')
        monkeypatch.setattr(store, 'create_user', boom)
        res = await client.post('/api/register', json={'username': 'frank', 'password': 'pw'})
        assert res.status_code == 500
        assert res.json()['detail'] == 'An error occurred while registering the user'


class TestTokenGate:

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self, client):
        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'})
        assert res.status_code == 401
        assert res.json()['detail'] == 'Missing token'

    @pytest.mark.asyncio
    async def test_tampered_token_is_403(self, client, token):
        header, payload, signature = token.split('.')
        claims = json.loads(base64.urlsafe_b64decode(payload + '=' * (-len(payload) % 4)))
        claims['username'] = 'mallory'
        forged = '.'.join([header, _b64(claims), signature])

        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'},
                                headers={'authorization': forged})
        assert res.status_code == 403
        assert res.json()['detail'] == 'Invalid token'

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, client, token):
        claims = decode_token(token)
        expired = create_access_token({'id': claims['id'], 'username': claims['username']},
                                      expires_delta=timedelta(seconds=-30))
        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'},
                                headers={'authorization': expired})
        assert res.status_code == 403

    @pytest.mark.asyncio
    async def test_foreign_key_token_is_403(self, client, token):
        claims = decode_token(token)
        other = jwt.encode({'id': claims['id'], 'username': claims['username']}, 'not-our-key', algorithm='HS256')
        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'},
                                headers={'authorization': other})
        assert res.status_code == 403

    @pytest.mark.asyncio
    async def test_bearer_prefix_is_not_stripped(self, client, token):
        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'},
                                headers={'authorization': f'Bearer {token}'})
        assert res.status_code == 403

    @pytest.mark.asyncio
    async def test_token_for_missing_user_is_401(self, client):
        orphan = create_access_token({'id': '0' * 24, 'username': 'nobody'})
        res = await client.post('/api/posts', json={'title': 't', 'content': 'c'},
                                headers={'authorization': orphan})
        assert res.status_code == 401


def test_decode_token_requires_identity_claims():
    token = jwt.encode({'username': 'alice'}, SECRET, algorithm=ALGORITHM)
    assert decode_token(token) is None


def test_decode_token_rejects_garbage():
    assert decode_token('not-a-jwt') is None


class TestRegistrationLimits:

    @pytest.mark.asyncio
    async def test_password_limit_counts_bytes(self, client):
        # 40 characters, 80 bytes in utf-8
        res = await client.post('/api/register', json={'username': 'gina', 'password': 'é' * 40})
        assert res.status_code == 422

    @pytest.mark.asyncio
    async def test_password_at_byte_limit_is_accepted(self, client):
        res = await client.post('/api/register', json={'username': 'hank', 'password': 'é' * 36})
        assert res.status_code == 201
        login = await client.post('/api/login', json={'username': 'hank', 'password': 'é' * 36})
        assert login.status_code == 200


@pytest.mark.asyncio
async def test_login_store_failure_is_500(client, store, monkeypatch):
    async def boom(*args, **kwargs):
        raise RuntimeError('db down')
    monkeypatch.setattr(store, 'get_user_by_username', boom)
    res = await client.post('/api/login', json={'username': 'ivan', 'password': 'pw'})
    assert res.status_code == 500
    assert res.json()['detail'] == 'An error occurred while logging in'
