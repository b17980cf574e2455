import base64
import json
import os
import time
from dataclasses import dataclass, field

# Settings must be in place before the application modules read the configuration
os.environ['CONFIG_FILE'] = 'test-config-not-present.ini'
os.environ['ENV'] = 'test'
os.environ['STORAGE_BACKEND'] = 'memory'
os.environ['ADMIN_EMAIL'] = 'owner@example.com'
os.environ['FIREBASE_PROJECT_ID'] = ''
os.environ['LOG_LEVEL'] = 'WARNING'

import pytest
from db.clients.array_storage_client import ArrayStorageClient
from db.shared_repositories import use_storage
from utils.identity_provider import (
    CUSTOM_TOKEN_AUDIENCE,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidUserDataError,
    TokenExpiredError,
    TokenTypeError,
    decode_unverified,
    get_identity_provider,
    set_identity_provider,
)

ADMIN_TOKEN = 'admin-token'
READER_TOKEN = 'reader-token'
OWNER_TOKEN = 'owner-token'
EXPIRED_TOKEN = 'expired-token'

def _segment(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode('utf-8')).decode('ascii').rstrip('=')

def make_unsigned_token(payload: dict) -> str:
    return f"{_segment({'alg': 'RS256', 'typ': 'JWT'})}.{_segment(payload)}.signature"

@dataclass
class FakeUser:
    uid: str
    email: str
    display_name: str | None = None
    disabled: bool = False
    custom_claims: dict | None = None
    password: str = 'correct-password'

@dataclass
class FakeIdentityProvider:
    """Stands in for Firebase Authentication: users and ID tokens are held in dictionaries."""
    available: bool = True
    users: dict = field(default_factory=dict)
    tokens: dict = field(default_factory=dict)

    def add_user(self, user: FakeUser, token: str | None = None, **token_claims) -> FakeUser:
        self.users[user.uid] = user
        if token:
            self.tokens[token] = {'uid': user.uid, 'email': user.email, **token_claims}
        return user

    def verify_token(self, token: str) -> dict:
        if token == EXPIRED_TOKEN:
            raise TokenExpiredError('Token expired')
        if token in self.tokens:
            return dict(self.tokens[token])
        payload = decode_unverified(token)
        if payload and payload.get('aud') == CUSTOM_TOKEN_AUDIENCE:
            raise TokenTypeError('verify_id_token() expects an ID token, but was given a custom token')
        raise InvalidTokenError('Could not verify token')

    def get_user(self, uid: str):
        return self.users.get(uid)

    def get_user_by_email(self, email: str):
        if '@' not in email:
            raise InvalidUserDataError('Malformed email address string')
        return next((user for user in self.users.values() if user.email == email), None)

    def create_user(self, email: str, password: str, display_name: str):
        if len(password) < 6:
            raise InvalidUserDataError('Password must be a string at least 6 characters long.')
        uid = f'uid-{len(self.users) + 1}'
        return self.add_user(FakeUser(uid=uid, email=email, display_name=display_name, password=password))

    def set_admin_claims(self, uid: str) -> None:
        self.users[uid].custom_claims = {'admin': True, 'role': 'admin', 'permissions': ['read', 'write', 'delete']}

    def update_user(self, uid: str, **properties):
        user = self.users[uid]
        for key, value in properties.items():
            setattr(user, key, value)
        return user

    def delete_user(self, uid: str) -> None:
        del self.users[uid]

    def create_custom_token(self, uid: str) -> str:
        return make_unsigned_token({
            'aud': CUSTOM_TOKEN_AUDIENCE,
            'uid': uid,
            'exp': int(time.time()) + 3600,
            'claims': {'admin': True, 'role': 'admin'}
        })

    def sign_in_with_password(self, email: str, password: str) -> None:
        user = self.get_user_by_email(email)
        if user is None or user.password != password:
            raise InvalidCredentialsError('INVALID_LOGIN_CREDENTIALS')

@pytest.fixture(autouse=True)
def memory_store():
    """Give every test an empty in-memory document store."""
    use_storage(lambda collection: ArrayStorageClient(collection=collection))
    yield

@pytest.fixture(autouse=True)
def identity_provider():
    """Replace Firebase Authentication with a fake holding an admin, the configured owner and a non-admin."""
    previous = get_identity_provider()
    provider = FakeIdentityProvider()
    provider.add_user(
        FakeUser(uid='admin-uid', email='admin@example.com', display_name='Admin', custom_claims={'admin': True, 'role': 'admin'}),
        ADMIN_TOKEN, admin=True, role='admin'
    )
    provider.add_user(FakeUser(uid='owner-uid', email='owner@example.com', display_name='Owner'), OWNER_TOKEN)
    provider.add_user(FakeUser(uid='reader-uid', email='reader@example.com', display_name='Reader'), READER_TOKEN)
    set_identity_provider(provider)
    yield provider
    set_identity_provider(previous)

@pytest.fixture
def admin_headers() -> dict:
    return {'Authorization': f'Bearer {ADMIN_TOKEN}'}
