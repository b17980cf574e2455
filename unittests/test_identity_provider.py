import unittest
from unittest.mock import MagicMock, patch
import requests
from firebase_admin import auth, exceptions
from conftest import make_unsigned_token
from config import FirebaseConfig
from utils.identity_provider import (
    CUSTOM_TOKEN_AUDIENCE,
    IdentityProvider,
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidUserDataError,
    ProviderUnavailableError,
    TokenExpiredError,
    TokenTypeError,
)

def firebase_config(**overrides) -> FirebaseConfig:
    values = {
        'project_id': 'your-project-id',
        'private_key_id': '',
        'private_key': '',
        'client_email': '',
        'client_id': '',
        'auth_uri': '',
        'token_uri': '',
        'auth_provider_x509_cert_url': '',
        'client_x509_cert_url': '',
        'web_api_key': 'your-web-api-key',
    }
    values.update(overrides)
    return FirebaseConfig(**values)

def http_response(status: int, body: dict | None = None) -> MagicMock:
    result = MagicMock()
    result.status_code = status
    result.json.return_value = body or {}
    return result

class ConfigurationTestCase(unittest.TestCase):
    def test_placeholder_config_is_unavailable(self):
        config = firebase_config()
        self.assertFalse(config.is_configured)
        self.assertIsNone(config.sign_in_api_key)
        provider = IdentityProvider.from_config(config)
        self.assertFalse(provider.available)
        with self.assertRaises(ProviderUnavailableError):
            provider.get_user('u1')

    def test_real_values_are_configured(self):
        config = firebase_config(project_id='shop', private_key='key', client_email='sa@shop.iam.gserviceaccount.com', web_api_key='AIza123')
        self.assertTrue(config.is_configured)
        self.assertEqual(config.sign_in_api_key, 'AIza123')

class VerifyTokenTestCase(unittest.TestCase):
    def setUp(self):
        self.provider = IdentityProvider(MagicMock(), 'AIza123')

    @patch('utils.identity_provider.auth.verify_id_token')
    def test_errors_are_mapped(self, verify_id_token):
        verify_id_token.side_effect = auth.ExpiredIdTokenError('expired', None)
        with self.assertRaises(TokenExpiredError):
            self.provider.verify_token('token')
        verify_id_token.side_effect = auth.InvalidIdTokenError('bad')
        with self.assertRaises(InvalidTokenError):
            self.provider.verify_token('token')
        verify_id_token.side_effect = auth.CertificateFetchError('no certs', None)
        with self.assertRaises(ProviderUnavailableError):
            self.provider.verify_token('token')

    @patch('utils.identity_provider.auth.verify_id_token')
    def test_custom_token_is_detected(self, verify_id_token):
        verify_id_token.side_effect = auth.InvalidIdTokenError('wrong audience')
        custom_token = make_unsigned_token({'aud': CUSTOM_TOKEN_AUDIENCE, 'uid': 'u1'})
        with self.assertRaises(TokenTypeError):
            self.provider.verify_token(custom_token)

    @patch('utils.identity_provider.auth.get_user')
    def test_missing_user_is_none(self, get_user):
        get_user.side_effect = auth.UserNotFoundError('missing')
        self.assertIsNone(self.provider.get_user('u1'))

    @patch('utils.identity_provider.auth.get_user_by_email')
    @patch('utils.identity_provider.auth.get_user')
    def test_lookup_errors_are_mapped(self, get_user, get_user_by_email):
        get_user.side_effect = exceptions.UnavailableError('backend down')
        get_user_by_email.side_effect = exceptions.UnavailableError('backend down')
        with self.assertRaises(ProviderUnavailableError):
            self.provider.get_user('u1')
        with self.assertRaises(ProviderUnavailableError):
            self.provider.get_user_by_email('a@example.com')
        get_user.side_effect = ValueError('Invalid uid')
        get_user_by_email.side_effect = ValueError('Malformed email address string')
        with self.assertRaises(InvalidUserDataError):
            self.provider.get_user('u1')
        with self.assertRaises(InvalidUserDataError):
            self.provider.get_user_by_email('not-an-email')

    @patch('utils.identity_provider.auth.create_user')
    def test_rejected_user_data(self, create_user):
        create_user.side_effect = ValueError('Password must be a string at least 6 characters long.')
        with self.assertRaises(InvalidUserDataError):
            self.provider.create_user('a@example.com', '123', 'Admin')

class SignInTestCase(unittest.TestCase):
    def setUp(self):
        self.provider = IdentityProvider(MagicMock(), 'AIza123')

    @patch('utils.identity_provider.requests.post')
    def test_sign_in(self, post):
        post.return_value = http_response(200)
        self.provider.sign_in_with_password('a@example.com', 'secret')
        self.assertEqual(post.call_args.kwargs['params'], {'key': 'AIza123'})
        self.assertEqual(post.call_args.kwargs['json']['email'], 'a@example.com')

    @patch('utils.identity_provider.requests.post')
    def test_failures(self, post):
        post.return_value = http_response(400, {'error': {'message': 'INVALID_LOGIN_CREDENTIALS'}})
        with self.assertRaises(InvalidCredentialsError):
            self.provider.sign_in_with_password('a@example.com', 'wrong')
        post.return_value = http_response(500)
        with self.assertRaises(ProviderUnavailableError):
            self.provider.sign_in_with_password('a@example.com', 'secret')
        post.side_effect = requests.ConnectionError('offline')
        with self.assertRaises(ProviderUnavailableError):
            self.provider.sign_in_with_password('a@example.com', 'secret')

    def test_missing_api_key(self):
        with self.assertRaises(ProviderUnavailableError):
            IdentityProvider(MagicMock(), None).sign_in_with_password('a@example.com', 'secret')

if __name__ == '__main__':
    unittest.main()
