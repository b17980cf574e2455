"""
Firebase Authentication access for the service.

Wraps the ``firebase-admin`` SDK so that the rest of the code only deals with
plain values and a small set of typed errors. The provider is created once per
process from the configuration; ``set_identity_provider`` replaces it (tests).
"""

import base64
import json
import logging
import firebase_admin
import requests
from firebase_admin import auth, credentials, exceptions
from config import config, FirebaseConfig
from models.admin_profile import ADMIN_PERMISSIONS

logger = logging.getLogger(__name__)

APP_NAME = 'affiliate-api'
CUSTOM_TOKEN_AUDIENCE = 'https://identitytoolkit.googleapis.com/google.identity.identitytoolkit.v1.IdentityToolkit'
SIGN_IN_WITH_PASSWORD_URL = 'https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword'
ADMIN_CLAIMS = {
    'admin': True,
    'role': 'admin',
}

class IdentityProviderError(Exception):
    pass

class ProviderUnavailableError(IdentityProviderError):
    """The identity provider is not configured or cannot be reached."""

class TokenExpiredError(IdentityProviderError):
    pass

class TokenTypeError(IdentityProviderError):
    """A custom (exchange) token was given where an ID token is expected."""

class InvalidTokenError(IdentityProviderError):
    pass

class InvalidCredentialsError(IdentityProviderError):
    pass

class InvalidUserDataError(IdentityProviderError):
    """An email, uid or password was rejected by the provider as malformed."""

def decode_unverified(token: str) -> dict | None:
    """Decode the payload of a JWT without checking its signature.

    Returns None when the token is not a decodable JWT.
    """
    if not isinstance(token, str):
        return None
    parts = token.split('.')
    if len(parts) != 3:
        return None
    payload = parts[1]
    # JWT segments are unpadded base64url
    payload += '=' * (-len(payload) % 4)
    try:
        decoded = json.loads(base64.urlsafe_b64decode(payload.encode('utf-8')).decode('utf-8'))
    except (ValueError, UnicodeDecodeError):
        return None
    return decoded if isinstance(decoded, dict) else None

class IdentityProvider:
    def __init__(self, app: firebase_admin.App | None = None, web_api_key: str | None = None):
        self._app = app
        self._web_api_key = web_api_key

    @staticmethod
    def from_config(firebase_config: FirebaseConfig) -> 'IdentityProvider':
        """Initialize the Admin SDK from the service account configuration.

        A missing or broken configuration leaves the provider unavailable instead of
        stopping the process; requests that need it answer 503.
        """
        if not firebase_config.is_configured:
            logger.warning("Firebase credentials not configured, authentication is unavailable")
            return IdentityProvider(None, firebase_config.sign_in_api_key)
        try:
            app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            try:
                app = firebase_admin.initialize_app(
                    credentials.Certificate(firebase_config.service_account),
                    {'projectId': firebase_config.project_id},
                    name=APP_NAME
                )
            except Exception as e:
                logger.error("Firebase initialization failed: %s", e)
                return IdentityProvider(None, firebase_config.sign_in_api_key)
        logger.info("Firebase Admin SDK initialized for project %s", firebase_config.project_id)
        return IdentityProvider(app, firebase_config.sign_in_api_key)

    @property
    def available(self) -> bool:
        return self._app is not None

    def _require_app(self):
        if self._app is None:
            raise ProviderUnavailableError("Firebase authentication not configured")
        return self._app

    def verify_token(self, token: str) -> dict:
        """Verify an ID token and return its decoded claims.

        Raises:
            TokenExpiredError: The token has expired.
            TokenTypeError: The token is a custom token, which must be exchanged client-side first.
            InvalidTokenError: The token cannot be verified.
            ProviderUnavailableError: The provider is not configured or its certificates cannot be fetched.
        """
        app = self._require_app()
        try:
            return auth.verify_id_token(token, app=app)
        except auth.ExpiredIdTokenError as e:
            raise TokenExpiredError(str(e)) from e
        except auth.CertificateFetchError as e:
            raise ProviderUnavailableError(str(e)) from e
        except (auth.InvalidIdTokenError, ValueError) as e:
            payload = decode_unverified(token)
            if payload and payload.get('aud') == CUSTOM_TOKEN_AUDIENCE:
                raise TokenTypeError(str(e)) from e
            raise InvalidTokenError(str(e)) from e

    def get_user(self, uid: str) -> auth.UserRecord | None:
        try:
            return auth.get_user(uid, app=self._require_app())
        except auth.UserNotFoundError:
            return None
        except ValueError as e:
            raise InvalidUserDataError(str(e)) from e
        except exceptions.FirebaseError as e:
            raise ProviderUnavailableError(str(e)) from e

    def get_user_by_email(self, email: str) -> auth.UserRecord | None:
        """Look a user up by email.

        Raises:
            InvalidUserDataError: The email is malformed.
            ProviderUnavailableError: The provider is not configured or the lookup failed.
        """
        try:
            return auth.get_user_by_email(email, app=self._require_app())
        except auth.UserNotFoundError:
            return None
        except ValueError as e:
            raise InvalidUserDataError(str(e)) from e
        except exceptions.FirebaseError as e:
            raise ProviderUnavailableError(str(e)) from e

    def create_user(self, email: str, password: str, display_name: str) -> auth.UserRecord:
        try:
            return auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                email_verified=True,
                app=self._require_app()
            )
        except ValueError as e:
            # Malformed email, password shorter than six characters
            raise InvalidUserDataError(str(e)) from e

    def set_admin_claims(self, uid: str) -> None:
        auth.set_custom_user_claims(
            uid,
            {**ADMIN_CLAIMS, 'permissions': list(ADMIN_PERMISSIONS)},
            app=self._require_app()
        )

    def update_user(self, uid: str, **properties) -> auth.UserRecord:
        return auth.update_user(uid, app=self._require_app(), **properties)

    def delete_user(self, uid: str) -> None:
        auth.delete_user(uid, app=self._require_app())

    def create_custom_token(self, uid: str) -> str:
        """Create an exchange token carrying the admin claims."""
        token = auth.create_custom_token(uid, dict(ADMIN_CLAIMS), app=self._require_app())
        return token.decode('utf-8') if isinstance(token, bytes) else token

    def sign_in_with_password(self, email: str, password: str) -> None:
        """Check an email and password against Firebase Authentication.

        The Admin SDK cannot check passwords, so this goes through the Auth REST API
        with the project's web API key.

        Raises:
            InvalidCredentialsError: The email or password is wrong.
            ProviderUnavailableError: No web API key is configured or the API cannot be reached.
        """
        if not self._web_api_key:
            raise ProviderUnavailableError("Firebase web API key not configured")
        try:
            result = requests.post(
                SIGN_IN_WITH_PASSWORD_URL,
                params={'key': self._web_api_key},
                json={'email': email, 'password': password, 'returnSecureToken': False},
                timeout=10
            )
        except requests.RequestException as e:
            raise ProviderUnavailableError(str(e)) from e
        if result.status_code == 200:
            return
        if result.status_code == 400:
            message = result.json().get('error', {}).get('message', 'INVALID_LOGIN_CREDENTIALS')
            raise InvalidCredentialsError(message)
        raise ProviderUnavailableError(f"Sign-in request failed with status {result.status_code}")

_provider = IdentityProvider.from_config(config.firebase)

def get_identity_provider() -> IdentityProvider:
    return _provider

def set_identity_provider(provider: IdentityProvider) -> None:
    global _provider
    _provider = provider
