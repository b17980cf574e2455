from dataclasses import dataclass
from enum import Enum
import logging
import time
from config import config
from models.identity import AdminIdentity
from utils import Response, get_header
from utils.identity_provider import (
    IdentityProvider,
    InvalidTokenError,
    InvalidUserDataError,
    ProviderUnavailableError,
    TokenExpiredError,
    TokenTypeError,
    decode_unverified,
    get_identity_provider,
)

logger = logging.getLogger(__name__)

class AuthFailure(Enum):
    """Reasons a request is refused by the identity gateway, with the status and envelope they map to."""
    SERVICE_UNAVAILABLE = (503, 'Service Unavailable', 'Firebase authentication not configured. Please contact administrator.')
    MISSING_TOKEN = (401, 'Unauthorized', 'Authorization header with Bearer token is required')
    TOKEN_EXPIRED = (401, 'Token Expired', 'Token has expired. Please login again.')
    INVALID_TOKEN = (401, 'Unauthorized', 'Invalid or expired token')
    NOT_ADMIN = (403, 'Forbidden', 'Admin access required')

    def __init__(self, status: int, error: str, message: str):
        self.status = status
        self.error = error
        self.message = message

    def respond(self, response: Response) -> None:
        response.status(self.status).json({
            'success': False,
            'error': self.error,
            'message': self.message
        })

@dataclass
class AuthResult:
    identity: AdminIdentity | None = None
    failure: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

def bearer_token(event: dict) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    header = get_header(event, 'Authorization')
    if not header or not header.startswith('Bearer '):
        return None
    token = header[len('Bearer '):].strip()
    return token or None

def is_admin(claims: dict, admin_email: str | None) -> bool:
    """An identity is an admin if it carries the admin claim or its email is the configured admin email."""
    if claims.get('admin') is True:
        return True
    return bool(admin_email) and claims.get('email') == admin_email

def _resolve_exchange_token(provider: IdentityProvider, token: str) -> AuthResult:
    """Resolve an exchange token that was sent in place of an ID token.

    The payload is read without a signature check, so the embedded uid is only used to
    load the user record; the admin claim on that record decides.
    """
    payload = decode_unverified(token)
    uid = payload.get('uid') if payload else None
    if not uid:
        return AuthResult(failure=AuthFailure.INVALID_TOKEN)
    expires_at = payload.get('exp')
    if isinstance(expires_at, (int, float)) and expires_at < time.time():
        return AuthResult(failure=AuthFailure.TOKEN_EXPIRED)
    try:
        user = provider.get_user(uid)
    except InvalidUserDataError:
        return AuthResult(failure=AuthFailure.INVALID_TOKEN)
    except ProviderUnavailableError:
        return AuthResult(failure=AuthFailure.SERVICE_UNAVAILABLE)
    if user is None:
        return AuthResult(failure=AuthFailure.INVALID_TOKEN)
    custom_claims = user.custom_claims or {}
    if user.disabled or custom_claims.get('admin') is not True:
        return AuthResult(failure=AuthFailure.NOT_ADMIN)
    claims = {**custom_claims, 'uid': user.uid, 'email': user.email}
    return AuthResult(identity=AdminIdentity.from_claims(claims))

def resolve_identity(event: dict, provider: IdentityProvider | None = None, admin_email: str | None = None) -> AuthResult:
    """Authenticate the caller of a request as an admin.

    Args:
        event (dict): The API Gateway event.
        provider (IdentityProvider, optional): Defaults to the process-wide provider.
        admin_email (str, optional): Defaults to the configured admin email.

    Returns:
        AuthResult: The admin identity, or the reason the request is refused.
    """
    provider = provider or get_identity_provider()
    admin_email = admin_email if admin_email is not None else config.app.admin_email
    if not provider.available:
        return AuthResult(failure=AuthFailure.SERVICE_UNAVAILABLE)
    token = bearer_token(event)
    if token is None:
        return AuthResult(failure=AuthFailure.MISSING_TOKEN)
    try:
        claims = provider.verify_token(token)
    except TokenExpiredError:
        return AuthResult(failure=AuthFailure.TOKEN_EXPIRED)
    except TokenTypeError:
        return _resolve_exchange_token(provider, token)
    except InvalidTokenError:
        return AuthResult(failure=AuthFailure.INVALID_TOKEN)
    except ProviderUnavailableError:
        return AuthResult(failure=AuthFailure.SERVICE_UNAVAILABLE)
    if not is_admin(claims, admin_email):
        return AuthResult(failure=AuthFailure.NOT_ADMIN)
    # The configured admin email is admitted without the claim
    identity = AdminIdentity.from_claims(claims).model_copy(update={'admin': True})
    return AuthResult(identity=identity)

def authenticate(event, response, context):
    """Middleware that only lets admins through.

    The resolved identity is stored in ``event['user']`` as an ``AdminIdentity``.
    """
    result = resolve_identity(event)
    if not result.ok:
        logger.info("[Authentication] Request refused: %s", result.failure.name)
        result.failure.respond(response)
        return event, response, context
    event['user'] = result.identity
    logger.info("[Authentication] Admin verified: %s", result.identity.uid)
    return event, response, context

def optional_authenticate(event, response, context):
    """Authenticate only when a Bearer Authorization header is present; anonymous requests pass through."""
    if not (get_header(event, 'Authorization') or '').startswith('Bearer '):
        return event, response, context
    return authenticate(event, response, context)
