import logging
from config import config
from middlewares.authenticate import authenticate, is_admin
from models.admin_profile import ADMIN_PERMISSIONS
from routes import route
from utils import Response, use
from utils.helpers import get_json_body
from utils.identity_provider import (
    InvalidCredentialsError,
    InvalidTokenError,
    InvalidUserDataError,
    ProviderUnavailableError,
    TokenExpiredError,
    TokenTypeError,
    get_identity_provider,
)

logger = logging.getLogger(__name__)

EXCHANGE_INSTRUCTIONS = {
    'message': 'Exchange this custom token for an ID token using Firebase client SDK',
    'clientSideCode': 'firebase.auth().signInWithCustomToken(customToken).then(userCredential => userCredential.user.getIdToken())'
}
PROVIDER_UNAVAILABLE = {
    'success': False,
    'error': 'Service Unavailable',
    'message': 'Firebase authentication not configured'
}
ADMIN_REQUIRED = {
    'success': False,
    'error': 'Forbidden',
    'message': 'Admin privileges required'
}

def validation_error(message: str) -> dict:
    return {'success': False, 'error': 'Validation Error', 'message': message}

def user_response(identity) -> dict:
    return {
        'uid': identity.uid,
        'email': identity.email,
        'admin': identity.admin,
        'role': identity.role,
        'claims': identity.claims
    }

@route('/api/auth/login', 'POST', error='Authentication failed')
def login(event, response: Response):
    """Log an admin in with email and password.

    Answers with an exchange token that the client trades for an ID token with the
    Firebase client SDK; the ID token is what the protected endpoints accept.
    ---
    tags:
        - auth
    requestBody:
        required: true
        content:
            application/json:
                schema:
                    type: object
                    required:
                        - email
                        - password
                    properties:
                        email:
                            type: string
                        password:
                            type: string
    responses:
        200:
            description: Admin login successful
        401:
            description: Invalid admin credentials
        403:
            description: The account is not an admin or is disabled
        404:
            description: No user has this email
    """
    data = get_json_body(event) or {}
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return response.status(400).json(validation_error('Email and password are required'))
    provider = get_identity_provider()
    if not provider.available:
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    try:
        user = provider.get_user_by_email(email)
    except InvalidUserDataError:
        return response.status(400).json(validation_error('Invalid email address'))
    except ProviderUnavailableError as e:
        logger.error("User lookup unavailable: %s", e)
        return response.status(503).json(PROVIDER_UNAVAILABLE)
    if user is None:
        return response.status(404).json({
            'success': False,
            'error': 'User Not Found',
            'message': 'Admin user not found. Please ensure the admin user is created in Firebase.'
        })
    claims = {**(user.custom_claims or {}), 'email': user.email}
    if user.disabled or not is_admin(claims, config.app.admin_email):
        return response.status(403).json(ADMIN_REQUIRED)

    try:
        provider.sign_in_with_password(email, password)
    except InvalidCredentialsError:
        logger.info("Login refused for %s: invalid credentials", email)
        return response.status(401).json({
            'success': False,
            'error': 'Authentication Failed',
            'message': 'Invalid admin credentials'
        })
    except ProviderUnavailableError as e:
        logger.error("Password sign-in unavailable: %s", e)
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    logger.info("Admin %s logged in", user.uid)
    return {
        'success': True,
        'message': 'Admin login successful. Use the custom token with Firebase client SDK to get an ID token.',
        'data': {
            'customToken': provider.create_custom_token(user.uid),
            'user': {
                'uid': user.uid,
                'email': user.email,
                'displayName': user.display_name,
                'role': 'admin'
            },
            'instructions': EXCHANGE_INSTRUCTIONS
        }
    }

@route('/api/auth/refresh', 'POST', error='Token refresh failed')
def refresh(event, response: Response):
    """Trade a valid admin ID token for a new exchange token."""
    data = get_json_body(event) or {}
    refresh_token = data.get('refreshToken')
    if not refresh_token:
        return response.status(400).json(validation_error('Refresh token is required'))
    provider = get_identity_provider()
    if not provider.available:
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    try:
        claims = provider.verify_token(refresh_token)
    except TokenTypeError:
        return response.status(400).json({
            'success': False,
            'error': 'Invalid Token Type',
            'message': 'Cannot refresh custom tokens. Please use Firebase client SDK to sign in with the custom token and get a new ID token.'
        })
    except TokenExpiredError:
        return response.status(401).json({
            'success': False,
            'error': 'Token Expired',
            'message': 'Refresh token has expired. Please login again.'
        })
    except InvalidTokenError:
        return response.status(401).json({
            'success': False,
            'error': 'Invalid Token',
            'message': 'Invalid refresh token'
        })
    except ProviderUnavailableError:
        return response.status(503).json(PROVIDER_UNAVAILABLE)
    if not is_admin(claims, config.app.admin_email):
        return response.status(403).json(ADMIN_REQUIRED)

    return {
        'success': True,
        'message': 'Token refreshed successfully. Use the new custom token with Firebase client SDK to get an ID token.',
        'data': {
            'customToken': provider.create_custom_token(claims['uid']),
            'user': {
                'uid': claims['uid'],
                'email': claims.get('email'),
                'role': 'admin'
            },
            'instructions': EXCHANGE_INSTRUCTIONS
        }
    }

@route('/api/auth/verify', 'GET', error='Verification failed')
@use(authenticate)
def verify(event, response: Response):
    return {
        'success': True,
        'message': 'Authentication verified',
        'data': {
            'user': user_response(event['user']),
            'authenticated': True
        }
    }

@route('/api/auth/logout', 'POST', error='Logout failed')
def logout(event, response: Response):
    """Tokens are not revoked server-side; the client clears its Firebase session."""
    return {
        'success': True,
        'message': 'Logout successful. Please clear Firebase authentication on client side.',
        'data': {
            'loggedOut': True
        }
    }

@route('/api/auth/profile', 'GET', error='Failed to retrieve profile')
@use(authenticate)
def profile(event, response: Response):
    return {
        'success': True,
        'message': 'Admin profile retrieved',
        'data': {
            'user': user_response(event['user']),
            'role': 'admin',
            'permissions': list(ADMIN_PERMISSIONS)
        }
    }

@route('/api/auth/exchange', 'POST', error='Token exchange failed')
def exchange(event, response: Response):
    data = get_json_body(event) or {}
    custom_token = data.get('customToken')
    if not custom_token:
        return response.status(400).json(validation_error('Custom token is required'))
    return {
        'success': True,
        'message': 'Use this custom token with Firebase client SDK to get ID token',
        'data': {
            'customToken': custom_token,
            'instructions': 'Use firebase.auth().signInWithCustomToken(customToken) on client side'
        }
    }
