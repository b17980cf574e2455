import logging
from db.shared_repositories import admins_repository
from middlewares.authenticate import authenticate
from models.admin_profile import ADMIN_PERMISSIONS
from models.document import utc_now
from routes import route
from utils import Response, use
from utils.helpers import get_json_body
from utils.identity_provider import InvalidUserDataError, ProviderUnavailableError, get_identity_provider

logger = logging.getLogger(__name__)

RECENT_ADMINS_LIMIT = 5

PROVIDER_UNAVAILABLE = {
    'success': False,
    'error': 'Service Unavailable',
    'message': 'Firebase authentication not configured'
}
NOT_FOUND = {
    'success': False,
    'error': 'Not Found',
    'message': 'Admin user not found'
}
INVALID_BODY = {'success': False, 'error': 'Validation Error', 'message': 'Request body must be a JSON object'}

def invalid_user_data(message: str) -> dict:
    return {'success': False, 'error': 'Validation Error', 'message': message}

@route('/api/admin/users', 'POST', error='Failed to create admin user')
@use(authenticate)
def create_admin(event, response: Response):
    """Create an admin account and its profile.

    The identity record and the profile document are written one after the other; if the
    profile write fails the identity record is left in place.
    ---
    tags:
        - admin
    security:
        - bearerAuth: []
    responses:
        201:
            description: Admin user created successfully
        409:
            description: A user with this email already exists
    """
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return response.status(400).json({
            'success': False,
            'error': 'Validation Error',
            'message': 'Email and password are required'
        })
    provider = get_identity_provider()
    if not provider.available:
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    try:
        existing_user = provider.get_user_by_email(email)
    except InvalidUserDataError:
        return response.status(400).json(invalid_user_data('Invalid email address'))
    except ProviderUnavailableError as e:
        logger.error("User lookup unavailable: %s", e)
        return response.status(503).json(PROVIDER_UNAVAILABLE)
    if existing_user is not None:
        return response.status(409).json({
            'success': False,
            'error': 'User Exists',
            'message': 'User with this email already exists',
            'data': {
                'uid': existing_user.uid,
                'email': existing_user.email
            }
        })

    try:
        user = provider.create_user(email, password, data.get('displayName') or 'Admin User')
    except InvalidUserDataError as e:
        return response.status(400).json(invalid_user_data(str(e)))
    provider.set_admin_claims(user.uid)
    now = utc_now()
    with admins_repository.create_session() as session:
        profile = session.create({
            'id': user.uid,
            'uid': user.uid,
            'email': user.email,
            'displayName': user.display_name or 'Admin User',
            'permissions': list(ADMIN_PERMISSIONS),
            'isActive': True,
            'createdBy': event['user'].uid,
            'createdAt': now,
            'updatedAt': now
        })
    logger.info("Admin %s created by %s", profile.uid, event['user'].uid)
    created = profile.to_response()
    return response.status(201).json({
        'success': True,
        'message': 'Admin user created successfully',
        'data': {
            'uid': created['uid'],
            'email': created['email'],
            'displayName': created['displayName'],
            'role': created['role'],
            'isActive': created['isActive'],
            'createdAt': created['createdAt']
        }
    })

@route('/api/admin/users', 'GET', error='Failed to retrieve admin users')
@use(authenticate)
def list_admins(event, response: Response):
    with admins_repository.create_session() as session:
        admins = session.list(sort_by='created_at', descending=True)
    return {
        'success': True,
        'message': 'Admin users retrieved successfully',
        'data': {
            'admins': [admin.to_response() for admin in admins],
            'total': len(admins)
        }
    }

@route('/api/admin/users/{uid}', 'GET', error='Failed to retrieve admin user')
@use(authenticate)
def get_admin(event, response: Response):
    uid = event['pathParameters']['uid']
    with admins_repository.create_session() as session:
        admin = session.get_first({'id': uid})
    if admin is None:
        return response.status(404).json(NOT_FOUND)
    return {
        'success': True,
        'message': 'Admin user retrieved successfully',
        'data': admin.to_response()
    }

@route('/api/admin/users/{uid}', 'PUT', error='Failed to update admin user')
@use(authenticate)
def update_admin(event, response: Response):
    """Rename an admin or toggle their account. Deactivating also disables the identity record."""
    uid = event['pathParameters']['uid']
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    display_name = data.get('displayName')
    is_active = data.get('isActive')
    if is_active is not None and not isinstance(is_active, bool):
        return response.status(400).json({
            'success': False,
            'error': 'Validation Error',
            'message': 'isActive must be a boolean'
        })
    provider = get_identity_provider()
    if not provider.available:
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    with admins_repository.create_session() as session:
        if session.get_first({'id': uid}) is None:
            return response.status(404).json(NOT_FOUND)
        if is_active is False and uid == event['user'].uid:
            return response.status(403).json({
                'success': False,
                'error': 'Forbidden',
                'message': 'Cannot deactivate your own account'
            })

        changes = {'updatedAt': utc_now()}
        if display_name:
            provider.update_user(uid, display_name=display_name)
            changes['displayName'] = display_name
        if is_active is not None:
            provider.update_user(uid, disabled=not is_active)
            changes['isActive'] = is_active
        admin = session.merge({'id': uid}, changes)
    return {
        'success': True,
        'message': 'Admin user updated successfully',
        'data': admin.to_response()
    }

@route('/api/admin/users/{uid}', 'DELETE', error='Failed to delete admin user')
@use(authenticate)
def delete_admin(event, response: Response):
    uid = event['pathParameters']['uid']
    if uid == event['user'].uid:
        return response.status(403).json({
            'success': False,
            'error': 'Forbidden',
            'message': 'Cannot delete your own account'
        })
    provider = get_identity_provider()
    if not provider.available:
        return response.status(503).json(PROVIDER_UNAVAILABLE)

    with admins_repository.create_session() as session:
        if session.get_first({'id': uid}) is None:
            return response.status(404).json(NOT_FOUND)
        provider.delete_user(uid)
        session.delete({'id': uid})
    logger.info("Admin %s deleted by %s", uid, event['user'].uid)
    return {
        'success': True,
        'message': 'Admin user deleted successfully',
        'data': {
            'uid': uid,
            'deletedAt': utc_now().isoformat()
        }
    }

@route('/api/admin/stats', 'GET', error='Failed to retrieve dashboard statistics')
@use(authenticate)
def get_admin_stats(event, response: Response):
    """Count admins by state and list the most recently created ones."""
    with admins_repository.create_session() as session:
        admins = session.list(sort_by='created_at', descending=True)
    active_admins = len([admin for admin in admins if admin.is_active])
    return {
        'success': True,
        'message': 'Dashboard statistics retrieved successfully',
        'data': {
            'totalAdmins': len(admins),
            'activeAdmins': active_admins,
            'inactiveAdmins': len(admins) - active_admins,
            'recentAdmins': [
                {
                    'uid': admin.uid,
                    'email': admin.email,
                    'displayName': admin.display_name,
                    'createdAt': admin.to_response()['createdAt']
                }
                for admin in admins[:RECENT_ADMINS_LIMIT]
            ]
        }
    }
