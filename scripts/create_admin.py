"""
Create the first admin account, or list the existing admin profiles.

An existing Firebase user with the given email is promoted instead of duplicated.

    python -m scripts.create_admin create <email> <password> [displayName]
    python -m scripts.create_admin list
"""

import logging
import sys
from db.repository import Repository
from db.shared_repositories import admins_repository
from models.admin_profile import ADMIN_PERMISSIONS, AdminProfile
from models.document import utc_now
from utils.identity_provider import IdentityProvider, ProviderUnavailableError, get_identity_provider

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = 'Admin User'

def create_admin(email: str,
                 password: str,
                 display_name: str | None = None,
                 provider: IdentityProvider | None = None,
                 repository: Repository = admins_repository
                ) -> AdminProfile:
    """Create (or promote) an admin user and write its profile.

    Raises:
        ProviderUnavailableError: Firebase authentication is not configured.
    """
    provider = provider or get_identity_provider()
    if not provider.available:
        raise ProviderUnavailableError("Firebase authentication not configured")
    display_name = display_name or DEFAULT_DISPLAY_NAME

    user = provider.get_user_by_email(email)
    if user is None:
        user = provider.create_user(email, password, display_name)
        logger.info("Created user %s (%s)", user.email, user.uid)
    else:
        logger.info("User %s already exists, granting admin privileges", user.uid)
    provider.set_admin_claims(user.uid)

    now = utc_now()
    with repository.create_session() as session:
        existing = session.get_first({'id': user.uid})
        profile = {
            'id': user.uid,
            'uid': user.uid,
            'email': email,
            'displayName': display_name,
            'permissions': list(ADMIN_PERMISSIONS),
            'isActive': True,
            'createdAt': existing.created_at if existing else now,
            'updatedAt': now
        }
        if existing is None:
            return session.create(profile)
        return session.update(profile)

def list_admins(repository: Repository = admins_repository) -> list[AdminProfile]:
    with repository.create_session() as session:
        return session.list(sort_by='email')

def print_usage():
    print('Usage:')
    print('  python -m scripts.create_admin create <email> <password> [displayName]')
    print('  python -m scripts.create_admin list')

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    args = sys.argv[1:]
    command = args[0] if args else None
    if command == 'create' and len(args) >= 3:
        admin = create_admin(args[1], args[2], args[3] if len(args) > 3 else None)
        print(f'Admin ready: {admin.email} (UID: {admin.uid})')
    elif command == 'list':
        admins = list_admins()
        if not admins:
            print('No admin users found.')
        for admin in admins:
            print(f'   - {admin.email} (UID: {admin.uid})')
    else:
        print_usage()
        sys.exit(1)
