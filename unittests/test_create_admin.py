import unittest
from conftest import FakeIdentityProvider, FakeUser
from db.clients.array_storage_client import ArrayStorageClient
from db.repository import Repository
from models.admin_profile import AdminProfile
from scripts.create_admin import create_admin, list_admins
from utils.identity_provider import ProviderUnavailableError

class CreateAdminTestCase(unittest.TestCase):
    def setUp(self):
        self.provider = FakeIdentityProvider()
        self.repository = Repository(model=AdminProfile, name='admins', client=ArrayStorageClient(collection='admins'))

    def test_creates_user_and_profile(self):
        admin = create_admin('first@example.com', 'secret', provider=self.provider, repository=self.repository)
        self.assertEqual(admin.display_name, 'Admin User')
        self.assertEqual(admin.id, admin.uid)
        user = self.provider.users[admin.uid]
        self.assertEqual(user.password, 'secret')
        self.assertTrue(user.custom_claims['admin'])
        self.assertEqual([profile.email for profile in list_admins(self.repository)], ['first@example.com'])

    def test_promotes_existing_user(self):
        self.provider.add_user(FakeUser(uid='existing', email='first@example.com'))
        admin = create_admin('first@example.com', 'ignored', 'First', provider=self.provider, repository=self.repository)
        self.assertEqual(admin.uid, 'existing')
        self.assertEqual(len(self.provider.users), 1)
        self.assertTrue(self.provider.users['existing'].custom_claims['admin'])
        # Running it again refreshes the profile rather than failing
        again = create_admin('first@example.com', 'ignored', 'First Admin', provider=self.provider, repository=self.repository)
        self.assertEqual(again.display_name, 'First Admin')
        self.assertEqual(again.created_at, admin.created_at)
        self.assertEqual(self.repository.count(), 1)

    def test_unavailable_provider(self):
        self.provider.available = False
        with self.assertRaises(ProviderUnavailableError):
            create_admin('first@example.com', 'secret', provider=self.provider, repository=self.repository)

if __name__ == '__main__':
    unittest.main()
