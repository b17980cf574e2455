import unittest
from db.clients.array_storage_client import ArrayStorageClient
from db.repository import Repository
from models.category import Category
from scripts.create_categories import DEFAULT_CATEGORIES, create_categories

class CreateCategoriesTestCase(unittest.TestCase):
    def setUp(self):
        self.repository = Repository(model=Category, name='categories', client=ArrayStorageClient(collection='categories'))

    def test_creates_default_categories(self):
        created = create_categories(self.repository)
        self.assertEqual(created, [category['name'] for category in DEFAULT_CATEGORIES])
        slugs = sorted(category.slug for category in self.repository.list())
        self.assertEqual(slugs, ['beauty-care', 'electronics', 'fashion-style', 'health-wellness', 'home-garden', 'sports-fitness'])
        self.assertIsNotNone(self.repository.get_first({'slug': 'electronics'}).created_at)

    def test_existing_categories_are_skipped(self):
        self.repository.create({'name': 'Electronics', 'slug': 'electronics', 'description': 'Kept'})
        created = create_categories(self.repository)
        self.assertNotIn('Electronics', created)
        self.assertEqual(len(created), len(DEFAULT_CATEGORIES) - 1)
        self.assertEqual(self.repository.get_first({'slug': 'electronics'}).description, 'Kept')
        self.assertEqual(create_categories(self.repository), [])

    def test_matches_existing_categories_by_name(self):
        self.repository.create({'name': 'Electronics', 'slug': 'gadgets'})
        self.repository.create({'name': 'Home and Garden', 'slug': 'home-garden'})
        created = create_categories(self.repository)
        self.assertNotIn('Electronics', created)
        self.assertIn('Home & Garden', created)
        self.assertEqual(self.repository.count({'name': 'Electronics'}), 1)
        home_garden = self.repository.get_first({'name': 'Home & Garden'})
        self.assertTrue(home_garden.slug.startswith('home-garden-'))
        self.assertEqual(self.repository.get_first({'slug': 'home-garden'}).name, 'Home and Garden')

if __name__ == '__main__':
    unittest.main()
