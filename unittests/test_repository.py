import importlib
import unittest
from datetime import datetime, timedelta
from pydantic import ValidationError
from db.clients.array_storage_client import ArrayStorageClient
from db import repository as repository_module
from db.repository import Repository
from models.product import Product

def build_repository() -> Repository:
    return Repository(model=Product, name='products', client=ArrayStorageClient(collection='products'))

class ArrayStorageClientTestCase(unittest.TestCase):
    def test_put_replaces_by_id(self):
        client = ArrayStorageClient(collection='products')
        client.put({'id': '1', 'name': 'first'})
        client.put({'id': '1', 'name': 'second'})
        self.assertEqual(client.list(), [{'id': '1', 'name': 'second'}])

    def test_documents_are_copied(self):
        client = ArrayStorageClient(collection='products')
        document = {'id': '1', 'tags': ['a']}
        client.put(document)
        document['tags'].append('b')
        client.get({'id': '1'})[0]['tags'].append('c')
        self.assertEqual(client.get({'id': '1'})[0]['tags'], ['a'])

    def test_delete_requires_keys(self):
        client = ArrayStorageClient(collection='products')
        client.put({'id': '1'})
        with self.assertRaises(ValueError):
            client.delete({})
        client.delete({'id': '1'})
        self.assertEqual(client.list(), [])

class RepositoryTestCase(unittest.TestCase):
    def setUp(self):
        self.repository = build_repository()

    def test_create_generates_id_and_stores_camel_case(self):
        with self.repository.create_session() as session:
            product = session.create({'name': 'Kettle', 'slug': 'kettle', 'affiliateLink': 'https://aff.com/k'})
        self.assertIsNotNone(product.id)
        self.assertEqual(product.affiliate_link, 'https://aff.com/k')
        [stored] = self.repository.client.list()
        self.assertEqual(stored['affiliateLink'], 'https://aff.com/k')
        self.assertEqual(stored['clickCount'], 0)

    def test_create_duplicate_id(self):
        self.repository.create({'id': 'p1', 'name': 'Kettle', 'slug': 'kettle'})
        with self.assertRaises(ValueError):
            self.repository.create({'id': 'p1', 'name': 'Toaster', 'slug': 'toaster'})

    def test_merge(self):
        product = self.repository.create({'name': 'Kettle', 'slug': 'kettle'})
        merged = self.repository.merge({'id': product.id}, {'status': 'published', 'clickCount': 3})
        self.assertEqual(merged.status, 'published')
        self.assertEqual(merged.click_count, 3)
        self.assertEqual(merged.name, 'Kettle')
        self.assertIsNone(self.repository.merge({'id': 'missing'}, {'name': 'x'}))

    def test_merge_invalid_change_leaves_document(self):
        product = self.repository.create({'name': 'Kettle', 'slug': 'kettle'})
        with self.assertRaises(ValidationError):
            self.repository.merge({'id': product.id}, {'status': 'archived'})
        self.assertEqual(self.repository.get_first({'id': product.id}).status, 'draft')

    def test_update_requires_existing(self):
        with self.assertRaises(ValueError):
            self.repository.update(Product(id='missing', name='Kettle', slug='kettle'))

    def test_sort_and_limit(self):
        start = datetime(2024, 1, 1)
        for i in range(5):
            self.repository.create({'name': f'Product {i}', 'slug': f'product-{i}', 'createdAt': start + timedelta(days=i)})
        self.repository.create({'name': 'Undated', 'slug': 'undated'})
        newest = self.repository.list(sort_by='created_at', descending=True, limit=2)
        self.assertEqual([product.name for product in newest], ['Product 4', 'Product 3'])
        oldest = self.repository.list(sort_by='created_at')
        self.assertEqual(oldest[0].name, 'Undated')

    def test_get_count_and_delete(self):
        self.repository.create({'name': 'Kettle', 'slug': 'kettle', 'status': 'published'})
        toaster = self.repository.create({'name': 'Toaster', 'slug': 'toaster'})
        self.assertEqual(self.repository.count(), 2)
        self.assertEqual(self.repository.count({'status': 'published'}), 1)
        self.assertEqual([product.name for product in self.repository.get({'status': 'draft'})], ['Toaster'])
        self.assertEqual(self.repository.get_first({'slug': 'nothing'}, default='none'), 'none')
        self.repository.delete(toaster)
        self.assertEqual(self.repository.count(), 1)

    def test_module_reloads_and_lists(self):
        module = importlib.reload(repository_module)
        repository = module.Repository(model=Product, name='products', client=ArrayStorageClient(collection='products'))
        repository.create({'name': 'Kettle', 'slug': 'kettle'})
        self.assertEqual([product.name for product in repository.list(limit=1)], ['Kettle'])

if __name__ == '__main__':
    unittest.main()
