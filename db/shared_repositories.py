from db.clients.array_storage_client import ArrayStorageClient
from db.clients.base_storage_client import BaseStorageClient
from db.clients.dynamodb_storage_client import DynamoStorageClient
from db.repository import Repository
from models import AdminProfile, BlogPost, Category, ClickEvent, Deal, Product
from config import config

def create_storage_client(collection: str) -> BaseStorageClient:
    """Build the storage client for a collection according to the configured backend."""
    if config.storage.backend == 'memory':
        return ArrayStorageClient(collection=collection)
    return DynamoStorageClient(
        collection=collection,
        table=f'{config.storage.table_prefix}{collection}',
        region=config.aws.region,
        endpoint_url=config.storage.endpoint_url
    )

products_repository = Repository(
    model=Product,
    name='products',
    client=create_storage_client('products')
)

posts_repository = Repository(
    model=BlogPost,
    name='posts',
    client=create_storage_client('posts')
)

categories_repository = Repository(
    model=Category,
    name='categories',
    client=create_storage_client('categories')
)

deals_repository = Repository(
    model=Deal,
    name='deals',
    client=create_storage_client('deals')
)

click_events_repository = Repository(
    model=ClickEvent,
    name='clickEvents',
    client=create_storage_client('clickEvents')
)

admins_repository = Repository(
    model=AdminProfile,
    name='admins',
    client=create_storage_client('admins')
)

repositories = [
    products_repository,
    posts_repository,
    categories_repository,
    deals_repository,
    click_events_repository,
    admins_repository,
]

def use_storage(factory=create_storage_client):
    """Rebind every repository to a client built by ``factory(collection)``.

    Handlers hold references to the repository objects, so swapping the clients here
    changes the store for all of them, e.g. to an in-memory store in tests.
    """
    for repository in repositories:
        repository.client = factory(repository.name)
