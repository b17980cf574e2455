"""
Seed the categories collection with the default categories.

Categories whose name already exists are skipped, so the script can be re-run safely.

    python -m scripts.create_categories
"""

import logging
from db.repository import Repository
from db.shared_repositories import categories_repository
from models.document import utc_now
from utils.helpers import slugify, unique_slug

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {
        'name': 'Health & Wellness',
        'description': 'Products and services focused on improving physical and mental well-being, including supplements, fitness equipment, and wellness programs.'
    },
    {
        'name': 'Electronics',
        'description': 'Latest technology gadgets, devices, and electronic accessories for home, work, and entertainment.'
    },
    {
        'name': 'Fashion & Style',
        'description': 'Trendy clothing, accessories, and fashion items for all occasions and personal style preferences.'
    },
    {
        'name': 'Home & Garden',
        'description': 'Everything for your home improvement, decoration, gardening, and outdoor living spaces.'
    },
    {
        'name': 'Sports & Fitness',
        'description': 'Athletic gear, fitness equipment, sportswear, and accessories for active lifestyles and sports enthusiasts.'
    },
    {
        'name': 'Beauty & Care',
        'description': 'Skincare, cosmetics, personal care products, and beauty tools for self-care and grooming routines.'
    },
]

def create_categories(repository: Repository = categories_repository, categories: list[dict] = DEFAULT_CATEGORIES) -> list[str]:
    """Create the missing categories and return the names of those created."""
    created = []
    with repository.create_session() as session:
        for category in categories:
            if session.get_first({'name': category['name']}) is not None:
                logger.info('Category "%s" already exists, skipping', category['name'])
                continue
            slug = unique_slug(session, slugify(category['name']))
            now = utc_now()
            document = session.create({
                'name': category['name'],
                'slug': slug,
                'description': category.get('description', ''),
                'createdAt': now,
                'updatedAt': now
            })
            logger.info('Created category "%s" with ID: %s', document.name, document.id)
            created.append(document.name)
    return created

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    create_categories()
    with categories_repository.create_session() as session:
        for category in session.list(sort_by='name'):
            print(f'   - {category.name} ({category.slug})')
