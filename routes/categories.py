from db.repository import Repository
from db.shared_repositories import categories_repository, products_repository
from middlewares.authenticate import authenticate
from models.category import Category, CATEGORY_REQUIRED_FIELDS, CATEGORY_WRITABLE_FIELDS
from models.document import utc_now
from routes import route
from utils import Response, use
from utils.helpers import (
    get_json_body,
    is_slug_unique,
    pick,
    slugify,
    unique_slug,
    validate_required_fields,
)

INVALID_BODY = {'success': False, 'error': 'Request body must be a JSON object'}
NOT_FOUND = {'success': False, 'error': 'Category not found'}
NAME_EXISTS = {'success': False, 'error': 'Category name already exists'}

def count_products(products: Repository, category: Category, published_only: bool = True) -> int:
    """Count the products that reference the category by name. Never stored, always recomputed."""
    filters = {'category': category.name}
    if published_only:
        filters['status'] = 'published'
    return products.count(filters)

def is_name_taken(categories: Repository, name: str, exclude_id: str | None = None) -> bool:
    return any(match.id != exclude_id for match in categories.get({'name': name}))

@route('/api/categories', 'GET', error='Failed to fetch categories')
def list_categories(event, response: Response):
    """List every category, by name, with the number of published products in each.
    ---
    tags:
        - categories
    responses:
        200:
            description: The categories with their productCount
    """
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        return {
            'success': True,
            'data': [
                category.to_response(count_products(products, category))
                for category in categories.list(sort_by='name')
            ]
        }

@route('/api/categories/admin/all', 'GET', error='Failed to fetch categories')
@use(authenticate)
def list_all_categories(event, response: Response):
    """Admin view of the categories, counting products of any status."""
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        return {
            'success': True,
            'data': [
                category.to_response(count_products(products, category, published_only=False))
                for category in categories.list(sort_by='name')
            ]
        }

@route('/api/categories/{slug}', 'GET', error='Failed to fetch category')
def get_category(event, response: Response):
    slug = event['pathParameters']['slug']
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        category = categories.get_first({'slug': slug})
        if category is None:
            return response.status(404).json(NOT_FOUND)
        return {
            'success': True,
            'data': category.to_response(count_products(products, category))
        }

@route('/api/categories/{slug}/products', 'GET', error='Failed to fetch products by category')
def list_category_products(event, response: Response):
    """List the published products of a category, newest first."""
    slug = event['pathParameters']['slug']
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        category = categories.get_first({'slug': slug})
        if category is None:
            return response.status(404).json(NOT_FOUND)
        category_products = products.get(
            {'category': category.name, 'status': 'published'},
            sort_by='created_at',
            descending=True
        )
    return {
        'success': True,
        'data': {
            'category': category.to_response(),
            'products': [product.to_response() for product in category_products],
            'totalProducts': len(category_products)
        }
    }

@route('/api/categories', 'POST', error='Failed to create category')
@use(authenticate)
def create_category(event, response: Response):
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    missing_fields = validate_required_fields(data, CATEGORY_REQUIRED_FIELDS)
    if missing_fields:
        return response.status(400).json({
            'success': False,
            'error': f"Missing required fields: {', '.join(missing_fields)}"
        })
    slug = slugify(str(data.get('slug') or data['name']))
    if not slug:
        return response.status(400).json({'success': False, 'error': 'Invalid slug'})

    now = utc_now()
    with categories_repository.create_session() as categories:
        if is_name_taken(categories, data['name']):
            return response.status(409).json(NAME_EXISTS)
        category = categories.create({
            **pick(data, CATEGORY_WRITABLE_FIELDS),
            'slug': unique_slug(categories, slug),
            'description': data.get('description') or '',
            'createdAt': now,
            'updatedAt': now
        })
    return response.status(201).json({
        'success': True,
        'data': category.to_response(product_count=0),
        'message': 'Category created successfully'
    })

@route('/api/categories/{id}', 'PUT', error='Failed to update category')
@use(authenticate)
def update_category(event, response: Response):
    category_id = event['pathParameters']['id']
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        if categories.get_first({'id': category_id}) is None:
            return response.status(404).json(NOT_FOUND)

        changes = pick(data, CATEGORY_WRITABLE_FIELDS)
        if data.get('slug'):
            changes['slug'] = slugify(str(data['slug']))
            if not changes['slug']:
                return response.status(400).json({'success': False, 'error': 'Invalid slug'})
            if not is_slug_unique(categories, changes['slug'], exclude_id=category_id):
                return response.status(400).json({'success': False, 'error': 'Slug already exists'})
        else:
            changes.pop('slug', None)
        if data.get('name') and is_name_taken(categories, data['name'], exclude_id=category_id):
            return response.status(409).json(NAME_EXISTS)
        changes['updatedAt'] = utc_now()
        category = categories.merge({'id': category_id}, changes)
        return {
            'success': True,
            'data': category.to_response(count_products(products, category)),
            'message': 'Category updated successfully'
        }

@route('/api/categories/{id}', 'DELETE', error='Failed to delete category')
@use(authenticate)
def delete_category(event, response: Response):
    """Delete a category. Refused while any product, published or draft, references it."""
    category_id = event['pathParameters']['id']
    with categories_repository.create_session() as categories, \
         products_repository.create_session() as products:
        category = categories.get_first({'id': category_id})
        if category is None:
            return response.status(404).json(NOT_FOUND)
        if count_products(products, category, published_only=False) > 0:
            return response.status(403).json({
                'success': False,
                'error': 'Cannot delete category with existing products'
            })
        categories.delete({'id': category_id})
    return {
        'success': True,
        'message': 'Category deleted successfully'
    }
