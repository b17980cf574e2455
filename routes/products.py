from db.shared_repositories import products_repository
from middlewares.authenticate import authenticate
from models.document import utc_now
from models.product import PRODUCT_REQUIRED_FIELDS, PRODUCT_WRITABLE_FIELDS
from routes import route
from utils import Response, use
from utils.helpers import (
    get_json_body,
    is_slug_unique,
    is_valid_url,
    pick,
    slugify,
    unique_slug,
    validate_required_fields,
)

INVALID_BODY = {'success': False, 'error': 'Request body must be a JSON object'}
NOT_FOUND = {'success': False, 'error': 'Product not found'}

@route('/api/products', 'GET', error='Failed to fetch products')
def list_published_products(event, response: Response):
    """List published products.
    ---
    tags:
        - products
    responses:
        200:
            description: Every published product, possibly none
            content:
                application/json:
                    schema:
                        type: object
                        properties:
                            success:
                                type: boolean
                            data:
                                type: array
                                items:
                                    $ref: '#/components/schemas/Product'
    """
    with products_repository.create_session() as session:
        products = session.get({'status': 'published'})
    return {
        'success': True,
        'data': [product.to_response() for product in products]
    }

@route('/api/products/{slug}', 'GET', error='Failed to fetch product')
def get_published_product(event, response: Response):
    """Get a published product by its slug.
    ---
    tags:
        - products
    parameters:
        - in: path
          name: slug
          required: true
          schema:
            type: string
    responses:
        200:
            description: The product
        404:
            description: No published product has this slug
    """
    slug = event['pathParameters']['slug']
    with products_repository.create_session() as session:
        product = session.get_first({'slug': slug, 'status': 'published'})
    if product is None:
        return response.status(404).json(NOT_FOUND)
    return {
        'success': True,
        'data': product.to_response()
    }

@route('/api/products', 'POST', error='Failed to create product')
@use(authenticate)
def create_product(event, response: Response):
    """Create a product. The slug is derived from the name unless one is given, and made unique.
    ---
    tags:
        - products
    security:
        - bearerAuth: []
    requestBody:
        required: true
        content:
            application/json:
                schema:
                    $ref: '#/components/schemas/ProductInput'
    responses:
        201:
            description: Product created successfully
        400:
            description: Missing fields or an invalid affiliate link
    """
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    missing_fields = validate_required_fields(data, PRODUCT_REQUIRED_FIELDS)
    if missing_fields:
        return response.status(400).json({
            'success': False,
            'error': f"Missing required fields: {', '.join(missing_fields)}"
        })
    if not is_valid_url(data['affiliateLink']):
        return response.status(400).json({'success': False, 'error': 'Invalid affiliate link URL'})

    slug = slugify(str(data.get('slug') or data['name']))
    if not slug:
        return response.status(400).json({'success': False, 'error': 'Invalid slug'})
    now = utc_now()
    with products_repository.create_session() as session:
        product = session.create({
            **pick(data, PRODUCT_WRITABLE_FIELDS),
            'slug': unique_slug(session, slug),
            'status': data.get('status') or 'draft',
            'createdAt': now,
            'updatedAt': now
        })
    return response.status(201).json({
        'success': True,
        'data': product.to_response(),
        'message': 'Product created successfully'
    })

@route('/api/products/{id}', 'PUT', error='Failed to update product')
@use(authenticate)
def update_product(event, response: Response):
    """Apply a partial update to a product."""
    product_id = event['pathParameters']['id']
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    with products_repository.create_session() as session:
        if session.get_first({'id': product_id}) is None:
            return response.status(404).json(NOT_FOUND)
        if data.get('affiliateLink') is not None and not is_valid_url(data['affiliateLink']):
            return response.status(400).json({'success': False, 'error': 'Invalid affiliate link URL'})

        changes = pick(data, PRODUCT_WRITABLE_FIELDS)
        if data.get('slug'):
            changes['slug'] = slugify(str(data['slug']))
            if not changes['slug']:
                return response.status(400).json({'success': False, 'error': 'Invalid slug'})
            if not is_slug_unique(session, changes['slug'], exclude_id=product_id):
                return response.status(400).json({'success': False, 'error': 'Slug already exists'})
        else:
            changes.pop('slug', None)
        changes['updatedAt'] = utc_now()
        product = session.merge({'id': product_id}, changes)
    return {
        'success': True,
        'data': product.to_response(),
        'message': 'Product updated successfully'
    }

@route('/api/products/{id}', 'DELETE', error='Failed to delete product')
@use(authenticate)
def delete_product(event, response: Response):
    product_id = event['pathParameters']['id']
    with products_repository.create_session() as session:
        if session.get_first({'id': product_id}) is None:
            return response.status(404).json(NOT_FOUND)
        session.delete({'id': product_id})
    return {
        'success': True,
        'message': 'Product deleted successfully'
    }
