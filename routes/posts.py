from db.shared_repositories import posts_repository
from middlewares.authenticate import authenticate
from models.document import utc_now
from models.post import POST_REQUIRED_FIELDS, POST_WRITABLE_FIELDS
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
NOT_FOUND = {'success': False, 'error': 'Post not found'}
INVALID_COVER_IMAGE = {'success': False, 'error': 'Invalid cover image URL'}

@route('/api/posts', 'GET', error='Failed to fetch posts')
def list_published_posts(event, response: Response):
    """List published blog posts.
    ---
    tags:
        - posts
    responses:
        200:
            description: Every published post, possibly none
    """
    with posts_repository.create_session() as session:
        posts = session.get({'status': 'published'})
    return {
        'success': True,
        'data': [post.to_response() for post in posts]
    }

@route('/api/posts/{slug}', 'GET', error='Failed to fetch post')
def get_published_post(event, response: Response):
    slug = event['pathParameters']['slug']
    with posts_repository.create_session() as session:
        post = session.get_first({'slug': slug, 'status': 'published'})
    if post is None:
        return response.status(404).json(NOT_FOUND)
    return {
        'success': True,
        'data': post.to_response()
    }

@route('/api/posts', 'POST', error='Failed to create post')
@use(authenticate)
def create_post(event, response: Response):
    """Create a blog post, as a draft unless a status is given.
    ---
    tags:
        - posts
    security:
        - bearerAuth: []
    responses:
        201:
            description: Blog post created successfully
        400:
            description: Missing fields or an invalid cover image
    """
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    missing_fields = validate_required_fields(data, POST_REQUIRED_FIELDS)
    if missing_fields:
        return response.status(400).json({
            'success': False,
            'error': f"Missing required fields: {', '.join(missing_fields)}"
        })
    if not is_valid_url(data['coverImage']):
        return response.status(400).json(INVALID_COVER_IMAGE)

    slug = slugify(str(data.get('slug') or data['title']))
    if not slug:
        return response.status(400).json({'success': False, 'error': 'Invalid slug'})
    now = utc_now()
    with posts_repository.create_session() as session:
        post = session.create({
            **pick(data, POST_WRITABLE_FIELDS),
            'slug': unique_slug(session, slug),
            'tags': data.get('tags') or [],
            'status': data.get('status') or 'draft',
            'createdAt': now,
            'updatedAt': now
        })
    return response.status(201).json({
        'success': True,
        'data': post.to_response(),
        'message': 'Blog post created successfully'
    })

@route('/api/posts/{id}', 'PUT', error='Failed to update post')
@use(authenticate)
def update_post(event, response: Response):
    post_id = event['pathParameters']['id']
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    with posts_repository.create_session() as session:
        if session.get_first({'id': post_id}) is None:
            return response.status(404).json(NOT_FOUND)
        if data.get('coverImage') is not None and not is_valid_url(data['coverImage']):
            return response.status(400).json(INVALID_COVER_IMAGE)

        changes = pick(data, POST_WRITABLE_FIELDS)
        if data.get('slug'):
            changes['slug'] = slugify(str(data['slug']))
            if not changes['slug']:
                return response.status(400).json({'success': False, 'error': 'Invalid slug'})
            if not is_slug_unique(session, changes['slug'], exclude_id=post_id):
                return response.status(400).json({'success': False, 'error': 'Slug already exists'})
        else:
            changes.pop('slug', None)
        changes['updatedAt'] = utc_now()
        post = session.merge({'id': post_id}, changes)
    return {
        'success': True,
        'data': post.to_response(),
        'message': 'Blog post updated successfully'
    }

@route('/api/posts/{id}', 'DELETE', error='Failed to delete post')
@use(authenticate)
def delete_post(event, response: Response):
    post_id = event['pathParameters']['id']
    with posts_repository.create_session() as session:
        if session.get_first({'id': post_id}) is None:
            return response.status(404).json(NOT_FOUND)
        session.delete({'id': post_id})
    return {
        'success': True,
        'message': 'Blog post deleted successfully'
    }
