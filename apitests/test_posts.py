from base import POST, create_post, execute_endpoint

def test_create_post():
    result = execute_endpoint('/api/posts', 'POST', POST, auth=True)
    assert result['statusCode'] == 201
    post = result['body']['data']
    assert result['body']['message'] == 'Blog post created successfully'
    assert post['slug'] == 'ten-kettles-worth-buying'
    assert post['status'] == 'draft'
    assert post['tags'] == ['kitchen', 'reviews']
    assert post['coverImage'] == POST['coverImage']

def test_create_post_without_tags():
    post = create_post({'tags': None})
    assert post['tags'] == []

def test_create_post_missing_fields():
    result = execute_endpoint('/api/posts', 'POST', {'title': 'Title only'}, auth=True)
    assert result['statusCode'] == 400
    assert result['body']['error'] == 'Missing required fields: content, coverImage'

def test_create_post_invalid_cover_image():
    result = execute_endpoint('/api/posts', 'POST', {**POST, 'coverImage': 'cover.jpg'}, auth=True)
    assert result['statusCode'] == 400
    assert result['body']['error'] == 'Invalid cover image URL'

def test_public_posts_are_published_only():
    create_post()
    published = create_post({'title': 'Published Post', 'status': 'published'})
    listed = execute_endpoint('/api/posts')['body']['data']
    assert [post['id'] for post in listed] == [published['id']]
    assert execute_endpoint('/api/posts/ten-kettles-worth-buying')['statusCode'] == 404
    result = execute_endpoint('/api/posts/published-post')
    assert result['statusCode'] == 200
    assert result['body']['data'] == published

def test_update_post():
    created = create_post()
    result = execute_endpoint(f"/api/posts/{created['id']}", 'PUT', {'tags': ['news'], 'slug': 'New Slug'}, auth=True)
    assert result['statusCode'] == 200
    post = result['body']['data']
    assert post['tags'] == ['news']
    assert post['slug'] == 'new-slug'
    assert post['title'] == created['title']

def test_update_post_slug_collision():
    first = create_post()
    second = create_post({'title': 'Another Post'})
    result = execute_endpoint(f"/api/posts/{second['id']}", 'PUT', {'slug': first['slug']}, auth=True)
    assert result['statusCode'] == 400
    assert result['body']['error'] == 'Slug already exists'

def test_update_post_invalid_cover_image():
    created = create_post()
    result = execute_endpoint(f"/api/posts/{created['id']}", 'PUT', {'coverImage': 'nope'}, auth=True)
    assert result['statusCode'] == 400

def test_delete_post():
    created = create_post()
    assert execute_endpoint(f"/api/posts/{created['id']}", 'DELETE')['statusCode'] == 401
    result = execute_endpoint(f"/api/posts/{created['id']}", 'DELETE', auth=True)
    assert result['statusCode'] == 200
    assert result['body']['message'] == 'Blog post deleted successfully'
    assert execute_endpoint(f"/api/posts/{created['id']}", 'DELETE', auth=True)['statusCode'] == 404
