# Base file for testing the API endpoints.
import json
from typing import Literal
from lambda_function import lambda_handler as local_handler

ADMIN_TOKEN = 'admin-token'

PRODUCT = {
    'name': 'Foo Bar!',
    'image': 'https://x.com/i.jpg',
    'description': 'd',
    'affiliateLink': 'https://aff.com/1',
    'category': 'Electronics'
}

POST = {
    'title': 'Ten Kettles Worth Buying',
    'content': '<p>Kettles.</p>',
    'coverImage': 'https://x.com/cover.jpg',
    'tags': ['kitchen', 'reviews']
}

DEAL = {
    'title': 'Half price headphones',
    'description': 'Noise cancelling',
    'originalPrice': 200,
    'discountedPrice': 100,
    'affiliateLink': 'https://aff.com/deal',
    'startDate': '2020-01-01T00:00:00Z',
    'endDate': '2999-01-01T00:00:00Z'
}

def execute_endpoint(endpoint: str,
                     method: Literal['GET', 'POST', 'DELETE', 'PUT', 'PATCH', 'OPTIONS'] = 'GET',
                     body: dict | str | None = None,
                     headers: dict | None = None,
                     auth = False
                    ):
    """
    Execute a local API endpoint with the given method and body.

    :param endpoint: The API endpoint to call.
    :param method: The HTTP method to use (default is 'GET').
    :param body: The request body, serialized to JSON unless it is already a string (default is None).
    :param headers: Additional headers to include in the request (default is None).
    :param auth: Whether to send the admin bearer token.
    :return: The response from the API call, with the JSON body decoded.
    """
    headers = dict(headers or {})
    if auth:
        headers['Authorization'] = f'Bearer {ADMIN_TOKEN}'

    event = {
        'httpMethod': method,
        'path': endpoint,
        'headers': headers,
    }

    if body is not None:
        event['body'] = body if isinstance(body, str) else json.dumps(body)

    response = local_handler(event, None)
    if response.get('body'):
        response['body'] = json.loads(response['body'])
    return response

def create_product(overrides: dict | None = None) -> dict:
    response = execute_endpoint('/api/products', 'POST', {**PRODUCT, **(overrides or {})}, auth=True)
    assert response['statusCode'] == 201, response['body']
    return response['body']['data']

def create_post(overrides: dict | None = None) -> dict:
    response = execute_endpoint('/api/posts', 'POST', {**POST, **(overrides or {})}, auth=True)
    assert response['statusCode'] == 201, response['body']
    return response['body']['data']

def create_category(name: str, description: str = '') -> dict:
    response = execute_endpoint('/api/categories', 'POST', {'name': name, 'description': description}, auth=True)
    assert response['statusCode'] == 201, response['body']
    return response['body']['data']

def create_deal(overrides: dict | None = None) -> dict:
    response = execute_endpoint('/api/deals', 'POST', {**DEAL, **(overrides or {})}, auth=True)
    assert response['statusCode'] == 201, response['body']
    return response['body']['data']
