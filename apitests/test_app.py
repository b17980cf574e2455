import base64
import json
from base import execute_endpoint
from lambda_function import lambda_handler

def test_welcome():
    result = execute_endpoint('/')
    assert result['statusCode'] == 200
    assert result['body']['success'] is True
    assert result['body']['endpoints']['products'] == '/api/products'

def test_health():
    result = execute_endpoint('/api/health/')
    assert result['statusCode'] == 200
    assert result['body']['message'] == 'Affiliate Content API is running'
    assert result['body']['timestamp']

def test_unknown_endpoint():
    result = execute_endpoint('/api/unknown', 'DELETE')
    assert result['statusCode'] == 404
    assert result['body'] == {
        'success': False,
        'error': 'Endpoint not found',
        'message': 'The requested endpoint DELETE /api/unknown does not exist'
    }

def test_invalid_json():
    result = execute_endpoint('/api/products', 'POST', '{"name": ', auth=True)
    assert result['statusCode'] == 400
    assert result['body']['error'] == 'Invalid JSON'

def test_base64_body():
    body = base64.b64encode(json.dumps({'name': 'Electronics'}).encode('utf-8')).decode('ascii')
    result = lambda_handler({
        'httpMethod': 'POST',
        'path': '/api/categories',
        'headers': {'Authorization': 'Bearer admin-token'},
        'isBase64Encoded': True,
        'body': body
    }, None)
    assert result['statusCode'] == 201

def test_payload_too_large(monkeypatch):
    from config import config
    monkeypatch.setattr(config.app, 'max_body_bytes', 16)
    result = execute_endpoint('/api/categories', 'POST', {'name': 'A category with a long name'}, auth=True)
    assert result['statusCode'] == 413
    assert result['body']['error'] == 'Payload Too Large'

def test_unknown_origin_is_refused():
    result = execute_endpoint('/api/health', headers={'Origin': 'https://evil.example.com'})
    assert result['statusCode'] == 403
    assert result['body']['error'] == 'CORS Error'
    assert 'Access-Control-Allow-Origin' not in result['headers']

def test_allowed_origin_is_echoed():
    result = execute_endpoint('/api/health', headers={'Origin': 'http://localhost:3000'})
    assert result['statusCode'] == 200
    assert result['headers']['Access-Control-Allow-Origin'] == 'http://localhost:3000'
    assert result['headers']['Access-Control-Allow-Credentials'] == 'true'

def test_preflight():
    result = execute_endpoint('/api/products', 'OPTIONS', headers={'Origin': 'http://localhost:3000'})
    assert result['statusCode'] == 204
    assert 'PUT' in result['headers']['Access-Control-Allow-Methods']
    assert 'Authorization' in result['headers']['Access-Control-Allow-Headers']

def test_security_headers():
    headers = execute_endpoint('/api/health')['headers']
    assert headers['X-Content-Type-Options'] == 'nosniff'
    assert headers['X-Frame-Options'] == 'SAMEORIGIN'
    assert headers['Content-Type'] == 'application/json'

def test_unsupported_event():
    result = lambda_handler({'Records': []}, None)
    assert result['statusCode'] == 400
