from models.document import utc_now
from routes import route

API_VERSION = '1.0.0'

@route('/', 'GET')
def welcome():
    """Describe the API and list its endpoint groups."""
    return {
        'success': True,
        'message': 'Welcome to the Affiliate Content API',
        'version': API_VERSION,
        'endpoints': {
            'auth': '/api/auth',
            'products': '/api/products',
            'posts': '/api/posts',
            'categories': '/api/categories',
            'deals': '/api/deals',
            'redirect': '/api/redirect',
            'admin': '/api/admin',
            'dashboard': '/api/dashboard',
            'health': '/api/health'
        }
    }

@route('/api/health', 'GET')
def health():
    """Liveness probe.
    ---
    tags:
        - health
    responses:
        200:
            description: The API is running
    """
    return {
        'success': True,
        'message': 'Affiliate Content API is running',
        'timestamp': utc_now().isoformat()
    }
