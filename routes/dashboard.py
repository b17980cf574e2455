from db.shared_repositories import categories_repository, deals_repository, posts_repository, products_repository
from middlewares.authenticate import authenticate
from models.document import utc_now
from routes import route
from utils import Response, use

RECENT_LIMIT = 5

def count_by_status(documents: list) -> dict:
    published = len([document for document in documents if document.status == 'published'])
    return {
        'total': len(documents),
        'published': published,
        'draft': len(documents) - published
    }

@route('/api/dashboard/stats', 'GET', error='Failed to fetch dashboard statistics')
@use(authenticate)
def get_dashboard_stats(event, response: Response):
    """Overview counts for the admin dashboard, with the five newest products and posts.
    ---
    tags:
        - dashboard
    security:
        - bearerAuth: []
    responses:
        200:
            description: The dashboard statistics
    """
    now = utc_now()
    with products_repository.create_session() as products, \
         posts_repository.create_session() as posts, \
         categories_repository.create_session() as categories, \
         deals_repository.create_session() as deals:
        all_products = products.list(sort_by='created_at', descending=True)
        all_posts = posts.list(sort_by='created_at', descending=True)
        total_categories = categories.count()
        all_deals = deals.list()
    product_counts = count_by_status(all_products)
    post_counts = count_by_status(all_posts)
    return {
        'success': True,
        'data': {
            'totalProducts': product_counts['total'],
            'publishedProducts': product_counts['published'],
            'draftProducts': product_counts['draft'],
            'totalPosts': post_counts['total'],
            'publishedPosts': post_counts['published'],
            'draftPosts': post_counts['draft'],
            'totalCategories': total_categories,
            'totalDeals': len(all_deals),
            'activeDeals': len([deal for deal in all_deals if deal.is_running(now)]),
            'totalClicks': sum(product.click_count for product in all_products),
            'recentProducts': [product.to_response() for product in all_products[:RECENT_LIMIT]],
            'recentPosts': [post.to_response() for post in all_posts[:RECENT_LIMIT]]
        }
    }

@route('/api/dashboard/products', 'GET', error='Failed to fetch products')
@use(authenticate)
def list_all_products(event, response: Response):
    """Every product, drafts included, newest first."""
    with products_repository.create_session() as session:
        products = session.list(sort_by='created_at', descending=True)
    return {
        'success': True,
        'data': [product.to_response() for product in products]
    }

@route('/api/dashboard/posts', 'GET', error='Failed to fetch posts')
@use(authenticate)
def list_all_posts(event, response: Response):
    with posts_repository.create_session() as session:
        posts = session.list(sort_by='created_at', descending=True)
    return {
        'success': True,
        'data': [post.to_response() for post in posts]
    }
