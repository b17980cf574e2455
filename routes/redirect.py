import logging
from db.shared_repositories import click_events_repository, products_repository
from middlewares.authenticate import authenticate
from models.document import utc_now
from routes import route
from utils import Response, get_header, use

logger = logging.getLogger(__name__)

RECENT_CLICKS_LIMIT = 100

def get_user_ip(event: dict) -> str:
    """The requester address: first forwarded-for entry, then X-Real-IP, then the source IP seen by API Gateway."""
    forwarded_for = get_header(event, 'X-Forwarded-For')
    if forwarded_for and forwarded_for.split(',')[0].strip():
        return forwarded_for.split(',')[0].strip()
    real_ip = get_header(event, 'X-Real-IP')
    if real_ip:
        return real_ip
    source_ip = ((event.get('requestContext') or {}).get('identity') or {}).get('sourceIp')
    return source_ip or 'unknown'

@route('/api/redirect/{productSlug}', 'GET', error='Internal server error during redirect')
def redirect_to_affiliate(event, response: Response):
    """Redirect to the affiliate link of a published product and record the click.
    ---
    tags:
        - redirect
    parameters:
        - in: path
          name: productSlug
          required: true
          schema:
            type: string
    responses:
        302:
            description: Redirect to the affiliate link
        404:
            description: Product not found or not published
    """
    slug = event['pathParameters']['productSlug']
    with products_repository.create_session() as products, \
         click_events_repository.create_session() as click_events:
        product = products.get_first({'slug': slug, 'status': 'published'})
        if product is None:
            return response.status(404).json({'success': False, 'error': 'Product not found or not published'})
        if not product.affiliate_link:
            return response.status(400).json({'success': False, 'error': 'Affiliate link not available for this product'})

        now = utc_now()
        click_events.create({
            'productId': product.id,
            'productSlug': product.slug,
            'userIP': get_user_ip(event),
            'userAgent': get_header(event, 'User-Agent') or 'unknown',
            'referrer': get_header(event, 'Referer') or get_header(event, 'Referrer') or 'direct',
            'timestamp': now,
            'createdAt': now
        })
        # Read-increment-write; concurrent clicks on the same product can lose an increment
        products.merge({'id': product.id}, {
            'clickCount': product.click_count + 1,
            'lastClickedAt': now,
            'updatedAt': now
        })
    logger.info("Click tracked for product %s", product.slug)
    return response.redirect(product.affiliate_link, 302)

@route('/api/redirect/analytics/{productSlug}', 'GET', error='Failed to fetch click analytics')
@use(authenticate)
def get_click_analytics(event, response: Response):
    """Click count of a product with its most recent clicks, newest first."""
    slug = event['pathParameters']['productSlug']
    with products_repository.create_session() as products, \
         click_events_repository.create_session() as click_events:
        product = products.get_first({'slug': slug})
        if product is None:
            return response.status(404).json({'success': False, 'error': 'Product not found'})
        recent_clicks = click_events.get(
            {'productId': product.id},
            sort_by='timestamp',
            descending=True,
            limit=RECENT_CLICKS_LIMIT
        )
    product_data = product.to_response()
    return {
        'success': True,
        'data': {
            'product': {
                'id': product.id,
                'name': product.name,
                'slug': product.slug,
                'clickCount': product.click_count,
                'lastClickedAt': product_data['lastClickedAt']
            },
            'recentClicks': [click.to_response() for click in recent_clicks],
            'totalClicks': product.click_count
        }
    }
