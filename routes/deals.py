from db.shared_repositories import deals_repository
from middlewares.authenticate import authenticate, optional_authenticate
from models.deal import DEAL_REQUIRED_FIELDS, DEAL_WRITABLE_FIELDS
from models.document import utc_now
from routes import route
from utils import Response, use
from utils.helpers import get_json_body, is_valid_url, pick, validate_required_fields

INVALID_BODY = {'success': False, 'error': 'Request body must be a JSON object'}
NOT_FOUND = {'success': False, 'error': 'Deal not found'}

def invalid_links(data: dict) -> str | None:
    """Return an error message if a link in the payload is not a URL."""
    if data.get('affiliateLink') is not None and not is_valid_url(data['affiliateLink']):
        return 'Invalid affiliate link URL'
    if data.get('imageUrl') and not is_valid_url(data['imageUrl']):
        return 'Invalid image URL'
    return None

def active_deals() -> dict:
    """Envelope of the deals that are active and within their start and end dates, newest first."""
    now = utc_now()
    with deals_repository.create_session() as session:
        deals = session.list(sort_by='created_at', descending=True)
    running = [deal.to_response() for deal in deals if deal.is_running(now)]
    return {
        'success': True,
        'data': running,
        'message': f'Found {len(running)} active deals'
    }

@route('/api/deals/public', 'GET', error='Failed to fetch active deals')
def list_active_deals(event, response: Response):
    """List the deals that are active and within their start and end dates, newest first.
    ---
    tags:
        - deals
    responses:
        200:
            description: The running deals
    """
    return active_deals()

@route('/api/deals/public/{id}', 'GET', error='Failed to fetch deal')
def get_deal(event, response: Response):
    deal_id = event['pathParameters']['id']
    with deals_repository.create_session() as session:
        deal = session.get_first({'id': deal_id})
    if deal is None:
        return response.status(404).json(NOT_FOUND)
    return {
        'success': True,
        'data': deal.to_response()
    }

@route('/api/deals', 'GET', error='Failed to fetch deals')
@use(optional_authenticate)
def list_deals(event, response: Response):
    """List deals: every deal for an authenticated admin, only the running ones otherwise."""
    if event.get('user') is None:
        return active_deals()
    with deals_repository.create_session() as session:
        deals = session.list(sort_by='created_at', descending=True)
    return {
        'success': True,
        'data': [deal.to_response() for deal in deals],
        'message': f'Found {len(deals)} deals'
    }

@route('/api/deals', 'POST', error='Failed to create deal')
@use(authenticate)
def create_deal(event, response: Response):
    """Create a deal. The discount percentage is always computed from the two prices.
    ---
    tags:
        - deals
    security:
        - bearerAuth: []
    responses:
        201:
            description: Deal created successfully
        400:
            description: Missing fields, invalid prices, dates or links
    """
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    missing_fields = validate_required_fields(data, DEAL_REQUIRED_FIELDS)
    if missing_fields:
        return response.status(400).json({
            'success': False,
            'error': f"Missing required fields: {', '.join(missing_fields)}"
        })
    link_error = invalid_links(data)
    if link_error:
        return response.status(400).json({'success': False, 'error': link_error})

    now = utc_now()
    with deals_repository.create_session() as session:
        deal = session.create({
            **pick(data, DEAL_WRITABLE_FIELDS),
            'imageUrl': data.get('imageUrl') or '',
            'category': data.get('category') or 'general',
            'isActive': data.get('isActive', True),
            'createdAt': now,
            'updatedAt': now
        })
    return response.status(201).json({
        'success': True,
        'data': deal.to_response(),
        'message': 'Deal created successfully'
    })

@route('/api/deals/{id}', 'PUT', error='Failed to update deal')
@use(authenticate)
def update_deal(event, response: Response):
    deal_id = event['pathParameters']['id']
    data = get_json_body(event)
    if data is None:
        return response.status(400).json(INVALID_BODY)
    link_error = invalid_links(data)
    with deals_repository.create_session() as session:
        if session.get_first({'id': deal_id}) is None:
            return response.status(404).json(NOT_FOUND)
        if link_error:
            return response.status(400).json({'success': False, 'error': link_error})
        deal = session.merge({'id': deal_id}, {
            **pick(data, DEAL_WRITABLE_FIELDS),
            'updatedAt': utc_now()
        })
    return {
        'success': True,
        'data': deal.to_response(),
        'message': 'Deal updated successfully'
    }

@route('/api/deals/{id}', 'DELETE', error='Failed to delete deal')
@use(authenticate)
def delete_deal(event, response: Response):
    deal_id = event['pathParameters']['id']
    with deals_repository.create_session() as session:
        if session.get_first({'id': deal_id}) is None:
            return response.status(404).json(NOT_FOUND)
        session.delete({'id': deal_id})
    return {
        'success': True,
        'message': 'Deal deleted successfully'
    }
