from urllib.parse import unquote
import json
import logging
from config import config
from middlewares import InvalidJsonError, PayloadTooLargeError, parse_body
from middlewares.cors import CorsError, apply_headers, check_origin, cors_headers, preflight_headers
from routes import parse_path_parameters, routes
from utils import Response
from utils.timer import Timer

logging.basicConfig(level=config.app.log_level.upper())
logger = logging.getLogger(__name__)
access_logger = logging.getLogger('access')

def error_result(status: int, body: dict) -> dict:
    return {
        'statusCode': status,
        'isBase64Encoded': False,
        'headers': {
            'Content-Type': 'application/json',
        },
        'body': json.dumps(body)
    }

def normalize_path(path: str | None) -> str:
    path = path or '/'
    if not path.startswith('/'):
        path = f'/{path}'
    if path.endswith('/') and len(path) > 1:
        path = path[:-1]
    return path

def dispatch(event, context, method: str, path: str) -> tuple[dict, str | None]:
    """Run the handler matching the request and return its result with the matched route."""
    event, response, context = parse_body(event, context, Response())
    try:
        route, path_params = parse_path_parameters(path, method)
    except KeyError:
        return error_result(404, {
            'success': False,
            'error': 'Endpoint not found',
            'message': f'The requested endpoint {method} {path} does not exist'
        }), None
    event['pathParameters'] = {key: unquote(value) for key, value in path_params.items()}
    _, response, _ = routes[route][method](event, response, context)
    return response.body, route

def handle_api_gateway_event(event, context):
    method = (event.get('httpMethod') or 'GET').upper()
    path = normalize_path(event.get('path'))
    route = None
    origin = None
    with Timer() as timer:
        try:
            origin = check_origin(event)
            if method == 'OPTIONS':
                result = {
                    'statusCode': 204,
                    'isBase64Encoded': False,
                    'headers': preflight_headers(origin),
                    'body': ''
                }
            else:
                result, route = dispatch(event, context, method, path)
        except CorsError as e:
            result = error_result(403, {
                'success': False,
                'error': 'CORS Error',
                'message': str(e),
                'hint': 'Make sure your frontend origin is included in ALLOWED_ORIGINS environment variable'
            })
        except InvalidJsonError:
            result = error_result(400, {
                'success': False,
                'error': 'Invalid JSON',
                'message': 'Request body contains invalid JSON'
            })
        except PayloadTooLargeError as e:
            result = error_result(413, {
                'success': False,
                'error': 'Payload Too Large',
                'message': str(e)
            })
        except Exception as e:
            logger.exception("Unhandled error for %s %s", method, path)
            result = error_result(500, {
                'success': False,
                'error': 'Internal Server Error',
                'message': str(e) if config.app.is_development else 'Something went wrong'
            })
    apply_headers(result, cors_headers(origin))
    access_logger.info(json.dumps({
        'method': method,
        'path': path,
        'route': route,
        'status': result.get('statusCode'),
        'duration_ms': timer.elapsed_ms
    }))
    return result

def lambda_handler(event, context):
    # API Gateway proxy events carry the request path
    if event.get('path') is not None:
        return handle_api_gateway_event(event, context)
    logger.warning("Ignoring unsupported event: %s", list(event.keys()))
    return error_result(400, {'success': False, 'error': 'Unsupported event'})

def invoke(event, verbose=False):
    """Call the handler with an API Gateway-shaped event, for local debugging."""
    result = lambda_handler({
        **event,
        'headers': {
            'Content-Type': 'application/json',
            **(event.get('headers') or {})
        }
    }, {})
    if verbose: print(json.dumps(result, indent=2))
    return result

if __name__ == "__main__":
    invoke({
        'path': '/api/health',
        'httpMethod': 'GET',
    }, verbose=True)
