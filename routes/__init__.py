from functools import wraps
from pydantic import ValidationError
from db.clients.base_storage_client import StorageUnavailableError
from utils import Response
import inspect
import logging
import typing
import re

logger = logging.getLogger(__name__)

routes = {}

HttpMethod = typing.Literal['GET', 'POST', 'PUT', 'DELETE', 'PATCH']

def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic validation error into a single readable line."""
    messages = []
    for detail in error.errors():
        location = '.'.join(str(part) for part in detail.get('loc', ()))
        messages.append(f"{location}: {detail.get('msg')}" if location else detail.get('msg'))
    return 'Invalid fields: ' + '; '.join(messages)

def route(action: str, method: HttpMethod = 'GET', error: str = 'Internal Server Error'):
    """Register a handler for a path pattern and HTTP method.

    The handler receives up to three arguments ``(event, response, context)`` and may either
    write to the response itself or return a dict/list that is sent as JSON with status 200.

    Failures the handler does not anticipate are answered here: an unreachable document store
    becomes 503, a document that fails model validation becomes 400, and anything else is logged
    and becomes 500 with ``error`` as the message.
    """
    def decorator(func):
        @wraps(func) # Preserve the function metadata (name, docstring, etc.)
        def inner(event, response=None, context=None):
            if response is None:
                response = Response()
            num_args = len(inspect.signature(func).parameters)
            args = (event, response, context)
            try:
                results = func(*args[:num_args])
            except StorageUnavailableError as e:
                logger.error("Document store unavailable in %s: %s", func.__name__, e)
                response.status(503).json({
                    'success': False,
                    'error': 'Service Unavailable',
                    'message': 'Document store not configured'
                })
                return event, response, context
            except ValidationError as e:
                response.status(400).json({'success': False, 'error': format_validation_error(e)})
                return event, response, context
            except Exception:
                logger.exception("Unhandled error in %s", func.__name__)
                response.status(500).json({'success': False, 'error': error})
                return event, response, context
            if results is None:
                return event, response, context
            if isinstance(results, tuple) and len(results) == 3:
                return results
            if type(results) in [dict, list]:
                response.json(results)
            return event, response, context
        # Ensure the route starts with a forward slash and does not end with one
        formatted_route = action if action.startswith("/") else f"/{action}"
        formatted_route = formatted_route[:-1] if formatted_route.endswith("/") and len(formatted_route) > 1 else formatted_route
        if formatted_route not in routes:
            routes[formatted_route] = {}
        routes[formatted_route][method.upper()] = inner
        return inner
    return decorator

def get_path_param_keys(route: str) -> list[str]:
    """Get the keys of the path parameters in a route.

    Example:

    ```python
    keys = get_path_param_keys('/api/products/{slug}')
    print(keys)  # ['slug']
    ```

    Args:
        route (str): The route to extract the path parameters from.

    Returns:
        list[str]: The keys of the path parameters in the route.
    """
    return re.findall(r'{(.*?)}', route)

def parse_path_parameters(path: str, method: str | None = None) -> tuple[str, dict]:
    """Find the route associated with a path and extract the path parameters.
    Raises a KeyError if the path does not match any route.

    When a method is given, only routes that accept that method are considered, so that
    ``/api/products/{slug}`` (GET) and ``/api/products/{id}`` (PUT) can coexist. Static
    routes take precedence over dynamic ones.

    Example:

    ```
    path, params = parse_path_parameters('/api/products/blue-kettle', 'GET')
    print(path, params)  # /api/products/{slug} {'slug': 'blue-kettle'}
    ```

    Args:
        path (str): The url path to look up.
        method (str, optional): The HTTP method of the request.

    Returns:
        tuple[str, dict]: The route pattern and the extracted path parameters from the url.
    """
    def accepts(methods: dict) -> bool:
        return method is None or method.upper() in methods

    for candidate, methods in routes.items():
        # If an exact match is found -> the route is static and has no parameters
        if candidate == path and accepts(methods):
            return candidate, {}

    path_parts = path.split('/')
    for candidate, methods in routes.items():
        if '{' not in candidate or not accepts(methods):
            continue
        if len(candidate.split('/')) != len(path_parts):
            continue
        # Replace all {param} with a single-segment pattern to find the parameter values
        escaped_route = re.escape(candidate)
        escaped_route = re.sub(r'\\{.*?\\}', r'([^/]+)', escaped_route)
        matches = re.match(f"^{escaped_route}$", path)
        if matches is None:
            continue
        keys = get_path_param_keys(candidate)
        return candidate, {key: matches.group(i + 1) for i, key in enumerate(keys)}
    raise KeyError(f'No route found for path: {path}')

# Declare all routes here - won't work without the imports
from . import health
from . import auth
from . import products
from . import posts
from . import categories
from . import deals
from . import redirect
from . import admin
from . import dashboard
