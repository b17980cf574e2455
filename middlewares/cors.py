import logging
import re
from config import config
from utils import get_header

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS', 'PATCH']
ALLOWED_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With', 'Accept', 'Origin']
LOCAL_ORIGIN = re.compile(r'^https?://(localhost|127\.0\.0\.1)(:\d+)?$')

SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'self'",
    'Cross-Origin-Opener-Policy': 'same-origin',
    'Cross-Origin-Resource-Policy': 'same-origin',
    'Referrer-Policy': 'no-referrer',
    'Strict-Transport-Security': 'max-age=15552000; includeSubDomains',
    'X-Content-Type-Options': 'nosniff',
    'X-DNS-Prefetch-Control': 'off',
    'X-Frame-Options': 'SAMEORIGIN',
    'X-XSS-Protection': '0',
}

class CorsError(Exception):
    def __init__(self, origin: str):
        super().__init__(f"Origin '{origin}' not allowed by CORS")
        self.origin = origin

def is_origin_allowed(origin: str | None) -> bool:
    """Requests without an Origin header (curl, server to server) are always allowed."""
    if not origin:
        return True
    if config.app.is_development and LOCAL_ORIGIN.match(origin):
        return True
    return origin in config.app.allowed_origins

def check_origin(event: dict) -> str | None:
    """Return the request origin if it may call the API.

    Raises:
        CorsError: The origin is not in the allow-list.
    """
    origin = get_header(event, 'Origin')
    if not is_origin_allowed(origin):
        logger.warning("CORS: Origin '%s' not allowed. Allowed origins: %s", origin, config.app.allowed_origins)
        raise CorsError(origin)
    return origin

def cors_headers(origin: str | None) -> dict:
    if not origin:
        return {}
    return {
        'Access-Control-Allow-Origin': origin,
        'Access-Control-Allow-Credentials': 'true',
        'Vary': 'Origin',
    }

def preflight_headers(origin: str | None) -> dict:
    return {
        **cors_headers(origin),
        'Access-Control-Allow-Methods': ', '.join(ALLOWED_METHODS),
        'Access-Control-Allow-Headers': ', '.join(ALLOWED_HEADERS),
    }

def apply_headers(result: dict, headers: dict) -> dict:
    """Add headers to a Lambda proxy result, keeping any the handler already set."""
    result['headers'] = {**SECURITY_HEADERS, **headers, **(result.get('headers') or {})}
    return result
