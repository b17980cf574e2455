import base64
import json
from config import config
from . import authenticate

class InvalidJsonError(ValueError):
    pass

class PayloadTooLargeError(ValueError):
    pass

def parse_body(event_raw, context, response, max_bytes: int | None = None):
    """Decode the JSON body of an API Gateway event in place.

    Base64 bodies are decoded first. An empty body becomes None.

    Raises:
        PayloadTooLargeError: The body is larger than the configured ceiling.
        InvalidJsonError: The body is not valid JSON.
    """
    event = event_raw
    max_bytes = max_bytes if max_bytes is not None else config.app.max_body_bytes
    request_body = event.get('body')
    if request_body is None or isinstance(request_body, (dict, list)):
        return event, response, context
    if isinstance(request_body, str):
        request_body = request_body.encode('utf-8')
    if event.get('isBase64Encoded'):
        request_body = base64.b64decode(request_body)
    if len(request_body) > max_bytes:
        raise PayloadTooLargeError(f'Request body exceeds {max_bytes} bytes')
    if not request_body.strip():
        event['body'] = None
        return event, response, context
    try:
        event['body'] = json.loads(request_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidJsonError(str(e)) from e
    return event, response, context
