from functools import wraps
import json
import inspect

class Response:
    def __init__(self):
        self.body = {}
        self.headers = {}
        self.terminated = False

    def status(self, code: int):
        self.body = {
            'statusCode': code
        }
        self.terminated = True
        return self

    def header(self, name: str, value: str):
        self.headers[name] = value
        return self

    def json(self, body):
        self.body = {
            'statusCode': self.body.get('statusCode', 200),
            'headers': {
                'Content-Type': 'application/json',
                **self.headers
            },
            'isBase64Encoded': False,
            # Timestamps and other non-JSON values are written as strings
            'body': json.dumps(body, default=str)
        }
        self.terminated = True

    def redirect(self, location: str, code: int = 302):
        self.body = {
            'statusCode': code,
            'headers': {
                'Location': location,
                **self.headers
            },
            'isBase64Encoded': False,
            'body': ''
        }
        self.terminated = True

def get_header(event: dict, name: str, default: str | None = None) -> str | None:
    """Read a request header, ignoring case.

    API Gateway forwards headers with whatever casing the client used.
    """
    headers = event.get('headers') or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return default

def use(middleware):
    """Apply a middleware to a function to modify the event and context before the function is executed.

    The middleware receives ``(event, response, context)`` and returns the same triple. If it
    terminates the response (for instance by answering 401), the wrapped function is not called.

    Args:
        middleware (function): The middleware function to apply.
    """
    def decorator(func):
        @wraps(func) # Preserve the function metadata.
        def wrapper(event, response=None, context={}):
            if response is None:
                response = Response()
            event, response, context = middleware(event, response, context)
            if response.terminated:
                return event, response, context
            args = (event, response, context)
            num_args = len(inspect.signature(func).parameters)
            return func(*args[:num_args])
        return wrapper
    return decorator
