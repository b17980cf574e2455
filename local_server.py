"""
Serve the Lambda handler over HTTP for local development.

Each request is translated into an API Gateway proxy event, passed to
``lambda_handler`` and its result written back as the HTTP response.

    python local_server.py
"""

import asyncio
import base64
from urllib.parse import parse_qsl
import uvicorn
from config import config
from lambda_function import lambda_handler

async def read_body(receive) -> bytes:
    body = b''
    more_body = True
    while more_body:
        message = await receive()
        body += message.get('body', b'')
        more_body = message.get('more_body', False)
    return body

def to_event(scope: dict, body: bytes) -> dict:
    headers = {key.decode('latin-1'): value.decode('latin-1') for key, value in scope['headers']}
    client = scope.get('client') or ('unknown', 0)
    return {
        'path': scope['path'],
        'httpMethod': scope['method'],
        'headers': headers,
        'queryStringParameters': dict(parse_qsl(scope.get('query_string', b'').decode('latin-1'))) or None,
        'body': base64.b64encode(body).decode('ascii') if body else None,
        'isBase64Encoded': bool(body),
        'requestContext': {
            'identity': {
                'sourceIp': client[0]
            }
        }
    }

async def app(scope, receive, send):
    if scope['type'] != 'http':
        return
    body = await read_body(receive)
    # The handler blocks on storage and provider calls; keep it off the event loop
    result = await asyncio.to_thread(lambda_handler, to_event(scope, body), {})
    payload = result.get('body') or ''
    payload = base64.b64decode(payload) if result.get('isBase64Encoded') else payload.encode('utf-8')
    await send({
        'type': 'http.response.start',
        'status': result['statusCode'],
        'headers': [(key.encode('latin-1'), str(value).encode('latin-1')) for key, value in (result.get('headers') or {}).items()],
    })
    await send({
        'type': 'http.response.body',
        'body': payload,
    })

if __name__ == '__main__':
    uvicorn.run(app, host='0.0.0.0', port=config.app.port, log_level=config.app.log_level.lower())
