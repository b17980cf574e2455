import asyncio
import base64
import json
import threading
import unittest
from unittest.mock import patch
import local_server

SCOPE = {
    'type': 'http',
    'method': 'POST',
    'path': '/api/auth/exchange',
    'query_string': b'page=2&limit=5',
    'headers': [(b'content-type', b'application/json'), (b'x-forwarded-for', b'203.0.113.7')],
    'client': ('127.0.0.1', 5000),
}

def serve(scope: dict, chunks: list[bytes]) -> list[dict]:
    messages = [{'type': 'http.request', 'body': chunk, 'more_body': i < len(chunks) - 1} for i, chunk in enumerate(chunks)]
    sent = []

    async def receive():
        return messages.pop(0)

    async def send(message):
        sent.append(message)

    asyncio.run(local_server.app(scope, receive, send))
    return sent

class ToEventTestCase(unittest.TestCase):
    def test_translates_scope(self):
        event = local_server.to_event(SCOPE, b'{"a": 1}')
        self.assertEqual(event['path'], '/api/auth/exchange')
        self.assertEqual(event['httpMethod'], 'POST')
        self.assertEqual(event['headers']['x-forwarded-for'], '203.0.113.7')
        self.assertEqual(event['queryStringParameters'], {'page': '2', 'limit': '5'})
        self.assertTrue(event['isBase64Encoded'])
        self.assertEqual(base64.b64decode(event['body']), b'{"a": 1}')
        self.assertEqual(event['requestContext']['identity']['sourceIp'], '127.0.0.1')

    def test_empty_request(self):
        event = local_server.to_event({**SCOPE, 'query_string': b'', 'client': None}, b'')
        self.assertIsNone(event['queryStringParameters'])
        self.assertIsNone(event['body'])
        self.assertFalse(event['isBase64Encoded'])
        self.assertEqual(event['requestContext']['identity']['sourceIp'], 'unknown')

class AppTestCase(unittest.TestCase):
    def test_handler_response_is_sent(self):
        start, body = serve(SCOPE, [b'{"customToken": ', b'"abc"}'])
        self.assertEqual(start['type'], 'http.response.start')
        self.assertEqual(start['status'], 200)
        self.assertEqual(body['type'], 'http.response.body')
        self.assertEqual(json.loads(body['body'])['data']['customToken'], 'abc')

    def test_handler_runs_off_the_event_loop(self):
        loop_thread = threading.get_ident()
        handler_threads = []

        def handler(event, context):
            handler_threads.append(threading.get_ident())
            return {'statusCode': 204, 'headers': {'X-Test': 'yes'}}

        with patch('local_server.lambda_handler', handler):
            start, body = serve({**SCOPE, 'method': 'GET'}, [b''])
        self.assertEqual(len(handler_threads), 1)
        self.assertNotEqual(handler_threads[0], loop_thread)
        self.assertEqual(start['status'], 204)
        self.assertEqual(start['headers'], [(b'X-Test', b'yes')])
        self.assertEqual(body['body'], b'')

if __name__ == '__main__':
    unittest.main()
