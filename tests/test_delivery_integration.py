"""
Delivery Integration Tests
Runs the client against a local HTTP stub so real request encoding,
header handling and socket timeouts are exercised end to end.
"""

import json
import threading
import time
import unittest
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import requests

from postmark_client.modules.delivery_client import DeliveryClient
from postmark_client.modules.email_address import EmailAddress
from postmark_client.modules.errors import (
    AuthenticationError,
    DeliveryTimeoutError,
    ServerResponseError,
    TransportError,
)
from postmark_client.modules.outbound_message import OutboundMessage

RESULT = {
    "ErrorCode": 0,
    "Message": "OK",
    "MessageID": "0a129aee-e1cd-480d-b08d-4f48548ff48d",
    "SubmittedAt": "2024-02-01T10:00:00Z",
    "To": "recipient@example.com",
}


def _direct_session():
    # Ignore proxy settings from the environment; the stub is on loopback
    session = requests.Session()
    session.trust_env = False
    return session


class StubPostmarkHandler(BaseHTTPRequestHandler):
    """Answers according to the class-level `behaviour` set by each test"""

    behaviour = "ok"
    received = []

    def do_POST(self):
        length = int(self.headers.get("Content-Length", "0"))
        body = json.loads(self.rfile.read(length) or b"null")
        type(self).received.append({
            "path": self.path,
            "token": self.headers.get("X-Postmark-Server-Token"),
            "content_type": self.headers.get("Content-Type"),
            "body": body,
        })

        if self.behaviour == "slow":
            time.sleep(1.0)
            self._reply(200, json.dumps(RESULT))
        elif self.behaviour == "stall":
            self._reply_slowly(json.dumps(RESULT), pause_before_body=1.5)
        elif self.behaviour == "trickle":
            self._reply_slowly(json.dumps(RESULT), byte_interval=0.03)
        elif self.behaviour == "unauthorized":
            self._reply(401, '{"ErrorCode": 10, "Message": "Bad token"}')
        elif self.behaviour == "error":
            self._reply(500, "boom")
        elif self.path == "/email/batch":
            self._reply(200, json.dumps([dict(RESULT, To=item["To"]) for item in body]))
        else:
            self._reply(200, json.dumps(RESULT))

    def _reply(self, status, text):
        payload = text.encode("utf-8")
        try:
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)
        except (BrokenPipeError, ConnectionResetError):
            # Client already gave up (timeout test)
            pass

    def _reply_slowly(self, text, pause_before_body=0.0, byte_interval=0.0):
        """Send headers at once, then hold back or drip-feed the body"""
        payload = text.encode("utf-8")
        try:
            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.flush()
            time.sleep(pause_before_body)
            for i in range(len(payload)):
                self.wfile.write(payload[i:i + 1])
                self.wfile.flush()
                time.sleep(byte_interval)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


class TestDeliveryAgainstStubServer(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.server = ThreadingHTTPServer(("127.0.0.1", 0), StubPostmarkHandler)
        cls.server.daemon_threads = True
        cls.thread = threading.Thread(target=cls.server.serve_forever, daemon=True)
        cls.thread.start()
        host, port = cls.server.server_address[:2]
        cls.base_url = f"http://{host}:{port}"

    @classmethod
    def tearDownClass(cls):
        cls.server.shutdown()
        cls.server.server_close()

    def setUp(self):
        StubPostmarkHandler.behaviour = "ok"
        StubPostmarkHandler.received = []
        self.client = (
            DeliveryClient.builder()
            .base_url(self.base_url)
            .sender(EmailAddress.parse("sender@example.com"))
            .server_token("integration-token")
            .timeout(0.3)
            .session(_direct_session())
            .build()
        )
        self.addCleanup(self.client.close)

    def _message(self, recipient="recipient@example.com"):
        return (
            OutboundMessage.builder(EmailAddress.parse(recipient))
            .subject("Integration")
            .text_body("Hello")
            .build()
        )

    def test_send_round_trip(self):
        result = self.client.send(self._message())

        self.assertEqual(result.message_id, RESULT["MessageID"])
        request = StubPostmarkHandler.received[0]
        self.assertEqual(request["path"], "/email")
        self.assertEqual(request["token"], "integration-token")
        self.assertEqual(request["content_type"], "application/json")
        self.assertEqual(request["body"]["From"], "sender@example.com")
        self.assertEqual(request["body"]["TrackLinks"], "HtmlAndText")
        self.assertNotIn("HtmlBody", request["body"])

    def test_batch_round_trip(self):
        recipients = ["one@example.com", "two@example.com"]

        results = self.client.send_batch([self._message(r) for r in recipients])

        self.assertEqual([r.recipient for r in results], recipients)
        self.assertEqual(StubPostmarkHandler.received[0]["path"], "/email/batch")

    def test_unauthorized(self):
        StubPostmarkHandler.behaviour = "unauthorized"
        with self.assertRaises(AuthenticationError) as ctx:
            self.client.send(self._message())
        self.assertIn("Bad token", ctx.exception.message)

    def test_server_error(self):
        StubPostmarkHandler.behaviour = "error"
        with self.assertRaises(ServerResponseError) as ctx:
            self.client.send(self._message())
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.message, "boom")

    def test_slow_response_times_out(self):
        StubPostmarkHandler.behaviour = "slow"
        with self.assertRaises(DeliveryTimeoutError) as ctx:
            self.client.send(self._message())
        self.assertEqual(ctx.exception.timeout, 0.3)

    def test_body_stalled_after_headers_times_out(self):
        StubPostmarkHandler.behaviour = "stall"
        started = time.monotonic()

        with self.assertRaises(DeliveryTimeoutError) as ctx:
            self.client.send(self._message())

        self.assertLess(time.monotonic() - started, 1.0)
        self.assertEqual(ctx.exception.timeout, 0.3)

    def test_trickled_body_is_cut_off_at_the_deadline(self):
        # The whole body takes several seconds; every single read is quick
        StubPostmarkHandler.behaviour = "trickle"
        started = time.monotonic()

        with self.assertRaises(DeliveryTimeoutError):
            self.client.send(self._message())

        self.assertLess(time.monotonic() - started, 1.0)


class TestUnreachableServer(unittest.TestCase):

    def test_connection_refused_is_transport_error(self):
        # Bind then close to get a port nothing listens on
        server = ThreadingHTTPServer(("127.0.0.1", 0), StubPostmarkHandler)
        host, port = server.server_address[:2]
        server.server_close()

        client = (
            DeliveryClient.builder()
            .base_url(f"http://{host}:{port}")
            .sender(EmailAddress.parse("sender@example.com"))
            .server_token("token")
            .timeout(1)
            .session(_direct_session())
            .build()
        )
        with client:
            with self.assertRaises(TransportError) as ctx:
                client.send(
                    OutboundMessage.builder(EmailAddress.parse("r@example.com")).build()
                )
        self.assertNotIsInstance(ctx.exception, DeliveryTimeoutError)


if __name__ == '__main__':
    unittest.main()
