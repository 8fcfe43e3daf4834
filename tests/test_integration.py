"""
Integration tests against a local stand-in for the gateway.
"""

import json
import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qsl, urlsplit

import pytest

from open_taobao import (
    ApiError,
    Config,
    DecodeError,
    TaobaoClient,
    TransportError,
    sign,
)

APP_KEY = "12345678"
SECRET_KEY = "integration-secret"


class GatewayHandler(BaseHTTPRequestHandler):
    """Verifies the signature and answers like the gateway would."""

    def log_message(self, format, *args):
        pass

    def _respond(self, params):
        server = self.server
        server.requests.append((self.command, params, dict(self.headers)))

        if server.delay:
            time.sleep(server.delay)

        if server.raw_body is not None:
            body = server.raw_body
        elif params.get("sign") != sign(params, SECRET_KEY):
            body = json.dumps({"error_response": {"code": 25, "msg": "Invalid signature"}}).encode()
        elif params.get("method") == "taobao.fail":
            body = json.dumps({"error_response": {"code": 15, "msg": "bad"}}).encode()
        else:
            body = json.dumps({"result": {"ok": True, "echo": params.get("q")}}).encode()

        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self):
        self._respond(dict(parse_qsl(urlsplit(self.path).query)))

    def do_POST(self):
        length = int(self.headers.get("Content-Length", 0))
        self._respond(dict(parse_qsl(self.rfile.read(length).decode("utf-8"))))


class TestIntegration:
    """Integration tests with a local HTTP server."""

    @pytest.fixture
    def gateway(self):
        """Start the local gateway server."""
        server = ThreadingHTTPServer(("127.0.0.1", 0), GatewayHandler)
        server.daemon_threads = True
        server.requests = []
        server.delay = 0
        server.raw_body = None

        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        yield server

        server.shutdown()
        server.server_close()

    @pytest.fixture
    def endpoint(self, gateway):
        host, port = gateway.server_address
        return f"http://{host}:{port}/router/rest"

    @pytest.fixture
    def client(self, endpoint):
        """Create signed client."""
        with TaobaoClient(Config(app_key=APP_KEY, secret_key=SECRET_KEY, endpoint=endpoint)) as client:
            yield client

    def test_signed_get(self, client, gateway):
        result = client.get_strict({"method": "taobao.echo", "q": "a b&c"})

        assert result == {"result": {"ok": True, "echo": "a b&c"}}
        command, params, headers = gateway.requests[0]
        assert command == "GET"
        assert params["app_key"] == APP_KEY
        assert params["v"] == "2.0"
        assert headers["User-Agent"].startswith("open_taobao-v")

    def test_signed_post(self, client, gateway):
        result = client.post_strict({"method": "taobao.echo", "q": "淘宝 & co"})

        assert result == {"result": {"ok": True, "echo": "淘宝 & co"}}
        command, params, headers = gateway.requests[0]
        assert command == "POST"
        assert headers["Content-Type"].startswith("application/x-www-form-urlencoded")

    def test_wrong_secret_is_rejected(self, endpoint):
        config = Config(app_key=APP_KEY, secret_key="wrong", endpoint=endpoint)
        with TaobaoClient(config) as client:
            result = client.get({"method": "taobao.echo"})

        assert result["error_response"]["code"] == 25

    def test_error_response(self, client):
        assert "error_response" in client.get({"method": "taobao.fail"})

        with pytest.raises(ApiError) as exc_info:
            client.post_strict({"method": "taobao.fail"})
        assert exc_info.value.code == 15

    def test_invalid_body(self, client, gateway):
        gateway.raw_body = b"<html>502 Bad Gateway</html>"

        with pytest.raises(DecodeError):
            client.get({"method": "taobao.echo"})

    def test_timeout(self, endpoint, gateway):
        gateway.delay = 1.0
        config = Config(app_key=APP_KEY, secret_key=SECRET_KEY, endpoint=endpoint, timeout=0.2)

        with TaobaoClient(config) as client:
            with pytest.raises(TransportError) as exc_info:
                client.get_strict({"method": "taobao.echo"})

        assert not isinstance(exc_info.value, (ApiError, DecodeError))

    def test_connection_refused(self):
        config = Config(app_key=APP_KEY, secret_key=SECRET_KEY, endpoint="http://127.0.0.1:1/router/rest")

        with TaobaoClient(config) as client:
            with pytest.raises(TransportError):
                client.post({"method": "taobao.echo"})

    def test_refused_get_keeps_signature_out_of_logs(self, caplog):
        config = Config(app_key=APP_KEY, secret_key=SECRET_KEY, endpoint="http://127.0.0.1:1/router/rest")

        with caplog.at_level(logging.DEBUG, logger="open_taobao"):
            with TaobaoClient(config) as client:
                with pytest.raises(TransportError) as exc_info:
                    client.get({"method": "taobao.echo"})

        assert "taobao.echo failed" in caplog.text
        for text in (caplog.text, str(exc_info.value)):
            assert "sign=" not in text
            assert SECRET_KEY not in text

    def test_concurrent_calls(self, client, gateway):
        results = []
        errors = []

        def worker(n):
            try:
                results.append(client.get_strict({"method": "taobao.echo", "q": str(n)}))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(r["result"]["echo"] for r in results) == [str(n) for n in range(8)]
