"""
Integration tests for the HTTP server.

The first group drives HTTPServer.respond() directly; the second talks to
a real server over TCP.
"""

import json
import logging
import socket
from pathlib import Path

import pytest

from minihttp import ConfigurationError, HTTPServer, ServerConfig, create_app


def split_response(raw: bytes):
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = dict(line.split(":", 1) for line in lines[1:])
    return lines[0], headers, body


def get(path: str) -> bytes:
    return f"GET {path} HTTP/1.1\r\nHost: localhost:3000\r\n\r\n".encode()


class TestStartup:

    def test_create_app(self, config: ServerConfig):
        assert isinstance(create_app(config), HTTPServer)

    def test_missing_404_page_fails_startup(self, config: ServerConfig, public_dir: Path):
        (public_dir / "404.html").unlink()

        with pytest.raises(ConfigurationError):
            HTTPServer(config)

    def test_broken_dataset_fails_startup(self, config: ServerConfig, data_dir: Path):
        (data_dir / "characters.json").write_text("{", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            HTTPServer(config)

    def test_invalid_config_fails_startup(self, config: ServerConfig):
        config.workers = 0

        with pytest.raises(ConfigurationError):
            HTTPServer(config)


class TestRespond:
    """The parse → route → handle pipeline without sockets."""

    def test_index(self, server: HTTPServer, site):
        status, headers, body = split_response(server.respond(get("/")).to_bytes())

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert headers["Content-Length"] == f" {len(site.index)}"
        assert body.decode() == site.index

    def test_health(self, server: HTTPServer, site):
        response = server.respond(get("/health"))

        assert response.status_code == "200"
        assert response.body == site.health

    def test_stylesheet(self, server: HTTPServer, site):
        response = server.respond(get("/style.css"))

        assert response.headers == {"Content-Type": "text/css"}
        assert response.body == site.style

    def test_binary_asset(self, server: HTTPServer, site):
        raw = server.respond(get("/logo.png")).to_bytes()

        assert raw.endswith(b"\r\n\r\n" + site.png)

    def test_characters(self, server: HTTPServer, site):
        response = server.respond(get("/api/shipping/characters"))

        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "application/json"}
        assert [c["name"] for c in json.loads(response.body)] == ["Ayla", "Borin"]

    @pytest.mark.parametrize("path", ["/missing", "/api/shipping/orders", "/../data/characters.json"])
    def test_not_found(self, server: HTTPServer, site, path: str):
        response = server.respond(get(path))

        assert response.status_code == "404"
        assert response.body == site.not_found

    def test_post_is_not_found(self, server: HTTPServer, sample_post_request: bytes):
        assert server.respond(sample_post_request).status_code == "404"

    @pytest.mark.parametrize("raw", [b"", b"garbage\r\n\r\n", b"PUT / HTTP/1.1\r\n\r\n"])
    def test_malformed_request_is_400(self, server: HTTPServer, site, raw: bytes):
        response = server.respond(raw)

        assert response.status_code == "400"
        assert response.to_bytes().startswith(b"HTTP/1.1 400 Bad Request\r\n")
        assert response.body == site.not_found

    def test_malformed_request_is_access_logged(self, server: HTTPServer, caplog):
        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            server.respond(b"garbage\r\n\r\n", ("10.0.0.7", 51000))

        lines = [r.getMessage() for r in caplog.records if r.name == "minihttp.access"]
        assert len(lines) == 1
        assert lines[0].startswith("10.0.0.7 - - [")
        assert '"-" 400 ' in lines[0]

    def test_malformed_request_json_access_log(self, config: ServerConfig, caplog):
        config.log_format = "json"
        server = HTTPServer(config)

        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            response = server.respond(b"garbage\r\n\r\n")

        lines = [r.getMessage() for r in caplog.records if r.name == "minihttp.access"]
        entry = json.loads(lines[-1])
        assert entry["status_code"] == "400"
        assert entry["content_length"] == response.content_length

    def test_dataset_broken_after_startup_is_500(self, server: HTTPServer, data_dir: Path):
        (data_dir / "characters.json").write_text("[]]", encoding="utf-8")

        response = server.respond(get("/api/shipping/characters"))

        assert response.status_code == "500"

    def test_404_page_removed_after_startup_is_500(self, server: HTTPServer, public_dir: Path):
        (public_dir / "404.html").unlink()

        assert server.respond(get("/missing")).status_code == "500"
        assert server.respond(b"garbage").status_code == "500"

    def test_handler_crash_is_500(self, server: HTTPServer, monkeypatch):
        def crash(request, target=""):
            raise RuntimeError("boom")

        monkeypatch.setattr(server.router.static, "handle", crash)

        assert server.respond(get("/")).status_code == "500"


class TestLiveServer:
    """Requests over a real TCP connection."""

    def test_index(self, test_server, site):
        status, headers, body = split_response(test_server.get("/"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert body.decode() == site.index

    def test_characters(self, test_server):
        status, headers, body = split_response(test_server.get("/api/shipping/characters"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "application/json"
        assert headers["Content-Length"] == f" {len(body)}"
        assert json.loads(body)[0]["name"] == "Ayla"

    def test_not_found(self, test_server, site):
        status, _, body = split_response(test_server.get("/nope.html"))

        assert status == "HTTP/1.1 404 Not Found"
        assert body.decode() == site.not_found

    def test_post_with_body(self, test_server, sample_post_request: bytes):
        status, _, _ = split_response(test_server.request(sample_post_request))

        assert status == "HTTP/1.1 404 Not Found"

    def test_malformed_request(self, test_server):
        status, _, _ = split_response(test_server.request(b"hello\r\n\r\n"))

        assert status == "HTTP/1.1 400 Bad Request"

    def test_connection_closed_after_response(self, test_server):
        with socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0) as sock:
            sock.sendall(get("/health"))
            data = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                data += chunk

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")

    def test_several_clients(self, test_server):
        responses = [test_server.get("/health") for _ in range(5)]

        assert all(r.startswith(b"HTTP/1.1 200 OK\r\n") for r in responses)
