"""
Unit tests for HTTP response building.
"""

import pytest

from minihttp.http.response import (
    HTTPResponse,
    ResponseBuilder,
    make_response,
)


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        """Test status line generation."""
        assert HTTPResponse(status_code="200").status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status_code="404").status_line == "HTTP/1.1 404 Not Found"
        assert HTTPResponse(status_code="500").status_line == "HTTP/1.1 500 Internal Server Error"

    def test_unknown_status_reads_not_found(self):
        assert HTTPResponse(status_code="999").status_line == "HTTP/1.1 999 Not Found"

    def test_defaults(self):
        response = HTTPResponse()

        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == ""

    def test_default_headers_not_shared(self):
        a = HTTPResponse()
        b = HTTPResponse()

        a.headers["X-Test"] = "1"

        assert "X-Test" not in b.headers

    def test_to_bytes_layout(self):
        """Headers are written as key:value, Content-Length last."""
        response = HTTPResponse(
            status_code="200",
            headers={"Content-Type": "text/css"},
            body="body{}",
        )

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type:text/css\r\n"
            b"Content-Length: 6\r\n"
            b"\r\n"
            b"body{}"
        )

    def test_content_length_counts_utf8_bytes(self):
        response = HTTPResponse(body="héllo")

        assert response.content_length == 6
        assert b"Content-Length: 6\r\n" in response.to_bytes()
        assert response.to_bytes().endswith("héllo".encode("utf-8"))

    def test_binary_body_sent_verbatim(self):
        payload = b"\x89PNG\r\n\x1a\n\x00\xff"
        response = HTTPResponse(headers={"Content-Type": "image/png"}, body=payload)

        assert response.is_binary
        assert response.to_bytes().endswith(b"\r\n\r\n" + payload)
        assert f"Content-Length: {len(payload)}\r\n".encode() in response.to_bytes()

    def test_empty_body_has_zero_length(self):
        result = HTTPResponse(status_code="404").to_bytes()

        assert result.endswith(b"Content-Length: 0\r\n\r\n")

    def test_supplied_content_length_is_replaced(self):
        response = HTTPResponse(headers={"Content-Length": "999"}, body="abc")
        result = response.to_bytes()

        assert b"999" not in result
        assert result.count(b"Content-Length") == 1
        assert b"Content-Length: 3\r\n" in result

    def test_response_is_immutable(self):
        response = HTTPResponse()

        with pytest.raises(AttributeError):
            response.status_code = "404"


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_defaults(self):
        response = ResponseBuilder().build()

        assert response == HTTPResponse("200", {"Content-Type": "text/html"}, "")

    def test_status_accepts_int(self):
        response = ResponseBuilder().status(404).build()

        assert response.status_code == "404"

    def test_method_chaining(self):
        response = (ResponseBuilder()
            .status("200")
            .header("X-One", "1")
            .content_type("text/css")
            .body("a{}")
            .build())

        assert response.headers == {"X-One": "1", "Content-Type": "text/css"}
        assert response.body == "a{}"

    def test_explicit_headers_replace_default(self):
        response = ResponseBuilder().headers({"Content-Type": "application/json"}).build()

        assert response.headers == {"Content-Type": "application/json"}

    def test_none_headers_and_body_use_defaults(self):
        response = ResponseBuilder().headers(None).body(None).build()

        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == ""

    def test_builder_to_bytes(self):
        assert ResponseBuilder().status("404").to_bytes().startswith(b"HTTP/1.1 404 Not Found\r\n")


class TestMakeResponse:
    """Tests for the make_response helper."""

    def test_status_only(self):
        response = make_response("404")

        assert response.status_code == "404"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == ""

    def test_with_headers_and_body(self):
        response = make_response("200", {"Content-Type": "application/json"}, "[]")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type:application/json\r\n"
            b"Content-Length: 2\r\n"
            b"\r\n"
            b"[]"
        )
