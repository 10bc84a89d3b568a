from datetime import timedelta

import httpx

from pytest_restassured.report_formatter import format_body, format_cookies, format_headers, format_request, format_response


class TestFormatRequest:
    def test_simple_get_request(self):
        request = httpx.Request("GET", "https://example.com/api/users")
        result = format_request(request)

        assert "GET https://example.com/api/users" in result
        assert "host: example.com" in result

    def test_request_with_json_body(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/users",
            headers={"content-type": "application/json"},
            json={"name": "Alice", "age": 30},
        )
        result = format_request(request)

        assert "POST https://example.com/api/users" in result
        assert '"name": "Alice"' in result
        assert '"age": 30' in result

    def test_request_with_xml_body(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/places",
            headers={"content-type": "application/xml"},
            content=b"<Place><Name>Sun City</Name></Place>",
        )
        result = format_request(request)

        assert "<Place>\n  <Name>Sun City</Name>\n</Place>" in result

    def test_request_with_form_body(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/login",
            data={"username": "alice", "password": "secret"},
        )
        result = format_request(request)

        assert "username=alice" in result
        assert "password=secret" in result

    def test_request_with_multipart_body(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/upload",
            files={"file": ("upload.txt", b"contents", "text/plain")},
        )
        result = format_request(request)

        assert 'filename="upload.txt"' in result

    def test_request_with_binary_content(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/upload",
            headers={"content-type": "application/octet-stream"},
            content=bytes(range(256)),
        )
        result = format_request(request)

        assert "<Binary content: 256 bytes>" in result

    def test_request_with_long_body_truncated(self):
        request = httpx.Request(
            "POST",
            "https://example.com/api/data",
            headers={"content-type": "text/plain"},
            content=("x" * 2000).encode(),
        )
        result = format_request(request)

        assert "... (truncated)" in result
        assert len(result) < 2000 + 500

    def test_sensitive_header_masked(self):
        request = httpx.Request("GET", "https://example.com/api", headers={"Authorization": "Bearer token"})
        result = format_request(request, sensitive=["authorization"])

        assert "authorization: *****" in result
        assert "Bearer token" not in result


class TestFormatResponse:
    def test_status_headers_and_body(self):
        response = httpx.Response(
            404,
            headers={"content-type": "application/json"},
            json={"error": "Not found"},
        )
        result = format_response(response)

        assert result.startswith("HTTP 404 (Not Found)")
        assert "content-type: application/json" in result
        assert '"error": "Not found"' in result

    def test_elapsed(self):
        result = format_response(httpx.Response(200), elapsed=timedelta(milliseconds=250))
        assert "Response time: 250.0 ms" in result

    def test_empty_body(self):
        assert format_response(httpx.Response(204)) == "HTTP 204 (No Content)"


class TestFormatParts:
    def test_headers_keep_repeated_values(self):
        headers = httpx.Headers([("Accept", "text/html"), ("Accept", "application/json")])
        assert format_headers(headers) == ["accept: text/html", "accept: application/json"]

    def test_cookies(self):
        cookies = httpx.Cookies()
        cookies.set("session", "abc", domain="example.com")
        cookies.set("token", "xyz", domain="example.com")

        lines = format_cookies(cookies, sensitive=["TOKEN"])

        assert "Cookie: session=abc, Domain: example.com, HTTP-only: False, Secure: False" in lines
        assert "Cookie: token=*****, Domain: example.com, HTTP-only: False, Secure: False" in lines

    def test_no_cookies(self):
        assert format_cookies(None) == []

    def test_invalid_json_left_verbatim(self):
        assert format_body(b"{not json", "application/json") == "{not json"

    def test_empty_body(self):
        assert format_body(b"", "application/json") is None
