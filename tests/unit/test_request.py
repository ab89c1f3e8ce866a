"""
Unit tests for HTTP request parsing.
"""

import pytest

from fileserver.http.request import (
    HTTPRequest,
    RequestParser,
    ParsingError,
    Method,
    Version,
    parse_request,
    parse_method,
    parse_resource,
    parse_version,
    parse_headers,
    parse_body,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        request = RequestParser().parse(sample_get_request)

        assert request.method is Method.GET
        assert request.resource_path == "/"
        assert request.version is Version.V1_1
        assert request.headers == {"Host": "x"}
        assert request.body == ""

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a body."""
        request = parse_request(sample_post_request)

        assert request.method is Method.POST
        assert request.resource_path == "/upload"
        assert request.body == "hello"
        assert request.raw_body == b"hello"
        assert request.content_length == 5

    def test_parse_accepts_text(self):
        """Test that already decoded text parses the same as bytes."""
        raw = "GET /a.txt HTTP/1.1\r\nHost: x\r\n\r\n"
        assert parse_request(raw) == parse_request(raw.encode())

    def test_get_body_is_always_empty(self):
        """Test that bytes after the headers are ignored for GET."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\nignored")

        assert request.body == ""
        assert request.raw_body == b""

    def test_post_without_blank_line_has_empty_body(self):
        request = parse_request(b"POST /upload HTTP/1.1\r\nHost: x\r\n")
        assert request.body == ""

    def test_post_binary_body_kept_exactly(self):
        """Test that non UTF-8 POST bytes survive in raw_body."""
        payload = b"\xff\xfe\x00\x01"
        request = parse_request(b"POST /upload HTTP/1.1\r\n\r\n" + payload)

        assert request.raw_body == payload
        assert "�" in request.body  # Lossy text copy

    def test_unknown_method_still_parses(self):
        """Test that an unrecognized method never fails the request."""
        request = parse_request(b"DELETE /a.txt HTTP/1.1\r\nHost: x\r\n\r\n")

        assert request.method is Method.UNINITIALIZED
        assert request.resource_path == "/a.txt"
        assert request.version is Version.V1_1

    def test_no_line_terminator_fails(self):
        """Test that a buffer without CRLF is rejected."""
        with pytest.raises(ParsingError):
            parse_request(b"GET / HTTP/1.1")

    def test_unknown_version_fails(self):
        with pytest.raises(ParsingError) as exc_info:
            parse_request(b"GET / HTTP/3\r\n\r\n")

        assert "HTTP/3" in str(exc_info.value)

    def test_lossy_decoding(self):
        """Test that invalid UTF-8 in headers does not fail parsing."""
        request = parse_request(b"GET / HTTP/1.1\r\nX-Bin: \xff\r\n\r\n")
        assert request.headers["X-Bin"] == "�"


class TestParseMethod:

    @pytest.mark.parametrize("line, expected", [
        ("GET / HTTP/1.1\r\n", Method.GET),
        ("POST / HTTP/1.1\r\n", Method.POST),
        ("PUT / HTTP/1.1\r\n", Method.UNINITIALIZED),
        ("get / HTTP/1.1\r\n", Method.UNINITIALIZED),
        ("GET\r\n", Method.UNINITIALIZED),
    ])
    def test_method_tokens(self, line, expected):
        assert parse_method(line) is expected

    def test_missing_crlf(self):
        with pytest.raises(ParsingError):
            parse_method("GET / HTTP/1.1")


class TestParseResource:

    @pytest.mark.parametrize("line, expected", [
        ("GET / HTTP/1.1\r\n", "/"),
        ("GET /a.txt HTTP/1.1\r\n", "/a.txt"),
        ("GET /sub/dir/file HTTP/2\r\n", "/sub/dir/file"),
        ("GET /my%20file.txt HTTP/1.1\r\n", "/my%20file.txt"),
        ("GET /../../etc/passwd HTTP/1.1\r\n", "/../../etc/passwd"),
        ("GET /a.txt\tHTTP/1.1\r\n", "/a.txt"),
    ])
    def test_resource_path(self, line, expected):
        assert parse_resource(line) == expected

    def test_no_trailing_whitespace_defaults_to_root(self):
        assert parse_resource("GET /a.txt\r\n") == "/"

    def test_no_slash_defaults_to_root(self):
        assert parse_resource("GET HTTP/1.1\r\n") == "/"

    def test_resource_property_strips_slash(self):
        request = parse_request(b"GET /sub/image.png HTTP/1.1\r\n\r\n")
        assert request.resource == "sub/image.png"

    def test_missing_crlf(self):
        with pytest.raises(ParsingError):
            parse_resource("GET / HTTP/1.1")


class TestParseVersion:

    @pytest.mark.parametrize("token, expected", [
        ("HTTP/1.1", Version.V1_1),
        ("HTTP/2", Version.V2_0),
        ("HTTP/2.0", Version.V2_0),
    ])
    def test_known_versions(self, token, expected):
        assert parse_version(f"GET / {token}\r\n") is expected

    @pytest.mark.parametrize("token", ["HTTP/1.0", "HTTP/3", "http/1.1", "garbage"])
    def test_unknown_version_names_token(self, token):
        with pytest.raises(ParsingError) as exc_info:
            parse_version(f"GET / {token}\r\n")

        assert f"Unknown HTTP version: {token}" in str(exc_info.value)

    def test_single_unknown_token(self):
        with pytest.raises(ParsingError) as exc_info:
            parse_version("nonsense\r\n")

        assert "nonsense" in str(exc_info.value)

    def test_empty_first_line(self):
        with pytest.raises(ParsingError) as exc_info:
            parse_version("\r\nHost: x\r\n\r\n")

        assert "Unknown HTTP version" not in str(exc_info.value)

    def test_missing_crlf(self):
        with pytest.raises(ParsingError):
            parse_version("GET / HTTP/1.1")

    def test_version_wire_text(self):
        assert str(Version.V1_1) == "HTTP/1.1"
        assert str(Version.V2_0) == "HTTP/2"


class TestParseHeaders:

    def test_trims_names_and_values(self):
        headers = parse_headers("GET / HTTP/1.1\r\n  Host :   x  \r\nAccept:text/html\r\n\r\n")
        assert headers == {"Host": "x", "Accept": "text/html"}

    def test_last_duplicate_wins(self):
        headers = parse_headers("GET / HTTP/1.1\r\nA: 1\r\nA: 2\r\n\r\n")
        assert headers == {"A": "2"}

    def test_order_independent(self):
        first = parse_headers("GET / HTTP/1.1\r\nA: 1\r\nB: 2\r\n\r\n")
        second = parse_headers("GET / HTTP/1.1\r\nB: 2\r\nA: 1\r\n\r\n")
        assert first == second

    def test_stops_at_blank_line(self):
        headers = parse_headers("POST / HTTP/1.1\r\nA: 1\r\n\r\nB: 2\r\n")
        assert headers == {"A": "1"}

    def test_splits_on_first_colon(self):
        headers = parse_headers("GET / HTTP/1.1\r\nHost: localhost:8080\r\n\r\n")
        assert headers == {"Host": "localhost:8080"}

    def test_skips_lines_without_colon(self):
        headers = parse_headers("GET / HTTP/1.1\r\nnot a header\r\nA: 1\r\n\r\n")
        assert headers == {"A": "1"}

    def test_no_headers(self):
        assert parse_headers("GET / HTTP/1.1\r\n\r\n") == {}

    def test_missing_crlf(self):
        with pytest.raises(ParsingError):
            parse_headers("GET / HTTP/1.1")


class TestParseBody:

    def test_post_body(self):
        assert parse_body("POST / HTTP/1.1\r\n\r\nhello", Method.POST) == "hello"

    def test_body_only_for_post(self):
        assert parse_body("GET / HTTP/1.1\r\n\r\nhello", Method.GET) == ""
        assert parse_body("PUT / HTTP/1.1\r\n\r\nhello", Method.UNINITIALIZED) == ""

    def test_body_after_first_boundary(self):
        assert parse_body("POST / HTTP/1.1\r\n\r\na\r\n\r\nb", Method.POST) == "a\r\n\r\nb"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_case_insensitive(self):
        request = HTTPRequest(method=Method.GET, headers={"Content-Type": "text/html"})

        assert request.get_header("Content-Type") == "text/html"
        assert request.get_header("content-type") == "text/html"
        assert request.get_header("X-Missing") == ""
        assert request.get_header("X-Missing", "default") == "default"

    def test_content_length_invalid(self):
        request = HTTPRequest(method=Method.POST, headers={"Content-Length": "abc"})
        assert request.content_length == 0

    def test_is_immutable(self):
        request = HTTPRequest(method=Method.GET)
        with pytest.raises(AttributeError):
            request.resource_path = "/other"
