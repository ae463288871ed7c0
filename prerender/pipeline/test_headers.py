from prerender.pipeline.headers import (
    filter_response_headers,
    forward_headers,
    get_header,
)

REQUEST_ALLOWLIST = (
    "User-Agent",
    "X-Forwarded-For",
    "X-Forwarded-Host",
    "X-Forwarded-Port",
    "X-Forwarded-Proto",
)
RESPONSE_ALLOWLIST = (
    "Content-Encoding",
    "Content-Length",
    "Content-Type",
    "Expires",
    "Last-Modified",
)


class TestGetHeader:
    def test_case_insensitive(self):
        headers = (("content-type", "text/html"),)
        assert get_header(headers, "Content-Type") == "text/html"
        assert get_header(headers, "CONTENT-TYPE") == "text/html"

    def test_absent_is_none(self):
        assert get_header((("a", "1"),), "b") is None
        assert get_header(None, "b") is None

    def test_accepts_mapping(self):
        assert get_header({"User-Agent": "bot"}, "user-agent") == "bot"

    def test_repeated_fields_are_combined(self):
        headers = (("X-Forwarded-For", "1.1.1.1"), ("x-forwarded-for", "2.2.2.2"))
        assert get_header(headers, "X-Forwarded-For") == "1.1.1.1, 2.2.2.2"

    def test_empty_value_is_present(self):
        assert get_header((("X-Empty", ""),), "x-empty") == ""


class TestForwardHeaders:
    def test_forwards_allowlisted_in_configured_order(self):
        inbound = (
            ("x-forwarded-proto", "https"),
            ("cookie", "secret=1"),
            ("user-agent", "Googlebot/2.1"),
            ("accept", "*/*"),
        )
        assert forward_headers(inbound, REQUEST_ALLOWLIST) == (
            ("User-Agent", "Googlebot/2.1"),
            ("X-Forwarded-Proto", "https"),
        )

    def test_absent_headers_are_skipped(self):
        assert forward_headers((), REQUEST_ALLOWLIST) == ()

    def test_values_are_not_transformed(self):
        inbound = (("User-Agent", "  spaced\tvalue  "),)
        assert forward_headers(inbound, ("User-Agent",)) == (
            ("User-Agent", "  spaced\tvalue  "),
        )

    def test_empty_allowlist_forwards_nothing(self):
        assert forward_headers((("User-Agent", "bot"),), ()) == ()


class TestFilterResponseHeaders:
    def test_marker_comes_first(self):
        result = filter_response_headers(
            (("Content-Type", "text/html"),), RESPONSE_ALLOWLIST, "prerender"
        )
        assert result[0] == ("X-Renderer", "prerender")
        assert result[1] == ("Content-Type", "text/html")

    def test_marker_is_present_with_empty_allowlist(self):
        result = filter_response_headers((("Content-Type", "text/html"),), (), "id")
        assert result == (("X-Renderer", "id"),)

    def test_only_allowlisted_headers_pass(self):
        render_headers = (
            ("set-cookie", "session=abc"),
            ("content-type", "text/html"),
            ("cache-control", "max-age=60"),
            ("last-modified", "Wed, 21 Oct 2015 07:28:00 GMT"),
        )
        result = filter_response_headers(render_headers, RESPONSE_ALLOWLIST, "id")
        assert result == (
            ("X-Renderer", "id"),
            ("Content-Type", "text/html"),
            ("Last-Modified", "Wed, 21 Oct 2015 07:28:00 GMT"),
        )

    def test_newlines_become_spaces(self):
        result = filter_response_headers(
            (("Content-Type", "a\nb"), ("Expires", "x\n\ny")),
            RESPONSE_ALLOWLIST,
            "id",
        )
        assert ("Content-Type", "a b") in result
        assert ("Expires", "x  y") in result
        assert all("\n" not in value for _, value in result)
