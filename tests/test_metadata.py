"""Tests for parsing endpoint metadata."""

import pytest

from feignhttp.errors import (
    AmbiguousUrlError,
    DeclarationError,
    DuplicateHeaderError,
    InvalidTimeoutError,
    MissingUrlError,
)
from feignhttp.metadata import (
    is_absolute,
    join_url,
    merge_headers,
    parse_endpoint,
    parse_headers,
    parse_timeout,
)
from feignhttp.types import Method

BASE = "https://api.github.com"


class TestUrlResolution:
    """Test how the URL template is resolved."""

    def test_positional_url(self):
        descriptor = parse_endpoint("GET", f"{BASE}/users/{{user}}")
        assert descriptor.method is Method.GET
        assert descriptor.url_template == f"{BASE}/users/{{user}}"

    def test_url_keyword(self):
        descriptor = parse_endpoint(Method.POST, url=f"{BASE}/user/repos")
        assert descriptor.method is Method.POST
        assert descriptor.url_template == f"{BASE}/user/repos"

    def test_lowercase_method(self):
        assert parse_endpoint("delete", BASE).method is Method.DELETE

    def test_positional_and_keyword_url_is_ambiguous(self):
        with pytest.raises(AmbiguousUrlError):
            parse_endpoint("GET", BASE, url=BASE)

    def test_two_positional_urls_are_ambiguous(self):
        with pytest.raises(AmbiguousUrlError):
            parse_endpoint("GET", BASE, BASE)

    def test_missing_url(self):
        with pytest.raises(MissingUrlError):
            parse_endpoint("GET")

    def test_path_without_base(self):
        with pytest.raises(MissingUrlError):
            parse_endpoint("GET", path="/repos")

    def test_relative_url_without_base(self):
        with pytest.raises(MissingUrlError):
            parse_endpoint("GET", "/repos")

    def test_base_plus_path(self):
        descriptor = parse_endpoint("GET", path="/repos/{owner}/{repo}", base_url=BASE)
        assert descriptor.url_template == f"{BASE}/repos/{{owner}}/{{repo}}"

    def test_base_alone(self):
        assert parse_endpoint("GET", base_url=BASE).url_template == BASE

    def test_relative_positional_is_path_of_base(self):
        descriptor = parse_endpoint("GET", "/users", base_url=BASE)
        assert descriptor.url_template == f"{BASE}/users"

    def test_absolute_url_ignores_base(self):
        descriptor = parse_endpoint("GET", "https://other.example/x", base_url=BASE)
        assert descriptor.url_template == "https://other.example/x"

    def test_url_plus_path(self):
        descriptor = parse_endpoint("GET", url=BASE, path="/rate_limit")
        assert descriptor.url_template == f"{BASE}/rate_limit"

    def test_unknown_option(self):
        with pytest.raises(TypeError, match="unexpected endpoint option"):
            parse_endpoint("GET", BASE, retries=3)

    def test_non_string_url(self):
        with pytest.raises(DeclarationError):
            parse_endpoint("GET", 42)


class TestJoinUrl:
    """Test base and path concatenation."""

    def test_literal_concatenation(self):
        assert join_url("https://x.io/api", "/users") == "https://x.io/api/users"

    def test_double_slash_collapses(self):
        assert join_url("https://x.io/", "/users") == "https://x.io/users"

    def test_no_separator_is_kept_literal(self):
        assert join_url("https://x.io/users", ".json") == "https://x.io/users.json"

    def test_is_absolute(self):
        assert is_absolute("https://x.io")
        assert not is_absolute("/users")
        assert not is_absolute("x.io/users")


class TestTimeouts:
    """Test timeout parsing."""

    def test_integers(self):
        descriptor = parse_endpoint("GET", BASE, connect_timeout=1000, timeout=2500)
        assert descriptor.connect_timeout_ms == 1000
        assert descriptor.read_timeout_ms == 2500

    def test_digit_strings(self):
        assert parse_timeout("3000") == 3000

    def test_zero(self):
        assert parse_timeout(0) == 0

    def test_absent(self):
        descriptor = parse_endpoint("GET", BASE)
        assert descriptor.connect_timeout_ms is None
        assert descriptor.read_timeout_ms is None

    @pytest.mark.parametrize("value", [-1, 1.5, "abc", "-5", "²", "١٠", True, [1000]])
    def test_invalid(self, value):
        with pytest.raises(InvalidTimeoutError) as exc_info:
            parse_endpoint("GET", BASE, timeout=value)
        assert exc_info.value.value == value

    def test_base_timeouts_apply(self):
        descriptor = parse_endpoint("GET", base_url=BASE, base_connect_timeout=100, base_timeout=200)
        assert descriptor.connect_timeout_ms == 100
        assert descriptor.read_timeout_ms == 200

    def test_endpoint_timeout_overrides_base(self):
        descriptor = parse_endpoint("GET", base_url=BASE, base_timeout=200, timeout=50)
        assert descriptor.read_timeout_ms == 50


class TestHeaders:
    """Test static header declarations."""

    def test_mapping(self):
        assert parse_headers({"Accept": "text/plain"}) == (("Accept", "text/plain"),)

    def test_string(self):
        headers = parse_headers("Accept: application/json; X-Api-Version: 2")
        assert headers == (("Accept", "application/json"), ("X-Api-Version", "2"))

    def test_list(self):
        assert parse_headers(["Accept: */*"]) == (("Accept", "*/*"),)

    def test_malformed_entry(self):
        with pytest.raises(DeclarationError):
            parse_headers("Accept application/json")

    def test_duplicates_are_case_insensitive(self):
        with pytest.raises(DuplicateHeaderError):
            parse_headers({"Accept": "a", "accept": "b"})

    def test_merge_overrides_case_insensitively(self):
        merged = merge_headers((("Accept", "a"), ("X-One", "1")), (("accept", "b"),))
        assert merged == (("X-One", "1"), ("accept", "b"))

    def test_endpoint_headers_merge_with_base(self):
        descriptor = parse_endpoint(
            "GET",
            base_url=BASE,
            base_headers=(("Accept", "a"), ("User-Agent", "ua")),
            headers={"Accept": "b"},
        )
        assert descriptor.headers == (("User-Agent", "ua"), ("Accept", "b"))
