# tests/unit/cache/test_fingerprint.py — v3
"""Tests for cache/fingerprint.py — request fingerprinting."""

from __future__ import annotations

import hashlib
import json

from rfccache.cache.fingerprint import (
    DEFAULT_EXCLUDED_HEADERS,
    DEFAULT_INCLUDED_PROPERTIES,
    Fingerprinter,
    compute_fingerprint,
)


class TestFingerprinter:
    def test_hex_md5_length(self, get_request):
        fp = compute_fingerprint(get_request)
        assert len(fp) == 32
        int(fp, 16)

    def test_known_digest(self):
        request = {"uri": "/a", "method": "GET", "headers": {}}
        expected = hashlib.md5(  # noqa: S324
            json.dumps(
                {"headers": {}, "method": "GET", "uri": "/a"},
                sort_keys=True,
                separators=(",", ":"),
            ).encode("utf-8")
        ).hexdigest()
        assert compute_fingerprint(request) == expected

    def test_key_order_independent(self):
        a = {"uri": "/x", "method": "GET", "qs": {"a": 1, "b": 2}, "headers": {"x-a": "1", "x-b": "2"}}
        b = {"headers": {"x-b": "2", "x-a": "1"}, "qs": {"b": 2, "a": 1}, "method": "GET", "uri": "/x"}
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_excluded_headers_ignored(self, get_request):
        with_secrets = dict(get_request)
        with_secrets["headers"] = {
            **get_request["headers"],
            "cookie": "session=abc",
            "Authorization": "Bearer token",
        }
        assert compute_fingerprint(with_secrets) == compute_fingerprint(get_request)

    def test_unlisted_fields_ignored(self, get_request):
        noisy = {**get_request, "timeout": 30, "body": "payload"}
        assert compute_fingerprint(noisy) == compute_fingerprint(get_request)

    def test_included_field_changes_fingerprint(self, get_request):
        other = {**get_request, "method": "HEAD"}
        assert compute_fingerprint(other) != compute_fingerprint(get_request)

    def test_other_header_changes_fingerprint(self, get_request):
        other = {**get_request, "headers": {"accept": "text/html"}}
        assert compute_fingerprint(other) != compute_fingerprint(get_request)

    def test_authenticated_user_included(self, get_request):
        alice = {**get_request, "authenticated_user": "alice"}
        bob = {**get_request, "authenticated_user": "bob"}
        assert compute_fingerprint(alice) != compute_fingerprint(bob)

    def test_missing_headers_is_empty(self):
        assert compute_fingerprint({"uri": "/"}) == compute_fingerprint({"uri": "/", "headers": {}})

    def test_header_names_case_insensitive(self):
        a = {"uri": "/", "headers": {"Accept": "a"}}
        b = {"uri": "/", "headers": {"accept": "a"}}
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_case_variant_headers_order_independent(self):
        a = {"uri": "/", "headers": {"Accept": "x", "accept": "y"}}
        b = {"uri": "/", "headers": {"accept": "y", "Accept": "x"}}
        assert compute_fingerprint(a) == compute_fingerprint(b)

    def test_case_variant_headers_keep_all_values(self):
        both = {"uri": "/", "headers": {"accept": "y", "Accept": "x"}}
        assert Fingerprinter().project(both)["headers"] == {"accept": ["x", "y"]}
        only_x = {"uri": "/", "headers": {"accept": "x"}}
        assert compute_fingerprint(both) != compute_fingerprint(only_x)


class TestFingerprinterConfiguration:
    def test_defaults(self):
        f = Fingerprinter()
        assert f.include_properties == DEFAULT_INCLUDED_PROPERTIES
        assert f.exclude_headers == DEFAULT_EXCLUDED_HEADERS

    def test_extensions_are_unioned(self):
        f = Fingerprinter(include_properties=["uri", "body"], exclude_headers=["X-Request-Id", "cookie"])
        assert f.include_properties == ("uri", "qs", "method", "authenticated_user", "body")
        assert f.exclude_headers == ("cookie", "authorization", "x-request-id")

    def test_extra_property_affects_fingerprint(self, get_request):
        f = Fingerprinter(include_properties=["body"])
        a = f.fingerprint({**get_request, "body": "a"})
        b = f.fingerprint({**get_request, "body": "b"})
        assert a != b

    def test_extra_excluded_header(self, get_request):
        f = Fingerprinter(exclude_headers=["x-request-id"])
        a = f.fingerprint({**get_request, "headers": {"x-request-id": "1"}})
        b = f.fingerprint({**get_request, "headers": {"X-Request-Id": "2"}})
        assert a == b

    def test_project(self, get_request):
        projection = Fingerprinter().project({**get_request, "extra": 1})
        assert set(projection) == {"uri", "qs", "method", "headers"}
