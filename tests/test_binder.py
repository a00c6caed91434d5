from urllib.parse import parse_qsl, urlsplit

import pytest

from atlas_url.binding.analyzer import analyze
from atlas_url.binding.binder import bind
from atlas_url.binding.values import render_record
from atlas_url.errors import SchemaMismatch, UrlParseError
from atlas_url.schema.base import ParameterDescriptor

BASE = "http://example.com"


def _bind(template: str, fields: list[tuple[str, str]], values: dict, base_url: str = BASE, **kwargs) -> str:
    descriptors = [ParameterDescriptor(name=n, kind=k) for n, k in fields]
    plan = analyze(template, descriptors, **kwargs)
    return bind(plan, render_record(descriptors, values), base_url)


class TestPathRendering:
    def test_scalar_path_and_query(self):
        url = _bind(
            "/api/v2/cluster/{cluster_id}/query",
            [("cluster_id", "scalar"), ("foo", "optional"), ("bar", "scalar")],
            {"cluster_id": "123", "foo": 42, "bar": True},
        )
        parts = urlsplit(url)
        assert parts.path == "/api/v2/cluster/123/query"
        assert parse_qsl(parts.query) == [("foo", "42"), ("bar", "true")]
        assert url == "http://example.com/api/v2/cluster/123/query?foo=42&bar=true"

    def test_multiple_path_params(self):
        url = _bind(
            "/api/{version}/users/{user_id}/posts/{post_id}",
            [("version", "scalar"), ("user_id", "scalar"), ("post_id", "scalar")],
            {"version": "v1", "user_id": 123, "post_id": "abc"},
        )
        assert url == "http://example.com/api/v1/users/123/posts/abc"

    def test_list_path_param_is_comma_joined(self):
        url = _bind("/api/v1/users/{user_ids}", [("user_ids", "list")], {"user_ids": [1, 2, 3]})
        assert urlsplit(url).path == "/api/v1/users/1,2,3"

    def test_basic_types_in_path(self):
        url = _bind(
            "/api/{str}/{u32}/{i32}/{bool}/{float}",
            [("str", "scalar"), ("u32", "scalar"), ("i32", "scalar"), ("bool", "scalar"), ("float", "scalar")],
            {"str": "test", "u32": 42, "i32": -42, "bool": True, "float": 3.14},
        )
        assert urlsplit(url).path == "/api/test/42/-42/true/3.14"

    def test_list_types_in_path(self):
        url = _bind(
            "/api/{strings}/{ints}/{bools}/{floats}",
            [("strings", "list"), ("ints", "list"), ("bools", "list"), ("floats", "list")],
            {"strings": ["a", "b"], "ints": [-1, -2], "bools": [True, False], "floats": [1.1, 2.2]},
        )
        assert urlsplit(url).path == "/api/a,b/-1,-2/true,false/1.1,2.2"

    def test_absent_optional_path_field_renders_empty(self):
        url = _bind("/api/{id}/query", [("id", "optional")], {"id": None}, allow_optional_path=True)
        assert url == "http://example.com/api//query"

    def test_path_characters_are_percent_encoded(self):
        url = _bind("/api/{name}", [("name", "scalar")], {"name": "my cluster"})
        assert url == "http://example.com/api/my%20cluster"

    def test_query_delimiters_in_values_stay_in_path(self):
        url = _bind(
            "/api/{name}/query", [("name", "scalar"), ("page", "scalar")], {"name": "a?b#c", "page": 1},
        )
        parts = urlsplit(url)
        assert parts.path == "/api/a%3Fb%23c/query"
        assert parts.query == "page=1"
        assert parts.fragment == ""

    def test_slash_in_value_is_not_escaped(self):
        url = _bind("/api/{name}/query", [("name", "scalar")], {"name": "a/b"})
        assert urlsplit(url).path == "/api/a/b/query"


class TestQueryRendering:
    def test_absent_optional_leaves_no_question_mark(self):
        url = _bind("/api/test", [("optional_param", "optional")], {"optional_param": None})
        assert url == "http://example.com/api/test"

    def test_present_optional(self):
        url = _bind("/api/test", [("optional_param", "optional")], {"optional_param": "test"})
        assert url == "http://example.com/api/test?optional_param=test"

    def test_list_query_repeats_key(self):
        url = _bind(
            "/api/{version}/users",
            [("version", "scalar"), ("filter", "list")],
            {"version": "v1", "filter": ["active", "verified"]},
        )
        parts = urlsplit(url)
        assert parts.path == "/api/v1/users"
        assert parse_qsl(parts.query) == [("filter", "active"), ("filter", "verified")]

    def test_empty_list_is_omitted(self):
        url = _bind("/api/test", [("filter", "list"), ("page", "optional")], {"filter": [], "page": None})
        assert url == "http://example.com/api/test"

    def test_optional_list(self):
        fields = [("filters", "optional_list")]
        assert _bind("/api/test", fields, {"filters": ["a", "b"]}) == "http://example.com/api/test?filters=a&filters=b"
        assert _bind("/api/test", fields, {"filters": None}) == "http://example.com/api/test"
        assert _bind("/api/test", fields, {"filters": []}) == "http://example.com/api/test"

    def test_required_scalar_is_never_omitted(self):
        url = _bind("/api/test", [("bar", "scalar")], {"bar": ""})
        assert url == "http://example.com/api/test?bar="

    def test_declaration_order_is_kept(self):
        url = _bind(
            "/api/test",
            [("z", "scalar"), ("tags", "list"), ("a", "optional"), ("m", "scalar")],
            {"z": 1, "tags": ["x", "y"], "a": 2.0, "m": False},
        )
        assert urlsplit(url).query == "z=1&tags=x&tags=y&a=2&m=false"

    def test_values_are_form_encoded(self):
        url = _bind("/api/test", [("q", "scalar")], {"q": "a b&c=d/e"})
        assert urlsplit(url).query == "q=a+b%26c%3Dd%2Fe"
        assert parse_qsl(urlsplit(url).query) == [("q", "a b&c=d/e")]

    def test_floats_have_no_exponent(self):
        url = _bind("/api/test", [("size", "scalar"), ("ratio", "scalar")], {"size": 1e16, "ratio": 1e-7})
        assert urlsplit(url).query == "size=10000000000000000&ratio=0.0000001"

    def test_path_only_template_has_no_query(self):
        url = _bind("/api/{id}", [("id", "scalar")], {"id": 7})
        assert urlsplit(url).query == ""
        assert "?" not in url


class TestBindContract:
    def test_binding_is_idempotent(self):
        descriptors = [
            ParameterDescriptor(name="group_id"),
            ParameterDescriptor(name="tags", kind="list"),
        ]
        plan = analyze("/groups/{group_id}", descriptors)
        record = render_record(descriptors, {"group_id": "g1", "tags": ["b", "a"]})
        assert bind(plan, record, BASE) == bind(plan, record, BASE)

    def test_missing_scheme(self):
        with pytest.raises(UrlParseError):
            _bind("/api/test", [], {}, base_url="example.com")

    def test_missing_host(self):
        with pytest.raises(UrlParseError):
            _bind("/api/test", [], {}, base_url="http://")

    def test_unsupported_scheme(self):
        with pytest.raises(UrlParseError):
            _bind("/api/test", [], {}, base_url="ftp://example.com")

    def test_scalar_given_a_list(self):
        plan = analyze("/api/{id}", [ParameterDescriptor(name="id")])
        with pytest.raises(SchemaMismatch):
            bind(plan, {"id": ["1", "2"]}, BASE)

    def test_required_field_missing_from_record(self):
        plan = analyze("/api/test", [ParameterDescriptor(name="id")])
        with pytest.raises(SchemaMismatch):
            bind(plan, {}, BASE)

    def test_list_given_a_string(self):
        plan = analyze("/api/test", [ParameterDescriptor(name="ids", kind="list")])
        with pytest.raises(SchemaMismatch):
            bind(plan, {"ids": "1,2"}, BASE)
