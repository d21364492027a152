"""
Tests for request logging helpers
"""

import pytest

from userhub.logging import (
    add_request_context,
    bind_user_id,
    clear_request_context,
    generate_request_id,
    get_request_id,
    get_user_id,
    redact_secrets,
    set_request_context,
)
from userhub.middleware import describe_graphql_operation, sanitize_query_params


class TestSanitizeQueryParams:
    def test_redacts_sensitive_keys(self):
        sanitized = sanitize_query_params({"password": "p", "accessToken": "t", "page": "2"})

        assert sanitized == {"password": "[REDACTED]", "accessToken": "[REDACTED]", "page": "2"}

    def test_redacts_graphql_payload_on_graphql_path(self):
        params = {"query": "{ me { id } }", "variables": "{}", "operationName": "Me"}

        sanitized = sanitize_query_params(params, path="/graphql")

        assert sanitized["query"] == "[REDACTED]"
        assert sanitized["variables"] == "[REDACTED]"
        assert sanitized["operationName"] == "Me"

    def test_keeps_query_elsewhere(self):
        assert sanitize_query_params({"query": "x"}, path="/health") == {"query": "x"}


class TestDescribeGraphQLOperation:
    @pytest.mark.parametrize(
        "payload,expected",
        [
            ({"operationName": "Me"}, "Me"),
            ({"query": "query Users { users { totalCount } }"}, "Users"),
            ({"query": "mutation Login($i: LoginInput!) { login(input: $i) { token } }"},
             "mutation:Login"),
            ({"query": "{ __schema { types { name } } }"}, "__introspection"),
            ({"query": "{ me { id } }"}, "unnamed_operation"),
            ({}, None),
        ],
    )
    def test_names(self, payload, expected):
        assert describe_graphql_operation(payload) == expected


class TestRequestContext:
    def test_set_and_clear(self):
        request_id = set_request_context()
        bind_user_id("user-1")

        assert get_request_id() == request_id
        assert get_user_id() == "user-1"

        clear_request_context()

        assert get_request_id() is None
        assert get_user_id() is None

    def test_explicit_request_id_is_kept(self):
        assert set_request_context(request_id="abc") == "abc"
        clear_request_context()

    def test_generated_ids_are_compact_and_distinct(self):
        first, second = generate_request_id(), generate_request_id()

        assert len(first) == 14
        assert first != second

    def test_processor_stamps_ids(self):
        set_request_context(request_id="req-1", user_id="user-1")
        try:
            event = add_request_context(None, "info", {"event": "hello"})
        finally:
            clear_request_context()

        assert event == {"event": "hello", "request_id": "req-1", "user_id": "user-1"}

    def test_processor_masks_credentials(self):
        event = redact_secrets(None, "info", {"event": "login", "password": "hunter2", "ok": 1})

        assert event == {"event": "login", "password": "[REDACTED]", "ok": 1}
