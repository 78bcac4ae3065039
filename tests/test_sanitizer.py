import re

import pytest

from mule_diagram.sanitizer import (
    MAX_ID_LENGTH,
    escape_label,
    sanitize_id,
    truncate_text,
)

SAFE_ID = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@pytest.mark.parametrize("raw, expected", [
    ("orders-api-main", "orders_api_main"),
    ("get:\\orders:api-config", "get_orders_api_config"),
    ('my "quoted" [flow]', "my_quoted_flow"),
    ("123-start", "f_123_start"),
    ("_private", "private"),
    ("end", "flow_end"),
    ("END", "flow_END"),
    ("subgraph", "flow_subgraph"),
    ("", "flow"),
    (None, "flow"),
    ("!!!", "flow"),
])
def test_sanitize_id(raw, expected):
    assert sanitize_id(raw) == expected


def test_sanitize_id_custom_fallback():
    assert sanitize_id("***", fallback="component") == "component"


@pytest.mark.parametrize("raw", [
    "a  b", "a--b", "x__y", "__lead", "trail__", "a/:\\b", "9__9", "[weird] {name}",
])
def test_sanitized_ids_are_safe_and_never_contain_double_underscore(raw):
    result = sanitize_id(raw)
    assert SAFE_ID.match(result)
    assert "__" not in result


def test_long_ids_are_truncated_with_distinct_hash_suffix():
    first = sanitize_id("a" * 80 + "-one")
    second = sanitize_id("a" * 80 + "-two")

    assert len(first) <= MAX_ID_LENGTH
    assert len(second) <= MAX_ID_LENGTH
    assert first != second
    assert SAFE_ID.match(first)
    assert "__" not in first


def test_sanitize_id_is_deterministic():
    assert sanitize_id("x" * 100) == sanitize_id("x" * 100)


def test_escape_label_replaces_mermaid_syntax_characters():
    label = escape_label('Say "hi" [now] {x} <y> a|b #1; done')
    for character in '"[]{}<>|#;':
        assert character not in label


def test_escape_label_collapses_whitespace():
    assert escape_label("line one\n\n   line\ttwo") == "line one line two"


def test_escape_label_fallback_for_blank_text():
    assert escape_label(None, fallback="Unknown Flow") == "Unknown Flow"
    assert escape_label("   ", fallback="Unknown Type") == "Unknown Type"
    assert escape_label("#", fallback="Unknown Component") == "Unknown Component"


def test_escape_label_truncates():
    label = escape_label("x" * 100, max_length=20)
    assert len(label) == 20
    assert label.endswith("...")


def test_truncate_text():
    assert truncate_text("short", 10) == "short"
    assert truncate_text("abcdefghij", 8) == "abcde..."
    assert truncate_text("abcdef", 3) == "abc"
