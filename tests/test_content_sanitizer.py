"""Tests for stripping script content from submitted values."""

import pytest

from formdesk.core.errors import PayloadTooDeep, SubmissionValidationError
from formdesk.services.content_sanitizer import sanitize, sanitize_text


def _nest(value, levels: int):
    for _ in range(levels):
        value = [value]
    return value


def test_removes_script_blocks_and_javascript_uris():
    assert sanitize_text("hi<script>alert(1)</script> there") == "hi there"
    assert sanitize_text("<a href='javascript:alert(1)'>x</a>") == "<a href='alert(1)'>x</a>"


def test_matching_is_case_insensitive_and_spans_lines():
    text = "a<SCRIPT type='text/javascript'>\nsteal()\n</Script >b JavaScript:go()"
    assert sanitize_text(text) == "ab go()"


def test_cleans_string_leaves_at_any_depth():
    payload = {
        "name": "Jo<script>alert(1)</script>",
        "links": ["javascript:alert(1)", {"inner": ["<script>x</script>ok"]}],
        "age": 30,
        "subscribed": True,
        "nickname": None,
    }

    assert sanitize(payload) == {
        "name": "Jo",
        "links": ["alert(1)", {"inner": ["ok"]}],
        "age": 30,
        "subscribed": True,
        "nickname": None,
    }


def test_input_is_not_mutated():
    payload = {"tags": ["<script>x</script>a"]}
    sanitize(payload)
    assert payload == {"tags": ["<script>x</script>a"]}


@pytest.mark.parametrize(
    "value",
    [
        "<scr<script>x</script>ipt>alert(1)</script>",
        "javajavascript:script:alert(1)",
        {"k": ["jav<script></script>ascript:x", "<script>a</script><script>b</script>"]},
        "plain text",
        42,
    ],
)
def test_sanitize_is_idempotent(value):
    once = sanitize(value)
    assert sanitize(once) == once


def test_spliced_payloads_are_fully_removed():
    assert "<script" not in sanitize_text("<scr<script>x</script>ipt>alert(1)</script>").lower()
    assert "javascript:" not in sanitize_text("javajavascript:script:alert(1)").lower()


def test_nesting_up_to_the_bound_is_accepted():
    assert sanitize(_nest("ok", 3), max_depth=3) == _nest("ok", 3)


def test_nesting_beyond_the_bound_raises_payload_too_deep():
    with pytest.raises(PayloadTooDeep) as exc_info:
        sanitize(_nest("x", 33))

    assert isinstance(exc_info.value, SubmissionValidationError)
    assert exc_info.value.errors[0].code == "payload_too_deep"
