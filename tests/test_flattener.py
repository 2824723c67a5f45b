"""Tests for flattening event key-values into string fields."""

import pytest

from formatted_logger.errors import (
    KeyValueTraversalError,
    MalformedContextError,
    ValueCoercionError,
)
from formatted_logger.flattener import CtxtPolicy, flatten, parse_ctxt
from formatted_logger.levels import Level
from formatted_logger.models import LogEvent, context


def _event(*key_values) -> LogEvent:
    return LogEvent(Level.INFO, "svc", "msg", key_values=tuple(key_values))


def _broken_source():
    yield ("first", "1")
    raise RuntimeError("source exploded")


class TestFlatten:
    def test_plain_pairs_coerced(self):
        result = flatten(_event(("n", 3), ("ok", True), ("lvl", Level.DEBUG)))
        assert dict(result.fields) == {"n": "3", "ok": "true", "lvl": "DEBUG"}
        assert result.ok

    def test_ctxt_expanded(self):
        result = flatten(_event(
            ("ctxt", '{"user":"alice","req":"42"}'),
            ("op", "login"),
        ))
        assert dict(result.fields) == {"user": "alice", "req": "42", "op": "login"}
        assert "ctxt" not in result.fields

    def test_ctxt_mapping_value(self):
        result = flatten(_event(("ctxt", {"user": "bob"})))
        assert dict(result.fields) == {"user": "bob"}

    def test_ctxt_bytes_value(self):
        result = flatten(_event(("ctxt", b'{"a":"b"}')))
        assert dict(result.fields) == {"a": "b"}

    def test_ctxt_helper(self):
        result = flatten(_event(("ctxt", context(user="alice", attempts=3))))
        assert dict(result.fields) == {"user": "alice", "attempts": "3"}

    def test_last_write_wins(self):
        result = flatten(_event(
            ("user", "first"),
            ("ctxt", '{"user":"second"}'),
            ("other", "x"),
        ))
        assert result.fields["user"] == "second"

        result = flatten(_event(("ctxt", '{"user":"first"}'), ("user", "second")))
        assert result.fields["user"] == "second"

    def test_idempotent(self):
        event = _event(("ctxt", '{"a":"1"}'), ("b", 2))
        assert dict(flatten(event).fields) == dict(flatten(event).fields)

    def test_fields_read_only(self):
        result = flatten(_event(("a", "1")))
        with pytest.raises(TypeError):
            result.fields["a"] = "2"

    def test_no_key_values(self):
        result = flatten(_event())
        assert dict(result.fields) == {}
        assert result.ok


class TestMalformedCtxt:
    BAD = ("ctxt", "not json")

    def test_skip_pair_keeps_rest(self):
        result = flatten(_event(("a", "1"), self.BAD, ("b", "2")), CtxtPolicy.SKIP_PAIR)
        assert dict(result.fields) == {"a": "1", "b": "2"}
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], MalformedContextError)

    def test_abort_drops_all_context(self):
        result = flatten(_event(("a", "1"), self.BAD, ("b", "2")), CtxtPolicy.ABORT)
        assert dict(result.fields) == {}
        assert isinstance(result.errors[0], MalformedContextError)

    def test_policy_accepts_string(self):
        result = flatten(_event(("a", "1"), self.BAD), "abort")
        assert dict(result.fields) == {}

    def test_default_policy_is_skip(self):
        result = flatten(_event(("a", "1"), self.BAD))
        assert dict(result.fields) == {"a": "1"}


class TestTraversalError:
    def test_context_dropped(self):
        event = LogEvent(Level.INFO, "svc", "msg", key_values=_broken_source())
        result = flatten(event)
        assert dict(result.fields) == {}
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], KeyValueTraversalError)
        assert "source exploded" in str(result.errors[0])

    def test_non_pair_item(self):
        result = flatten(LogEvent(Level.INFO, "svc", "msg", key_values=("abc",)))
        assert isinstance(result.errors[0], KeyValueTraversalError)


class TestParseCtxt:
    def test_valid(self):
        assert parse_ctxt('{"a":"b"}') == {"a": "b"}

    @pytest.mark.parametrize("value", [
        "not json",
        "[1, 2]",
        '"just a string"',
        '{"n": 1}',
        '{"nested": {"a": "b"}}',
        42,
        None,
    ])
    def test_malformed(self, value):
        with pytest.raises(MalformedContextError):
            parse_ctxt(value)


class _Unprintable:
    def __str__(self):
        raise RuntimeError("str failed")


class TestCoercionError:
    def test_dict_with_tuple_keys_skipped(self):
        result = flatten(_event(("a", "1"), ("data", {(1, 2): "x"}), ("b", "2")))
        assert dict(result.fields) == {"a": "1", "b": "2"}
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], ValueCoercionError)
        assert result.errors[0].key == "data"

    def test_failing_str_skipped(self):
        result = flatten(_event(("obj", _Unprintable()), ("b", "2")))
        assert dict(result.fields) == {"b": "2"}
        assert "str failed" in str(result.errors[0])

    def test_failing_key(self):
        result = flatten(_event((_Unprintable(), "v"), ("b", "2")))
        assert dict(result.fields) == {"b": "2"}
        assert result.errors[0].key == "<key>"

    def test_abort_drops_all_context(self):
        result = flatten(_event(("a", "1"), ("obj", _Unprintable())), CtxtPolicy.ABORT)
        assert dict(result.fields) == {}
        assert isinstance(result.errors[0], ValueCoercionError)
