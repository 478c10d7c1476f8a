import asyncio

import pytest

from dataknobs_rules import RuleCompileError, ValidationError


class TestPresence:
    """Test the required and forbidden rules."""

    def test_required(self, jo):
        assert jo.validate_sync(0, jo.required()).valid
        assert jo.validate_sync("", jo.required()).valid
        assert jo.validate_sync(None, jo.required()).errors == [ValidationError("required")]

    def test_forbidden(self, jo):
        assert jo.validate_sync(None, jo.forbidden()).valid
        result = jo.validate_sync("here", jo.forbidden())
        assert [error.rule_name for error in result.errors] == ["forbidden"]

    def test_required_runs_first(self, jo):
        result = jo.validate_sync(None, jo.number().required(), {"abort_early": True})
        assert [error.rule_name for error in result.errors] == ["required"]


class TestAllowAndDenyLists:
    """Test the valid and invalid rules."""

    def test_valid(self, jo):
        schema = jo.valid("red", "green")
        assert jo.validate_sync("red", schema).valid
        result = jo.validate_sync("blue", schema)
        assert result.errors == [ValidationError("valid", (), {"allowed": ["red", "green"]})]

    def test_repeated_valid_merges(self, jo):
        schema = jo.valid("red").valid("green")
        assert jo.validate_sync("green", schema).valid
        result = jo.validate_sync("blue", schema)
        assert len(result.errors) == 1
        assert result.errors[0].info == {"allowed": ["red", "green"]}

    def test_valid_is_case_sensitive_by_default(self, jo):
        assert not jo.validate_sync("RED", jo.string().valid("red")).valid

    def test_insensitive(self, jo):
        schema = jo.string().insensitive().valid("red")
        assert jo.validate_sync("RED", schema).valid
        assert not jo.validate_sync("REDDISH", schema).valid

    def test_insensitive_applies_to_merged_list(self, jo):
        schema = jo.string().insensitive().valid("red").valid("green")
        assert jo.validate_sync("Green", schema).valid

    def test_insensitive_after_valid(self, jo):
        schema = jo.string().valid("red").string().insensitive()
        assert jo.validate_sync("Red", schema).valid

    def test_insensitive_only_reachable_from_string(self, jo):
        assert not hasattr(jo.valid("red"), "insensitive")

    def test_invalid(self, jo):
        schema = jo.invalid("admin", "root")
        assert jo.validate_sync("alice", schema).valid
        result = jo.validate_sync("root", schema)
        assert result.errors == [ValidationError("invalid", (), {"denied": "root"})]

    def test_invalid_requires_values(self, jo):
        with pytest.raises(RuleCompileError):
            jo.invalid()


class TestCustom:
    """Test user-supplied validation functions."""

    def test_sync_function(self, jo):
        schema = jo.custom(lambda value: value % 2 == 0)
        assert jo.validate_sync(4, schema).valid
        assert jo.validate_sync(3, schema).errors == [ValidationError("custom")]

    def test_message(self, jo):
        schema = jo.custom(lambda value: False, "never valid")
        result = jo.validate_sync(1, schema)
        assert result.errors[0].info == {"message": "never valid"}

    def test_async_function(self, jo):
        async def check(value):
            await asyncio.sleep(0)
            return value == "ok" or {"got": value}

        schema = jo.custom(check)
        assert jo.validate_sync("ok", schema).valid
        assert jo.validate_sync("ko", schema).errors[0].info == {"got": "ko"}

    def test_exceptions_fail_the_value(self, jo):
        schema = jo.custom(lambda value: value["missing"])
        result = jo.validate_sync({}, schema)
        assert result.errors[0].rule_name == "custom"
        assert "missing" in result.errors[0].info["error"]

    def test_requires_callable(self, jo):
        with pytest.raises(RuleCompileError):
            jo.custom("not callable")

    def test_missing_values_skip_the_function(self, jo):
        schema = jo.custom(lambda value: value > 0)
        assert jo.validate_sync(None, schema).valid
