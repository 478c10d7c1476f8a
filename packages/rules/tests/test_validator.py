import asyncio

import pytest

from dataknobs_rules import (
    Priority,
    Rule,
    SchemaAssertionError,
    SyncRule,
    UnknownRuleError,
    ValidationError,
    ValidationOptions,
    ValidationResult,
    Validator,
)


def rule_names(result):
    return [error.rule_name for error in result.errors]


class TestValidation:
    """Test the validation run against the built-in catalogue."""

    @pytest.mark.asyncio
    async def test_bounded_string(self, jo):
        schema = jo.string().min(2).max(5)

        result = await jo.validate("ab", schema)
        assert result.valid
        assert result.value == "ab"

        result = await jo.validate("a", schema)
        assert not result.valid
        assert result.errors == [ValidationError("string.min", (), {"length": 1, "min": 2})]

        result = await jo.validate("abcdef", schema)
        assert result.errors == [ValidationError("string.max", (), {"length": 6, "max": 5})]

    @pytest.mark.asyncio
    async def test_errors_accumulate(self, jo):
        schema = jo.string().min(5).alphanum()
        result = await jo.validate("a-b", schema)
        assert rule_names(result) == ["string.min", "string.alphanum"]

    @pytest.mark.asyncio
    async def test_abort_early(self, jo):
        schema = jo.string().min(5).alphanum()
        result = await jo.validate("a-b", schema, {"abort_early": True})
        assert rule_names(result) == ["string.min"]

    @pytest.mark.asyncio
    async def test_missing_values_pass_unless_required(self, jo):
        assert (await jo.validate(None, jo.string().min(2))).valid
        result = await jo.validate(None, jo.string().min(2).required())
        assert rule_names(result) == ["required"]

    @pytest.mark.asyncio
    async def test_identical_calls_run_once(self, jo):
        result = await jo.validate(None, jo.required().required())
        assert rule_names(result) == ["required"]

        result = await jo.validate("abc", jo.string().max(2).max(2))
        assert rule_names(result) == ["string.max"]

    @pytest.mark.asyncio
    async def test_empty_schema_accepts_anything(self, jo):
        result = await jo.validate({"any": "thing"}, jo.schema())
        assert result.valid

    @pytest.mark.asyncio
    async def test_callback(self, jo):
        calls = []
        schema = jo.number()

        await jo.validate(5, schema, callback=lambda errors, value: calls.append((errors, value)))
        await jo.validate("x", schema, callback=lambda errors, value: calls.append((errors, value)))

        assert calls[0] == (None, 5)
        assert [error.rule_name for error in calls[1][0]] == ["number"]
        assert calls[1][1] == "x"


class TestCoercion:
    """Test coercion with the convert option."""

    @pytest.mark.asyncio
    async def test_coerced_value_is_returned(self, jo):
        result = await jo.validate("42", jo.number().integer(), {"convert": True})
        assert result.valid
        assert result.value == 42

    @pytest.mark.asyncio
    async def test_deeply_nested_json_fails_cleanly(self, jo):
        result = await jo.validate("[" * 100000, jo.array(), {"convert": True})
        assert rule_names(result) == ["array"]

        result = await jo.validate('{"a":' * 100000, jo.object(), {"convert": True})
        assert rule_names(result) == ["object"]

    @pytest.mark.asyncio
    async def test_no_coercion_without_convert(self, jo):
        result = await jo.validate("42", jo.number())
        assert rule_names(result) == ["number"]
        assert result.value == "42"

    @pytest.mark.asyncio
    async def test_failed_coercion_records_one_error(self, jo):
        result = await jo.validate("forty-two", jo.number(), {"convert": True})
        assert rule_names(result) == ["number"]
        assert result.value == "forty-two"

    @pytest.mark.asyncio
    async def test_coercion_feeds_later_rules(self, jo):
        schema = jo.string().trim().max(3)
        result = await jo.validate("  abc  ", schema, {"convert": True})
        assert result.valid
        assert result.value == "abc"

    @pytest.mark.asyncio
    async def test_failed_retry_reverts_value(self):
        class Doubler(SyncRule):
            rule_name = "even"

            def validate_sync(self, ctx):
                return ctx.value % 4 == 0

            def coerce(self, value):
                return value * 2

        jo = Validator().extend(Doubler)
        result = await jo.validate(1, jo.even(), {"convert": True})
        assert result.errors == [ValidationError("even")]
        assert result.value == 1

        result = await jo.validate(2, jo.even(), {"convert": True})
        assert result.valid
        assert result.value == 4

    @pytest.mark.asyncio
    async def test_validator_default_options(self):
        jo = Validator(options={"convert": True})
        assert jo.options == ValidationOptions(convert=True)
        result = await jo.validate("true", jo.boolean())
        assert result.value is True

        result = await jo.validate("true", jo.boolean(), {"convert": False})
        assert not result.valid


class TestExecutionOrder:
    """Test priority ordering and asynchronous sequencing."""

    @pytest.mark.asyncio
    async def test_priority_order(self):
        order = []

        class Normal(SyncRule):
            rule_name = "normal"

            def validate_sync(self, ctx):
                order.append("normal")
                return True

        class Urgent(SyncRule):
            rule_name = "urgent"

            def priority(self):
                return Priority.HIGH

            def validate_sync(self, ctx):
                order.append("urgent")
                return True

        jo = Validator().extend(Normal, Urgent)
        await jo.validate(1, jo.normal().urgent())
        assert order == ["urgent", "normal"]

    @pytest.mark.asyncio
    async def test_async_rules_run_in_sequence(self):
        events = []

        class Slow(Rule):
            rule_name = "slow"

            async def validate(self, ctx):
                events.append("slow start")
                await asyncio.sleep(0.01)
                events.append("slow end")
                return True

        class Quick(SyncRule):
            rule_name = "quick"

            def validate_sync(self, ctx):
                events.append("quick")
                return True

        jo = Validator().extend(Slow, Quick)
        result = await jo.validate(1, jo.slow().quick())
        assert result.valid
        assert events == ["slow start", "slow end", "quick"]

    @pytest.mark.asyncio
    async def test_outcome_interpretation(self):
        class Outcome(Rule):
            rule_name = "outcome"

            def validate(self, ctx):
                return self.params[0]

        jo = Validator().extend(Outcome)
        custom = ValidationError("elsewhere", ("x",), "info")

        assert (await jo.validate(1, jo.outcome(True))).valid
        assert (await jo.validate(1, jo.outcome(None))).valid
        assert (await jo.validate(1, jo.outcome(False))).errors == [ValidationError("outcome")]
        assert (await jo.validate(1, jo.outcome(custom))).errors == [custom]
        assert (await jo.validate(1, jo.outcome([custom, custom]))).errors == [custom, custom]

        nested = ValidationResult.failure(1, [custom])
        assert (await jo.validate(1, jo.outcome(nested))).errors == [custom]
        empty = ValidationResult.failure(1, [])
        assert (await jo.validate(1, jo.outcome(empty))).errors == [ValidationError("outcome")]

        result = await jo.validate(1, jo.outcome({"why": "because"}))
        assert result.errors == [ValidationError("outcome", (), {"why": "because"})]


class TestSyncEntryPoints:
    """Test the synchronous helpers."""

    def test_validate_sync(self, jo):
        result = jo.validate_sync("abc", jo.string().max(2))
        assert rule_names(result) == ["string.max"]

    def test_assert_valid_returns_value(self, jo):
        assert jo.assert_valid("7", jo.number(), options={"convert": True}) == 7

    def test_assert_valid_raises(self, jo):
        with pytest.raises(SchemaAssertionError) as exc_info:
            jo.assert_valid("a", jo.string().min(2), message="bad name")
        error = exc_info.value
        assert str(error).startswith("bad name: string.min")
        assert error.errors[0].rule_name == "string.min"
        assert error.context["errors"][0]["info"] == {"length": 1, "min": 2}

    def test_module_level_helpers(self):
        import dataknobs_rules as rules

        schema = rules.default_validator.string().email()
        assert rules.validate_sync("someone@example.com", schema).valid
        with pytest.raises(SchemaAssertionError):
            rules.assert_valid("nobody", schema)


class TestRootScope:
    """Test chain entry points on the Validator itself."""

    def test_only_rule_names_are_forwarded(self, jo):
        for name in ("compile", "rules", "chain", "attach", "email"):
            with pytest.raises(UnknownRuleError):
                getattr(jo, name)
            assert not hasattr(jo, name)

    def test_rule_named_like_a_schema_method(self):
        class Compile(SyncRule):
            rule_name = "compile"

            def validate_sync(self, ctx):
                return ctx.value == "ok"

        jo = Validator().extend(Compile)
        schema = jo.compile()
        assert jo.validate_sync("ok", schema).valid
        assert rule_names(jo.validate_sync("no", schema)) == ["compile"]
