import pytest

from dataknobs_rules import RuleCompileError, Schema, UnknownRuleError, Validator


class TestSchemaChaining:
    """Test building schemas with the fluent chain."""

    def test_chain_accumulates_rules(self, jo):
        schema = jo.string().min(2).max(5).required()
        assert isinstance(schema, Schema)
        assert schema.names == ["string", "string.min", "string.max", "required"]
        assert schema.scope.name == "required"

    def test_chains_are_immutable(self, jo):
        base = jo.string().trim()
        short = base.max(10)
        long = base.min(10)
        assert base.names == ["string", "string.trim"]
        assert short.names == ["string", "string.trim", "string.max"]
        assert long.names == ["string", "string.trim", "string.min"]

    def test_root_rules_reachable_after_narrowing(self, jo):
        schema = jo.number().integer().required()
        assert schema.names == ["number", "number.integer", "required"]

    def test_deeper_name_wins(self, jo):
        assert jo.number().min(1).names == ["number", "number.min"]
        assert jo.string().min(1).names == ["string", "string.min"]

    def test_unreachable_name(self, jo):
        with pytest.raises(UnknownRuleError) as exc_info:
            jo.number().email()
        assert exc_info.value.rule_name == "email"
        assert "min" in exc_info.value.context["available"]

    def test_unknown_rule_is_attribute_error(self, jo):
        assert not hasattr(jo.number(), "email")
        assert hasattr(jo.number(), "positive")

    def test_private_names_are_plain_attribute_errors(self, jo):
        with pytest.raises(AttributeError) as exc_info:
            jo.number()._missing
        assert not isinstance(exc_info.value, UnknownRuleError)

    def test_call_by_name(self, jo):
        schema = jo.schema().call("string").call("min", 3)
        assert schema == jo.string().min(3)

    def test_call_unknown_name(self, jo):
        with pytest.raises(UnknownRuleError):
            jo.schema().call("nope")

    def test_compile_errors_surface_at_the_call_site(self, jo):
        with pytest.raises(RuleCompileError):
            jo.string().min("three")
        with pytest.raises(RuleCompileError):
            jo.valid()
        with pytest.raises(RuleCompileError):
            jo.object().keys({"name": "not a schema"})

    def test_dir_lists_reachable_names(self, jo):
        names = dir(jo.string())
        assert "email" in names
        assert "required" in names
        assert "positive" not in names

    def test_chain_entry_points(self, jo):
        chain = jo.number().chain()
        assert chain["min"](3).names == ["number", "number.min"]


class TestSchemaIdentity:
    """Test schema equality and compilation."""

    def test_equality(self, jo):
        assert jo.string().min(2) == jo.string().min(2)
        assert jo.string().min(2) != jo.string().min(3)
        assert jo.string() != jo.string().min(3)

    def test_unhashable(self, jo):
        with pytest.raises(TypeError):
            hash(jo.string())

    def test_repr(self, jo):
        assert repr(jo.string().min(2)) == "Schema(string().string.min(2))"

    def test_compile_returns_fresh_pipelines(self, jo):
        schema = jo.valid("a").valid("b")
        first = schema.compile()
        second = schema.compile()
        assert first.steps[0] is not second.steps[0]
        assert first.steps[0]._allowed == ["a", "b"]

    def test_validators_have_independent_rulesets(self):
        assert Validator().ruleset is not Validator().ruleset
