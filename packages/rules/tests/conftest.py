"""Pytest configuration and fixtures for rules package tests."""

import pytest

from dataknobs_rules import Ruleset, SyncRule, Validator


class NumberRule(SyncRule):
    rule_name = "number"

    def validate_sync(self, ctx):
        return isinstance(ctx.value, (int, float))


class NumberMin(SyncRule):
    rule_name = "number.min"

    def validate_sync(self, ctx):
        return ctx.value >= self.params[0]


class NumberInteger(SyncRule):
    rule_name = "number.integer"

    def validate_sync(self, ctx):
        return isinstance(ctx.value, int)


class ThirtyTwoBit(SyncRule):
    rule_name = "number.integer.thirtyTwoBit"

    def validate_sync(self, ctx):
        return -(2**31) <= ctx.value < 2**31


class DateMin(SyncRule):
    rule_name = "date.min"

    def validate_sync(self, ctx):
        return ctx.value >= self.params[0]


class DateIso(SyncRule):
    rule_name = "date.iso"

    def validate_sync(self, ctx):
        return True


class RequiredRule(SyncRule):
    rule_name = "required"
    skip_missing = False

    def validate_sync(self, ctx):
        return ctx.value is not None


SAMPLE_RULES = [
    NumberRule,
    NumberMin,
    NumberInteger,
    ThirtyTwoBit,
    DateMin,
    DateIso,
    RequiredRule,
]


@pytest.fixture
def sample_ruleset():
    """A small ruleset with a nested namespace."""
    return Ruleset().register(*SAMPLE_RULES)


@pytest.fixture
def jo():
    """A validator over the built-in rule catalogue."""
    return Validator()


@pytest.fixture
def sample_rules():
    """The sample rule classes keyed by rule name."""
    return {rule.rule_name: rule for rule in SAMPLE_RULES}
