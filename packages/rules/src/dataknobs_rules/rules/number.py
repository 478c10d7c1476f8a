"""Number rules, under the ``number`` namespace."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any

from ..coercer import default_coercer
from ..exceptions import RuleCompileError, RuleNotImplementedError
from ..rule import SyncRule
from .base import is_number, number_arg

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext


class NumberValidator(SyncRule):
    """The value must be a real number (bools and NaN excluded).

    With ``convert``, numeric strings are parsed: integral text becomes an
    int, anything else a float.
    """

    rule_name = "number"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return is_number(ctx.value)

    def coerce(self, value: Any) -> Any:
        return default_coercer.number(value)


class NumberRule(SyncRule):
    """A refinement judging numbers only."""

    def validate(self, ctx: ValidationContext) -> Any:
        if not is_number(ctx.value):
            return True
        return self.validate_sync(ctx)


class Integer(NumberRule):
    rule_name = "number.integer"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        value = ctx.value
        return isinstance(value, int) or (not math.isinf(value) and float(value).is_integer())


class BoundRule(NumberRule):
    """Compares the value with a number given at the call site."""

    bound_key = "limit"

    def compile(self, ctx: CompileContext) -> None:
        self._bound = number_arg(self, ctx)

    def compare(self, value: Any) -> bool:
        raise RuleNotImplementedError(f"Rule '{self.name}' does not implement compare")

    def validate_sync(self, ctx: ValidationContext) -> Any:
        return self.compare(ctx.value) or {"value": ctx.value, self.bound_key: self._bound}


class Min(BoundRule):
    rule_name = "number.min"
    bound_key = "min"

    def compare(self, value: Any) -> bool:
        return value >= self._bound


class Max(BoundRule):
    rule_name = "number.max"
    bound_key = "max"

    def compare(self, value: Any) -> bool:
        return value <= self._bound


class Greater(BoundRule):
    rule_name = "number.greater"
    bound_key = "greater"

    def compare(self, value: Any) -> bool:
        return value > self._bound


class Less(BoundRule):
    rule_name = "number.less"
    bound_key = "less"

    def compare(self, value: Any) -> bool:
        return value < self._bound


class Positive(NumberRule):
    rule_name = "number.positive"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value > 0


class Negative(NumberRule):
    rule_name = "number.negative"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value < 0


class Multiple(BoundRule):
    rule_name = "number.multiple"
    bound_key = "multiple"

    def compile(self, ctx: CompileContext) -> None:
        super().compile(ctx)
        if self._bound <= 0:
            raise RuleCompileError(
                self.name, f"expects a positive number, got {self._bound!r}"
            )

    def compare(self, value: Any) -> bool:
        if math.isinf(value):
            return False
        return value % self._bound == 0


RULES = [
    NumberValidator,
    Integer,
    Min,
    Max,
    Greater,
    Less,
    Positive,
    Negative,
    Multiple,
]
