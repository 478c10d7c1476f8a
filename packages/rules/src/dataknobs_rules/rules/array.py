"""Array (list) rules, under the ``array`` namespace."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List

from ..coercer import default_coercer
from ..rule import Priority, Rule, SyncRule
from .base import (
    ExactSize,
    MaxSize,
    MinSize,
    TypedRule,
    fan_out,
    schema_arg,
    single_arg,
)

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext
    from ..result import ValidationError

SEQUENCE_TYPES = (list, tuple)


class ArrayValidator(SyncRule):
    """The value must be a list or tuple.

    With ``convert``, tuples, JSON array text and comma-separated strings
    become lists.
    """

    rule_name = "array"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return isinstance(ctx.value, SEQUENCE_TYPES)

    def coerce(self, value: Any) -> Any:
        return default_coercer.coerce(value, list)


class Items(Rule):
    """Validates every element against one schema, each at its own index."""

    rule_name = "array.items"

    def compile(self, ctx: CompileContext) -> None:
        self._schema = schema_arg(self, single_arg(self, ctx))

    def priority(self) -> Priority:
        return Priority.LOW

    def validate(self, ctx: ValidationContext) -> Any:
        if not isinstance(ctx.value, SEQUENCE_TYPES):
            return True
        return self._validate_items(ctx)

    async def _validate_items(self, ctx: ValidationContext) -> Any:
        items = list(ctx.value)
        results = await fan_out(
            ctx, [(index, item, self._schema) for index, item in enumerate(items)]
        )

        errors: List[ValidationError] = []
        for result in results:
            errors.extend(result.errors)
        if errors:
            return errors

        if ctx.options.convert and any(
            result.value is not item for result, item in zip(results, items)
        ):
            ctx.value = [result.value for result in results]
        return True


class ArrayRule(TypedRule):
    accepts = SEQUENCE_TYPES


class Min(MinSize, ArrayRule):
    rule_name = "array.min"


class Max(MaxSize, ArrayRule):
    rule_name = "array.max"


class Length(ExactSize, ArrayRule):
    rule_name = "array.length"


RULES = [ArrayValidator, Items, Min, Max, Length]
