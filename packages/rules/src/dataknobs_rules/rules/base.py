"""Building blocks shared by the built-in rule modules."""

from __future__ import annotations

import asyncio
import math
from numbers import Real
from typing import TYPE_CHECKING, Any, ClassVar, List, Mapping, Sequence, Tuple

from ..exceptions import RuleCompileError, RuleNotImplementedError
from ..rule import Rule, SyncRule

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext
    from ..result import PathItem, ValidationResult
    from ..schema import Schema


def is_number(value: Any) -> bool:
    """Whether a value is a real number usable in comparisons (not bool or NaN)."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def single_arg(rule: Rule, ctx: CompileContext) -> Any:
    """Return the only call-site argument, raising if there is not exactly one."""
    if len(ctx.args) != 1:
        raise RuleCompileError(
            rule.name,
            f"expects exactly one argument, got {len(ctx.args)}",
            details={"args": ctx.args},
        )
    return ctx.args[0]


def limit_arg(rule: Rule, ctx: CompileContext) -> int:
    """Return a non-negative integer bound from the call-site arguments."""
    limit = single_arg(rule, ctx)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
        raise RuleCompileError(
            rule.name,
            f"expects a non-negative integer, got {limit!r}",
            details={"args": ctx.args},
        )
    return limit


def number_arg(rule: Rule, ctx: CompileContext) -> float | int:
    """Return a finite number from the call-site arguments."""
    number = single_arg(rule, ctx)
    if not is_number(number) or math.isinf(number):
        raise RuleCompileError(
            rule.name,
            f"expects a finite number, got {number!r}",
            details={"args": ctx.args},
        )
    return number


def schema_arg(rule: Rule, value: Any) -> Schema:
    """Check that a rule argument is a Schema."""
    from ..schema import Schema

    if not isinstance(value, Schema):
        raise RuleCompileError(
            rule.name,
            f"expects a schema, got {type(value).__name__}",
            details={"value": repr(value)},
        )
    return value


def schema_mapping_arg(rule: Rule, ctx: CompileContext) -> dict[str, Schema]:
    """Return a mapping of keys to Schemas from the call-site arguments."""
    mapping = single_arg(rule, ctx)
    if not isinstance(mapping, Mapping):
        raise RuleCompileError(
            rule.name,
            f"expects a mapping of keys to schemas, got {type(mapping).__name__}",
            details={"args": ctx.args},
        )
    return {key: schema_arg(rule, schema) for key, schema in mapping.items()}


class TypedRule(SyncRule):
    """A refinement that only judges values of the ``accepts`` types.

    Other values pass; the type rule of the same namespace reports them.
    """

    accepts: ClassVar[Tuple[type, ...]] = (object,)

    def validate(self, ctx: ValidationContext) -> Any:
        if ctx.value is None or not isinstance(ctx.value, self.accepts):
            return True
        return self.validate_sync(ctx)


class SizeRule(TypedRule):
    """Compares ``len(value)`` with a bound given at the call site."""

    info_key: ClassVar[str] = "limit"

    def compile(self, ctx: CompileContext) -> None:
        self._limit = limit_arg(self, ctx)

    def compare(self, length: int) -> bool:
        raise RuleNotImplementedError(f"Rule '{self.name}' does not implement compare")

    def validate_sync(self, ctx: ValidationContext) -> Any:
        length = len(ctx.value)
        return self.compare(length) or {"length": length, self.info_key: self._limit}


class MinSize(SizeRule):
    info_key = "min"

    def compare(self, length: int) -> bool:
        return length >= self._limit


class MaxSize(SizeRule):
    info_key = "max"

    def compare(self, length: int) -> bool:
        return length <= self._limit


class ExactSize(SizeRule):
    info_key = "expected"

    def compare(self, length: int) -> bool:
        return length == self._limit


async def fan_out(
    ctx: ValidationContext, members: Sequence[Tuple[PathItem, Any, Schema]]
) -> List[ValidationResult]:
    """Validate member values against their schemas.

    Members run concurrently and all of them complete. With ``abort_early``
    the results after the first invalid member are discarded.

    Args:
        ctx: Context of the container value
        members: ``(key, value, schema)`` triples

    Returns:
        Member results, in member order
    """
    results = list(
        await asyncio.gather(
            *(ctx.descend(key, value, schema) for key, value, schema in members)
        )
    )
    if ctx.options.abort_early:
        for index, result in enumerate(results):
            if not result.valid:
                return results[: index + 1]
    return results
