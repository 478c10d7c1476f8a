"""Object (mapping) rules, under the ``object`` namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from ..coercer import default_coercer
from ..rule import FlagRule, Priority, Rule, SyncRule
from .base import ExactSize, MaxSize, MinSize, TypedRule, fan_out, schema_mapping_arg

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext
    from ..result import ValidationError
    from ..schema import Schema

logger = logging.getLogger(__name__)


class ObjectValidator(SyncRule):
    """The value must be a mapping. With ``convert``, JSON object text is parsed."""

    rule_name = "object"

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return isinstance(ctx.value, Mapping)

    def coerce(self, value: Any) -> Any:
        return default_coercer.coerce(value, dict)


class Keys(Rule):
    """Validates mapping members against per-key schemas.

    Repeated declarations merge their keys into the first declaration; a
    later schema for the same key replaces the earlier one. Keys that have
    no schema are rejected unless ``object.unknown`` allows them. Members
    are validated concurrently, each at its own path. With ``convert``,
    coerced member values are written into a shallow copy of the mapping.
    """

    rule_name = "object.keys"

    _schemas: Dict[Any, Schema] | None = None
    allow_unknown = False

    def compile(self, ctx: CompileContext) -> None:
        schemas = schema_mapping_arg(self, ctx)

        def merge(rule: Keys) -> None:
            rule._schemas = {**rule._schemas, **schemas}

        if ctx.invoke_first(Keys, merge):
            return
        self._schemas = schemas

    def operates(self) -> bool:
        return self._schemas is not None

    def priority(self) -> Priority:
        return Priority.LOW

    def validate(self, ctx: ValidationContext) -> Any:
        if not isinstance(ctx.value, Mapping):
            return True
        return self._validate_members(ctx)

    async def _validate_members(self, ctx: ValidationContext) -> Any:
        value = ctx.value
        if not self.allow_unknown:
            for key in value:
                if key not in self._schemas:
                    return self.error(ctx, {"extra": key, "rule": "object.unknown"})

        keys = list(self._schemas)
        results = await fan_out(
            ctx, [(key, value.get(key), self._schemas[key]) for key in keys]
        )

        errors: List[ValidationError] = []
        for result in results:
            errors.extend(result.errors)
        if errors:
            return errors

        if ctx.options.convert:
            updates = {
                key: result.value
                for key, result in zip(keys, results)
                if key in value and result.value is not value[key]
            }
            if updates:
                logger.debug(f"Converted members {sorted(map(str, updates))} at '{ctx.path}'")
                ctx.value = {**value, **updates}
        return True


class Unknown(FlagRule):
    """Sets whether ``object.keys`` accepts keys it has no schema for.

    ``object.unknown()`` allows them; ``object.unknown(False)`` restores the
    default of rejecting them.
    """

    rule_name = "object.unknown"
    target = Keys
    # Repeated ``keys`` declarations merge into the first instance
    from_last = False

    def apply(self, rule: Keys, ctx: CompileContext) -> None:
        rule.allow_unknown = bool(ctx.args[0]) if ctx.args else True


class ObjectRule(TypedRule):
    accepts = (Mapping,)


class Min(MinSize, ObjectRule):
    rule_name = "object.min"


class Max(MaxSize, ObjectRule):
    rule_name = "object.max"


class Length(ExactSize, ObjectRule):
    rule_name = "object.length"


RULES = [ObjectValidator, Keys, Unknown, Min, Max, Length]
