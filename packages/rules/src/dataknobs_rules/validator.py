"""Execution engine that runs compiled schemas against values.

The Validator compiles a schema into a pipeline (see ``compiler``) and runs
its steps strictly in priority order. Synchronous and asynchronous rules
share one execution signature: a rule's outcome is awaited when it is
awaitable, and the next step never starts before the current one resolves.

Failures are collected as ``ValidationError`` records. With the ``convert``
option, a failing rule gets one chance to coerce the value and re-validate.
With ``abort_early``, the run stops at the first failing rule.

Example:
    ```python
    from dataknobs_rules import Validator

    jo = Validator()
    schema = jo.object().keys({
        "name": jo.string().min(2).required(),
        "age": jo.number().integer().positive(),
    })

    result = await jo.validate({"name": "Al", "age": "42"}, schema, {"convert": True})
    assert result.valid
    assert result.value == {"name": "Al", "age": 42}
    ```
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Sequence

from .context import ValidationContext
from .exceptions import SchemaAssertionError, UnknownRuleError
from .options import OptionsLike, ValidationOptions
from .result import PathItem, ValidationError, ValidationResult
from .rule import NO_COERCION
from .schema import Schema

if TYPE_CHECKING:
    from .rule import Rule
    from .ruleset import Ruleset

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[List[ValidationError]], Any], Any]


class Validator:
    """Validation engine and root chain scope.

    Rule names reachable from the ruleset root can be chained directly on
    the validator (``jo.string()``) to start a schema.

    Attributes:
        ruleset: The rule namespace schemas are built from
        options: Default options, overridden by per-call options
    """

    def __init__(
        self,
        ruleset: Ruleset | None = None,
        options: OptionsLike | None = None,
    ):
        """Initialize the validator.

        Args:
            ruleset: Rule namespace to chain from. Defaults to a new ruleset
                holding the built-in rule catalogue.
            options: Default validation options
        """
        if ruleset is None:
            from .rules import default_ruleset

            ruleset = default_ruleset()
        self._ruleset = ruleset
        self._options = ValidationOptions().merge(options)

    @property
    def ruleset(self) -> Ruleset:
        """The rule namespace schemas are built from."""
        return self._ruleset

    @property
    def options(self) -> ValidationOptions:
        """Default validation options."""
        return self._options

    def schema(self) -> Schema:
        """Start an empty schema at the ruleset root."""
        return Schema(self._ruleset)

    def extend(self, *rules: type[Rule]) -> Validator:
        """Register additional rule definitions (fluent API).

        Args:
            *rules: Rule classes to register at their ``rule_name``

        Returns:
            Self for chaining
        """
        self._ruleset.register(*rules)
        return self

    def __getattr__(self, name: str) -> Callable[..., Schema]:
        if name.startswith("_"):
            raise AttributeError(name)
        if self._ruleset.resolve(name) is None:
            raise UnknownRuleError(name, self._ruleset.name, sorted(self._ruleset.reachable()))

        def handler(*args: Any) -> Schema:
            return self.schema().call(name, *args)

        handler.__name__ = name
        return handler

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._ruleset.reachable()))

    async def validate(
        self,
        value: Any,
        schema: Schema,
        options: OptionsLike | None = None,
        callback: Callback | None = None,
        *,
        path: Iterable[PathItem] = (),
    ) -> ValidationResult:
        """Validate a value against a schema.

        Args:
            value: Value to validate
            schema: Schema to validate against
            options: Options overriding this validator's defaults
            callback: Optional function called as ``callback(errors, value)``
                where errors is None on success
            path: Path of ``value`` from the validation root, used when
                recursing into nested members

        Returns:
            ValidationResult with the (possibly coerced) value and errors
        """
        opts = self._options.merge(options)
        pipeline = schema.compile()
        ctx = ValidationContext(value=value, path=tuple(path), options=opts, validator=self)

        errors: List[ValidationError] = []
        for rule in pipeline.steps:
            failure = await self._run_rule(rule, ctx)
            if failure and opts.convert:
                failure = await self._coerce_and_retry(rule, ctx, failure)
            if failure:
                errors.extend(failure)
                if opts.abort_early:
                    break

        if errors:
            logger.debug(f"Validation at '{ctx.path}' failed with {len(errors)} error(s)")
            result = ValidationResult.failure(ctx.value, errors)
        else:
            result = ValidationResult.success(ctx.value)

        if callback is not None:
            callback(result.errors or None, result.value)
        return result

    def validate_sync(
        self,
        value: Any,
        schema: Schema,
        options: OptionsLike | None = None,
    ) -> ValidationResult:
        """Validate a value from synchronous code.

        Runs the engine in a new event loop, so it cannot be called while an
        event loop is running in the current thread.
        """
        return asyncio.run(self.validate(value, schema, options))

    def assert_valid(
        self,
        value: Any,
        schema: Schema,
        message: str | None = None,
        options: OptionsLike | None = None,
    ) -> Any:
        """Validate a value and raise if it does not conform.

        Args:
            value: Value to validate
            schema: Schema to validate against
            message: Optional prefix for the exception message
            options: Options overriding this validator's defaults

        Returns:
            The (possibly coerced) value

        Raises:
            SchemaAssertionError: If validation fails
        """
        result = self.validate_sync(value, schema, options)
        if not result.valid:
            detail = str(result.errors[0])
            raise SchemaAssertionError(
                f"{message}: {detail}" if message else detail,
                result.errors,
            )
        return result.value

    async def _run_rule(self, rule: Rule, ctx: ValidationContext) -> List[ValidationError]:
        """Run one rule and return its failures (empty when it passes)."""
        outcome = rule.validate(ctx)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return self._interpret(rule, ctx, outcome)

    async def _coerce_and_retry(
        self, rule: Rule, ctx: ValidationContext, failure: List[ValidationError]
    ) -> List[ValidationError]:
        """Coerce the working value for a failing rule and validate it once more.

        The working value is only replaced when the re-validation passes.
        """
        original = ctx.value
        coerced = rule.coerce(original)
        if coerced is NO_COERCION:
            return failure

        logger.debug(f"Rule '{rule.name}' coerced {original!r} -> {coerced!r}")
        ctx.value = coerced
        retry = await self._run_rule(rule, ctx)
        if retry:
            ctx.value = original
        return retry

    @staticmethod
    def _interpret(rule: Rule, ctx: ValidationContext, outcome: Any) -> List[ValidationError]:
        """Translate a rule outcome into a list of failures."""
        if outcome is True or outcome is None:
            return []
        if outcome is False:
            return [rule.error(ctx)]
        if isinstance(outcome, ValidationError):
            return [outcome]
        if isinstance(outcome, ValidationResult):
            if not outcome.valid and not outcome.errors:
                return [rule.error(ctx)]
            return list(outcome.errors)
        if isinstance(outcome, Sequence) and not isinstance(outcome, (str, bytes)) and all(
            isinstance(item, ValidationError) for item in outcome
        ):
            return list(outcome)
        return [rule.error(ctx, outcome)]
