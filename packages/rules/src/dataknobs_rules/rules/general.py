"""Rules available at the root of the namespace, for values of any type."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any

from ..exceptions import RuleCompileError
from ..rule import Priority, Rule, SyncRule

if TYPE_CHECKING:
    from ..context import CompileContext, ValidationContext

logger = logging.getLogger(__name__)


class Required(SyncRule):
    """The value must be present (not None)."""

    rule_name = "required"
    skip_missing = False

    def priority(self) -> Priority:
        return Priority.HIGH

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value is not None


class Forbidden(SyncRule):
    """The value must be absent (None)."""

    rule_name = "forbidden"
    skip_missing = False

    def priority(self) -> Priority:
        return Priority.HIGH

    def validate_sync(self, ctx: ValidationContext) -> bool:
        return ctx.value is None


class Valid(SyncRule):
    """The value must be one of an allow-list.

    Repeated declarations merge into the first one, so
    ``.valid("a").valid("b")`` allows both values. A ``string.insensitive``
    flag declared before or after makes string comparisons ignore case.
    """

    rule_name = "valid"

    _allowed: list[Any] | None = None
    case_insensitive = False

    def compile(self, ctx: CompileContext) -> None:
        if not ctx.args:
            raise RuleCompileError(self.name, "expects at least one allowed value")
        if ctx.invoke_first(Valid, lambda rule: rule._allowed.extend(ctx.args)):
            return
        self._allowed = list(ctx.args)

        from .string import Insensitive

        self.case_insensitive = ctx.find_first(Insensitive) is not None

    def operates(self) -> bool:
        return self._allowed is not None

    def validate_sync(self, ctx: ValidationContext) -> Any:
        value = ctx.value
        if value in self._allowed:
            return True
        if self.case_insensitive and isinstance(value, str):
            folded = value.casefold()
            if any(isinstance(item, str) and item.casefold() == folded for item in self._allowed):
                return True
        return {"allowed": list(self._allowed)}


class Invalid(SyncRule):
    """The value must not be one of a deny-list."""

    rule_name = "invalid"

    def compile(self, ctx: CompileContext) -> None:
        if not ctx.args:
            raise RuleCompileError(self.name, "expects at least one denied value")
        self._denied = list(ctx.args)

    def validate_sync(self, ctx: ValidationContext) -> Any:
        return ctx.value not in self._denied or {"denied": ctx.value}


class Custom(Rule):
    """Validate with a user function.

    The function receives the value and returns an outcome (True, False, or
    diagnostic info), or an awaitable of one. An exception raised by the
    function fails the value with the exception message as info. Missing
    values pass without calling the function.
    """

    rule_name = "custom"

    def compile(self, ctx: CompileContext) -> None:
        if not ctx.args or not callable(ctx.args[0]) or len(ctx.args) > 2:
            raise RuleCompileError(
                self.name,
                "expects a callable and an optional message",
                details={"args": ctx.args},
            )
        self._fn = ctx.args[0]
        self._message = ctx.args[1] if len(ctx.args) > 1 else None

    def validate(self, ctx: ValidationContext) -> Any:
        if ctx.value is None:
            return True
        try:
            outcome = self._fn(ctx.value)
        except Exception as e:
            logger.debug(f"Custom validator raised: {e!s}")
            return {"error": str(e)}
        if inspect.isawaitable(outcome):
            return self._resolve(outcome)
        return self._finish(outcome)

    async def _resolve(self, awaitable: Any) -> Any:
        try:
            outcome = await awaitable
        except Exception as e:
            logger.debug(f"Custom validator raised: {e!s}")
            return {"error": str(e)}
        return self._finish(outcome)

    def _finish(self, outcome: Any) -> Any:
        if outcome is False and self._message is not None:
            return {"message": self._message}
        return outcome


RULES = [Required, Forbidden, Valid, Invalid, Custom]
