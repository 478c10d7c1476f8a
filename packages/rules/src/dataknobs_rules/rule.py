"""Base interfaces and classes for validation rules.

Every validation unit is a ``Rule`` subclass positioned in a ruleset by its
dotted ``rule_name``. This module defines:
- The rule contract (compile, operates, validate, coerce, error, priority)
- ``SyncRule`` for rules that judge a value without suspending
- ``FlagRule`` for marker rules that only reconfigure a cooperating rule
- The ``Priority`` ordering and the ``NO_COERCION`` sentinel
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Awaitable, ClassVar, Union

from .exceptions import RuleNotImplementedError
from .result import ValidationError

if TYPE_CHECKING:
    from .context import CompileContext, ValidationContext

logger = logging.getLogger(__name__)


class Priority(IntEnum):
    """Execution order of compiled rules; lower values run first."""

    HIGH = 0
    NORMAL = 1
    LOW = 2


class _NoCoercion:
    """Type of the ``NO_COERCION`` sentinel."""

    _instance: ClassVar[_NoCoercion | None] = None

    def __new__(cls) -> _NoCoercion:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_COERCION"


NO_COERCION = _NoCoercion()

Outcome = Any
MaybeAwaitable = Union[Outcome, Awaitable[Outcome]]


class Rule:
    """Base class that all validation rules must implement.

    A rule class is a stateless template named by ``rule_name``. Calling a
    rule in a chain, e.g. ``.min(3)``, creates an instance holding the call
    arguments in ``params``; compilation may then capture configuration into
    instance state.

    Outcomes returned by ``validate`` are interpreted by the engine:
    - ``True`` or ``None``: the value passes
    - ``False``: the value fails without diagnostic info
    - a ``ValidationError`` or a list of them: reported verbatim
    - a ``ValidationResult``: its errors are reported
    - anything else: the value fails, with the outcome passed to ``error()``
      as ``info``

    Attributes:
        rule_name: Dotted name positioning the rule in a ruleset
        params: Arguments given at the chain call site
    """

    rule_name: ClassVar[str | None] = None

    def __init__(self, *args: Any):
        self.params: tuple[Any, ...] = args

    @property
    def name(self) -> str:
        """The rule's dotted name."""
        name = type(self).rule_name
        if not name:
            raise RuleNotImplementedError(
                f"Rule class '{type(self).__name__}' does not define rule_name",
                context={"rule": type(self).__name__},
            )
        return name

    def fresh(self) -> Rule:
        """Create an uncompiled copy bound to the same call arguments.

        Each compilation pass works on fresh copies so that compiled state is
        never shared between validation runs.
        """
        return type(self)(*self.params)

    def compile(self, ctx: CompileContext) -> None:
        """Capture configuration from the call-site arguments.

        Called once per compilation pass, in authoring order, so a rule can
        locate and modify rules declared before it through ``ctx``. Failures
        here are programmer errors and should raise.

        Args:
            ctx: Compilation context with ``args`` and sibling lookups
        """
        return None

    def operates(self) -> bool:
        """Whether the rule judges values itself.

        Rules returning False only configure other rules at compile time and
        are excluded from execution.
        """
        return True

    def validate(self, ctx: ValidationContext) -> MaybeAwaitable:
        """Check ``ctx.value`` and return an outcome or an awaitable of one.

        Args:
            ctx: Validation context carrying the value, path and options

        Returns:
            The outcome, or an awaitable resolving to it
        """
        raise RuleNotImplementedError(
            f"Rule '{self.name}' does not implement validate",
            context={"rule": self.name},
        )

    def coerce(self, value: Any) -> Any:
        """Attempt to transform a failing value into a conforming one.

        Only run when validation failed and the ``convert`` option is on; the
        rule is validated once more against the returned value.

        Returns:
            The coerced value, or ``NO_COERCION`` when no coercion took place
        """
        return NO_COERCION

    def error(self, ctx: ValidationContext, info: Any = None) -> ValidationError:
        """Build the error record signalling a failure of this rule.

        Args:
            ctx: Validation context as passed to validate()
            info: Additional information about the failure

        Returns:
            ValidationError for this rule at the context's path
        """
        return ValidationError(self.name, tuple(ctx.path), info)

    def identical_to(self, other: Any) -> bool:
        """Whether another instance is the same definition with equal arguments."""
        if other is self:
            return True
        return (
            isinstance(other, Rule)
            and type(self) is type(other)
            and self.params == other.params
        )

    def priority(self) -> Priority:
        """The rule's execution priority; lower priorities run first."""
        return Priority.NORMAL

    def __repr__(self) -> str:
        args = ", ".join(repr(arg) for arg in self.params)
        return f"{type(self).rule_name}({args})"


class SyncRule(Rule):
    """A rule whose judgment completes without suspending.

    Subclasses implement ``validate_sync``. A missing value (None) passes
    unless the subclass sets ``skip_missing`` to False; presence is enforced
    by the ``required`` rule.
    """

    skip_missing: ClassVar[bool] = True

    def validate(self, ctx: ValidationContext) -> Outcome:
        if ctx.value is None and self.skip_missing:
            return True
        return self.validate_sync(ctx)

    def validate_sync(self, ctx: ValidationContext) -> Outcome:
        """Check ``ctx.value`` and return an outcome."""
        raise RuleNotImplementedError(
            f"Rule '{self.name}' does not implement validate_sync",
            context={"rule": self.name},
        )


class FlagRule(Rule):
    """A marker rule that modifies a previously declared rule of ``target`` type.

    Flag rules never operate. At compile time they locate the last (or, with
    ``from_last`` False, the first) compiled instance of ``target`` and call
    ``apply`` on it. A flag with nothing to modify is ignored.
    """

    target: ClassVar[type[Rule] | None] = None
    from_last: ClassVar[bool] = True

    def operates(self) -> bool:
        return False

    def compile(self, ctx: CompileContext) -> None:
        if self.target is None:
            raise RuleNotImplementedError(
                f"Flag rule '{self.name}' does not define a target",
                context={"rule": self.name},
            )
        invoke = ctx.invoke_last if self.from_last else ctx.invoke_first
        if not invoke(self.target, lambda rule: self.apply(rule, ctx)):
            logger.debug(f"Flag '{self.name}' found no '{self.target.rule_name}' rule to modify")

    def apply(self, rule: Rule, ctx: CompileContext) -> None:
        """Modify the located target rule."""
        raise RuleNotImplementedError(
            f"Flag rule '{self.name}' does not implement apply",
            context={"rule": self.name},
        )
