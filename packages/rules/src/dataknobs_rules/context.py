"""Contexts passed to rules during compilation and validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence, Tuple, Type, TypeVar

from .options import ValidationOptions
from .result import PathItem, ValidationResult

if TYPE_CHECKING:
    from .rule import Rule
    from .schema import Schema
    from .validator import Validator

R = TypeVar("R", bound="Rule")


@dataclass
class CompileContext:
    """Context for compiling one rule instance of a schema.

    Exposes the call-site arguments and the instances of the same schema
    that were compiled before this one, in authoring order. Lookups never
    see the instance being compiled or any instance after it.

    Attributes:
        args: Arguments given at the chain call site
        rules: All instances of the compilation pass, in authoring order
        index: Position of the instance being compiled within ``rules``
    """

    args: Tuple[Any, ...]
    rules: Sequence[Rule]
    index: int

    @property
    def compiled(self) -> Sequence[Rule]:
        """Instances already compiled in this pass, in authoring order."""
        return self.rules[: self.index]

    def find_first(self, rule_type: Type[R]) -> R | None:
        """Return the first compiled instance of ``rule_type``, if any."""
        for rule in self.compiled:
            if isinstance(rule, rule_type):
                return rule
        return None

    def find_last(self, rule_type: Type[R]) -> R | None:
        """Return the last compiled instance of ``rule_type``, if any."""
        for rule in reversed(self.compiled):
            if isinstance(rule, rule_type):
                return rule
        return None

    def invoke_first(self, rule_type: Type[R], fn: Callable[[R], Any]) -> bool:
        """Call ``fn`` on the first compiled instance of ``rule_type``.

        Returns:
            True if an instance was found
        """
        rule = self.find_first(rule_type)
        if rule is None:
            return False
        fn(rule)
        return True

    def invoke_last(self, rule_type: Type[R], fn: Callable[[R], Any]) -> bool:
        """Call ``fn`` on the last compiled instance of ``rule_type``.

        Returns:
            True if an instance was found
        """
        rule = self.find_last(rule_type)
        if rule is None:
            return False
        fn(rule)
        return True


@dataclass
class ValidationContext:
    """Unit of work passed to every rule's validate call.

    Attributes:
        value: The working value; coercion and container rules may replace it
        path: Key/index accessors from the validation root
        options: Engine-wide options for this run
        validator: The engine, for recursing into nested values
    """

    value: Any
    path: Tuple[PathItem, ...]
    options: ValidationOptions
    validator: Validator

    async def descend(self, key: PathItem, value: Any, schema: Schema) -> ValidationResult:
        """Validate a member value against its own schema.

        Recurses through the engine's public entry point with ``key``
        appended to the current path.

        Args:
            key: Member key or index
            value: Member value
            schema: Schema for the member

        Returns:
            The member's ValidationResult
        """
        return await self.validator.validate(
            value, schema, self.options, path=self.path + (key,)
        )
