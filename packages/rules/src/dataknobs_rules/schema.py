"""Schema definition with a fluent, ruleset-scoped chaining API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Sequence, Tuple

from .compiler import Pipeline, compile_rules
from .exceptions import UnknownRuleError

if TYPE_CHECKING:
    from .rule import Rule
    from .ruleset import Ruleset

logger = logging.getLogger(__name__)


class Schema:
    """An ordered accumulation of rule instances for one value position.

    Every chain call returns a new Schema scoped at the called rule's node;
    the receiving Schema is left unchanged, so a partial chain can be reused
    as the base of several schemas:

        ```python
        name = jo.string().trim()
        short_name = name.max(10)
        long_name = name.min(10)
        ```

    Rule names are resolved against the scope node: its children, then the
    children of each ancestor. Names that are not reachable raise
    ``UnknownRuleError``, which is an ``AttributeError``. Rule names that
    collide with Schema attributes can still be chained through ``call``.
    """

    def __init__(self, scope: Ruleset, rules: Sequence[Rule] = ()):
        """Initialize schema.

        Args:
            scope: Ruleset node defining which rule names can be chained next
            rules: Rule instances in authoring order
        """
        self._scope = scope
        self._rules: Tuple[Rule, ...] = tuple(rules)

    @property
    def scope(self) -> Ruleset:
        """The ruleset node of this schema's chain position."""
        return self._scope

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Rule instances in authoring order."""
        return self._rules

    @property
    def names(self) -> list[str]:
        """Dotted names of the rule instances, in authoring order."""
        return [rule.name for rule in self._rules]

    def resolve(self, name: str) -> Ruleset | None:
        """Find the ruleset node that chaining ``name`` would reach."""
        return self._scope.resolve(name)

    def call(self, name: str, *args: Any) -> Schema:
        """Chain the rule named ``name`` with the given arguments.

        Args:
            name: Rule name segment reachable from this scope
            *args: Arguments for the rule

        Returns:
            A new Schema extended with the rule

        Raises:
            UnknownRuleError: If ``name`` is not reachable from this scope
            RuleCompileError: If the rule rejects its arguments
        """
        child = self.resolve(name)
        if child is None:
            raise UnknownRuleError(name, self._scope.name, sorted(self._scope.reachable()))
        return self.attach(name, child, args)

    def attach(self, name: str, child: Ruleset, args: Tuple[Any, ...]) -> Schema:
        """Extend this schema with the rule held by ``child``.

        Instantiates the child's definition with ``args`` (nodes without a
        definition only narrow the scope) and compiles the extended schema
        once, so argument errors surface at the call site.

        Args:
            name: The called name segment
            child: The ruleset node reached by ``name``
            args: Call arguments

        Returns:
            A new Schema scoped at ``child``
        """
        rules = self._rules
        if child.node is not None:
            rules = rules + (child.node(*args),)
        schema = Schema(child, rules)
        schema.compile()
        return schema

    def compile(self) -> Pipeline:
        """Compile this schema's rules into a fresh execution pipeline."""
        return compile_rules(self._rules)

    def chain(self) -> Dict[str, Callable[..., Schema]]:
        """Entry points for every rule name reachable from this scope."""
        return self._scope.build_chain(self.attach)

    def __getattr__(self, name: str) -> Callable[..., Schema]:
        if name.startswith("_"):
            raise AttributeError(name)
        child = self._scope.resolve(name)
        if child is None:
            raise UnknownRuleError(name, self._scope.name, sorted(self._scope.reachable()))

        def handler(*args: Any) -> Schema:
            return self.attach(name, child, args)

        handler.__name__ = name
        return handler

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._scope.reachable()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        if len(self._rules) != len(other._rules):
            return False
        return all(a.identical_to(b) for a, b in zip(self._rules, other._rules))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "Schema(" + ".".join(repr(rule) for rule in self._rules) + ")"
