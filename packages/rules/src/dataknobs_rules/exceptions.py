"""Exception hierarchy for the rules package.

Validation failures are never raised by the engine; they are collected as
``ValidationError`` records (see ``dataknobs_rules.result``). The exceptions
in this module signal programmer or configuration errors: invalid chain
usage, malformed rule arguments, or incomplete rule implementations.

Example:
    ```python
    from dataknobs_rules.exceptions import RulesError, UnknownRuleError

    try:
        jo.number().iso()
    except UnknownRuleError as e:
        logger.error(f"Error: {e}")
        logger.error(f"Context: {e.context}")
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from .result import ValidationError


class RulesError(Exception):
    """Base exception for the rules package.

    Supports optional context data for rich error information.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Example:
        ```python
        error = RulesError(
            "Rule failed to compile",
            context={"rule": "string.min", "args": ()}
        )
        str(error)
        # 'Rule failed to compile'
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ConfigurationError(RulesError):
    """Raised when options or declarative schema configuration are invalid."""

    pass


class RuleDefinitionError(ConfigurationError):
    """Raised when a rule definition cannot be registered in a ruleset.

    Example:
        ```python
        raise RuleDefinitionError(
            "Rule has no name",
            context={"rule": "MyRule"}
        )
        ```
    """

    pass


class RuleCompileError(ConfigurationError):
    """Raised when a rule rejects the arguments given at its chain call site."""

    def __init__(self, rule_name: str, message: str, details: Dict[str, Any] | None = None):
        super().__init__(
            f"Rule '{rule_name}' failed to compile: {message}",
            context=details,
        )
        self.rule_name = rule_name


class UnknownRuleError(RulesError, AttributeError):
    """Raised when a chain calls a rule name that is not reachable.

    Derives from ``AttributeError`` so that unreachable names behave as absent
    attributes (``hasattr`` returns False).
    """

    def __init__(self, name: str, scope: str, available: list[str] | None = None):
        super().__init__(
            f"Rule '{name}' is not reachable from scope '{scope or '<root>'}'",
            context={"name": name, "scope": scope, "available": available or []},
        )
        self.rule_name = name


class RuleNotImplementedError(RulesError, NotImplementedError):
    """Raised when a rule contract method is invoked without being overridden."""

    pass


class SchemaAssertionError(RulesError):
    """Raised by the assertion helpers when a value fails validation.

    Attributes:
        errors: The ValidationError records collected for the value
    """

    def __init__(self, message: str, errors: list[ValidationError]):
        super().__init__(
            message,
            context={"errors": [error.to_dict() for error in errors]},
        )
        self.errors = errors
