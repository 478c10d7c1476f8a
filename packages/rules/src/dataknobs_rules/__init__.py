"""DataKnobs Rules Package

A schema validation engine built from a namespace of pluggable rules.
Schemas are written as fluent chains of rule calls and validated against
values asynchronously, with optional coercion.
"""

from .coercer import Coercer, default_coercer
from .compiler import Pipeline, compile_rules
from .context import CompileContext, ValidationContext
from .exceptions import (
    ConfigurationError,
    RuleCompileError,
    RuleDefinitionError,
    RuleNotImplementedError,
    RulesError,
    SchemaAssertionError,
    UnknownRuleError,
)
from .factory import SchemaFactory, schema_factory
from .options import ValidationOptions
from .result import ValidationError, ValidationResult
from .rule import NO_COERCION, FlagRule, Priority, Rule, SyncRule
from .rules import BUILTIN_RULES, default_ruleset
from .ruleset import Ruleset
from .schema import Schema
from .validator import Validator

__version__ = "0.1.0"

default_validator = Validator()

# Module-level entry points bound to the default validator
validate = default_validator.validate
validate_sync = default_validator.validate_sync
assert_valid = default_validator.assert_valid

__all__ = [
    "BUILTIN_RULES",
    "NO_COERCION",
    "Coercer",
    "CompileContext",
    "ConfigurationError",
    "FlagRule",
    "Pipeline",
    "Priority",
    "Rule",
    "RuleCompileError",
    "RuleDefinitionError",
    "RuleNotImplementedError",
    "RulesError",
    "Ruleset",
    "Schema",
    "SchemaAssertionError",
    "SchemaFactory",
    "SyncRule",
    "UnknownRuleError",
    "ValidationContext",
    "ValidationError",
    "ValidationOptions",
    "ValidationResult",
    "Validator",
    "assert_valid",
    "compile_rules",
    "default_coercer",
    "default_ruleset",
    "default_validator",
    "schema_factory",
    "validate",
    "validate_sync",
]
