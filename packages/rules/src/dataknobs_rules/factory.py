"""Factory for building schemas from configuration.

A chain is a list of steps. Each step is either a rule name, or a mapping
with a single entry ``{name: args}`` where a list supplies positional
arguments and any other value a single argument. The arguments of
``object.keys`` (a mapping of keys to chains) and ``array.items`` (a chain)
are built recursively.

Example Configuration:
    name: user
    options:
      convert: true
    rules:
      - object
      - keys:
          name: [string, {min: 2}, required]
          age: [number, integer, positive]
          tags:
            - array
            - items: [string, lowercase]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from .exceptions import ConfigurationError
from .options import OptionsLike, ValidationOptions
from .result import ValidationResult
from .rules.array import Items
from .rules.object import Keys
from .schema import Schema
from .validator import Validator

logger = logging.getLogger(__name__)


@dataclass
class SchemaDefinition:
    """A named schema with the options it should be validated with."""

    name: str
    schema: Schema
    options: ValidationOptions = field(default_factory=ValidationOptions)

    async def validate(
        self, value: Any, validator: Validator, options: OptionsLike | None = None
    ) -> ValidationResult:
        """Validate a value with this definition's options, plus any overrides."""
        return await validator.validate(value, self.schema, self.options.merge(options))


class SchemaFactory:
    """Builds schemas from configuration dictionaries and files.

    Configuration Options:
        name (str): Schema name (default: "unnamed_schema")
        rules (list): The chain of rule steps
        options (dict): Validation options (convert, abort_early)
    """

    def __init__(self, validator: Validator | None = None):
        """Initialize the factory.

        Args:
            validator: Validator whose ruleset resolves rule names. Defaults
                to a validator over the built-in catalogue.
        """
        self._validator = validator

    @property
    def validator(self) -> Validator:
        if self._validator is None:
            self._validator = Validator()
        return self._validator

    def create(self, **config: Any) -> Schema:
        """Create a Schema from configuration.

        Args:
            **config: Schema configuration

        Returns:
            Schema instance
        """
        name = config.get("name", "unnamed_schema")
        logger.info(f"Creating schema: {name}")
        return self.build(config.get("rules", []))

    def load(self, config: Mapping[str, Any]) -> SchemaDefinition:
        """Create a SchemaDefinition (schema plus options) from configuration."""
        if not isinstance(config, Mapping):
            raise ConfigurationError(
                f"Schema configuration must be a mapping, got {type(config).__name__}"
            )
        schema = self.create(**config)
        options = ValidationOptions.from_dict(config.get("options") or {})
        return SchemaDefinition(config.get("name", "unnamed_schema"), schema, options)

    def from_file(self, path: str | Path) -> SchemaDefinition:
        """Load a SchemaDefinition from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file type is not supported
        """
        path = Path(path)
        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in (".yaml", ".yml"):
                config = yaml.safe_load(f)
            elif suffix == ".json":
                config = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported schema file type: {path.suffix}",
                    context={"path": str(path)},
                )
        logger.debug(f"Loaded schema configuration from {path}")
        return self.load(config)

    def build(self, chain: Sequence[Any]) -> Schema:
        """Build a Schema from a chain of steps.

        Raises:
            ConfigurationError: If a step is malformed
            UnknownRuleError: If a step names a rule that is not reachable
        """
        if isinstance(chain, (str, Mapping)):
            chain = [chain]
        schema = self.validator.schema()
        for step in chain:
            schema = self._apply_step(schema, step)
        return schema

    def _apply_step(self, schema: Schema, step: Any) -> Schema:
        if isinstance(step, str):
            return schema.call(step)
        if not isinstance(step, Mapping) or len(step) != 1:
            raise ConfigurationError(
                f"Invalid chain step: {step!r}",
                details={"expected": "a rule name or a single-entry mapping"},
            )

        name, args = next(iter(step.items()))
        node = schema.resolve(name)
        rule = node.node if node is not None else None
        if rule is not None and issubclass(rule, Keys):
            if not isinstance(args, Mapping):
                raise ConfigurationError(f"'{name}' expects a mapping of keys to chains")
            return schema.call(name, {key: self.build(sub) for key, sub in args.items()})
        if rule is not None and issubclass(rule, Items):
            return schema.call(name, self.build(args))

        if args is None:
            return schema.call(name)
        if isinstance(args, list):
            return schema.call(name, *args)
        return schema.call(name, args)


# Create singleton instance for registration
schema_factory = SchemaFactory()
