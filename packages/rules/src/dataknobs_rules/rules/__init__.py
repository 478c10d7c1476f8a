"""Built-in rule catalogue.

Each module exposes its definitions in a ``RULES`` list; ``default_ruleset``
registers all of them into a new ruleset.
"""

from ..ruleset import Ruleset
from . import array, boolean, general, number, object, string

BUILTIN_RULES = [
    *general.RULES,
    *string.RULES,
    *number.RULES,
    *boolean.RULES,
    *object.RULES,
    *array.RULES,
]


def default_ruleset() -> Ruleset:
    """Create a ruleset holding the built-in rule catalogue."""
    return Ruleset().register(*BUILTIN_RULES)


__all__ = ["BUILTIN_RULES", "default_ruleset"]
