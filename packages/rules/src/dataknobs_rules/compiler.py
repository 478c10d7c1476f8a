"""Compilation of a schema's rule instances into an execution pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Sequence

from .context import CompileContext
from .exceptions import RuleCompileError, RulesError

if TYPE_CHECKING:
    from .rule import Rule

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """The compiled form of a schema.

    Attributes:
        compiled: Every deduplicated instance, compiled, in authoring order
        steps: Operating instances sorted by priority, in execution order
    """

    compiled: List[Rule] = field(default_factory=list)
    steps: List[Rule] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)


def deduplicate(rules: Sequence[Rule]) -> List[Rule]:
    """Collapse identical instances, keeping the first occurrence of each.

    Args:
        rules: Instances in authoring order

    Returns:
        The unique instances, still in authoring order
    """
    unique: List[Rule] = []
    for rule in rules:
        if any(rule.identical_to(kept) for kept in unique):
            logger.debug(f"Collapsing duplicate rule {rule!r}")
            continue
        unique.append(rule)
    return unique


def compile_rules(rules: Sequence[Rule]) -> Pipeline:
    """Compile rule instances into a deduplicated, priority-ordered pipeline.

    Works on fresh copies of the given instances, so the caller's instances
    never carry compiled state and each pipeline is private to its run.

    Steps:
    1. Deduplicate by ``identical_to`` (first occurrence wins)
    2. Compile each instance once, in authoring order, so later instances
       can locate and modify earlier ones
    3. Drop instances that do not operate
    4. Stable-sort the rest by priority

    Args:
        rules: Instances in authoring order

    Returns:
        The compiled Pipeline

    Raises:
        RuleCompileError: If an instance rejects its arguments
    """
    unique = deduplicate([rule.fresh() for rule in rules])

    for index, rule in enumerate(unique):
        ctx = CompileContext(args=rule.params, rules=unique, index=index)
        try:
            rule.compile(ctx)
        except RulesError:
            raise
        except (TypeError, ValueError, KeyError, AttributeError, IndexError) as e:
            raise RuleCompileError(
                rule.name,
                str(e),
                details={"rule": rule.name, "args": rule.params},
            ) from e

    steps = sorted(
        (rule for rule in unique if rule.operates()),
        key=lambda rule: rule.priority(),
    )
    return Pipeline(compiled=unique, steps=steps)
